"""Abstract base class for shortcode registry implementations."""

from abc import ABC, abstractmethod
from typing import List, Optional

from .models import ClickEvent, UrlRecord


DEFAULT_VALIDITY_MINUTES = 30


class RegistryStoreBase(ABC):
    """Abstract base class for shortcode registry operations."""

    @abstractmethod
    def create(
        self,
        original_url: str,
        validity_minutes: int = DEFAULT_VALIDITY_MINUTES,
        requested_shortcode: Optional[str] = None,
    ) -> UrlRecord:
        """Create a new short URL record.

        Args:
            original_url: The original long URL
            validity_minutes: Minutes until the record expires
            requested_shortcode: Optional custom shortcode

        Returns:
            The new record

        Raises:
            CodeConflictError: If requested_shortcode maps to a live record
        """
        pass

    @abstractmethod
    def lookup(self, shortcode: str) -> Optional[UrlRecord]:
        """Get the live record for a shortcode.

        Args:
            shortcode: The shortcode to look up

        Returns:
            The record, or None if absent or expired
        """
        pass

    @abstractmethod
    def record_click(self, shortcode: str, event: ClickEvent) -> None:
        """Append a click event to a live record.

        Does nothing if the shortcode is absent or expired.

        Args:
            shortcode: The shortcode that was visited
            event: Click metadata
        """
        pass

    @abstractmethod
    def list_records(self) -> List[UrlRecord]:
        """List live records, newest first.

        Returns:
            Records ordered by created_at descending
        """
        pass

    def stats(self, shortcode: str) -> Optional[UrlRecord]:
        """Get a live record for read-only reporting.

        Args:
            shortcode: The shortcode to look up

        Returns:
            The record, or None if absent or expired
        """
        return self.lookup(shortcode)

    @abstractmethod
    def __len__(self) -> int:
        """Number of records currently tracked, including unreaped expired ones."""
        pass
