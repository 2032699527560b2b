"""Business logic service for shortlinks."""

import logging
from typing import Any, Dict, List, Optional

from .common.validators import MAX_VALIDITY_MINUTES, validate_short_url_request
from .exceptions import RequestValidationFailed
from .store.base import DEFAULT_VALIDITY_MINUTES, RegistryStoreBase
from .store.models import ClickEvent, UrlRecord
from .telemetry import TelemetryClient


class ShortlinkService:
    """Service layer between the HTTP gateway and the registry store."""

    def __init__(
        self,
        store: RegistryStoreBase,
        telemetry: Optional[TelemetryClient] = None,
        logger: Optional[logging.Logger] = None,
        default_validity_minutes: int = DEFAULT_VALIDITY_MINUTES,
        max_validity_minutes: int = MAX_VALIDITY_MINUTES,
        enable_custom_codes: bool = True,
    ):
        """Initialize shortlink service.

        Args:
            store: Registry store instance
            telemetry: Optional telemetry client, closed with the service
            logger: Optional logger
            default_validity_minutes: Validity used when a request gives none
            max_validity_minutes: Upper bound accepted from requests
            enable_custom_codes: Whether to allow requested shortcodes
        """
        self.store = store
        self.telemetry = telemetry
        self.logger = logger or logging.getLogger(__name__)
        self.default_validity_minutes = default_validity_minutes
        self.max_validity_minutes = max_validity_minutes
        self.enable_custom_codes = enable_custom_codes

    async def create_short_url(
        self,
        url: Any,
        validity: Optional[Any] = None,
        shortcode: Optional[Any] = None,
    ) -> UrlRecord:
        """Validate a request and register a new short URL.

        Args:
            url: The original long URL
            validity: Optional validity window in minutes
            shortcode: Optional custom shortcode

        Returns:
            The created record

        Raises:
            RequestValidationFailed: If any input is invalid
            CodeConflictError: If the custom shortcode is already live
        """
        errors = validate_short_url_request(
            url,
            validity=validity,
            shortcode=shortcode,
            max_validity_minutes=self.max_validity_minutes,
        )
        if shortcode is not None and not self.enable_custom_codes:
            errors.append("Custom shortcodes are not enabled")

        if errors:
            self.logger.warning(f"Validation errors: {', '.join(errors)}")
            raise RequestValidationFailed(errors)

        return self.store.create(
            url,
            validity_minutes=int(validity) if validity is not None else self.default_validity_minutes,
            requested_shortcode=shortcode,
        )

    async def resolve(self, shortcode: str, click: ClickEvent) -> Optional[UrlRecord]:
        """Look up a shortcode for redirection and record the visit.

        Args:
            shortcode: The shortcode being visited
            click: Click metadata built from the inbound request

        Returns:
            The live record, or None if absent or expired
        """
        record = self.store.lookup(shortcode)
        if record is None:
            self.logger.warning(f"Short URL not found for redirect: {shortcode}")
            return None

        # Every served redirect is counted on the record it resolved to
        record.append_click(click)
        self.logger.info(f"Redirecting {shortcode} to {record.original_url}")
        return record

    async def get_stats(self, shortcode: str) -> Optional[UrlRecord]:
        """Get a live record with its click ledger.

        Args:
            shortcode: The shortcode to report on

        Returns:
            The record, or None if absent or expired
        """
        record = self.store.stats(shortcode)
        if record is None:
            self.logger.warning(f"Short URL not found: {shortcode}")
        return record

    async def list_short_urls(self) -> List[UrlRecord]:
        """List live short URLs, newest first."""
        records = self.store.list_records()
        self.logger.debug(f"Retrieved {len(records)} short URLs")
        return records

    async def health_check(self) -> Dict[str, Any]:
        """Report the number of records the store is tracking."""
        return {"records": len(self.store)}

    async def close(self) -> None:
        """Close service connections."""
        if self.telemetry:
            await self.telemetry.close()
