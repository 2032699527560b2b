"""Data models for the shortcode registry."""

import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional, Tuple


UNKNOWN_LOCATION = "Unknown"


@dataclass(frozen=True)
class ClickEvent:
    """One redirect occurrence."""

    timestamp: datetime
    referrer: Optional[str] = None
    user_agent: Optional[str] = None
    location: str = UNKNOWN_LOCATION

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "referrer": self.referrer,
            "userAgent": self.user_agent,
            "location": self.location,
        }


@dataclass(frozen=True)
class UrlRecord:
    """Represents one shortened URL and its click ledger.

    Identity fields are frozen. The click ledger only grows and is guarded
    by a per-record lock, so appends on different records never contend.
    """

    shortcode: str
    original_url: str
    created_at: datetime
    expires_at: datetime
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    _clicks: List[ClickEvent] = field(default_factory=list, repr=False, compare=False)
    _clicks_lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False
    )

    def __post_init__(self):
        if self.expires_at <= self.created_at:
            raise ValueError("expires_at must be after created_at")

    @classmethod
    def new(
        cls,
        shortcode: str,
        original_url: str,
        created_at: datetime,
        validity_minutes: int,
    ) -> "UrlRecord":
        """Build a record expiring validity_minutes after created_at."""
        return cls(
            shortcode=shortcode,
            original_url=original_url,
            created_at=created_at,
            expires_at=created_at + timedelta(minutes=validity_minutes),
        )

    @property
    def clicks(self) -> Tuple[ClickEvent, ...]:
        """Snapshot of the click ledger in insertion order."""
        with self._clicks_lock:
            return tuple(self._clicks)

    @property
    def click_count(self) -> int:
        with self._clicks_lock:
            return len(self._clicks)

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

    def append_click(self, event: ClickEvent) -> None:
        """Append one event to the ledger. Only the owning store calls this."""
        with self._clicks_lock:
            self._clicks.append(event)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        clicks = self.clicks
        return {
            "id": self.id,
            "shortcode": self.shortcode,
            "originalUrl": self.original_url,
            "createdAt": self.created_at.isoformat(),
            "expiry": self.expires_at.isoformat(),
            "clickCount": len(clicks),
            "clicks": [click.to_dict() for click in clicks],
        }
