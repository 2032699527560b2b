"""In-memory shortcode registry with click ledgers."""

import logging
import threading
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from ..exceptions import CodeConflictError, ShortcodeSpaceExhaustedError
from ..shortcode import ShortCodeGenerator
from .base import DEFAULT_VALIDITY_MINUTES, RegistryStoreBase
from .models import ClickEvent, UrlRecord


Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryRegistryStore(RegistryStoreBase):
    """Process-local registry mapping shortcodes to URL records.

    Reads go straight to the dict; inserts and deletes share one lock that
    is held only for the check-then-mutate step. Each record carries its
    own lock for click appends. Expired records are reaped lazily when a
    read or listing runs into them. Nothing is logged or generated while
    the mapping lock is held.
    """

    # Extra characters used once codes of the default length keep colliding
    FALLBACK_LENGTH_STEP = 2

    def __init__(
        self,
        short_code_generator: Optional[ShortCodeGenerator] = None,
        clock: Optional[Clock] = None,
        logger: Optional[logging.Logger] = None,
        max_collision_retries: int = 10,
    ):
        """Initialize the registry.

        Args:
            short_code_generator: Optional short code generator
            clock: Callable returning the current aware UTC datetime
            logger: Optional logger
            max_collision_retries: Attempts per code length before giving up
        """
        if max_collision_retries < 1:
            raise ValueError("max_collision_retries must be at least 1")
        self.generator = short_code_generator or ShortCodeGenerator()
        self.clock = clock or utc_now
        self.logger = logger or logging.getLogger(__name__)
        self.max_collision_retries = max_collision_retries

        self._records: Dict[str, UrlRecord] = {}
        self._lock = threading.Lock()

    def create(
        self,
        original_url: str,
        validity_minutes: int = DEFAULT_VALIDITY_MINUTES,
        requested_shortcode: Optional[str] = None,
    ) -> UrlRecord:
        if validity_minutes <= 0:
            raise ValueError(f"validity_minutes must be positive, got {validity_minutes}")

        if requested_shortcode:
            record = self._try_insert(requested_shortcode, original_url, validity_minutes)
            if record is None:
                self.logger.warning(f"Shortcode collision: {requested_shortcode}")
                raise CodeConflictError(requested_shortcode)
        else:
            record = self._insert_generated(original_url, validity_minutes)

        self.logger.info(
            f"Created short URL: {record.shortcode} -> {original_url} "
            f"(expires {record.expires_at.isoformat()})"
        )
        return record

    def lookup(self, shortcode: str) -> Optional[UrlRecord]:
        return self._get_live(shortcode, self.clock())

    def record_click(self, shortcode: str, event: ClickEvent) -> None:
        record = self._get_live(shortcode, self.clock())
        if record is None:
            self.logger.debug(f"Dropped click for missing shortcode: {shortcode}")
            return

        record.append_click(event)
        self.logger.info(
            f"Recorded click for {shortcode} "
            f"(referrer={event.referrer}, location={event.location})"
        )

    def list_records(self) -> List[UrlRecord]:
        now = self.clock()
        live = []
        reaped = []

        with self._lock:
            for shortcode, record in list(self._records.items()):
                if record.is_expired(now):
                    del self._records[shortcode]
                    reaped.append(shortcode)
                else:
                    live.append(record)

        if reaped:
            self.logger.info(f"Reaped {len(reaped)} expired short URLs: {', '.join(reaped)}")

        live.sort(key=lambda r: r.created_at, reverse=True)
        return live

    def __len__(self) -> int:
        return len(self._records)

    def _get_live(self, shortcode: str, now: datetime) -> Optional[UrlRecord]:
        record = self._records.get(shortcode)
        if record is None:
            return None

        if record.is_expired(now):
            self._reap(shortcode, record)
            return None

        return record

    def _reap(self, shortcode: str, record: UrlRecord) -> None:
        with self._lock:
            # A concurrent create may already have replaced the expired record
            removed = self._records.get(shortcode) is record
            if removed:
                del self._records[shortcode]

        if removed:
            self.logger.info(
                f"Short URL expired: {shortcode} (expired {record.expires_at.isoformat()})"
            )

    def _try_insert(
        self,
        shortcode: str,
        original_url: str,
        validity_minutes: int,
    ) -> Optional[UrlRecord]:
        """Insert a new record unless shortcode maps to a live one.

        Returns:
            The inserted record, or None on collision
        """
        now = self.clock()
        record = UrlRecord.new(shortcode, original_url, now, validity_minutes)

        with self._lock:
            existing = self._records.get(shortcode)
            if existing is not None and not existing.is_expired(now):
                return None
            self._records[shortcode] = record

        return record

    def _insert_generated(self, original_url: str, validity_minutes: int) -> UrlRecord:
        lengths = (
            self.generator.default_length,
            self.generator.default_length + self.FALLBACK_LENGTH_STEP,
        )

        for length in lengths:
            for attempt in range(self.max_collision_retries):
                candidate = self.generator.generate(length)
                record = self._try_insert(candidate, original_url, validity_minutes)
                if record is not None:
                    self.logger.debug(
                        f"Generated code after {attempt + 1} attempts at length {length}: {candidate}"
                    )
                    return record
                self.logger.debug(f"Generated code collided: {candidate}")

        self.logger.critical(
            f"Unable to generate unique short code after {self.max_collision_retries} "
            f"attempts at lengths {lengths}"
        )
        raise ShortcodeSpaceExhaustedError(
            "Unable to generate unique short code after multiple attempts"
        )
