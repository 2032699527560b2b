"""Log shipping to a remote log API.

Telemetry is a side channel: every failure is swallowed and reported on the
local ``shortlinks.telemetry`` logger, which is never shipped itself.
"""

import asyncio
import logging
import time
from typing import Callable, Dict, Optional, Set

import httpx

from .exceptions import TelemetryError


TELEMETRY_LOGGER_NAME = "shortlinks.telemetry"

LOG_LEVELS = ("debug", "info", "warn", "error", "fatal")

PACKAGES = (
    "cache", "controller", "db", "domain", "handler",
    "route", "service", "auth", "config", "utils",
)

# Logger name prefix -> package reported to the log API (longest prefix wins)
PACKAGE_BY_LOGGER = {
    "shortlinks.store": "db",
    "shortlinks.service": "service",
    "shortlinks.web": "handler",
    "shortlinks.api": "route",
    "shortlinks.config": "config",
    "shortlinks.common": "utils",
}


def python_level_to_api(levelno: int) -> str:
    if levelno >= logging.CRITICAL:
        return "fatal"
    if levelno >= logging.ERROR:
        return "error"
    if levelno >= logging.WARNING:
        return "warn"
    if levelno >= logging.INFO:
        return "info"
    return "debug"


def package_for_logger(name: str) -> str:
    matches = [prefix for prefix in PACKAGE_BY_LOGGER if name == prefix or name.startswith(prefix + ".")]
    if not matches:
        return "utils"
    return PACKAGE_BY_LOGGER[max(matches, key=len)]


class TelemetryClient:
    """Async client for the remote log API."""

    def __init__(
        self,
        api_base_url: str,
        credentials: Dict[str, str],
        stack: str = "backend",
        timeout: float = 5.0,
        logger: Optional[logging.Logger] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize telemetry client.

        Args:
            api_base_url: Base URL of the log API (``/auth`` and ``/logs`` live under it)
            credentials: Body posted to ``/auth`` to obtain a bearer token
            stack: Value reported as the log's ``stack`` field
            timeout: Per-request timeout in seconds
            logger: Optional local logger for delivery failures
            transport: Optional httpx transport (tests pass a MockTransport)
            clock: Returns the current unix time, compared against token expiry
        """
        self.api_base_url = api_base_url.rstrip("/")
        self.credentials = dict(credentials)
        self.stack = stack
        self.logger = logger or logging.getLogger(TELEMETRY_LOGGER_NAME)
        self._clock = clock
        self._client = httpx.AsyncClient(
            base_url=self.api_base_url,
            timeout=timeout,
            transport=transport,
        )
        self._token: Optional[str] = None
        self._token_expires_at: Optional[float] = None
        self._token_lock = asyncio.Lock()

    def _token_valid(self) -> bool:
        return (
            self._token is not None
            and self._token_expires_at is not None
            and self._clock() < self._token_expires_at
        )

    async def get_access_token(self) -> str:
        """Return a cached bearer token, authenticating when it has expired.

        Raises:
            TelemetryError: If authentication fails
            httpx.HTTPError: On transport errors
        """
        if self._token_valid():
            return self._token

        async with self._token_lock:
            if self._token_valid():
                return self._token

            response = await self._client.post("/auth", json=self.credentials)
            if response.status_code >= 400:
                raise TelemetryError(f"Authentication failed with status {response.status_code}")

            data = response.json()
            token = data.get("access_token")
            if not token:
                raise TelemetryError("Authentication response missing access_token")

            # expires_in is an absolute unix timestamp, not a duration
            self._token = token
            self._token_expires_at = float(data.get("expires_in", 0))
            return token

    async def send_log(self, level: str, package: str, message: str) -> Optional[dict]:
        """Ship one log line. Never raises.

        Args:
            level: One of LOG_LEVELS (anything else is sent as "info")
            package: One of PACKAGES (anything else is sent as "utils")
            message: Log message

        Returns:
            The API's response body, or None if delivery failed
        """
        payload = {
            "stack": self.stack,
            "level": level if level in LOG_LEVELS else "info",
            "package": package if package in PACKAGES else "utils",
            "message": message,
        }

        try:
            token = await self.get_access_token()
            response = await self._client.post(
                "/logs",
                json=payload,
                headers={"Authorization": f"Bearer {token}"},
            )
            if response.status_code == 401:
                self._token = None
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, TelemetryError, ValueError) as e:
            self.logger.warning(f"Failed to send log: {e}")
            return None

    async def close(self) -> None:
        await self._client.aclose()


class TelemetryHandler(logging.Handler):
    """Logging handler that forwards records to a TelemetryClient.

    Each record becomes a background task on the running event loop;
    records emitted with no running loop are dropped.
    """

    def __init__(self, client: TelemetryClient, level: int = logging.INFO):
        super().__init__(level)
        self.client = client
        self._pending: Set[asyncio.Task] = set()

    def emit(self, record: logging.LogRecord) -> None:
        if record.name == TELEMETRY_LOGGER_NAME or record.name.startswith(TELEMETRY_LOGGER_NAME + "."):
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return

        try:
            message = self.format(record)
        except Exception:
            self.handleError(record)
            return

        task = loop.create_task(
            self.client.send_log(
                python_level_to_api(record.levelno),
                package_for_logger(record.name),
                message,
            )
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def flush_pending(self) -> None:
        """Wait for every in-flight shipment to finish."""
        if self._pending:
            await asyncio.gather(*list(self._pending))
