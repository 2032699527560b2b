"""Exceptions raised by the shortlinks service."""

from typing import List


class ShortlinkError(Exception):
    """Base exception for all application-specific errors."""


class CodeConflictError(ShortlinkError):
    """Raised when a requested shortcode already maps to a live record."""

    def __init__(self, shortcode: str):
        super().__init__(f"Shortcode '{shortcode}' already exists")
        self.shortcode = shortcode


class ShortcodeSpaceExhaustedError(ShortlinkError):
    """Raised when no free shortcode could be generated within the retry budget."""


class RequestValidationFailed(ShortlinkError):
    """Raised when a create request fails input validation."""

    def __init__(self, errors: List[str]):
        super().__init__("; ".join(errors) or "Validation failed")
        self.errors = list(errors)


class TelemetryError(ShortlinkError):
    """Raised when the remote log API rejects a request or responds badly."""
