"""Common utilities for shortlinks."""

from .validators import (
    is_valid_url,
    is_valid_shortcode,
    is_valid_validity,
    validate_short_url_request,
)
from .headers import extract_forwarded_headers, build_base_url, resolve_client_location
from .url_builder import build_short_url, build_shortlink
from .logging_config import setup_logging, get_logger

__all__ = [
    "is_valid_url",
    "is_valid_shortcode",
    "is_valid_validity",
    "validate_short_url_request",
    "extract_forwarded_headers",
    "build_base_url",
    "resolve_client_location",
    "build_short_url",
    "build_shortlink",
    "setup_logging",
    "get_logger",
]
