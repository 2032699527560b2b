"""Validation utilities for shortlink requests."""

from typing import Any, List, Optional, Tuple
from urllib.parse import urlparse

from ..shortcode import ShortCodeGenerator


MAX_URL_LENGTH = 2048
MAX_VALIDITY_MINUTES = 525600  # one year

# Paths already taken by gateway routes (matched case-sensitively)
RESERVED_SHORTCODES = {"health", "shorturls"}


def is_valid_url(url: Any) -> Tuple[bool, str]:
    """Validate an absolute URL.

    Args:
        url: The URL to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not url or not isinstance(url, str):
        return False, "URL is required and must be a string"

    if len(url) > MAX_URL_LENGTH:
        return False, f"URL is too long (max {MAX_URL_LENGTH} characters)"

    try:
        result = urlparse(url)
    except ValueError as e:
        return False, f"URL must be a valid URL format: {e}"

    if not result.scheme:
        return False, "URL must be a valid URL format (missing scheme)"

    if not result.netloc:
        return False, "URL must be a valid URL format (missing host)"

    return True, ""


def is_valid_shortcode(shortcode: Any, min_length: int = 3, max_length: int = 20) -> Tuple[bool, str]:
    """Validate a custom shortcode.

    Args:
        shortcode: The shortcode to validate
        min_length: Minimum length for shortcode
        max_length: Maximum length for shortcode

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(shortcode, str):
        return False, "Shortcode must be a string"

    if not min_length <= len(shortcode) <= max_length:
        return False, f"Shortcode must be {min_length}-{max_length} alphanumeric characters"

    if not ShortCodeGenerator.is_valid_format(shortcode):
        return False, f"Shortcode must be {min_length}-{max_length} alphanumeric characters"

    if shortcode in RESERVED_SHORTCODES:
        return False, f"'{shortcode}' is a reserved word and cannot be used"

    return True, ""


def is_valid_validity(validity: Any, max_minutes: int = MAX_VALIDITY_MINUTES) -> Tuple[bool, str]:
    """Validate a validity window in minutes.

    Args:
        validity: Number of minutes the link stays resolvable
        max_minutes: Upper bound (inclusive)

    Returns:
        Tuple of (is_valid, error_message)
    """
    # bool is an int subclass; true/false are not durations
    if isinstance(validity, bool):
        return False, "Validity must be a positive integer (minutes)"

    # Whole-number floats such as 30.0 count as integers
    if isinstance(validity, float) and not validity.is_integer():
        return False, "Validity must be a positive integer (minutes)"

    if not isinstance(validity, (int, float)):
        return False, "Validity must be a positive integer (minutes)"

    if validity <= 0:
        return False, "Validity must be a positive integer (minutes)"

    if validity > max_minutes:
        return False, f"Validity must be at most {max_minutes} minutes"

    return True, ""


def validate_short_url_request(
    url: Any,
    validity: Optional[Any] = None,
    shortcode: Optional[Any] = None,
    max_validity_minutes: int = MAX_VALIDITY_MINUTES,
) -> List[str]:
    """Validate a create request and collect every problem found.

    Args:
        url: The URL to shorten
        validity: Optional validity window in minutes
        shortcode: Optional custom shortcode

    Returns:
        List of error messages (empty when valid)
    """
    errors = []

    is_valid, error = is_valid_url(url)
    if not is_valid:
        errors.append(error)

    if validity is not None:
        is_valid, error = is_valid_validity(validity, max_validity_minutes)
        if not is_valid:
            errors.append(error)

    if shortcode is not None:
        is_valid, error = is_valid_shortcode(shortcode)
        if not is_valid:
            errors.append(error)

    return errors
