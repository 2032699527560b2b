"""URL building utilities for shortlinks."""

from typing import Mapping, Optional

from .headers import build_base_url


def build_short_url(
    short_code: str,
    base_url: str,
    path_prefix: str = "",
) -> str:
    """Join origin, optional path prefix and shortcode.

    Args:
        short_code: The shortcode
        base_url: Origin (e.g., https://example.com)
        path_prefix: Optional path prefix (e.g., /s)

    Returns:
        Complete short URL
    """
    parts = [base_url.rstrip("/")]
    prefix = path_prefix.strip("/")
    if prefix:
        parts.append(prefix)
    parts.append(short_code)
    return "/".join(parts)


def build_shortlink(
    short_code: str,
    headers: Mapping[str, str],
    fallback_base_url: str,
    path_prefix: str = "",
    request_scheme: Optional[str] = None,
    request_host: Optional[str] = None,
) -> str:
    """Build the public shortlink for a code as seen by the current request."""
    base_url = build_base_url(
        headers=headers,
        fallback_base_url=fallback_base_url,
        request_scheme=request_scheme,
        request_host=request_host,
    )
    return build_short_url(short_code, base_url, path_prefix)
