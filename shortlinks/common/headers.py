"""Header parsing utilities for the shortlink gateway."""

from typing import Mapping, NamedTuple, Optional

from ..store.models import UNKNOWN_LOCATION


class ForwardedHeaders(NamedTuple):
    """X-Forwarded-* values set by a reverse proxy."""

    proto: Optional[str]
    host: Optional[str]
    client: Optional[str]


def extract_forwarded_headers(headers: Mapping[str, str]) -> ForwardedHeaders:
    """Extract X-Forwarded-* headers case-insensitively.

    Args:
        headers: Request headers mapping

    Returns:
        ForwardedHeaders with proto, host and client (X-Forwarded-For)
    """
    lowered = {k.lower(): v for k, v in headers.items()}

    return ForwardedHeaders(
        proto=lowered.get("x-forwarded-proto"),
        host=lowered.get("x-forwarded-host"),
        client=lowered.get("x-forwarded-for"),
    )


def build_base_url(
    headers: Mapping[str, str],
    fallback_base_url: str,
    request_scheme: Optional[str] = None,
    request_host: Optional[str] = None,
) -> str:
    """Work out the public origin that shortlinks should point at.

    Proxy headers win over the request's own scheme and Host, which win
    over the configured base URL.

    Args:
        headers: Request headers
        fallback_base_url: Base URL from configuration
        request_scheme: Request scheme (http/https)
        request_host: Value of the Host header

    Returns:
        Origin without trailing slash (e.g., https://example.com)
    """
    forwarded = extract_forwarded_headers(headers)

    if forwarded.proto and forwarded.host:
        return f"{forwarded.proto}://{forwarded.host}"

    if request_scheme and request_host:
        return f"{request_scheme}://{request_host}"

    return fallback_base_url.rstrip("/")


def resolve_client_location(
    forwarded_for: Optional[str],
    client_host: Optional[str] = None,
) -> str:
    """Best-effort origin of a visitor for click analytics.

    Uses the first hop of X-Forwarded-For, then the socket peer address.
    """
    if forwarded_for:
        first_hop = forwarded_for.split(",")[0].strip()
        if first_hop:
            return first_hop

    return client_host or UNKNOWN_LOCATION
