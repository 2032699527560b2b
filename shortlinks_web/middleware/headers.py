"""Forwarded headers middleware."""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from typing import Callable

from shortlinks.common.headers import extract_forwarded_headers


class ForwardedHeadersMiddleware(BaseHTTPMiddleware):
    """Expose X-Forwarded-* values on request.state for route handlers."""

    async def dispatch(self, request: Request, call_next: Callable):
        forwarded = extract_forwarded_headers(request.headers)
        request.state.forwarded_proto = forwarded.proto
        request.state.forwarded_host = forwarded.host
        request.state.forwarded_for = forwarded.client

        return await call_next(request)
