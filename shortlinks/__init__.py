"""Core business logic for shortlinks."""

from .shortcode import ShortCodeGenerator
from .service import ShortlinkService
from .store import InMemoryRegistryStore, ClickEvent, UrlRecord
from .exceptions import CodeConflictError, RequestValidationFailed

__all__ = [
    "ShortCodeGenerator",
    "ShortlinkService",
    "InMemoryRegistryStore",
    "ClickEvent",
    "UrlRecord",
    "CodeConflictError",
    "RequestValidationFailed",
]
