"""Shortcode registry and click ledger store."""

from .base import RegistryStoreBase, DEFAULT_VALIDITY_MINUTES
from .memory import InMemoryRegistryStore
from .models import ClickEvent, UrlRecord, UNKNOWN_LOCATION

__all__ = [
    "RegistryStoreBase",
    "InMemoryRegistryStore",
    "ClickEvent",
    "UrlRecord",
    "DEFAULT_VALIDITY_MINUTES",
    "UNKNOWN_LOCATION",
]
