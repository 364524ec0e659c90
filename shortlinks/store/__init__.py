"""Storage layer for URL records."""

from .base import URLStoreBase
from .memory import InMemoryURLStore
from .models import ClickContext, ClickEvent, StoreStats, URLRecord
from .snapshot import SnapshotFile

__all__ = [
    "URLStoreBase",
    "InMemoryURLStore",
    "SnapshotFile",
    "URLRecord",
    "ClickEvent",
    "ClickContext",
    "StoreStats",
]
