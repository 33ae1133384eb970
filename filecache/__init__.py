"""filecache - file-per-entry key/value cache with lazy expiration."""

from filecache.consts import PERMANENT
from filecache.models import CacheEntry, CacheStats, RequestClock
from filecache.settings import StorageSettings
from filecache.storage import (
    Cache,
    EmbeddedCodec,
    EntryCodec,
    FileCache,
    PlainCodec,
    StorageDirectoryManager,
)

__all__ = [
    "PERMANENT",
    "Cache",
    "CacheEntry",
    "CacheStats",
    "EmbeddedCodec",
    "EntryCodec",
    "FileCache",
    "PlainCodec",
    "RequestClock",
    "StorageDirectoryManager",
    "StorageSettings",
]
