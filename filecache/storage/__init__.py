"""Storage backends for cache entries.

This module provides:
- Cache: Abstract base class for bin-scoped caches
- FileCache: File-per-entry cache with expiration markers
- PlainCodec / EmbeddedCodec: Entry encodings
- StorageDirectoryManager: Storage root and bin directory resolution
"""

from filecache.storage.cache.base import Cache
from filecache.storage.cache.codecs import EmbeddedCodec, EntryCodec, PlainCodec
from filecache.storage.cache.file_caching import FileCache
from filecache.storage.directory_manager import StorageDirectoryManager

__all__ = [
    "Cache",
    "EmbeddedCodec",
    "EntryCodec",
    "FileCache",
    "PlainCodec",
    "StorageDirectoryManager",
]
