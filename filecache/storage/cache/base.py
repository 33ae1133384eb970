"""Abstract base class for cache backends.

A cache instance is bound to one bin (namespace). Caching is an optimization:
implementations report every failure as a miss or a no-op and never raise
from the operations below.
"""

from abc import ABC, abstractmethod
from typing import Any

from filecache.consts import PERMANENT
from filecache.models.model_entry import CacheEntry


class Cache(ABC):
    """Abstract base class for bin-scoped cache implementations."""

    @abstractmethod
    def get(self, cid: str) -> CacheEntry | None:
        """Get an entry from the cache.

        Args:
            cid: Cache ID.

        Returns:
            The entry if present, decodable and not expired, None otherwise.
        """
        ...

    @abstractmethod
    def get_multiple(self, cids: list[str]) -> dict[str, CacheEntry]:
        """Get several entries at once.

        Args:
            cids: Cache IDs to look up. Modified in place so that afterwards
                it only contains the IDs that were not found.

        Returns:
            Mapping of cache ID to entry for every hit.
        """
        ...

    @abstractmethod
    def set(self, cid: str, data: Any, expire: int = PERMANENT) -> None:
        """Store data in the cache.

        Args:
            cid: Cache ID.
            data: Value to cache (must be JSON-serializable).
            expire: Unix timestamp after which the entry is stale, or PERMANENT.
        """
        ...

    @abstractmethod
    def delete(self, cid: str | list[str]) -> None:
        """Delete one entry, or several when given a list."""
        ...

    @abstractmethod
    def delete_multiple(self, cids: list[str]) -> None:
        """Delete several entries. Missing entries are ignored."""
        ...

    @abstractmethod
    def delete_prefix(self, prefix: str) -> None:
        """Delete every entry whose cache ID starts with ``prefix``."""
        ...

    @abstractmethod
    def flush(self) -> None:
        """Delete every entry in the bin."""
        ...

    @abstractmethod
    def garbage_collection(self) -> int:
        """Reclaim expired entries.

        Returns:
            Number of entries reclaimed.
        """
        ...

    @abstractmethod
    def is_empty(self) -> bool:
        """Check whether the bin holds no unexpired entries."""
        ...
