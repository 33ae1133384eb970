"""File-based cache implementation.

Stores one file per cache entry in a per-bin directory, with an optional
``.expire`` marker file next to entries that are not permanent. Expired
entries are reclaimed lazily by garbage collection.

Every process sharing the storage root coordinates through the filesystem
only: writers take an exclusive flock, readers read without locking and fall
back to a shared-lock re-read when they see something they cannot decode.
"""

import logging
import os
import shutil
from collections.abc import Callable
from pathlib import Path
from typing import Any

from filecache.consts import BIN_PREFIX, DEFAULT_BIN, EXPIRE_SUFFIX, PERMANENT
from filecache.models.common import RequestClock
from filecache.models.model_entry import CacheEntry, CacheStats
from filecache.storage.cache.base import Cache
from filecache.storage.cache.codecs import EntryCodec, PlainCodec
from filecache.storage.cache.garbage_collector import GarbageCollector
from filecache.storage.cache.key_encoder import encode_cid, encode_prefix
from filecache.storage.cache.locking import is_temporary, read_shared, unlink_quietly, write_locked
from filecache.storage.directory_manager import StorageDirectoryManager, get_default_manager

logger = logging.getLogger(__name__)

_default_clock = RequestClock()


def bin_directory_name(bin: str) -> str:
    """Map a bin name to its directory name.

    The default bin keeps its name; every other bin is prefixed with
    BIN_PREFIX so bins cannot collide with each other's files.

    Raises:
        ValueError: If the bin name is empty or not a single path component.
    """
    if not bin or bin in (".", "..") or "/" in bin or os.sep in bin:
        raise ValueError(f"Invalid cache bin name: {bin!r}")
    if bin == DEFAULT_BIN:
        return bin
    return BIN_PREFIX + bin


class FileCache(Cache):
    """File-based cache bound to a single bin.

    Directory structure:
        {root}/{bin_dir}/
        ├── {token}{suffix}           # Primary entry file
        └── {token}{suffix}.expire    # Expiration marker, non-permanent only

    ``token`` is the encoded cache ID (see key_encoder) and ``suffix`` comes
    from the codec ("" for PlainCodec, ".py" for EmbeddedCodec).
    """

    def __init__(
        self,
        bin: str = DEFAULT_BIN,
        directories: StorageDirectoryManager | None = None,
        codec: EntryCodec | None = None,
        clock: Callable[[], int] | None = None,
        file_mode: int | None = None,
    ):
        """Initialize FileCache and create its bin directory if missing.

        Args:
            bin: Bin (namespace) name.
            directories: Storage root resolver. Defaults to the process-wide
                manager configured from the environment.
            codec: Entry codec. Defaults to PlainCodec.
            clock: Returns the current Unix timestamp. Defaults to a shared
                RequestClock.
            file_mode: Permission bits for written files. Defaults to the
                manager's settings.
        """
        self.bin = bin
        self.bin_dir = bin_directory_name(bin)
        self.directories = directories if directories is not None else get_default_manager()
        self.codec = codec if codec is not None else PlainCodec()
        self.clock = clock if clock is not None else _default_clock.now
        self.file_mode = file_mode if file_mode is not None else self.directories.settings.file_mode

        self.directory = self.directories.resolve_namespace_directory(self.bin_dir)
        self._collector = GarbageCollector(self.directory, self.clock, EXPIRE_SUFFIX)

    def _entry_path(self, token: str) -> Path:
        """Get the primary file path for an encoded cache ID."""
        return self.directory / f"{token}{self.codec.suffix}"

    def _marker_path(self, entry_path: Path) -> Path:
        """Get the expiration marker path for a primary file."""
        return entry_path.with_name(entry_path.name + EXPIRE_SUFFIX)

    def _read_locked(self, path: Path) -> CacheEntry | None:
        """Re-read an entry under a shared lock, removing it if still undecodable."""
        try:
            raw = read_shared(path)
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning(f"Failed to read cache entry {path.name}: {e}")
            return None

        if not raw:
            # Nothing written yet is not corruption
            return None

        entry = self.codec.decode(raw)
        if entry is None:
            logger.warning(f"Removing corrupt cache entry {path.name} in bin={self.bin}")
            unlink_quietly(path)
        return entry

    def get(self, cid: str) -> CacheEntry | None:
        """Get an entry from the cache.

        An unlocked read is tried first. If its contents do not decode, a
        write may be in progress, so the file is read again under a shared
        lock; contents that still do not decode are treated as corrupt and
        the file is deleted.

        Args:
            cid: Cache ID.

        Returns:
            The entry if present, decodable and not expired, None otherwise.
        """
        path = self._entry_path(encode_cid(cid))
        if not path.exists():
            logger.debug(f"Cache miss for cid={cid} in bin={self.bin}")
            return None

        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning(f"Failed to read cache entry {path.name}: {e}")
            return None

        entry = self.codec.decode(raw)
        if entry is None:
            entry = self._read_locked(path)
            if entry is None:
                return None

        if entry.is_expired(self.clock()):
            logger.debug(f"Cache entry expired for cid={cid} in bin={self.bin}")
            return None
        return entry

    def get_multiple(self, cids: list[str]) -> dict[str, CacheEntry]:
        """Get several entries at once.

        If the cache is unavailable the result is empty, so callers fall back
        to computing every value.

        Args:
            cids: Cache IDs to look up. Reduced in place to the misses.

        Returns:
            Mapping of cache ID to entry for every hit.
        """
        try:
            cache: dict[str, CacheEntry] = {}
            for cid in cids:
                entry = self.get(cid)
                if entry is not None:
                    cache[cid] = entry
            cids[:] = [cid for cid in cids if cid not in cache]
            return cache
        except Exception as e:
            logger.warning(f"Cache unavailable for get_multiple in bin={self.bin}: {e}")
            return {}

    def set(self, cid: str, data: Any, expire: int = PERMANENT) -> None:
        """Store data in the cache.

        Failures are logged and ignored; a later get() simply misses.

        Args:
            cid: Cache ID.
            data: Value to cache (must be JSON-serializable).
            expire: Unix timestamp after which the entry is stale, or PERMANENT.
        """
        token = encode_cid(cid)
        try:
            entry = CacheEntry(cid=token, created=self.clock(), expire=expire, data=data)
            payload = self.codec.encode(entry)

            self.directories.resolve_namespace_directory(self.bin_dir)
            path = self._entry_path(token)
            write_locked(path, payload, self.file_mode)

            marker = self._marker_path(path)
            if entry.is_permanent:
                # Left over from an earlier non-permanent write
                unlink_quietly(marker)
            else:
                write_locked(marker, str(entry.expire).encode("ascii"), self.file_mode)
        except (OSError, ValueError, TypeError) as e:
            logger.warning(f"Failed to cache cid={cid} in bin={self.bin}: {e}")
            return

        logger.debug(f"Cached cid={cid} in bin={self.bin} (expire={expire})")

    def delete(self, cid: str | list[str]) -> None:
        """Delete one entry, or several when given a list."""
        cids = cid if isinstance(cid, list) else [cid]
        self.delete_multiple(cids)

    def delete_multiple(self, cids: list[str]) -> None:
        """Delete several entries. Missing entries are ignored."""
        for cid in cids:
            path = self._entry_path(encode_cid(cid))
            unlink_quietly(path)
            unlink_quietly(self._marker_path(path))
            logger.debug(f"Deleted cid={cid} from bin={self.bin}")

    def delete_prefix(self, prefix: str) -> None:
        """Delete every entry whose cache ID starts with ``prefix``.

        Matching is a literal prefix comparison of file names against the
        encoded prefix, so markers of matched entries go with them. Prefixes
        that encode to more than FILENAME_POS_BEFORE_HASH characters can miss
        entries whose names were shortened with a hash.
        """
        token = encode_prefix(prefix)
        try:
            paths = list(self.directory.iterdir())
        except (FileNotFoundError, NotADirectoryError):
            return

        removed = 0
        for path in paths:
            if is_temporary(path) or not path.name.startswith(token):
                continue
            if path.is_file() and unlink_quietly(path):
                removed += 1
        logger.debug(f"Deleted {removed} files with prefix={prefix} from bin={self.bin}")

    def flush(self) -> None:
        """Delete every entry in the bin and recreate its empty directory."""
        shutil.rmtree(self.directory, ignore_errors=True)
        self.directories.ensure_directory_exists(self.directory)
        logger.info(f"Flushed bin={self.bin}")

    def garbage_collection(self) -> int:
        """Reclaim expired entries and orphaned markers.

        Returns:
            Number of entries reclaimed.
        """
        return self._collector.collect()

    def is_empty(self) -> bool:
        """Check whether the bin holds no entries once expired ones are reclaimed."""
        self.garbage_collection()
        try:
            with os.scandir(self.directory) as it:
                return next(it, None) is None
        except (FileNotFoundError, NotADirectoryError):
            return True

    def stats(self) -> CacheStats:
        """Get statistics for the bin directory.

        Returns:
            CacheStats counting entries, markers and markers already expired.
        """
        stats = CacheStats(bin=self.bin, directory=self.directory)
        try:
            paths = list(self.directory.iterdir())
        except (FileNotFoundError, NotADirectoryError):
            return stats

        now = self.clock()
        for path in paths:
            if is_temporary(path):
                continue
            try:
                size = path.stat().st_size
            except OSError:
                continue
            stats.total_bytes += size

            if path.name.endswith(EXPIRE_SUFFIX):
                stats.markers += 1
                try:
                    if int(path.read_text(encoding="ascii").strip()) < now:
                        stats.expired_markers += 1
                except (OSError, ValueError):
                    pass
            else:
                stats.entries += 1

        return stats
