"""Lazy reclamation of expired cache entries.

Expiration is tracked by marker files next to the primary entry file
(``{primary}.expire``) that hold a decimal Unix timestamp. Collection scans
those markers; there is no background process.
"""

import logging
from collections.abc import Callable
from pathlib import Path

from filecache.consts import EXPIRE_SUFFIX
from filecache.storage.cache.locking import unlink_quietly

logger = logging.getLogger(__name__)


class GarbageCollector:
    """Removes entries whose expiration marker is in the past.

    Other processes may reclaim the same entries concurrently; a file that is
    already gone is not an error.
    """

    def __init__(
        self,
        directory: Path,
        clock: Callable[[], int],
        marker_suffix: str = EXPIRE_SUFFIX,
    ):
        """Initialize GarbageCollector.

        Args:
            directory: Bin directory to scan.
            clock: Returns the current Unix timestamp.
            marker_suffix: Suffix identifying expiration marker files.
        """
        self.directory = directory
        self.clock = clock
        self.marker_suffix = marker_suffix

    def _read_marker(self, marker: Path) -> int | None:
        try:
            return int(marker.read_text(encoding="ascii").strip())
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            # Empty or half-written while a set() is in progress
            logger.debug(f"Skipping unreadable marker {marker.name}: {e}")
            return None

    def collect(self) -> int:
        """Scan markers and delete expired entries.

        Markers without a primary file are orphans and are removed as well.

        Returns:
            Number of entries (expired or orphaned markers) reclaimed.
        """
        try:
            paths = list(self.directory.iterdir())
        except (FileNotFoundError, NotADirectoryError):
            return 0

        now = self.clock()
        reclaimed = 0
        for marker in paths:
            if not marker.name.endswith(self.marker_suffix):
                continue
            primary = marker.with_name(marker.name[: -len(self.marker_suffix)])

            if not primary.exists():
                if unlink_quietly(marker):
                    logger.debug(f"Removed orphaned marker {marker.name}")
                    reclaimed += 1
                continue

            expire = self._read_marker(marker)
            if expire is None or expire >= now:
                continue

            unlink_quietly(marker)
            unlink_quietly(primary)
            reclaimed += 1
            logger.debug(f"Reclaimed expired entry {primary.name} (expired at {expire})")

        if reclaimed:
            logger.info(f"Garbage collection reclaimed {reclaimed} entries in {self.directory}")
        return reclaimed
