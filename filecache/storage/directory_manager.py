"""Storage root and bin directory resolution.

Directory structure:
    {root}/                  # storage_dir, or {private|public}/filecache
    ├── .htaccess            # Only when the root is not private
    ├── cache/               # Default bin
    └── cache_{bin}/         # Every other bin
        ├── {token}
        └── {token}.expire
"""

import logging
import threading
from pathlib import Path

from filecache.consts import HTACCESS_CONTENTS, HTACCESS_FILENAME, STORAGE_SUBDIR
from filecache.settings import StorageSettings

logger = logging.getLogger(__name__)


class StorageDirectoryManager:
    """Resolves the storage root once and creates bin directories on demand.

    One manager can be shared by many FileCache instances; the root is
    computed on first use and reused afterwards.
    """

    def __init__(self, settings: StorageSettings | None = None):
        """Initialize StorageDirectoryManager.

        Args:
            settings: Storage configuration. Defaults to StorageSettings() read
                from the environment.
        """
        self.settings = settings if settings is not None else StorageSettings()
        self._root: Path | None = None
        self._lock = threading.Lock()

    def _is_private(self, path: Path) -> bool:
        private = self.settings.private_path
        if private is None:
            return False
        return path.resolve().is_relative_to(private.resolve())

    def _choose_root(self) -> Path:
        if self.settings.storage_dir is not None:
            return self.settings.storage_dir
        if self.settings.private_path is not None:
            return self.settings.private_path / STORAGE_SUBDIR
        return self.settings.public_path / STORAGE_SUBDIR

    def ensure_directory_exists(self, path: Path) -> bool:
        """Create ``path`` (and parents) if missing.

        Another process creating the same directory first is not an error.

        Returns:
            True if the directory exists afterwards.
        """
        try:
            path.mkdir(mode=self.settings.directory_mode, parents=True, exist_ok=True)
        except OSError as e:
            logger.warning(f"Could not create cache directory {path}: {e}")
            return False
        return path.is_dir()

    def harden_directory_permissions(self, path: Path) -> None:
        """Restrict access to a storage root that may be web-accessible."""
        try:
            path.chmod(self.settings.directory_mode)
        except OSError as e:
            logger.warning(f"Could not set permissions on {path}: {e}")

        if not self.settings.write_htaccess or self._is_private(path):
            return

        htaccess = path / HTACCESS_FILENAME
        if htaccess.exists():
            return
        try:
            htaccess.write_text(HTACCESS_CONTENTS, encoding="utf-8")
            htaccess.chmod(0o444)
            logger.info(f"Wrote {htaccess}")
        except OSError as e:
            logger.warning(f"Could not write {htaccess}: {e}")

    def root_directory(self) -> Path:
        """Return the storage root, resolving and preparing it on first call."""
        if self._root is not None:
            return self._root

        with self._lock:
            if self._root is None:
                root = self._choose_root()
                if self.ensure_directory_exists(root):
                    self.harden_directory_permissions(root)
                logger.debug(f"Cache storage root: {root}")
                self._root = root
        return self._root

    def namespace_directory(self, name: str) -> Path:
        """Return the path of a bin directory without touching the filesystem."""
        return self.root_directory() / name

    def resolve_namespace_directory(self, name: str) -> Path:
        """Return the path of a bin directory, creating it if missing.

        Args:
            name: Directory name of the bin (already prefixed).
        """
        directory = self.namespace_directory(name)
        if not directory.is_dir():
            self.ensure_directory_exists(directory)
        return directory


_default_manager: StorageDirectoryManager | None = None
_default_lock = threading.Lock()


def get_default_manager() -> StorageDirectoryManager:
    """Return the process-wide manager built from environment settings."""
    global _default_manager
    with _default_lock:
        if _default_manager is None:
            _default_manager = StorageDirectoryManager()
        return _default_manager
