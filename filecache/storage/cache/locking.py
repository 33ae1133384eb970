"""Advisory file locking and removal helpers for cache files.

Writers build the new contents in a temporary file next to the destination,
holding an exclusive ``flock`` on it from creation until the file has been
renamed into place. Readers therefore only ever open a complete file: either
the previous version or the new one. A reader that takes a shared lock on a
file that was just published waits until its writer is done with it.
"""

import fcntl
import logging
import os
import tempfile
from pathlib import Path

from filecache.consts import TEMP_SUFFIX

logger = logging.getLogger(__name__)


def is_temporary(path: Path) -> bool:
    """Check whether ``path`` is an in-progress write."""
    return path.name.endswith(TEMP_SUFFIX)


def write_locked(path: Path, payload: bytes, mode: int | None = None) -> None:
    """Atomically replace ``path`` with ``payload`` under an exclusive lock.

    Args:
        path: Destination file.
        payload: Complete new contents.
        mode: Optional permission bits for the new file.

    Raises:
        OSError: If the file cannot be created, locked, written or renamed.
    """
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name[:64]}.", suffix=TEMP_SUFFIX)
    try:
        fcntl.flock(fd, fcntl.LOCK_EX)
        view = memoryview(payload)
        while view:
            written = os.write(fd, view)
            view = view[written:]
        os.fsync(fd)
        if mode is not None:
            os.fchmod(fd, mode)
        os.replace(tmp_name, path)
    except BaseException:
        unlink_quietly(Path(tmp_name))
        raise
    finally:
        # Closing the descriptor releases the lock
        os.close(fd)


def read_shared(path: Path) -> bytes:
    """Read the full contents of ``path`` while holding a shared lock.

    Raises:
        OSError: If the file cannot be opened, locked or read.
    """
    with path.open("rb") as f:
        fcntl.flock(f.fileno(), fcntl.LOCK_SH)
        try:
            return f.read()
        finally:
            fcntl.flock(f.fileno(), fcntl.LOCK_UN)


def unlink_quietly(path: Path) -> bool:
    """Remove a file, ignoring errors.

    Returns:
        True if this call removed the file.
    """
    try:
        path.unlink()
        return True
    except FileNotFoundError:
        return False
    except OSError as e:
        logger.debug(f"Could not remove {path}: {e}")
        return False
