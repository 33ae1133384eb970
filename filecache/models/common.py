import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime


def _utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(UTC)


def _unix_now() -> int:
    """Return current Unix time in whole seconds."""
    return int(time.time())


class RequestClock:
    """Request-scoped clock.

    Outside of ``frozen()`` every call to ``now()`` reads the wall clock.
    Inside ``frozen()`` the timestamp taken on entry is returned, so that all
    expiration checks belonging to one logical operation agree on "now".
    The frozen value is tracked per thread.
    """

    def __init__(self) -> None:
        self._local = threading.local()

    def now(self) -> int:
        frozen = getattr(self._local, "frozen_at", None)
        if frozen is not None:
            return frozen
        return _unix_now()

    @contextmanager
    def frozen(self, at: int | None = None) -> Iterator[int]:
        """Freeze ``now()`` for the duration of the block.

        Args:
            at: Timestamp to freeze at. Defaults to the current time.

        Yields:
            The frozen timestamp.
        """
        previous = getattr(self._local, "frozen_at", None)
        self._local.frozen_at = _unix_now() if at is None else at
        try:
            yield self._local.frozen_at
        finally:
            self._local.frozen_at = previous
