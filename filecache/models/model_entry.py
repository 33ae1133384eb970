"""Cache entry and statistics models."""

from datetime import datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, computed_field

from filecache.consts import PERMANENT
from filecache.models.common import _utc_now


class CacheEntry(BaseModel):
    """A single cached record as stored in its primary file.

    The ``cid`` field holds the encoded file token rather than the caller's
    original key; it is kept for bookkeeping only.
    """

    cid: str = Field(description="Encoded cache ID (file token)")
    created: int = Field(description="Unix timestamp of the write")
    expire: int = Field(default=PERMANENT, description="Unix timestamp or PERMANENT (0)")
    data: Any = None

    @property
    def is_permanent(self) -> bool:
        return self.expire == PERMANENT

    def is_expired(self, now: int) -> bool:
        """Check whether the entry expired strictly before ``now``."""
        return not self.is_permanent and self.expire < now


class CacheStats(BaseModel):
    """Snapshot of a bin directory's contents."""

    bin: str
    directory: Path
    entries: int = 0
    markers: int = 0
    expired_markers: int = 0
    total_bytes: int = 0
    generated_at: datetime = Field(default_factory=_utc_now)

    @computed_field
    @property
    def permanent_entries(self) -> int:
        return max(self.entries - self.markers, 0)
