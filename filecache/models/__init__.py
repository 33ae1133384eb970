"""Pydantic models for filecache."""

from filecache.models.common import RequestClock
from filecache.models.model_entry import CacheEntry, CacheStats

__all__ = [
    "CacheEntry",
    "CacheStats",
    "RequestClock",
]
