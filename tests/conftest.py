"""Pytest configuration and fixtures."""

import tempfile
from pathlib import Path

import pytest

from filecache.settings import StorageSettings
from filecache.storage.cache.codecs import EmbeddedCodec
from filecache.storage.cache.file_caching import FileCache
from filecache.storage.directory_manager import StorageDirectoryManager

NOW = 1_700_000_000


class FakeClock:
    """Settable clock returning a fixed Unix timestamp."""

    def __init__(self, now: int = NOW):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def storage_settings(temp_dir: Path) -> StorageSettings:
    """Settings with an explicit storage root inside the temp directory."""
    return StorageSettings(storage_dir=temp_dir / "filecache")


@pytest.fixture
def directories(storage_settings: StorageSettings) -> StorageDirectoryManager:
    return StorageDirectoryManager(storage_settings)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def file_cache(directories: StorageDirectoryManager, clock: FakeClock) -> FileCache:
    """Create a FileCache for the 'test' bin with the plain codec."""
    return FileCache(bin="test", directories=directories, clock=clock)


@pytest.fixture
def embedded_cache(directories: StorageDirectoryManager, clock: FakeClock) -> FileCache:
    """Create a FileCache for the 'embedded' bin with the embedded codec."""
    return FileCache(bin="embedded", directories=directories, codec=EmbeddedCodec(), clock=clock)
