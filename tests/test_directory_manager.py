"""Tests for storage root and bin directory resolution."""

import stat
from pathlib import Path

import pytest

from filecache.consts import HTACCESS_FILENAME
from filecache.settings import StorageSettings
from filecache.storage import directory_manager
from filecache.storage.directory_manager import StorageDirectoryManager, get_default_manager


class TestRootDirectory:
    """Tests for root_directory()."""

    def test_explicit_storage_dir(self, temp_dir: Path) -> None:
        manager = StorageDirectoryManager(StorageSettings(storage_dir=temp_dir / "custom"))

        root = manager.root_directory()
        assert root == temp_dir / "custom"
        assert root.is_dir()

    def test_prefers_private_path(self, temp_dir: Path) -> None:
        settings = StorageSettings(private_path=temp_dir / "private", public_path=temp_dir / "public")
        root = StorageDirectoryManager(settings).root_directory()

        assert root == temp_dir / "private" / "filecache"
        assert not (root / HTACCESS_FILENAME).exists()

    def test_falls_back_to_public_path(self, temp_dir: Path) -> None:
        settings = StorageSettings(public_path=temp_dir / "public")
        root = StorageDirectoryManager(settings).root_directory()

        assert root == temp_dir / "public" / "filecache"
        htaccess = root / HTACCESS_FILENAME
        assert htaccess.exists()
        assert "Deny from all" in htaccess.read_text()

    def test_htaccess_can_be_disabled(self, temp_dir: Path) -> None:
        settings = StorageSettings(public_path=temp_dir / "public", write_htaccess=False)
        root = StorageDirectoryManager(settings).root_directory()
        assert not (root / HTACCESS_FILENAME).exists()

    def test_storage_dir_inside_private_path_has_no_htaccess(self, temp_dir: Path) -> None:
        settings = StorageSettings(
            private_path=temp_dir / "private",
            storage_dir=temp_dir / "private" / "elsewhere",
        )
        root = StorageDirectoryManager(settings).root_directory()
        assert not (root / HTACCESS_FILENAME).exists()

    def test_root_permissions(self, temp_dir: Path) -> None:
        settings = StorageSettings(storage_dir=temp_dir / "root", directory_mode=0o750)
        root = StorageDirectoryManager(settings).root_directory()
        assert stat.S_IMODE(root.stat().st_mode) == 0o750

    def test_resolved_once(self, temp_dir: Path) -> None:
        settings = StorageSettings(storage_dir=temp_dir / "first")
        manager = StorageDirectoryManager(settings)
        first = manager.root_directory()

        settings.storage_dir = temp_dir / "second"
        assert manager.root_directory() == first
        assert not (temp_dir / "second").exists()

    def test_existing_directory(self, temp_dir: Path) -> None:
        (temp_dir / "existing").mkdir()
        manager = StorageDirectoryManager(StorageSettings(storage_dir=temp_dir / "existing"))
        assert manager.root_directory().is_dir()


class TestNamespaceDirectory:
    """Tests for resolve_namespace_directory()."""

    def test_creates_directory(self, directories: StorageDirectoryManager) -> None:
        directory = directories.resolve_namespace_directory("cache_page")

        assert directory == directories.root_directory() / "cache_page"
        assert directory.is_dir()

    def test_idempotent(self, directories: StorageDirectoryManager) -> None:
        first = directories.resolve_namespace_directory("cache_page")
        (first / "entry").write_text("x")

        second = directories.resolve_namespace_directory("cache_page")
        assert first == second
        assert (second / "entry").exists()

    def test_namespace_directory_does_not_create(self, directories: StorageDirectoryManager) -> None:
        directory = directories.namespace_directory("cache_lazy")
        assert not directory.exists()


class TestDirectoryHooks:
    def test_ensure_directory_exists_race(self, directories: StorageDirectoryManager, temp_dir: Path) -> None:
        """Directory created by someone else in the meantime is fine."""
        target = temp_dir / "raced"
        target.mkdir()
        assert directories.ensure_directory_exists(target) is True

    def test_ensure_directory_exists_failure(self, directories: StorageDirectoryManager, temp_dir: Path) -> None:
        blocker = temp_dir / "file"
        blocker.write_text("not a directory")
        assert directories.ensure_directory_exists(blocker / "child") is False

    def test_hooks_can_be_overridden(self, temp_dir: Path) -> None:
        hardened: list[Path] = []

        class RecordingManager(StorageDirectoryManager):
            def harden_directory_permissions(self, path: Path) -> None:
                hardened.append(path)

        manager = RecordingManager(StorageSettings(storage_dir=temp_dir / "root"))
        manager.root_directory()
        manager.root_directory()
        assert hardened == [temp_dir / "root"]


class TestSettings:
    def test_from_environment(self, monkeypatch: pytest.MonkeyPatch, temp_dir: Path) -> None:
        monkeypatch.setenv("FILECACHE_PRIVATE_PATH", str(temp_dir / "private"))
        monkeypatch.setenv("FILECACHE_CODEC", "embedded")
        monkeypatch.setenv("FILECACHE_WRITE_HTACCESS", "false")

        settings = StorageSettings()

        assert settings.private_path == temp_dir / "private"
        assert settings.codec == "embedded"
        assert settings.write_htaccess is False

    def test_invalid_codec(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FILECACHE_CODEC", "pickle")
        with pytest.raises(ValueError):
            StorageSettings()


def test_default_manager_is_shared(monkeypatch: pytest.MonkeyPatch, temp_dir: Path) -> None:
    monkeypatch.setattr(directory_manager, "_default_manager", None)
    monkeypatch.setenv("FILECACHE_STORAGE_DIR", str(temp_dir / "env_root"))

    manager = get_default_manager()

    assert manager is get_default_manager()
    assert manager.root_directory() == temp_dir / "env_root"
