from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from filecache.consts import DEFAULT_DATA_DIR, DEFAULT_DIRECTORY_MODE, DEFAULT_FILE_MODE

CodecName = Literal["plain", "embedded"]


class StorageSettings(BaseSettings):
    """Host configuration for the cache storage root.

    Values are read from ``FILECACHE_*`` environment variables or a ``.env``
    file, e.g. ``FILECACHE_PRIVATE_PATH=/var/lib/app/private``.
    """

    model_config = SettingsConfigDict(env_prefix="FILECACHE_", env_file=".env", extra="ignore")

    private_path: Path | None = None  # Preferred, not served by the web server
    public_path: Path = DEFAULT_DATA_DIR / "files"
    storage_dir: Path | None = None  # Overrides both private and public roots

    file_mode: int = DEFAULT_FILE_MODE
    directory_mode: int = DEFAULT_DIRECTORY_MODE
    write_htaccess: bool = True  # Only applied when the root is not private

    codec: CodecName = "plain"  # Used by the CLI; library callers pass a codec
