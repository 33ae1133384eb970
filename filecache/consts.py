from pathlib import Path
from typing import Final

DEFAULT_DATA_DIR = (Path(__file__).parent.parent.resolve() / "data").absolute().resolve()

# Bin naming
DEFAULT_BIN: Final[str] = "cache"  # Stored in a directory of the same name
BIN_PREFIX: Final[str] = "cache_"  # Every other bin is stored in cache_{bin}
STORAGE_SUBDIR: Final[str] = "filecache"  # Appended to the private/public root

# Filename bounds for encoded cache IDs (not counting the bin directory)
FILENAME_MAX: Final[int] = 200
FILENAME_HASH_LENGTH: Final[int] = 34  # ',' + 32 hex digits of MD5
FILENAME_POS_BEFORE_HASH: Final[int] = FILENAME_MAX - FILENAME_HASH_LENGTH  # 166
FILENAME_HASH_SEPARATOR: Final[str] = ","  # Never produced by quote_plus()

# Characters quote_plus() leaves alone but that would let a token end in a file suffix
CID_ESCAPES: Final[dict[str, str]] = {
    ".": "%2E",
}

# Readable substitutions for characters common in cache IDs
CID_SUBSTITUTIONS: Final[dict[str, str]] = {
    "%3A": "@",  # ':'
    "%2F": "=",  # '/'
}

# Entry files
EXPIRE_SUFFIX: Final[str] = ".expire"
EMBEDDED_SUFFIX: Final[str] = ".py"
EMBEDDED_VARIABLE: Final[str] = "cache"
TEMP_SUFFIX: Final[str] = ".%tmp"  # '%' followed by non-hex never comes out of encode_cid()

# Expiration
PERMANENT: Final[int] = 0  # Entry never expires and has no marker file

# Permissions
DEFAULT_FILE_MODE: Final[int] = 0o600
DEFAULT_DIRECTORY_MODE: Final[int] = 0o700

HTACCESS_FILENAME: Final[str] = ".htaccess"
HTACCESS_CONTENTS: Final[str] = """# Deny all requests to cache files.
<IfModule mod_authz_core.c>
  Require all denied
</IfModule>
<IfModule !mod_authz_core.c>
  Deny from all
</IfModule>
Options -Indexes -ExecCGI -Includes -MultiViews
"""
