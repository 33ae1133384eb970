"""Cache ID to filename encoding.

Cache IDs are URL-encoded, then the encoded ':' and '/' are turned into '@'
and '=' so that namespaced IDs such as ``user:42`` or ``menu/main`` stay
readable on disk. '.' is escaped as well, so no token can end in a marker or
codec suffix and none starts like a hidden temp file. Encoded IDs longer than
FILENAME_MAX are cut at FILENAME_POS_BEFORE_HASH and the rest is replaced by ',' plus its MD5 digest.

Prefix matching over encoded names is exact as long as neither the prefix nor
the key crosses the cut point. Past it, matching is best effort: a key whose
tail was hashed only matches prefixes no longer than the cut point.
"""

import hashlib
from urllib.parse import quote_plus

from filecache.consts import (
    CID_ESCAPES,
    CID_SUBSTITUTIONS,
    FILENAME_HASH_SEPARATOR,
    FILENAME_MAX,
    FILENAME_POS_BEFORE_HASH,
)


def encode_cid(cid: str) -> str:
    """Normalize a cache ID so it is usable as a file name.

    Args:
        cid: Cache ID as supplied by the caller.

    Returns:
        File token derived from ``cid``, at most FILENAME_MAX characters.
    """
    token = quote_plus(cid, safe="")
    for raw, escaped in CID_ESCAPES.items():
        token = token.replace(raw, escaped)
    for encoded, readable in CID_SUBSTITUTIONS.items():
        token = token.replace(encoded, readable)

    if len(token) > FILENAME_MAX:
        head = token[:FILENAME_POS_BEFORE_HASH]
        tail = token[FILENAME_POS_BEFORE_HASH:]
        token = head + FILENAME_HASH_SEPARATOR + hashlib.md5(tail.encode()).hexdigest()

    return token


def encode_prefix(prefix: str) -> str:
    """Encode a cache ID prefix for literal matching against file tokens."""
    return encode_cid(prefix)
