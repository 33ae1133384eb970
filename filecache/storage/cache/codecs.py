"""Entry codecs: how a CacheEntry is turned into file contents and back.

Two codecs share one interface so that FileCache never needs to know which
one a bin uses:

- PlainCodec: the entry serialized as JSON, written verbatim.
- EmbeddedCodec: the JSON is base64-encoded and wrapped in a one-line Python
  module (``cache = '...'``). Reading the file executes that module and picks
  up the ``cache`` variable.

EmbeddedCodec is EXPERIMENTAL and not the default. Executing file contents
means a damaged file fails at compile time instead of failing to parse, and
anyone able to write into the cache directory can get code executed by the
reader. Builtins are withheld from the executed module, which limits but does
not remove that exposure. Only use it for bins stored in a directory that is
private to the application.
"""

import base64
import binascii
import logging
from abc import ABC, abstractmethod

from pydantic import ValidationError

from filecache.consts import EMBEDDED_SUFFIX, EMBEDDED_VARIABLE
from filecache.models.model_entry import CacheEntry

logger = logging.getLogger(__name__)


class EntryCodec(ABC):
    """Serializes cache entries to bytes and back.

    ``decode`` must never raise: undecodable input (empty, truncated or
    corrupted) is reported as ``None`` and handled by the caller as a miss.
    """

    #: Appended to the file token to form the primary file name.
    suffix: str = ""

    @abstractmethod
    def encode(self, entry: CacheEntry) -> bytes:
        """Serialize an entry.

        Raises:
            ValueError: If the entry data cannot be serialized.
        """
        ...

    @abstractmethod
    def decode(self, raw: bytes) -> CacheEntry | None:
        """Deserialize file contents, or return None if they are not decodable."""
        ...


class PlainCodec(EntryCodec):
    """JSON serialization of the entry, stored as-is."""

    suffix = ""

    def encode(self, entry: CacheEntry) -> bytes:
        return entry.model_dump_json().encode("utf-8")

    def decode(self, raw: bytes) -> CacheEntry | None:
        if not raw:
            return None
        try:
            return CacheEntry.model_validate_json(raw)
        except ValidationError as e:
            logger.debug(f"Undecodable plain cache payload ({len(raw)} bytes): {e.error_count()} errors")
            return None


class EmbeddedCodec(EntryCodec):
    """Base64 JSON assigned to a variable in a Python module (experimental).

    Base64 keeps arbitrary payload text (quotes, backslashes, newlines) out of
    the string literal.
    """

    suffix = EMBEDDED_SUFFIX

    def __init__(self, variable: str = EMBEDDED_VARIABLE):
        self.variable = variable
        self._plain = PlainCodec()

    def encode(self, entry: CacheEntry) -> bytes:
        payload = base64.b64encode(self._plain.encode(entry)).decode("ascii")
        return f"{self.variable} = '{payload}'\n".encode("ascii")

    def decode(self, raw: bytes) -> CacheEntry | None:
        if not raw:
            return None
        try:
            code = compile(raw, f"<filecache {self.variable}>", "exec")
            namespace: dict[str, object] = {"__builtins__": {}}
            exec(code, namespace)
        except Exception as e:
            # Anything the damaged module raises while loading is a decode failure
            logger.debug(f"Embedded cache module failed to load: {e!r}")
            return None

        value = namespace.get(self.variable)
        if not isinstance(value, str):
            return None
        try:
            decoded = base64.b64decode(value, validate=True)
        except binascii.Error:
            return None
        return self._plain.decode(decoded)


def get_codec(name: str) -> EntryCodec:
    """Return a codec instance by name ('plain' or 'embedded')."""
    if name == "plain":
        return PlainCodec()
    if name == "embedded":
        return EmbeddedCodec()
    raise ValueError(f"Unknown codec '{name}'. Must be: plain, embedded")
