"""256-bit identifiers as used on the wire by Bitcoin Core."""

from __future__ import annotations

import hashlib
import string
from typing import Any

from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema

from .errors import MalformedResponseError

HASH_LENGTH = 32
HEX_LENGTH = HASH_LENGTH * 2
HEX_DIGITS = frozenset(string.hexdigits)


class Hash256:
    """Fixed 32-byte hash (block hash, txid, merkle root).

    Bytes are kept in internal (consensus) order. The node prints hashes
    byte-reversed, so `to_wire` and `from_wire` reverse on the way through.
    """

    __slots__ = ("_raw",)

    def __init__(self, raw: bytes) -> None:
        if not isinstance(raw, (bytes, bytearray)):
            raise TypeError(f"Hash256 expects bytes, got {type(raw).__name__}")
        if len(raw) != HASH_LENGTH:
            raise ValueError(f"Hash256 expects {HASH_LENGTH} bytes, got {len(raw)}")
        self._raw = bytes(raw)

    @classmethod
    def from_bytes(cls, raw: bytes) -> Hash256:
        return cls(raw)

    @classmethod
    def sha256d(cls, data: bytes) -> Hash256:
        """Double SHA-256 of `data`, as used for block hashes and txids."""
        return cls(hashlib.sha256(hashlib.sha256(data).digest()).digest())

    @classmethod
    def from_wire(cls, text: object, *, method: str | None = None) -> Hash256:
        if not isinstance(text, str):
            raise MalformedResponseError(method, f"expected hex string for hash, got {type(text).__name__}")
        if len(text) != HEX_LENGTH:
            raise MalformedResponseError(
                method, f"expected {HEX_LENGTH} hex characters for hash, got {len(text)}"
            )
        if not HEX_DIGITS.issuperset(text):
            raise MalformedResponseError(method, f"hash contains non-hex characters: {text!r}")
        return cls(bytes.fromhex(text)[::-1])

    def to_wire(self) -> str:
        return self._raw[::-1].hex()

    @property
    def raw(self) -> bytes:
        return self._raw

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Hash256):
            return NotImplemented
        return self._raw == other._raw

    def __hash__(self) -> int:
        return hash(self._raw)

    def __str__(self) -> str:
        return self.to_wire()

    def __repr__(self) -> str:
        return f"Hash256({self.to_wire()!r})"

    @classmethod
    def _validate(cls, value: Any) -> Hash256:
        if isinstance(value, Hash256):
            return value
        try:
            return cls.from_wire(value)
        except MalformedResponseError as exc:
            raise ValueError(exc.detail) from exc

    @classmethod
    def __get_pydantic_core_schema__(cls, source: Any, handler: GetCoreSchemaHandler) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            cls._validate,
            serialization=core_schema.plain_serializer_function_ser_schema(
                lambda value: value.to_wire(),
                when_used="always",
            ),
        )


__all__ = ["HASH_LENGTH", "HEX_DIGITS", "HEX_LENGTH", "Hash256"]
