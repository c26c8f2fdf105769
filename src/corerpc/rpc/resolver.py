"""Fetch-by-id for objects the node returns as consensus-encoded hex."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, ClassVar, Protocol, TypeVar, runtime_checkable

from .errors import DomainDecodeError, MalformedResponseError
from .hashes import HEX_DIGITS, Hash256
from .shapes import Simple

if TYPE_CHECKING:
    from .client import NodeRPCClient

logger = logging.getLogger(__name__)

RAW_HEX = Simple(str)

R = TypeVar("R", bound="Resolvable")


@runtime_checkable
class Resolvable(Protocol):
    """A domain object with a fetch method and a binary codec.

    `rpc_method` is called with `[object_id, rpc_raw_flag]` and must return
    the object's consensus encoding as a hex string.
    """

    rpc_method: ClassVar[str]
    rpc_raw_flag: ClassVar[Any]

    @classmethod
    def from_bytes(cls, data: bytes) -> Any: ...


def decode_hex(method: str, text: str) -> bytes:
    if not HEX_DIGITS.issuperset(text):
        raise MalformedResponseError(method, "result contains non-hex characters")
    try:
        return bytes.fromhex(text)
    except ValueError as exc:
        raise MalformedResponseError(method, f"result is not valid hex: {exc}") from exc


def resolve(client: NodeRPCClient, kind: type[R], object_id: Hash256) -> R:
    """Fetch `object_id` in raw mode and decode it with `kind.from_bytes`."""
    method = kind.rpc_method
    text = client.dispatch(method, (object_id, kind.rpc_raw_flag), RAW_HEX)
    data = decode_hex(method, text)
    try:
        obj = kind.from_bytes(data)
    except ValueError as exc:
        raise DomainDecodeError(method, exc) from exc
    logger.debug("Resolved %s %s (%d bytes)", kind.__name__, object_id, len(data))
    return obj


__all__ = ["RAW_HEX", "Resolvable", "decode_hex", "resolve"]
