"""Raw transaction RPC result types."""

from __future__ import annotations

from typing import Any

from corerpc.rpc.hashes import Hash256

from .base import Height, RPCModel, UInt32
from .blockchain import Serialized


class SerializedTransaction(Serialized):
    """`getrawtransaction` result with verbose=false."""

    __slots__ = ()


class VerboseTransaction(RPCModel):
    """`getrawtransaction` result with verbose=true."""

    txid: Hash256
    hash: Hash256
    version: int
    size: Height
    vsize: Height
    weight: Height | None = None
    locktime: UInt32
    # Script and witness layouts vary by output type; kept as decoded JSON.
    vin: list[dict[str, Any]]
    vout: list[dict[str, Any]]
    hex: str
    blockhash: Hash256 | None = None
    confirmations: int | None = None
    time: int | None = None
    blocktime: int | None = None


__all__ = ["SerializedTransaction", "VerboseTransaction"]
