"""Blockchain related RPC result types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from pydantic import Field

from corerpc.rpc.hashes import Hash256

from .base import Height, RPCModel, UInt32

ChainTipStatus = Literal["active", "valid-fork", "valid-headers", "headers-only", "invalid"]


@dataclass(frozen=True, slots=True)
class Serialized:
    """A consensus-encoded object returned by the node as a hex string."""

    hex: str

    @property
    def data(self) -> bytes:
        return bytes.fromhex(self.hex)


class SerializedBlock(Serialized):
    """`getblock` result at verbosity 0."""

    __slots__ = ()


class SerializedHeader(Serialized):
    """`getblockheader` result with verbose=false."""

    __slots__ = ()


class VerboseBlockTransaction(RPCModel):
    """A transaction inlined in a verbosity 2 `getblock` result."""

    txid: Hash256
    hash: Hash256


class VerboseBlock(RPCModel):
    """`getblock` result at verbosity 1 or 2."""

    hash: Hash256
    confirmations: int
    size: Height
    strippedsize: Height | None = None
    weight: Height | None = None
    height: Height
    version: int
    version_hex: str | None = Field(default=None, alias="versionHex")
    merkleroot: Hash256
    # Verbosity 1 lists txids; verbosity 2 inlines decoded transactions.
    tx: list[Hash256] | list[VerboseBlockTransaction]
    time: int
    mediantime: int | None = None
    nonce: UInt32
    bits: str
    difficulty: float | None = None
    chainwork: str
    n_tx: Height | None = Field(default=None, alias="nTx")
    previousblockhash: Hash256 | None = None
    nextblockhash: Hash256 | None = None

    @property
    def txids(self) -> list[Hash256]:
        return [entry if isinstance(entry, Hash256) else entry.txid for entry in self.tx]


class BlockHeaderInfo(RPCModel):
    """`getblockheader` result with verbose=true."""

    hash: Hash256
    confirmations: int
    height: Height
    version: int
    version_hex: str | None = Field(default=None, alias="versionHex")
    merkleroot: Hash256
    time: int
    mediantime: int | None = None
    nonce: UInt32
    bits: str
    difficulty: float
    chainwork: str
    n_tx: Height | None = Field(default=None, alias="nTx")
    previousblockhash: Hash256 | None = None
    nextblockhash: Hash256 | None = None


class SoftforkProgress(RPCModel):
    """Enforcement window counters of a legacy IsSuperMajority softfork."""

    status: bool
    found: int | None = None
    required: int | None = None
    window: int | None = None


class Softfork(RPCModel):
    id: str
    version: int
    enforce: SoftforkProgress | None = None
    reject: SoftforkProgress


class BlockchainInfo(RPCModel):
    """Models the result of "getblockchaininfo"."""

    chain: str
    blocks: Height
    headers: Height
    bestblockhash: Hash256
    difficulty: float
    time: int | None = None
    mediantime: int
    verificationprogress: float
    initialblockdownload: bool | None = None
    chainwork: str
    size_on_disk: Height | None = None
    pruned: bool
    pruneheight: Height | None = None
    warnings: str | list[str] | None = None


class LegacyBlockchainInfo(BlockchainInfo):
    """Result of "getblockchaininfo" on nodes older than 0.19 (softfork list)."""

    softforks: list[Softfork]


class ChainTip(RPCModel):
    height: Height
    hash: Hash256
    branchlen: Height
    status: ChainTipStatus


class MempoolInfo(RPCModel):
    loaded: bool | None = None
    size: Height
    bytes: Height
    usage: Height
    maxmempool: Height
    mempoolminfee: float
    minrelaytxfee: float | None = None


class MempoolEntry(RPCModel):
    """One transaction of a verbose getrawmempool result."""

    size: Height | None = None
    vsize: Height | None = None
    weight: Height | None = None
    fee: float | None = None
    time: int
    height: Height
    startingpriority: float | None = None
    currentpriority: float | None = None
    wtxid: Hash256 | None = None
    depends: list[Hash256]
    spentby: list[Hash256] | None = None


@dataclass(frozen=True, slots=True)
class MempoolTxids:
    """Result of "getrawmempool" with verbose=false."""

    txids: list[Hash256]


@dataclass(frozen=True, slots=True)
class MempoolEntries:
    """Result of "getrawmempool" with verbose=true, keyed by txid."""

    entries: dict[Hash256, MempoolEntry]


class ScriptPubKey(RPCModel):
    asm: str
    hex: str
    req_sigs: int | None = Field(default=None, alias="reqSigs")
    script_type: str = Field(alias="type")
    address: str | None = None
    addresses: list[str] | None = None


class TxOut(RPCModel):
    """Models the result of "gettxout" for an unspent output."""

    bestblock: Hash256
    confirmations: int
    value: float
    script_pub_key: ScriptPubKey = Field(alias="scriptPubKey")
    version: int | None = None
    coinbase: bool


class TxOutSetInfo(RPCModel):
    height: Height
    bestblock: Hash256
    transactions: Height | None = None
    txouts: Height
    bogosize: Height | None = None
    bytes_serialized: Height | None = None
    hash_serialized: str | None = None
    hash_serialized_2: str | None = None
    disk_size: Height | None = None
    total_amount: float


class BlockRef(RPCModel):
    """Models the result of "waitfornewblock" and "waitforblock"."""

    hash: Hash256
    height: Height


__all__ = [
    "BlockHeaderInfo",
    "BlockRef",
    "BlockchainInfo",
    "ChainTip",
    "ChainTipStatus",
    "LegacyBlockchainInfo",
    "MempoolEntries",
    "MempoolEntry",
    "MempoolInfo",
    "MempoolTxids",
    "ScriptPubKey",
    "Serialized",
    "SerializedBlock",
    "SerializedHeader",
    "Softfork",
    "SoftforkProgress",
    "TxOut",
    "TxOutSetInfo",
    "VerboseBlock",
    "VerboseBlockTransaction",
]
