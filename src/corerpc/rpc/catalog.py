"""Declarative catalog of the node RPC methods this client understands.

Each `MethodSpec` names a method, its positional parameters and the shape of
its result. Methods whose result changed between node releases list the
alternate shapes in `versions`, keyed by the first node version (as reported
in `getnetworkinfo.version`, e.g. 250000 for 25.0) that returns them.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from corerpc.models import (
    BlockchainInfo,
    BlockHeaderInfo,
    BlockRef,
    ChainTip,
    EstimateSmartFee,
    LegacyBlockchainInfo,
    LegacyNetworkInfo,
    MempoolEntries,
    MempoolEntry,
    MempoolInfo,
    MempoolTxids,
    NetTotals,
    NetworkInfo,
    PeerInfo,
    SerializedBlock,
    SerializedHeader,
    SerializedTransaction,
    TxOut,
    TxOutSetInfo,
    VerboseBlock,
    VerboseTransaction,
)
from corerpc.models.base import Height

from .hashes import Hash256
from .shapes import Polymorphic, ResultShape, Simple, Variant, is_array, is_object, is_string

NULL = Simple(None)


class UnknownMethodError(KeyError):
    """Raised by `lookup` for a method name missing from the catalog."""


class ArityError(TypeError):
    """Raised when a call passes too few or too many positional parameters."""


@dataclass(frozen=True)
class Param:
    name: str
    required: bool = True


@dataclass(frozen=True)
class MethodSpec:
    name: str
    params: tuple[Param, ...]
    result: ResultShape
    versions: tuple[tuple[int, ResultShape], ...] = field(default=())

    @property
    def min_params(self) -> int:
        return sum(1 for param in self.params if param.required)

    @property
    def max_params(self) -> int:
        return len(self.params)

    def check_arity(self, count: int) -> None:
        if not self.min_params <= count <= self.max_params:
            names = ", ".join(param.name if param.required else f"[{param.name}]" for param in self.params)
            raise ArityError(f"{self.name}({names}) takes {self._arity_text()} parameters, got {count}")

    def shape_for(self, node_version: int | None) -> ResultShape:
        """Return the result shape for a node of `node_version`.

        Unknown versions use the default (current) shape.
        """
        if node_version is None:
            return self.result
        chosen = self.result
        best: int | None = None
        for minimum, shape in self.versions:
            if minimum <= node_version and (best is None or minimum > best):
                chosen, best = shape, minimum
        return chosen

    def _arity_text(self) -> str:
        if self.min_params == self.max_params:
            return str(self.max_params)
        return f"{self.min_params} to {self.max_params}"


def _spec(
    name: str,
    result: ResultShape,
    *params: Param,
    versions: tuple[tuple[int, ResultShape], ...] = (),
) -> MethodSpec:
    return MethodSpec(name=name, params=tuple(params), result=result, versions=versions)


def _optional(name: str) -> Param:
    return Param(name, required=False)


GET_BLOCK_RESULT = Polymorphic(
    (
        Variant("serialized block hex", is_string, str, SerializedBlock),
        Variant("verbose block object", is_object, VerboseBlock),
    )
)

GET_BLOCK_HEADER_RESULT = Polymorphic(
    (
        Variant("serialized header hex", is_string, str, SerializedHeader),
        Variant("verbose header object", is_object, BlockHeaderInfo),
    )
)

GET_RAW_MEMPOOL_RESULT = Polymorphic(
    (
        Variant("txid list", is_array, list[Hash256], MempoolTxids),
        Variant("entries by txid", is_object, dict[Hash256, MempoolEntry], MempoolEntries),
    )
)

GET_RAW_TRANSACTION_RESULT = Polymorphic(
    (
        Variant("serialized transaction hex", is_string, str, SerializedTransaction),
        Variant("verbose transaction object", is_object, VerboseTransaction),
    )
)

_SPECS = (
    _spec("getbestblockhash", Simple(Hash256)),
    _spec("getblock", GET_BLOCK_RESULT, Param("blockhash"), _optional("verbosity")),
    _spec(
        "getblockchaininfo",
        Simple(BlockchainInfo),
        versions=((0, Simple(LegacyBlockchainInfo)), (190000, Simple(BlockchainInfo))),
    ),
    _spec("getblockcount", Simple(Height)),
    _spec("getblockhash", Simple(Hash256), Param("height")),
    _spec("getblockheader", GET_BLOCK_HEADER_RESULT, Param("blockhash"), _optional("verbose")),
    _spec("getchaintips", Simple(list[ChainTip])),
    _spec("getconnectioncount", Simple(Height)),
    _spec("getdifficulty", Simple(float)),
    _spec("getmempoolinfo", Simple(MempoolInfo)),
    _spec("getrawmempool", GET_RAW_MEMPOOL_RESULT, _optional("verbose")),
    _spec(
        "getrawtransaction",
        GET_RAW_TRANSACTION_RESULT,
        Param("txid"),
        _optional("verbose"),
        _optional("blockhash"),
    ),
    # null when the output is spent or unknown
    _spec("gettxout", Simple(TxOut | None), Param("txid"), Param("n"), _optional("include_mempool")),
    _spec("gettxoutsetinfo", Simple(TxOutSetInfo)),
    _spec("waitfornewblock", Simple(BlockRef), _optional("timeout")),
    _spec("waitforblock", Simple(BlockRef), Param("blockhash"), _optional("timeout")),
    _spec("estimatesmartfee", Simple(EstimateSmartFee), Param("conf_target"), _optional("estimate_mode")),
    _spec(
        "getnetworkinfo",
        Simple(NetworkInfo),
        versions=((0, Simple(LegacyNetworkInfo)), (140000, Simple(NetworkInfo))),
    ),
    _spec("getpeerinfo", Simple(list[PeerInfo])),
    _spec("getnettotals", Simple(NetTotals)),
    _spec("addnode", NULL, Param("node"), Param("command")),
    _spec("ping", NULL),
)

CATALOG: Mapping[str, MethodSpec] = MappingProxyType({spec.name: spec for spec in _SPECS})


def lookup(name: str) -> MethodSpec:
    try:
        return CATALOG[name]
    except KeyError:
        raise UnknownMethodError(f"unknown RPC method {name!r}") from None


__all__ = [
    "ArityError",
    "CATALOG",
    "GET_BLOCK_HEADER_RESULT",
    "GET_BLOCK_RESULT",
    "GET_RAW_MEMPOOL_RESULT",
    "GET_RAW_TRANSACTION_RESULT",
    "MethodSpec",
    "Param",
    "UnknownMethodError",
    "lookup",
]
