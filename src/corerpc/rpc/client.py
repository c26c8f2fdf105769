"""Typed client for a Bitcoin Core node's JSON-RPC interface."""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, TypeVar

import httpx

from corerpc.models import (
    MAX_CONF_TARGET,
    MIN_CONF_TARGET,
    AddNodeCommand,
    BlockchainInfo,
    BlockHeaderInfo,
    BlockRef,
    ChainTip,
    EstimateMode,
    EstimateSmartFee,
    LegacyNetworkInfo,
    MempoolEntries,
    MempoolInfo,
    MempoolTxids,
    NetTotals,
    NetworkInfo,
    NodeVersion,
    PeerInfo,
    SerializedBlock,
    SerializedHeader,
    SerializedTransaction,
    TxOut,
    TxOutSetInfo,
    VerboseBlock,
    VerboseTransaction,
)

from .catalog import lookup
from .errors import MalformedResponseError, ProtocolError, TransportError
from .hashes import Hash256
from .resolver import resolve
from .shapes import ResultShape, Simple, decode
from .transport import HTTPTransport, Transport
from .types import RequestBuilder

if TYPE_CHECKING:
    from corerpc.core.config import CoreRPCConfig

    from .resolver import Resolvable

logger = logging.getLogger(__name__)

R = TypeVar("R", bound="Resolvable")

_VERSION_PROBE = Simple(NodeVersion)


class NodeRPCClient:
    """Calls catalogued RPC methods and returns typed results.

    Every failure is raised as an `RPCError` subclass: `TransportError` when
    the node cannot be reached, `ProtocolError` when the node rejects the
    call, `MalformedResponseError` when the answer does not have the expected
    shape, and `DomainDecodeError` when consensus bytes fail to decode.
    Nothing is retried.
    """

    def __init__(
        self,
        transport: Transport,
        *,
        builder: RequestBuilder | None = None,
        node_version: int | None = None,
    ) -> None:
        self._transport = transport
        self._builder = builder or RequestBuilder()
        self.node_version = node_version

    @classmethod
    def from_config(
        cls,
        config: CoreRPCConfig,
        *,
        password: str | None = None,
        client: httpx.Client | None = None,
    ) -> NodeRPCClient:
        transport = HTTPTransport(
            config.rpc_url,
            user=config.rpc_user,
            password=password,
            timeout=config.timeout_seconds,
            client=client,
        )
        return cls(transport, node_version=config.node_version)

    # ------------------------------------------------------------------
    # Generic dispatch
    # ------------------------------------------------------------------
    def call(self, name: str, *params: Any) -> Any:
        """Call a catalogued method by name with positional parameters."""
        spec = lookup(name)
        spec.check_arity(len(params))
        return self.dispatch(name, params, spec.shape_for(self.node_version))

    def dispatch(self, method: str, params: Sequence[Any], shape: ResultShape) -> Any:
        call = self._builder.build(method, params)
        start_time = time.perf_counter()
        try:
            envelope = self._transport.send(call)
        except OSError as exc:
            raise TransportError(method, exc) from exc
        if envelope.id is not None and envelope.id != call.id:
            raise MalformedResponseError(method, f"correlation id mismatch: sent {call.id}, received {envelope.id!r}")
        try:
            result = decode(method, envelope, shape)
        except ProtocolError as exc:
            logger.warning("Node rejected %s (code %s): %s", method, exc.code, exc.error_message)
            raise
        logger.debug(
            "RPC call %s succeeded (id=%s, latency=%.3fs)",
            method,
            call.id,
            time.perf_counter() - start_time,
        )
        return result

    def resolve(self, kind: type[R], object_id: Hash256) -> R:
        """Fetch a consensus-encoded object by id and decode it."""
        return resolve(self, kind, object_id)

    def detect_node_version(self) -> int:
        """Ask the node for its version and use it to pick result shapes."""
        info = self.dispatch("getnetworkinfo", (), _VERSION_PROBE)
        self.node_version = info.version
        logger.info("Detected node version %s (%s)", info.version, info.subversion or "unknown")
        return info.version

    # ------------------------------------------------------------------
    # Blockchain
    # ------------------------------------------------------------------
    def get_best_block_hash(self) -> Hash256:
        return self.call("getbestblockhash")

    def get_block(self, block_hash: Hash256, verbosity: int = 1) -> SerializedBlock | VerboseBlock:
        if verbosity not in (0, 1, 2):
            raise ValueError(f"verbosity must be 0, 1 or 2, got {verbosity!r}")
        return self.call("getblock", block_hash, verbosity)

    def get_blockchain_info(self) -> BlockchainInfo:
        return self.call("getblockchaininfo")

    def get_block_count(self) -> int:
        return self.call("getblockcount")

    def get_block_hash(self, height: int) -> Hash256:
        if height < 0:
            raise ValueError(f"height must be non-negative, got {height}")
        return self.call("getblockhash", height)

    def get_block_header(self, block_hash: Hash256, verbose: bool = True) -> SerializedHeader | BlockHeaderInfo:
        return self.call("getblockheader", block_hash, verbose)

    def get_chain_tips(self) -> list[ChainTip]:
        return self.call("getchaintips")

    def get_difficulty(self) -> float:
        return self.call("getdifficulty")

    def get_mempool_info(self) -> MempoolInfo:
        return self.call("getmempoolinfo")

    def get_raw_mempool(self, verbose: bool = False) -> MempoolTxids | MempoolEntries:
        return self.call("getrawmempool", verbose)

    def get_tx_out(self, txid: Hash256, vout: int, include_mempool: bool = True) -> TxOut | None:
        if vout < 0:
            raise ValueError(f"vout must be non-negative, got {vout}")
        return self.call("gettxout", txid, vout, include_mempool)

    def get_tx_out_set_info(self) -> TxOutSetInfo:
        return self.call("gettxoutsetinfo")

    def wait_for_new_block(self, timeout_ms: int = 0) -> BlockRef:
        return self.call("waitfornewblock", timeout_ms)

    def wait_for_block(self, block_hash: Hash256, timeout_ms: int = 0) -> BlockRef:
        return self.call("waitforblock", block_hash, timeout_ms)

    # ------------------------------------------------------------------
    # Raw transactions
    # ------------------------------------------------------------------
    def get_raw_transaction(
        self,
        txid: Hash256,
        verbose: bool = False,
        block_hash: Hash256 | None = None,
    ) -> SerializedTransaction | VerboseTransaction:
        if block_hash is None:
            return self.call("getrawtransaction", txid, verbose)
        return self.call("getrawtransaction", txid, verbose, block_hash)

    # ------------------------------------------------------------------
    # Mining
    # ------------------------------------------------------------------
    def estimate_smart_fee(self, conf_target: int, estimate_mode: EstimateMode | None = None) -> EstimateSmartFee:
        if not MIN_CONF_TARGET <= conf_target <= MAX_CONF_TARGET:
            raise ValueError(
                f"conf_target must be between {MIN_CONF_TARGET} and {MAX_CONF_TARGET}, got {conf_target}"
            )
        if estimate_mode is None:
            return self.call("estimatesmartfee", conf_target)
        return self.call("estimatesmartfee", conf_target, EstimateMode(estimate_mode))

    # ------------------------------------------------------------------
    # Network
    # ------------------------------------------------------------------
    def get_network_info(self) -> NetworkInfo | LegacyNetworkInfo:
        return self.call("getnetworkinfo")

    def get_peer_info(self) -> list[PeerInfo]:
        return self.call("getpeerinfo")

    def get_connection_count(self) -> int:
        return self.call("getconnectioncount")

    def get_net_totals(self) -> NetTotals:
        return self.call("getnettotals")

    def add_node(self, node: str, command: AddNodeCommand) -> None:
        self.call("addnode", node, AddNodeCommand(command))

    def ping(self) -> None:
        self.call("ping")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def close(self) -> None:
        self._transport.close()

    def __enter__(self) -> NodeRPCClient:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = ["NodeRPCClient"]
