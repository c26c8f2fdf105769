"""Typed mirrors of the JSON objects returned by the node."""

from .base import RPCModel
from .blockchain import (
    BlockchainInfo,
    BlockHeaderInfo,
    BlockRef,
    ChainTip,
    LegacyBlockchainInfo,
    MempoolEntries,
    MempoolEntry,
    MempoolInfo,
    MempoolTxids,
    ScriptPubKey,
    Serialized,
    SerializedBlock,
    SerializedHeader,
    Softfork,
    SoftforkProgress,
    TxOut,
    TxOutSetInfo,
    VerboseBlock,
    VerboseBlockTransaction,
)
from .mining import MAX_CONF_TARGET, MIN_CONF_TARGET, EstimateMode, EstimateSmartFee
from .net import AddNodeCommand, LegacyNetworkInfo, LocalAddress, NetTotals, Network, NetworkInfo, NodeVersion, PeerInfo
from .rawtransactions import SerializedTransaction, VerboseTransaction

__all__ = [
    "AddNodeCommand",
    "BlockHeaderInfo",
    "BlockRef",
    "BlockchainInfo",
    "ChainTip",
    "EstimateMode",
    "EstimateSmartFee",
    "LegacyBlockchainInfo",
    "LegacyNetworkInfo",
    "LocalAddress",
    "MAX_CONF_TARGET",
    "MIN_CONF_TARGET",
    "MempoolEntries",
    "MempoolEntry",
    "MempoolInfo",
    "MempoolTxids",
    "NetTotals",
    "Network",
    "NetworkInfo",
    "NodeVersion",
    "PeerInfo",
    "RPCModel",
    "ScriptPubKey",
    "Serialized",
    "SerializedBlock",
    "SerializedHeader",
    "SerializedTransaction",
    "Softfork",
    "SoftforkProgress",
    "TxOut",
    "TxOutSetInfo",
    "VerboseBlock",
    "VerboseBlockTransaction",
    "VerboseTransaction",
]
