"""Typed client for Bitcoin Core's JSON-RPC interface."""

from corerpc.rpc import (
    DomainDecodeError,
    Hash256,
    HTTPTransport,
    MalformedResponseError,
    ProtocolError,
    RPCError,
    TransportError,
)
from corerpc.rpc.catalog import CATALOG
from corerpc.rpc.client import NodeRPCClient

__all__ = [
    "CATALOG",
    "DomainDecodeError",
    "HTTPTransport",
    "Hash256",
    "MalformedResponseError",
    "NodeRPCClient",
    "ProtocolError",
    "RPCError",
    "TransportError",
]
