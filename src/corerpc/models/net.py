"""Network related RPC result types."""

from __future__ import annotations

from enum import Enum
from typing import Literal

from .base import Height, RPCModel, UInt16

NetworkName = Literal["ipv4", "ipv6", "onion", "i2p", "cjdns"]


class AddNodeCommand(str, Enum):
    """Action requested from "addnode"."""

    ADD = "add"
    REMOVE = "remove"
    ONETRY = "onetry"


class NodeVersion(RPCModel):
    """The version field of "getnetworkinfo", valid across all releases."""

    version: Height
    subversion: str | None = None


class Network(RPCModel):
    name: NetworkName
    limited: bool
    reachable: bool
    proxy: str
    proxy_randomize_credentials: bool


class LocalAddress(RPCModel):
    address: str
    port: UInt16
    score: int


class NetworkInfo(RPCModel):
    """Models the result of "getnetworkinfo" on 0.14 and later."""

    version: int
    subversion: str
    protocolversion: int
    localservices: str
    localrelay: bool
    timeoffset: int
    networkactive: bool
    connections: Height
    networks: list[Network]
    relayfee: float
    incrementalfee: float
    localaddresses: list[LocalAddress]
    warnings: str | list[str]


class LegacyNetworkInfo(RPCModel):
    """Result of "getnetworkinfo" on nodes before 0.14.

    Those nodes may omit the p2p switch, connection count, and incremental
    relay fee.
    """

    version: int
    subversion: str
    protocolversion: int
    localservices: str | None = None
    localrelay: bool
    timeoffset: int
    networkactive: bool | None = None
    connections: Height | None = None
    networks: list[Network]
    relayfee: float
    incrementalfee: float | None = None
    localaddresses: list[LocalAddress]
    warnings: str


class PeerInfo(RPCModel):
    """Models one entry of "getpeerinfo"."""

    id: Height
    addr: str
    addrbind: str | None = None
    addrlocal: str | None = None
    services: str
    relaytxes: bool | None = None
    lastsend: Height
    lastrecv: Height
    bytessent: Height
    bytesrecv: Height
    conntime: Height
    timeoffset: int
    pingtime: float | None = None
    minping: float | None = None
    pingwait: float | None = None
    version: int
    subver: str
    inbound: bool
    addnode: bool | None = None
    startingheight: int
    banscore: int | None = None
    synced_headers: int
    synced_blocks: int
    inflight: list[Height]
    whitelisted: bool | None = None
    bytessent_per_msg: dict[str, Height]
    bytesrecv_per_msg: dict[str, Height]


class NetTotals(RPCModel):
    totalbytesrecv: Height
    totalbytessent: Height
    timemillis: Height


__all__ = [
    "AddNodeCommand",
    "LegacyNetworkInfo",
    "LocalAddress",
    "NetTotals",
    "Network",
    "NetworkInfo",
    "NetworkName",
    "NodeVersion",
    "PeerInfo",
]
