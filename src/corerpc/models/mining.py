"""Mining related RPC result types."""

from __future__ import annotations

from enum import Enum

from .base import Height, RPCModel

MIN_CONF_TARGET = 1
MAX_CONF_TARGET = 1008


class EstimateMode(str, Enum):
    """Fee estimation mode accepted by "estimatesmartfee"."""

    UNSET = "UNSET"
    ECONOMICAL = "ECONOMICAL"
    CONSERVATIVE = "CONSERVATIVE"


class EstimateSmartFee(RPCModel):
    """Models the result of "estimatesmartfee"."""

    # Fee rate in BTC/kvB; absent when the node has no estimate yet.
    feerate: float | None = None
    errors: list[str] | None = None
    blocks: Height


__all__ = ["EstimateMode", "EstimateSmartFee", "MAX_CONF_TARGET", "MIN_CONF_TARGET"]
