"""Shared pydantic configuration for node result models."""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

UInt16 = Annotated[int, Field(ge=0, le=0xFFFF)]
UInt32 = Annotated[int, Field(ge=0, le=0xFFFFFFFF)]
UInt64 = Annotated[int, Field(ge=0, le=0xFFFFFFFFFFFFFFFF)]
Height = Annotated[int, Field(ge=0)]


class RPCModel(BaseModel):
    """Immutable mirror of a JSON object returned by the node."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


__all__ = ["Height", "RPCModel", "UInt16", "UInt32", "UInt64"]
