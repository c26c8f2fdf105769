"""Request and response envelopes for the node's JSON-RPC interface."""

from __future__ import annotations

import itertools
import threading
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel

from .errors import MalformedResponseError
from .hashes import Hash256

JSONRPC_VERSION = "1.0"


class _NoResult(Enum):
    NO_RESULT = "no result"


# Envelope result when the response carried no `result` member.
NO_RESULT = _NoResult.NO_RESULT


@dataclass(frozen=True, slots=True)
class MethodCall:
    """A single positional JSON-RPC request."""

    method: str
    params: tuple[Any, ...]
    id: int

    def to_payload(self) -> dict[str, Any]:
        return {
            "jsonrpc": JSONRPC_VERSION,
            "id": self.id,
            "method": self.method,
            "params": list(self.params),
        }


@dataclass(frozen=True, slots=True)
class RPCErrorDetail:
    """The error object of a failed JSON-RPC response."""

    code: int
    message: str


@dataclass(frozen=True, slots=True)
class ResponseEnvelope:
    """A classified JSON-RPC response: either a result or an error."""

    id: Any
    result: Any = NO_RESULT
    error: RPCErrorDetail | None = None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @property
    def has_result(self) -> bool:
        return self.result is not NO_RESULT

    @classmethod
    def from_payload(cls, method: str, payload: object) -> ResponseEnvelope:
        """Classify a decoded JSON response body.

        Bitcoin Core sends both keys on every response with the unused one
        set to null, so a null `result` next to a null `error` is a valid,
        empty result. A response is rejected when it carries a non-null value
        in both keys or has neither a `result` key nor an error.
        """
        if not isinstance(payload, dict):
            raise MalformedResponseError(method, f"expected a JSON object envelope, got {type(payload).__name__}")

        result = payload.get("result", NO_RESULT)
        error = payload.get("error")
        response_id = payload.get("id")

        if error is not None:
            if result is not NO_RESULT and result is not None:
                raise MalformedResponseError(method, "response carries both a result and an error")
            return cls(id=response_id, error=_parse_error(method, error))

        if result is NO_RESULT:
            raise MalformedResponseError(method, "response carries neither a result nor an error")
        return cls(id=response_id, result=result)


def _parse_error(method: str, error: object) -> RPCErrorDetail:
    if not isinstance(error, dict):
        raise MalformedResponseError(method, f"error member must be an object, got {type(error).__name__}")
    code = error.get("code")
    message = error.get("message")
    if not isinstance(code, int) or isinstance(code, bool):
        raise MalformedResponseError(method, f"error code must be an integer, got {code!r}")
    if not isinstance(message, str):
        raise MalformedResponseError(method, f"error message must be a string, got {message!r}")
    return RPCErrorDetail(code=code, message=message)


def encode_param(value: Any) -> Any:
    """Convert a typed parameter into its JSON wire form."""
    if isinstance(value, Hash256):
        return value.to_wire()
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [encode_param(item) for item in value]
    if isinstance(value, dict):
        return {key: encode_param(item) for key, item in value.items()}
    return value


class RequestBuilder:
    """Builds `MethodCall` objects and owns the correlation-id counter."""

    def __init__(self, *, start: int = 1) -> None:
        self._ids: Iterator[int] = itertools.count(start)
        self._lock = threading.Lock()

    def next_id(self) -> int:
        with self._lock:
            return next(self._ids)

    def build(self, method: str, params: Sequence[Any] = ()) -> MethodCall:
        encoded = tuple(encode_param(param) for param in params)
        return MethodCall(method=method, params=encoded, id=self.next_id())


__all__ = [
    "JSONRPC_VERSION",
    "MethodCall",
    "NO_RESULT",
    "RPCErrorDetail",
    "RequestBuilder",
    "ResponseEnvelope",
    "encode_param",
]
