"""RPC errors."""

from __future__ import annotations

from enum import IntEnum


class RPCErrorCode(IntEnum):
    """Well-known error codes reported by Bitcoin Core."""

    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603
    PARSE_ERROR = -32700
    MISC_ERROR = -1
    TYPE_ERROR = -3
    INVALID_ADDRESS_OR_KEY = -5
    OUT_OF_MEMORY = -7
    INVALID_PARAMETER = -8
    DATABASE_ERROR = -20
    DESERIALIZATION_ERROR = -22
    VERIFY_ERROR = -25
    VERIFY_REJECTED = -26
    VERIFY_ALREADY_IN_CHAIN = -27
    IN_WARMUP = -28
    METHOD_DEPRECATED = -32
    CLIENT_NOT_CONNECTED = -9
    CLIENT_IN_INITIAL_DOWNLOAD = -10
    CLIENT_NODE_ALREADY_ADDED = -23
    CLIENT_NODE_NOT_ADDED = -24


class RPCError(RuntimeError):
    """Base class for every failure raised while calling the node."""

    def __init__(self, method: str | None, message: str) -> None:
        super().__init__(message)
        self.method = method


class TransportError(RPCError):
    """Raised when the node cannot be reached or the HTTP exchange fails."""

    def __init__(self, method: str | None, cause: object) -> None:
        super().__init__(method, f"{method or 'rpc'}: transport failure: {cause}")
        self.cause = cause


class ProtocolError(RPCError):
    """Raised when the node answers with its own JSON-RPC error object."""

    def __init__(self, method: str | None, code: int, message: str) -> None:
        super().__init__(method, f"{method or 'rpc'}: node error {code}: {message}")
        self.code = code
        self.error_message = message

    @property
    def known_code(self) -> RPCErrorCode | None:
        try:
            return RPCErrorCode(self.code)
        except ValueError:
            return None


class MalformedResponseError(RPCError):
    """Raised when a response does not fit the shape the client expects."""

    def __init__(self, method: str | None, detail: str) -> None:
        super().__init__(method, f"{method or 'rpc'}: malformed response: {detail}")
        self.detail = detail


class DomainDecodeError(RPCError):
    """Raised when consensus bytes returned by the node cannot be decoded."""

    def __init__(self, method: str | None, cause: object) -> None:
        super().__init__(method, f"{method or 'rpc'}: cannot decode object: {cause}")
        self.cause = cause


__all__ = [
    "DomainDecodeError",
    "MalformedResponseError",
    "ProtocolError",
    "RPCError",
    "RPCErrorCode",
    "TransportError",
]
