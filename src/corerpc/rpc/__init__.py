"""JSON-RPC plumbing: identifiers, envelopes, result shapes and transport.

The typed client (`corerpc.rpc.client`) and the method catalog
(`corerpc.rpc.catalog`) depend on the result models in `corerpc.models`,
which in turn use `Hash256` from here, so they are imported from their
modules rather than re-exported by this package.
"""

from .errors import (
    DomainDecodeError,
    MalformedResponseError,
    ProtocolError,
    RPCError,
    RPCErrorCode,
    TransportError,
)
from .hashes import Hash256
from .resolver import Resolvable
from .shapes import Polymorphic, ResultShape, Simple, Variant, decode
from .transport import HTTPTransport, Transport
from .types import NO_RESULT, MethodCall, RequestBuilder, ResponseEnvelope, RPCErrorDetail

__all__ = [
    "DomainDecodeError",
    "HTTPTransport",
    "Hash256",
    "MalformedResponseError",
    "MethodCall",
    "NO_RESULT",
    "Polymorphic",
    "ProtocolError",
    "RPCError",
    "RPCErrorCode",
    "RPCErrorDetail",
    "RequestBuilder",
    "Resolvable",
    "ResponseEnvelope",
    "ResultShape",
    "Simple",
    "TransportError",
    "Transport",
    "Variant",
    "decode",
]
