"""Result shapes and the response decoder.

A method's result is described by a `ResultShape`:

* `Simple(target)` decodes the result straight into `target`.
* `Polymorphic(variants)` picks one of several structurally distinct payloads
  by inspecting the JSON value itself. Bitcoin Core returns, for example,
  either a hex string or a verbose object from `getblock` depending on a
  flag the decoder never sees, so the choice is made from the response alone.

Decoding uses pydantic in strict mode: a JSON string is never coerced into a
number and a missing field is never filled with a default.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any, Generic, TypeVar

from pydantic import TypeAdapter, ValidationError

from .errors import MalformedResponseError, ProtocolError
from .types import ResponseEnvelope

T = TypeVar("T")

Predicate = Callable[[Any], bool]


def is_string(value: Any) -> bool:
    return isinstance(value, str)


def is_object(value: Any) -> bool:
    return isinstance(value, dict)


def is_array(value: Any) -> bool:
    return isinstance(value, list)


def has_fields(*names: str) -> Predicate:
    """Match JSON objects carrying every one of `names`."""

    def _predicate(value: Any) -> bool:
        return isinstance(value, dict) and all(name in value for name in names)

    _predicate.__name__ = f"has_fields({', '.join(names)})"
    return _predicate


def describe_validation_error(exc: ValidationError) -> str:
    """Render the first pydantic error as `field 'a.b': message`."""
    errors = exc.errors(include_url=False)
    if not errors:
        return str(exc)
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", "invalid value")
    extra = f" (+{len(errors) - 1} more)" if len(errors) > 1 else ""
    if location:
        return f"field '{location}': {message}{extra}"
    return f"{message}{extra}"


class ResultShape:
    """Base class for result shape descriptors."""

    def decode_result(self, method: str, value: Any) -> Any:
        raise NotImplementedError


@dataclass(frozen=True)
class Simple(ResultShape, Generic[T]):
    """A result that always has one structure."""

    target: Any

    @cached_property
    def _adapter(self) -> TypeAdapter[Any]:
        return TypeAdapter(self.target)

    def decode_result(self, method: str, value: Any) -> T:
        try:
            return self._adapter.validate_python(value, strict=True)
        except ValidationError as exc:
            raise MalformedResponseError(method, describe_validation_error(exc)) from exc


@dataclass(frozen=True)
class Variant(Generic[T]):
    """One case of a polymorphic result.

    `matches` inspects the raw JSON value; `target` is the type the payload
    decodes into; `wrap`, when given, turns the decoded payload into the
    case type returned to the caller.
    """

    name: str
    matches: Predicate
    target: Any
    wrap: Callable[[Any], T] | None = None

    @cached_property
    def _shape(self) -> Simple[Any]:
        return Simple(self.target)

    def decode(self, method: str, value: Any) -> T:
        payload = self._shape.decode_result(method, value)
        if self.wrap is None:
            return payload
        return self.wrap(payload)


@dataclass(frozen=True)
class Polymorphic(ResultShape):
    """A result whose structure depends on caller flags or node state.

    Variants are tried in declared order and the first matching predicate
    wins; a matched payload that fails to decode is an error, never a reason
    to try the next variant.
    """

    variants: Sequence[Variant[Any]] = field(default_factory=tuple)

    def decode_result(self, method: str, value: Any) -> Any:
        for variant in self.variants:
            if variant.matches(value):
                return variant.decode(method, value)
        expected = ", ".join(variant.name for variant in self.variants) or "nothing"
        raise MalformedResponseError(
            method, f"result of type {_json_kind(value)} matches none of: {expected}"
        )


def decode(method: str, envelope: ResponseEnvelope, shape: ResultShape) -> Any:
    """Turn a response envelope into a typed result or raise `RPCError`."""
    if envelope.error is not None:
        if envelope.has_result and envelope.result is not None:
            raise MalformedResponseError(method, "response carries both a result and an error")
        raise ProtocolError(method, envelope.error.code, envelope.error.message)
    if not envelope.has_result:
        raise MalformedResponseError(method, "response carries neither a result nor an error")
    return shape.decode_result(method, envelope.result)


def _json_kind(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


__all__ = [
    "Polymorphic",
    "Predicate",
    "ResultShape",
    "Simple",
    "Variant",
    "decode",
    "describe_validation_error",
    "has_fields",
    "is_array",
    "is_object",
    "is_string",
]
