"""Codec contract, forward references and delegating codecs."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Callable, Union

from ..exc import DecodeError, EncodeError, UnsupportedTypeError
from ..types.key import TypeKey

if TYPE_CHECKING:
    from ..schema import SchemaCollector

# The JSON value model: what json.loads produces and json.dumps accepts
JsonValue = Union[None, bool, int, float, str, list, dict]


def json_kind(value: Any) -> str:
    """Name of the JSON kind of ``value`` for error messages."""
    if value is None:
        return 'null'
    if isinstance(value, bool):
        return 'boolean'
    if isinstance(value, (int, float)):
        return 'number'
    if isinstance(value, str):
        return 'string'
    if isinstance(value, list):
        return 'array'
    if isinstance(value, dict):
        return 'object'
    return type(value).__name__


class Codec(ABC):
    """Bidirectional mapping between Python objects of one type and JSON values.

    Codecs are immutable once built and safe to share between threads.
    A codec whose ``schema_name`` is not None is *standalone*: the schema
    collector extracts its schema into the shared dictionary and refers to it
    with ``$ref`` instead of inlining it.
    """

    key: TypeKey | None = None
    schema_name: str | None = None

    @abstractmethod
    def encode(self, obj: Any) -> JsonValue:
        """Convert ``obj`` to a JSON value."""

    @abstractmethod
    def decode(self, value: JsonValue) -> Any:
        """Convert a JSON value to an object."""

    @abstractmethod
    def generate_schema(self, collector: SchemaCollector) -> dict[str, Any]:
        """Return the JSON-Schema body of this codec.

        Nested codecs must be rendered through ``collector.schema_of`` so
        standalone schemas are extracted and referenced.
        """

    def resolve(self) -> Codec:
        """Return the codec doing the actual work (self, unless a reference)."""
        return self

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.key})"


class CodecReference(Codec):
    """Forward reference to a codec whose derivation is still in progress.

    Handed out to nested codecs of self- or mutually-recursive types and bound
    to the real codec once it has been built.
    """

    def __init__(self, key: TypeKey) -> None:
        self.key = key
        self._target: Codec | None = None

    def bind(self, codec: Codec) -> None:
        self._target = codec

    @property
    def bound(self) -> bool:
        return self._target is not None

    def resolve(self) -> Codec:
        if self._target is None:
            raise UnsupportedTypeError(f"Codec for {self.key} used before its derivation finished")
        return self._target

    @property
    def schema_name(self) -> str | None:  # type: ignore[override]
        return self.resolve().schema_name

    def encode(self, obj: Any) -> JsonValue:
        return self.resolve().encode(obj)

    def decode(self, value: JsonValue) -> Any:
        return self.resolve().decode(value)

    def generate_schema(self, collector: SchemaCollector) -> dict[str, Any]:
        return self.resolve().generate_schema(collector)

    def __repr__(self) -> str:
        state = 'bound' if self._target is not None else 'pending'
        return f"CodecReference({self.key}, {state})"


class DelegatingCodec(Codec):
    """Codec that converts to and from another type and reuses its codec.

    The schema is the delegate's schema.

    Parameters
    ----------
    delegate : Codec
        Codec of the intermediate representation.
    to_delegate : Callable
        Converts an object into the delegate's representation.
    from_delegate : Callable
        Converts the delegate's decoded value back.
    key : TypeKey | None
        Key this codec is registered for.
    """

    def __init__(
        self,
        delegate: Codec,
        to_delegate: Callable[[Any], Any],
        from_delegate: Callable[[Any], Any],
        key: TypeKey | None = None,
    ) -> None:
        self.key = key
        self._delegate = delegate
        self._to_delegate = to_delegate
        self._from_delegate = from_delegate

    def encode(self, obj: Any) -> JsonValue:
        try:
            converted = self._to_delegate(obj)
        except (TypeError, ValueError, AttributeError) as e:
            raise EncodeError(f"cannot convert {type(obj).__name__} for {self.key}: {e}") from e
        return self._delegate.encode(converted)

    def decode(self, value: JsonValue) -> Any:
        decoded = self._delegate.decode(value)
        try:
            return self._from_delegate(decoded)
        except (TypeError, ValueError, OverflowError) as e:
            raise DecodeError(f"invalid value for {self.key}: {e}") from e

    def generate_schema(self, collector: SchemaCollector) -> dict[str, Any]:
        return collector.schema_of(self._delegate)
