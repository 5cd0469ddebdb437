"""Codecs for composable (object-shaped) types.

Decoding reads every deserializable property, passes constructor-bound
values to the constructor and applies setter-bound values afterwards.
Encoding reads every serializable property and omits nulls of optional
properties. Absence and an explicit JSON null are treated the same way.
"""

from __future__ import annotations

import dataclasses
import functools
from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Callable, Mapping, Sequence

from ..exc import CodecError, ConstructionError, DecodeError, EncodeError
from ..types.descriptors import (
    ABSENT, ConstructorDescriptor, ConstructorSlot, GetterSetterPair, PropertyDescriptor,
)
from ..types.key import TypeKey
from .base import Codec, JsonValue, json_kind

if TYPE_CHECKING:
    from ..registry import CodecRegistry
    from ..schema import SchemaCollector


@dataclasses.dataclass(frozen=True)
class _Entry:
    name: str
    codec: Codec
    mandatory: bool
    serializable: bool
    deserializable: bool
    getter: Callable[[Any], Any] | None


class _ObjectCodecBase(Codec):
    """Shared mandatory/omission rules and schema shape of object codecs."""

    @property
    @abstractmethod
    def entries(self) -> Sequence[_Entry]:
        ...

    @abstractmethod
    def _build(self, values: dict[str, Any]) -> Any:
        ...

    def encode(self, obj: Any) -> JsonValue:
        result: dict[str, Any] = {}
        for entry in self.entries:
            if not entry.serializable or entry.getter is None:
                continue
            try:
                value = entry.getter(obj)
            except CodecError:
                raise
            except Exception as e:
                raise EncodeError(
                    f"cannot read property {entry.name} of {type(obj).__name__}: {e}"
                ) from e
            if value is None:
                if entry.mandatory:
                    raise EncodeError(f"null in mandatory property {entry.name}")
                continue
            try:
                result[entry.name] = entry.codec.encode(value)
            except CodecError as e:
                raise e.at(entry.name) from e
        return result

    def decode(self, value: JsonValue) -> Any:
        if not isinstance(value, dict):
            raise DecodeError(f"expected object for {self.key}, got {json_kind(value)}")
        values: dict[str, Any] = {}
        for entry in self.entries:
            if not entry.deserializable:
                continue
            raw = value.get(entry.name)
            if raw is None:
                if entry.mandatory:
                    raise DecodeError(f"missing mandatory field {entry.name}")
                continue
            try:
                values[entry.name] = entry.codec.decode(raw)
            except CodecError as e:
                raise e.at(entry.name) from e
        return self._build(values)

    def generate_schema(self, collector: SchemaCollector) -> dict[str, Any]:
        properties: dict[str, Any] = {}
        required: list[str] = []
        for entry in self.entries:
            if not (entry.serializable or entry.deserializable):
                continue
            schema = dict(collector.schema_of(entry.codec))
            if entry.serializable and not entry.deserializable:
                schema['readOnly'] = True
            elif entry.deserializable and not entry.serializable:
                schema['writeOnly'] = True
            properties[entry.name] = schema
            if entry.mandatory:
                required.append(entry.name)
        result: dict[str, Any] = {'type': 'object', 'properties': properties}
        if required:
            result['required'] = required
        return result


# ── Derived object codec ───────────────────────────────────────────

def _attribute_getter(attribute: str) -> Callable[[Any], Any]:
    """Read ``attribute``, falling back to its ``_``-prefixed private twin."""
    private = f"_{attribute}"

    def getter(obj: Any) -> Any:
        try:
            return getattr(obj, attribute)
        except AttributeError:
            if hasattr(obj, private):
                return getattr(obj, private)
            raise
    return getter


class ObjectCodec(_ObjectCodecBase):
    """Codec derived from a :class:`ComposableDescriptor`.

    Parameters
    ----------
    key : TypeKey
        Key of the (possibly generic) instantiation.
    constructor : ConstructorDescriptor
        Constructor to invoke on decode.
    properties : Sequence[tuple[PropertyDescriptor, Codec]]
        Properties in declaration order with their value codecs.
    schema_name : str
        Name of the standalone schema.
    """

    def __init__(
        self,
        key: TypeKey,
        constructor: ConstructorDescriptor,
        properties: Sequence[tuple[PropertyDescriptor, Codec]],
        schema_name: str,
    ) -> None:
        self.key = key
        self.schema_name = schema_name
        self._constructor = constructor
        self._properties = tuple(properties)
        self._entries = tuple(
            _Entry(
                name=prop.name,
                codec=codec,
                mandatory=prop.mandatory,
                serializable=prop.serializable,
                deserializable=prop.deserializable,
                getter=_attribute_getter(prop.attribute_name),
            )
            for prop, codec in self._properties
        )

    @property
    def entries(self) -> Sequence[_Entry]:
        return self._entries

    @property
    def properties(self) -> tuple[PropertyDescriptor, ...]:
        return tuple(prop for prop, _ in self._properties)

    def _build(self, values: dict[str, Any]) -> Any:
        args = [ABSENT] * self._constructor.arity
        setters: list[PropertyDescriptor] = []
        for prop, _ in self._properties:
            if prop.name not in values:
                continue
            if isinstance(prop.binding, ConstructorSlot):
                args[prop.binding.index] = values[prop.name]
            elif isinstance(prop.binding, GetterSetterPair):
                setters.append(prop)

        try:
            instance = self._constructor.invoke(*args)
        except Exception as e:
            raise ConstructionError(f"cannot construct {self.key}: {e}", cause=e) from e

        for prop in setters:
            try:
                setattr(instance, prop.attribute_name, values[prop.name])
            except Exception as e:
                raise ConstructionError(
                    f"cannot set property {prop.name} of {self.key}: {e}", cause=e,
                ) from e
        return instance


# ── Hand-written object codecs ─────────────────────────────────────

@dataclasses.dataclass(frozen=True)
class SyntheticProperty:
    """A property of a :class:`StructuredObjectCodec`.

    ``accessor`` reads the value from an instance; None makes the property
    write-only. ``value_type`` accepts anything :meth:`TypeKey.of` accepts.
    """
    name: str
    value_type: Any
    accessor: Callable[[Any], Any] | None = None
    mandatory: bool = True
    deserializable: bool = True


class StructuredObjectCodec(_ObjectCodecBase):
    """Base class for hand-written codecs of object-shaped types.

    Subclasses declare their properties and implement
    :meth:`initialize_instance`. Value codecs are resolved through the
    registry on first use, so a property may refer to the type being coded.

    Usage::

        class MoneyCodec(StructuredObjectCodec):
            def __init__(self, registry):
                super().__init__(registry, TypeKey(Money), [
                    SyntheticProperty("amount", Decimal, lambda m: m.amount),
                    SyntheticProperty("currency", str, lambda m: m.currency),
                ], schema_name="Money")

            def initialize_instance(self, values):
                return Money(values["amount"], values["currency"])
    """

    def __init__(
        self,
        registry: CodecRegistry,
        key: TypeKey,
        properties: Sequence[SyntheticProperty],
        schema_name: str | None = None,
    ) -> None:
        self.key = key
        self.schema_name = schema_name
        self._registry = registry
        self._synthetic = tuple(properties)

    @functools.cached_property
    def _resolved_entries(self) -> tuple[_Entry, ...]:
        return tuple(
            _Entry(
                name=prop.name,
                codec=self._registry.get_codec(prop.value_type),
                mandatory=prop.mandatory,
                serializable=prop.accessor is not None,
                deserializable=prop.deserializable,
                getter=prop.accessor,
            )
            for prop in self._synthetic
        )

    @property
    def entries(self) -> Sequence[_Entry]:
        return self._resolved_entries

    @abstractmethod
    def initialize_instance(self, values: Mapping[str, Any]) -> Any:
        """Create an instance from the decoded property values.

        Optional properties that were absent or null are missing from
        ``values``.
        """

    def _build(self, values: dict[str, Any]) -> Any:
        try:
            return self.initialize_instance(values)
        except CodecError:
            raise
        except Exception as e:
            raise ConstructionError(f"cannot construct {self.key}: {e}", cause=e) from e
