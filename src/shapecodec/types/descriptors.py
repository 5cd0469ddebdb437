"""Type descriptors: the introspected shape of a raw type.

A descriptor is produced once per raw type by an introspector and tells the
codec registry which codec builder to use. Descriptors are immutable.
"""

from __future__ import annotations

import dataclasses
from typing import Any, Callable

from ..exc import IntrospectionError
from .atoms import AtomicType
from .key import TypeKey


class _Absent:
    """Marker for a constructor slot that received no value."""

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT: Any = _Absent()


# ── Property bindings ─────────────────────────────────────────────

@dataclasses.dataclass(frozen=True, slots=True)
class ConstructorSlot:
    """Property value is passed to the constructor at ``index``."""
    index: int


@dataclasses.dataclass(frozen=True, slots=True)
class GetterSetterPair:
    """Property is read with a getter and written with a setter after construction."""


@dataclasses.dataclass(frozen=True, slots=True)
class ReadOnly:
    """Property can only be read."""


@dataclasses.dataclass(frozen=True, slots=True)
class Calculated:
    """Property is derived from other state; read-only."""


Binding = ConstructorSlot | GetterSetterPair | ReadOnly | Calculated


@dataclasses.dataclass(frozen=True, slots=True)
class PropertyDescriptor:
    """Describes a single property of a composable type.

    Attributes
    ----------
    name : str
        JSON field name.
    value_type : TypeKey
        Key of the property value; may contain type variables.
    mandatory : bool
        Absence or null is an error on both encode and decode.
    serializable : bool
        Written by ``encode``.
    deserializable : bool
        Read by ``decode``.
    binding : Binding
        How the value reaches and leaves an instance.
    attribute : str
        Python attribute used by the accessor; defaults to ``name``.
    """
    name: str
    value_type: TypeKey
    mandatory: bool = True
    serializable: bool = True
    deserializable: bool = True
    binding: Binding = dataclasses.field(default_factory=ReadOnly)
    attribute: str = ''

    @property
    def attribute_name(self) -> str:
        return self.attribute or self.name


@dataclasses.dataclass(frozen=True, slots=True)
class ConstructorDescriptor:
    """Ordered constructor parameters and the callable invoking it."""
    parameters: tuple[str, ...]
    invoke: Callable[..., Any]

    @property
    def arity(self) -> int:
        return len(self.parameters)


# ── Descriptor kinds ──────────────────────────────────────────────

class TypeDescriptor:
    """Base class of all descriptor kinds."""

    kind: str = ''
    type_parameters: tuple[Any, ...] = ()


@dataclasses.dataclass(frozen=True)
class AtomicDescriptor(TypeDescriptor):
    atom: AtomicType
    kind = 'atomic'


@dataclasses.dataclass(frozen=True)
class ComposableDescriptor(TypeDescriptor):
    constructor: ConstructorDescriptor
    properties: dict[str, PropertyDescriptor]
    type_parameters: tuple[Any, ...] = ()
    kind = 'composable'

    def __post_init__(self) -> None:
        slots = [
            p.binding.index for p in self.properties.values()
            if isinstance(p.binding, ConstructorSlot)
        ]
        if len(slots) != self.constructor.arity:
            raise IntrospectionError(
                f"Constructor takes {self.constructor.arity} parameters "
                f"but {len(slots)} properties are bound to constructor slots"
            )
        if sorted(slots) != list(range(len(slots))):
            raise IntrospectionError(
                f"Constructor slot indices {sorted(slots)} are not a contiguous "
                f"0..{len(slots) - 1} range"
            )


@dataclasses.dataclass(frozen=True)
class CollectionDescriptor(TypeDescriptor):
    element: TypeKey
    container: type = list
    type_parameters: tuple[Any, ...] = ()
    kind = 'collection'


@dataclasses.dataclass(frozen=True)
class ArrayDescriptor(TypeDescriptor):
    element: TypeKey
    type_parameters: tuple[Any, ...] = ()
    kind = 'array'


@dataclasses.dataclass(frozen=True)
class MapDescriptor(TypeDescriptor):
    key: TypeKey
    value: TypeKey
    container: type = dict
    type_parameters: tuple[Any, ...] = ()
    kind = 'map'


@dataclasses.dataclass(frozen=True)
class EnumDescriptor(TypeDescriptor):
    members: tuple[str, ...]
    labels: tuple[str, ...] = ()
    kind = 'enum'

    def __post_init__(self) -> None:
        if not self.labels:
            object.__setattr__(self, 'labels', self.members)
        if len(self.labels) != len(self.members):
            raise IntrospectionError(
                f"Enum has {len(self.members)} members but {len(self.labels)} labels"
            )
        if len(set(self.labels)) != len(self.labels):
            raise IntrospectionError(f"Duplicate enum labels in {list(self.labels)}")


@dataclasses.dataclass(frozen=True)
class PolymorphicDescriptor(TypeDescriptor):
    subtypes: dict[str, TypeKey]
    kind = 'polymorphic'

    def __post_init__(self) -> None:
        if not self.subtypes:
            raise IntrospectionError("Polymorphic type declares no subtypes")


@dataclasses.dataclass(frozen=True)
class OpaqueDescriptor(TypeDescriptor):
    reason: str = ''
    kind = 'opaque'
