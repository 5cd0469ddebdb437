"""Public type aliases and type-model primitives.

Usage::

    from shapecodec.types import Int, Long, String

    @dataclass
    class Account:
        owner: String
        balance: Long
        version: Int = 0
"""

from __future__ import annotations

from typing import Annotated

from .atoms import (
    AtomicKind, AtomicType, get_atom, all_atoms,
    atom_string, atom_int, atom_long, atom_double, atom_bool,
)
from .key import (
    TypeKey, is_optional, type_name, schema_base_name, schema_type_name,
)
from .descriptors import (
    ABSENT,
    TypeDescriptor, AtomicDescriptor, ComposableDescriptor,
    CollectionDescriptor, ArrayDescriptor, MapDescriptor,
    EnumDescriptor, PolymorphicDescriptor, OpaqueDescriptor,
    PropertyDescriptor, ConstructorDescriptor,
    ConstructorSlot, GetterSetterPair, ReadOnly, Calculated, Binding,
)

# ── Annotated type aliases ─────────────────────────────────────────
# These carry AtomicType metadata for the introspector to pick up.

String = Annotated[str, atom_string]
Int = Annotated[int, atom_int]
Long = Annotated[int, atom_long]
Double = Annotated[float, atom_double]
Boolean = Annotated[bool, atom_bool]

__all__ = [
    # Type aliases
    'String', 'Int', 'Long', 'Double', 'Boolean',
    # Atoms
    'AtomicKind', 'AtomicType', 'get_atom', 'all_atoms',
    'atom_string', 'atom_int', 'atom_long', 'atom_double', 'atom_bool',
    # Keys
    'TypeKey', 'is_optional', 'type_name', 'schema_base_name', 'schema_type_name',
    # Descriptors
    'ABSENT',
    'TypeDescriptor', 'AtomicDescriptor', 'ComposableDescriptor',
    'CollectionDescriptor', 'ArrayDescriptor', 'MapDescriptor',
    'EnumDescriptor', 'PolymorphicDescriptor', 'OpaqueDescriptor',
    'PropertyDescriptor', 'ConstructorDescriptor',
    'ConstructorSlot', 'GetterSetterPair', 'ReadOnly', 'Calculated', 'Binding',
]
