"""Unit tests for type keys, atoms and descriptors."""

import typing
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Annotated, Any, Generic, Optional, TypeVar

import pytest

from shapecodec.exc import IntrospectionError, UnsupportedTypeError
from shapecodec.types import (
    TypeKey, String, Int, Long, Double, Boolean,
    AtomicKind, get_atom, all_atoms,
    atom_string, atom_int, atom_long, atom_double, atom_bool,
    is_optional, type_name, schema_base_name, schema_type_name,
    ComposableDescriptor, ConstructorDescriptor, PropertyDescriptor,
    ConstructorSlot, GetterSetterPair, EnumDescriptor, PolymorphicDescriptor,
)

T = TypeVar('T')
B = TypeVar('B', bound=str)


@dataclass
class Person:
    name: str


@dataclass
class Page(Generic[T]):
    items: list[T]


class Outer:
    class Inner:
        pass


class TestAtoms:
    def test_all_kinds_registered(self):
        assert {a.kind for a in all_atoms()} == set(AtomicKind)

    def test_get_atom_by_name(self):
        assert get_atom('long') is atom_long
        assert get_atom(AtomicKind.DOUBLE) is atom_double

    def test_json_types(self):
        assert atom_string.json_type == 'string'
        assert (atom_int.json_type, atom_int.format) == ('integer', 'int32')
        assert (atom_long.json_type, atom_long.format) == ('integer', 'int64')
        assert (atom_double.json_type, atom_double.format) == ('number', 'double')
        assert atom_bool.json_type == 'boolean'

    def test_aliases_carry_atoms(self):
        assert TypeKey.of(String) == TypeKey(atom_string)
        assert TypeKey.of(Int) == TypeKey(atom_int)
        assert TypeKey.of(Long) == TypeKey(atom_long)
        assert TypeKey.of(Double) == TypeKey(atom_double)
        assert TypeKey.of(Boolean) == TypeKey(atom_bool)


class TestTypeKeyOf:
    def test_plain_class(self):
        assert TypeKey.of(Person) == TypeKey(Person)

    def test_structural_equality(self):
        assert TypeKey.of(list[Person]) == TypeKey.of(list[Person])
        assert hash(TypeKey.of(dict[str, int])) == hash(TypeKey.of(dict[str, int]))
        assert TypeKey.of(list[Person]) != TypeKey.of(list[str])

    def test_list(self):
        key = TypeKey.of(list[str])
        assert key.raw_type is list
        assert key.type_arguments == (TypeKey(str),)

    def test_abstract_origins_fold_to_concrete(self):
        assert TypeKey.of(Sequence[int]) == TypeKey.of(list[int])
        assert TypeKey.of(Mapping[str, int]) == TypeKey.of(dict[str, int])
        assert TypeKey.of(typing.List[int]) == TypeKey.of(list[int])

    def test_variadic_tuple(self):
        assert TypeKey.of(tuple[int, ...]) == TypeKey(tuple, (TypeKey(int),))

    def test_fixed_tuple_rejected(self):
        with pytest.raises(UnsupportedTypeError, match="tuple"):
            TypeKey.of(tuple[int, str])

    def test_optional_unwraps(self):
        assert TypeKey.of(Optional[Person]) == TypeKey(Person)
        assert TypeKey.of(Person | None) == TypeKey(Person)

    def test_union_rejected(self):
        with pytest.raises(UnsupportedTypeError, match="Union"):
            TypeKey.of(int | str)

    def test_any_and_object(self):
        assert TypeKey.of(Any) == TypeKey(object)
        assert TypeKey.of(object) == TypeKey(object)

    def test_annotated_without_atom_uses_inner_type(self):
        assert TypeKey.of(Annotated[Person, "doc"]) == TypeKey(Person)

    def test_forward_ref_rejected(self):
        with pytest.raises(UnsupportedTypeError, match="forward reference"):
            TypeKey.of("Person")

    def test_none_rejected(self):
        with pytest.raises(UnsupportedTypeError):
            TypeKey.of(type(None))

    def test_type_handle(self):
        key = TypeKey.of(type[Person])
        assert key.raw_type is type
        assert key.erased == TypeKey(type)

    def test_type_variable(self):
        key = TypeKey.of(T)
        assert key.is_type_variable
        assert not key.is_parameterized

    def test_str(self):
        assert str(TypeKey.of(dict[str, list[Person]])) == 'dict[str, list[Person]]'


class TestSubstitute:
    def test_replaces_nested_variables(self):
        key = TypeKey.of(list[T])
        assert key.substitute({T: TypeKey(Person)}) == TypeKey.of(list[Person])

    def test_unbound_variable_becomes_object(self):
        assert TypeKey(T).substitute({}) == TypeKey(object)

    def test_unbound_variable_uses_bound(self):
        assert TypeKey(B).substitute({}) == TypeKey(str)

    def test_plain_key_unchanged(self):
        key = TypeKey(Person)
        assert key.substitute({T: TypeKey(str)}) is key


class TestNames:
    def test_is_optional(self):
        assert is_optional(Optional[int])
        assert is_optional(int | None)
        assert is_optional(Annotated[int | None, "x"])
        assert is_optional(Any)
        assert not is_optional(int)

    def test_type_name(self):
        assert type_name(atom_long) == 'long'
        assert type_name(T) == '~T'
        assert type_name(Person) == 'Person'

    def test_nested_class_name_concatenated(self):
        assert schema_base_name(Outer.Inner) == 'OuterInner'

    def test_local_class_scope_dropped(self):
        def make():
            class Local:
                pass
            return Local
        assert schema_base_name(make()) == 'Local'

    def test_generic_schema_name(self):
        assert schema_type_name(TypeKey.of(Page[Person])) == 'Page_Person'
        assert schema_type_name(TypeKey.of(Page[list[Person]])) == 'Page_list_Person'


class TestDescriptorInvariants:
    def _ctor(self, *params):
        return ConstructorDescriptor(tuple(params), lambda *args: None)

    def test_slot_count_must_match_arity(self):
        with pytest.raises(IntrospectionError, match="2 parameters"):
            ComposableDescriptor(
                constructor=self._ctor('a', 'b'),
                properties={'a': PropertyDescriptor('a', TypeKey(str), binding=ConstructorSlot(0))},
            )

    def test_slots_must_be_contiguous(self):
        with pytest.raises(IntrospectionError, match="contiguous"):
            ComposableDescriptor(
                constructor=self._ctor('a', 'b'),
                properties={
                    'a': PropertyDescriptor('a', TypeKey(str), binding=ConstructorSlot(0)),
                    'b': PropertyDescriptor('b', TypeKey(str), binding=ConstructorSlot(2)),
                },
            )

    def test_duplicate_slots_rejected(self):
        with pytest.raises(IntrospectionError):
            ComposableDescriptor(
                constructor=self._ctor('a', 'b'),
                properties={
                    'a': PropertyDescriptor('a', TypeKey(str), binding=ConstructorSlot(0)),
                    'b': PropertyDescriptor('b', TypeKey(str), binding=ConstructorSlot(0)),
                },
            )

    def test_setters_do_not_count(self):
        desc = ComposableDescriptor(
            constructor=self._ctor('a'),
            properties={
                'a': PropertyDescriptor('a', TypeKey(str), binding=ConstructorSlot(0)),
                'b': PropertyDescriptor('b', TypeKey(str), binding=GetterSetterPair()),
            },
        )
        assert desc.kind == 'composable'

    def test_enum_labels_default_to_members(self):
        desc = EnumDescriptor(('RED', 'GREEN'))
        assert desc.labels == ('RED', 'GREEN')

    def test_enum_duplicate_labels(self):
        with pytest.raises(IntrospectionError, match="Duplicate"):
            EnumDescriptor(('A', 'B'), ('x', 'x'))

    def test_polymorphic_needs_subtypes(self):
        with pytest.raises(IntrospectionError):
            PolymorphicDescriptor({})
