"""Descriptor derivation from Python reflection.

Dataclasses and plain classes with annotated ``__init__`` parameters are
composable; builtin containers, enums and ``@polymorphic`` bases map to their
own descriptor kinds. Anything else is reported as opaque.
"""

from __future__ import annotations

import dataclasses
import enum
import inspect
import typing
from typing import Any, ClassVar, TypeVar, get_origin, get_type_hints

from ..types.atoms import AtomicType, PYTHON_TO_ATOM
from ..types.descriptors import (
    ABSENT, TypeDescriptor, AtomicDescriptor, ComposableDescriptor,
    CollectionDescriptor, ArrayDescriptor, MapDescriptor,
    EnumDescriptor, PolymorphicDescriptor, OpaqueDescriptor,
    PropertyDescriptor, ConstructorDescriptor,
    ConstructorSlot, GetterSetterPair, ReadOnly, Calculated,
)
from ..types.key import TypeKey, is_optional
from ..exc import UnsupportedTypeError
from .markers import METADATA_KEY, calculated

# Element/key/value parameters of the builtin containers
_E = TypeVar('_E')
_K = TypeVar('_K')
_V = TypeVar('_V')

_COLLECTIONS = (list, set, frozenset)


class ReflectionIntrospector:
    """Default :class:`~shapecodec.introspect.Introspector` over ``typing`` metadata."""

    def describe(self, raw_type: Any) -> TypeDescriptor:
        if isinstance(raw_type, AtomicType):
            return AtomicDescriptor(raw_type)

        if not isinstance(raw_type, type):
            return OpaqueDescriptor(f"{raw_type!r} is not a class")

        atom = PYTHON_TO_ATOM.get(raw_type)
        if atom is not None:
            return AtomicDescriptor(atom)

        if raw_type in _COLLECTIONS:
            return CollectionDescriptor(TypeKey(_E), container=raw_type, type_parameters=(_E,))
        if raw_type is tuple:
            return ArrayDescriptor(TypeKey(_E), type_parameters=(_E,))
        if raw_type is dict:
            return MapDescriptor(TypeKey(_K), TypeKey(_V), type_parameters=(_K, _V))

        if issubclass(raw_type, enum.Enum):
            return _describe_enum(raw_type)

        subtypes = raw_type.__dict__.get('__subtypes__')
        if subtypes is not None:
            return PolymorphicDescriptor({
                disc: TypeKey.of(sub) for disc, sub in subtypes.items()
            })

        if raw_type is object or raw_type is type:
            return OpaqueDescriptor(f"{raw_type.__name__} has no fixed shape")
        if raw_type.__module__ == 'builtins':
            return OpaqueDescriptor(f"builtin type {raw_type.__name__} is not composable")
        if inspect.isabstract(raw_type):
            return OpaqueDescriptor(f"{raw_type.__qualname__} is abstract")

        try:
            if dataclasses.is_dataclass(raw_type):
                return _describe_dataclass(raw_type)
            return _describe_class(raw_type)
        except (NameError, TypeError, ValueError, UnsupportedTypeError) as e:
            return OpaqueDescriptor(f"cannot introspect {raw_type.__qualname__}: {e}")

    def __repr__(self) -> str:
        return "ReflectionIntrospector()"


# ── Enums ──────────────────────────────────────────────────────────

def _describe_enum(cls: type[enum.Enum]) -> EnumDescriptor:
    members = tuple(m.name for m in cls)
    label_of = getattr(cls, 'json_label', None)
    if callable(label_of):
        labels = tuple(str(m.json_label()) for m in cls)
    else:
        labels = members
    return EnumDescriptor(members, labels)


# ── Composable types ───────────────────────────────────────────────

def _type_parameters(cls: type) -> tuple[Any, ...]:
    return tuple(getattr(cls, '__parameters__', ()))


def _describe_dataclass(cls: type) -> ComposableDescriptor:
    hints = get_type_hints(cls, include_extras=True)
    properties: dict[str, PropertyDescriptor] = {}
    params: list[str] = []

    for fld in dataclasses.fields(cls):
        if fld.name.startswith('_'):
            continue
        options = fld.metadata.get(METADATA_KEY, {})
        annotation = hints[fld.name]
        if fld.init:
            binding = ConstructorSlot(len(params))
            params.append(fld.name)
        elif cls.__dataclass_params__.frozen:
            binding = ReadOnly()
        else:
            binding = GetterSetterPair()
        name = options.get('name') or fld.name
        properties[name] = PropertyDescriptor(
            name=name,
            value_type=TypeKey.of(annotation),
            mandatory=not is_optional(annotation),
            serializable=options.get('serialize', True),
            deserializable=options.get('deserialize', True) and not isinstance(binding, ReadOnly),
            binding=binding,
            attribute=fld.name,
        )

    # Positional-only parameters do not exist in generated dataclass __init__
    invoke = _keyword_invoker(cls, params, positional=0)
    _add_class_properties(cls, properties)
    return ComposableDescriptor(
        constructor=ConstructorDescriptor(tuple(params), invoke),
        properties=properties,
        type_parameters=_type_parameters(cls),
    )


def _describe_class(cls: type) -> ComposableDescriptor:
    if cls.__init__ is object.__init__:
        parameters: list[inspect.Parameter] = []
        init_hints: dict[str, Any] = {}
    else:
        parameters = list(inspect.signature(cls).parameters.values())
        init_hints = get_type_hints(cls.__init__, include_extras=True)

    properties: dict[str, PropertyDescriptor] = {}
    params: list[str] = []
    positional = 0

    for param in parameters:
        if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            continue
        if param.name not in init_hints:
            raise TypeError(f"constructor parameter {param.name!r} has no type annotation")
        annotation = init_hints[param.name]
        if param.kind is param.POSITIONAL_ONLY:
            positional += 1
        properties[param.name] = PropertyDescriptor(
            name=param.name,
            value_type=TypeKey.of(annotation),
            mandatory=not is_optional(annotation),
            binding=ConstructorSlot(len(params)),
        )
        params.append(param.name)

    _add_class_properties(cls, properties)

    # Annotated class attributes not covered above are plain mutable attributes
    class_hints = get_type_hints(cls, include_extras=True)
    for attr_name, annotation in class_hints.items():
        if attr_name.startswith('_') or attr_name in properties:
            continue
        if get_origin(annotation) is ClassVar or annotation is ClassVar:
            continue
        properties[attr_name] = PropertyDescriptor(
            name=attr_name,
            value_type=TypeKey.of(annotation),
            mandatory=not is_optional(annotation),
            binding=GetterSetterPair(),
        )

    return ComposableDescriptor(
        constructor=ConstructorDescriptor(tuple(params), _keyword_invoker(cls, params, positional)),
        properties=properties,
        type_parameters=_type_parameters(cls),
    )


def _add_class_properties(cls: type, properties: dict[str, PropertyDescriptor]) -> None:
    """Add ``property`` objects declared on the class (and its bases)."""
    seen: set[str] = set()
    for klass in cls.__mro__:
        for attr_name, member in klass.__dict__.items():
            if attr_name in seen or not isinstance(member, property):
                continue
            seen.add(attr_name)
            if attr_name.startswith('_') or attr_name in properties:
                continue
            if member.fget is None:
                continue
            annotation = typing.get_type_hints(member.fget, include_extras=True).get('return')
            if annotation is None:
                continue
            if isinstance(member, calculated):
                binding = Calculated()
            elif member.fset is not None:
                binding = GetterSetterPair()
            else:
                binding = ReadOnly()
            properties[attr_name] = PropertyDescriptor(
                name=attr_name,
                value_type=TypeKey.of(annotation),
                mandatory=not is_optional(annotation),
                deserializable=isinstance(binding, GetterSetterPair),
                binding=binding,
            )


def _keyword_invoker(cls: type, params: list[str], positional: int) -> Any:
    """Build a callable taking one positional argument per constructor slot.

    Slots holding :data:`ABSENT` are left out so the constructor default
    applies; positional-only slots fall back to ``None``.
    """
    positional_names = params[:positional]
    keyword_names = params[positional:]

    def invoke(*args: Any) -> Any:
        pos = [None if a is ABSENT else a for a in args[:positional]]
        kwargs = {
            name: value
            for name, value in zip(keyword_names, args[positional:])
            if value is not ABSENT
        }
        return cls(*pos, **kwargs)

    invoke.__qualname__ = f"{cls.__qualname__}.<constructor>"
    invoke.__doc__ = f"Construct {cls.__qualname__}({', '.join(positional_names + keyword_names)})"
    return invoke
