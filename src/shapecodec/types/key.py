"""TypeKey: structural identity for a possibly generic type.

Maps Python type hints (including ``Annotated[...]`` and parameterized
generics) to the canonical key used by the codec registry and the schema
collector.
"""

from __future__ import annotations

import collections.abc
import dataclasses
import types
import typing
from typing import Any, Annotated, TypeVar, get_args, get_origin

from ..exc import UnsupportedTypeError
from .atoms import AtomicType

_NONE_TYPE = type(None)

# Abstract container origins are folded onto the concrete type built on decode
_ABSTRACT_ORIGINS: dict[Any, type] = {
    collections.abc.Sequence: list,
    collections.abc.MutableSequence: list,
    collections.abc.Collection: list,
    collections.abc.Iterable: list,
    collections.abc.Set: frozenset,
    collections.abc.MutableSet: set,
    collections.abc.Mapping: dict,
    collections.abc.MutableMapping: dict,
}


@dataclasses.dataclass(frozen=True, slots=True)
class TypeKey:
    """Canonical identity of a type together with its type arguments.

    Two keys are equal when their raw types and all their type arguments
    are recursively equal, so keys built independently from the same
    annotation share one cached codec.

    Parameters
    ----------
    raw_type : Any
        A class, an :class:`AtomicType` marker, or a ``TypeVar`` awaiting
        substitution.
    type_arguments : tuple[TypeKey, ...]
        Ordered keys of the generic arguments; empty for plain types.
    """
    raw_type: Any
    type_arguments: tuple[TypeKey, ...] = ()

    @property
    def is_parameterized(self) -> bool:
        return bool(self.type_arguments)

    @property
    def is_type_variable(self) -> bool:
        return isinstance(self.raw_type, TypeVar)

    @property
    def erased(self) -> TypeKey:
        """The same key without type arguments."""
        if not self.type_arguments:
            return self
        return TypeKey(self.raw_type)

    def substitute(self, mapping: dict[Any, TypeKey]) -> TypeKey:
        """Replace type variables (recursively) using ``mapping``.

        Variables missing from ``mapping`` resolve to their bound, or to
        ``object`` when unbounded.
        """
        if isinstance(self.raw_type, TypeVar):
            bound = mapping.get(self.raw_type)
            if bound is not None:
                return bound
            if self.raw_type.__bound__ is not None:
                return TypeKey.of(self.raw_type.__bound__)
            return TypeKey(object)
        if not self.type_arguments:
            return self
        return TypeKey(
            self.raw_type,
            tuple(arg.substitute(mapping) for arg in self.type_arguments),
        )

    @classmethod
    def of(cls, annotation: Any) -> TypeKey:
        """Build a key from a Python type annotation.

        Supports plain classes, ``Annotated[X, AtomicType]``, ``Optional``,
        builtin and ``collections.abc`` generics, ``tuple[X, ...]``,
        ``type[X]``, user generics and bare ``TypeVar``s.

        Raises
        ------
        UnsupportedTypeError
            If the annotation cannot be mapped to a key (general unions,
            fixed-length tuples, unresolved forward references).
        """
        if isinstance(annotation, TypeKey):
            return annotation
        if isinstance(annotation, AtomicType):
            return cls(annotation)
        if annotation is Any or annotation is object:
            return cls(object)
        if isinstance(annotation, TypeVar):
            return cls(annotation)
        if isinstance(annotation, (str, typing.ForwardRef)):
            raise UnsupportedTypeError(
                f"Unresolved forward reference {annotation!r}; "
                f"make sure the referenced class is importable from its module"
            )

        origin = get_origin(annotation)

        if origin is Annotated:
            args = get_args(annotation)
            for arg in args[1:]:
                if isinstance(arg, AtomicType):
                    return cls(arg)
            return cls.of(args[0])

        if origin is typing.Union or origin is types.UnionType:
            members = [a for a in get_args(annotation) if a is not _NONE_TYPE]
            if len(members) == 1:
                return cls.of(members[0])
            raise UnsupportedTypeError(
                f"Union {annotation!r} is not supported; declare a polymorphic base class instead"
            )

        if origin is None:
            if annotation is _NONE_TYPE or annotation is None:
                raise UnsupportedTypeError("NoneType cannot be used as a value type")
            if isinstance(annotation, type):
                return cls(_ABSTRACT_ORIGINS.get(annotation, annotation))
            raise UnsupportedTypeError(f"Cannot build a type key from {annotation!r}")

        args = get_args(annotation)
        origin = _ABSTRACT_ORIGINS.get(origin, origin)

        if origin is tuple:
            if len(args) == 2 and args[1] is Ellipsis:
                return cls(tuple, (cls.of(args[0]),))
            raise UnsupportedTypeError(
                f"Fixed-length tuple {annotation!r} is not supported; use tuple[X, ...]"
            )

        if not isinstance(origin, type):
            raise UnsupportedTypeError(f"Cannot build a type key from {annotation!r}")

        return cls(origin, tuple(cls.of(arg) for arg in args))

    def __str__(self) -> str:
        name = type_name(self.raw_type)
        if not self.type_arguments:
            return name
        return f"{name}[{', '.join(str(a) for a in self.type_arguments)}]"


def is_optional(annotation: Any) -> bool:
    """Return True if the annotation admits ``None`` (``Optional[X]``, ``X | None``)."""
    origin = get_origin(annotation)
    if origin is Annotated:
        return is_optional(get_args(annotation)[0])
    if origin is typing.Union or origin is types.UnionType:
        return _NONE_TYPE in get_args(annotation)
    return annotation is Any or annotation is object


def type_name(raw_type: Any) -> str:
    """Short human-readable name of a raw type."""
    if isinstance(raw_type, AtomicType):
        return raw_type.name
    if isinstance(raw_type, TypeVar):
        return f"~{raw_type.__name__}"
    return getattr(raw_type, '__qualname__', None) or getattr(raw_type, '__name__', repr(raw_type))


def schema_base_name(raw_type: Any) -> str:
    """Name used for a standalone schema of ``raw_type``.

    Enclosing class names are concatenated with the class name, so
    ``Outer.Inner`` becomes ``OuterInner``. Function scopes are dropped.
    """
    if isinstance(raw_type, AtomicType):
        return raw_type.name
    qualname = getattr(raw_type, '__qualname__', None) or getattr(raw_type, '__name__', '')
    if '<locals>.' in qualname:
        qualname = qualname.rsplit('<locals>.', 1)[1]
    return ''.join(qualname.split('.'))


def schema_type_name(key: TypeKey) -> str:
    """Deterministic standalone schema name for ``key``.

    Generic instantiations append their argument names joined with
    underscores, e.g. ``Page[Person]`` becomes ``Page_Person``.
    """
    base = schema_base_name(key.raw_type)
    if not key.type_arguments:
        return base
    return '_'.join([base, *(schema_type_name(arg) for arg in key.type_arguments)])
