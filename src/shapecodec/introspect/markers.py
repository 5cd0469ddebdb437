"""Declarative markers read by the reflection introspector."""

from __future__ import annotations

import dataclasses
from typing import Any, Callable, TypeVar

from ..exc import IntrospectionError

C = TypeVar('C', bound=type)

# Key under which json_field() stores its options in dataclass field metadata
METADATA_KEY = 'shapecodec'


def json_field(
    *,
    name: str | None = None,
    serialize: bool = True,
    deserialize: bool = True,
    **kwargs: Any,
) -> Any:
    """Create a dataclass field carrying JSON mapping options.

    Remaining keyword arguments are passed to :func:`dataclasses.field`.

    Usage::

        @dataclass
        class Account:
            owner: str = json_field(name="ownerName")
            secret: str | None = json_field(default=None, serialize=False)
    """
    metadata = dict(kwargs.pop('metadata', None) or {})
    metadata[METADATA_KEY] = {
        'name': name,
        'serialize': serialize,
        'deserialize': deserialize,
    }
    return dataclasses.field(metadata=metadata, **kwargs)


class calculated(property):
    """A read-only property whose value is derived from other state.

    Calculated properties are written by ``encode`` and documented as
    ``readOnly`` in schemas, but never read back on ``decode``.
    """


def polymorphic(cls: C) -> C:
    """Mark a base class whose JSON form is a single-key discriminator object.

    Concrete subtypes are attached with :func:`subtype`, in declaration
    order. The order matters when an object matches several subtypes: the
    first registered one wins on encode.

    Usage::

        @polymorphic
        class Shape: ...

        @subtype("circle")
        @dataclass
        class Circle(Shape):
            radius: float
    """
    if '__subtypes__' not in cls.__dict__:
        cls.__subtypes__ = {}
    return cls


def subtype(discriminator: str) -> Callable[[C], C]:
    """Register the decorated class under ``discriminator`` with its polymorphic base."""
    def decorate(cls: C) -> C:
        for base in cls.__mro__[1:]:
            mapping = base.__dict__.get('__subtypes__')
            if mapping is None:
                continue
            if discriminator in mapping:
                raise IntrospectionError(
                    f"Discriminator {discriminator!r} already used by "
                    f"{mapping[discriminator].__qualname__} in {base.__qualname__}"
                )
            mapping[discriminator] = cls
            return cls
        raise IntrospectionError(
            f"{cls.__qualname__} has no @polymorphic base class"
        )
    return decorate
