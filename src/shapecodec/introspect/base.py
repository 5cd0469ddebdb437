"""Introspector contract and the process-lifetime descriptor cache."""

from __future__ import annotations

import logging
import threading
from typing import Any, Protocol, runtime_checkable

from ..types.descriptors import TypeDescriptor

log = logging.getLogger("shapecodec.introspect")


@runtime_checkable
class Introspector(Protocol):
    """Supplies the shape of a raw type.

    Implementations must be deterministic and side-effect free: describing
    the same raw type twice must yield equivalent descriptors.
    """

    def describe(self, raw_type: Any) -> TypeDescriptor:
        ...


class CachingIntrospector:
    """Wraps another introspector and memoizes its descriptors.

    Introspection is assumed to be expensive, so every raw type is
    described at most once per instance, even under concurrent first access.
    """

    def __init__(self, delegate: Introspector) -> None:
        self._delegate = delegate
        self._cache: dict[Any, TypeDescriptor] = {}
        self._lock = threading.Lock()

    @property
    def delegate(self) -> Introspector:
        return self._delegate

    def describe(self, raw_type: Any) -> TypeDescriptor:
        descriptor = self._cache.get(raw_type)
        if descriptor is not None:
            return descriptor
        with self._lock:
            descriptor = self._cache.get(raw_type)
            if descriptor is None:
                descriptor = self._delegate.describe(raw_type)
                log.debug("described %r as %s", raw_type, descriptor.kind)
                self._cache[raw_type] = descriptor
        return descriptor

    def __len__(self) -> int:
        return len(self._cache)

    def __repr__(self) -> str:
        return f"CachingIntrospector({self._delegate!r}, cached={len(self._cache)})"
