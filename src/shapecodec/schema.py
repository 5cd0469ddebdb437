"""JSON-Schema generation with named-schema extraction.

A :class:`SchemaCollector` walks codecs and inlines the schemas of simple
kinds. Object-shaped and polymorphic types (and custom codecs declaring a
``schema_name``) are extracted into a shared dictionary and referenced with
``$ref``, which also breaks cycles of self-referential types.
"""

from __future__ import annotations

import logging
from typing import Any

from .codec.base import Codec
from .exc import SchemaError
from .registry import CodecRegistry

log = logging.getLogger("shapecodec.schema")

DEFAULT_PREFIX = '#/components/schemas/'


class SchemaCollector:
    """Collects named schemas for one document build.

    Not thread-safe; use one collector per document.

    Usage::

        collector = SchemaCollector(registry)
        root = collector.generate_schema(list[Person])
        # root == {"type": "array", "items": {"$ref": "#/components/schemas/Person"}}
        components = collector.collected_schemas
    """

    def __init__(self, registry: CodecRegistry, prefix: str = DEFAULT_PREFIX) -> None:
        self._registry = registry
        self._prefix = prefix
        self._schemas: dict[str, dict[str, Any]] = {}
        self._owners: dict[str, Codec] = {}

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def registry(self) -> CodecRegistry:
        return self._registry

    def generate_schema(self, key: Any) -> dict[str, Any]:
        """Return the schema fragment for ``key``, collecting named schemas."""
        return self.schema_of(self._registry.get_codec(key))

    def schema_of(self, codec: Codec) -> dict[str, Any]:
        """Return the schema fragment for ``codec`` (inline or ``$ref``)."""
        codec = codec.resolve()
        name = codec.schema_name
        if name is None:
            return codec.generate_schema(self)

        ref = {'$ref': self._prefix + name}
        owner = self._owners.get(name)
        if owner is not None:
            if owner is not codec:
                raise SchemaError(
                    f"Schema name {name!r} is used by both {owner.key} and {codec.key}"
                )
            return ref

        # Placeholder first, so recursive references resolve to the $ref
        self._owners[name] = codec
        self._schemas[name] = {}
        log.debug("extracting schema %s for %s", name, codec.key)
        self._schemas[name] = codec.generate_schema(self)
        return ref

    @property
    def collected_schemas(self) -> dict[str, dict[str, Any]]:
        """Named schemas collected so far, sorted by name."""
        return {name: self._schemas[name] for name in sorted(self._schemas)}

    def __len__(self) -> int:
        return len(self._schemas)

    def __repr__(self) -> str:
        return f"SchemaCollector(prefix={self._prefix!r}, schemas={len(self._schemas)})"
