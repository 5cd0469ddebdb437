"""Collection, array and map codecs."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from ..exc import CodecError, DecodeError, EncodeError, UnsupportedTypeError
from ..types.atoms import AtomicKind
from ..types.key import TypeKey
from .atomic import AtomicCodec
from .base import Codec, JsonValue, json_kind
from .enums import EnumCodec

if TYPE_CHECKING:
    from ..schema import SchemaCollector


class CollectionCodec(Codec):
    """Codec for ordered collections and arrays.

    Elements keep their order; None elements are written as JSON null and
    JSON null elements decode to None. Decoding builds ``container``.
    """

    def __init__(self, key: TypeKey, element: Codec, container: type = list) -> None:
        self.key = key
        self.element = element
        self.container = container

    def encode(self, obj: Any) -> JsonValue:
        if isinstance(obj, (str, bytes, Mapping)) or not isinstance(obj, Iterable):
            raise EncodeError(f"expected a collection for {self.key}, got {type(obj).__name__}")
        result = []
        for i, item in enumerate(obj):
            if item is None:
                result.append(None)
                continue
            try:
                result.append(self.element.encode(item))
            except CodecError as e:
                raise e.at(f"[{i}]") from e
        return result

    def decode(self, value: JsonValue) -> Any:
        if not isinstance(value, list):
            raise DecodeError(f"expected array for {self.key}, got {json_kind(value)}")
        items = []
        for i, item in enumerate(value):
            if item is None:
                items.append(None)
                continue
            try:
                items.append(self.element.decode(item))
            except CodecError as e:
                raise e.at(f"[{i}]") from e
        if self.container is list:
            return items
        try:
            return self.container(items)
        except TypeError as e:
            raise DecodeError(f"cannot build {self.container.__name__} for {self.key}: {e}") from e

    def generate_schema(self, collector: SchemaCollector) -> dict[str, Any]:
        return {'type': 'array', 'items': collector.schema_of(self.element)}


def _is_string_key(codec: Codec) -> bool:
    target = codec.resolve()
    if isinstance(target, AtomicCodec):
        return target.atom.kind is AtomicKind.STRING
    return isinstance(target, EnumCodec)


class MapCodec(Codec):
    """Codec for string-keyed maps, written as JSON objects.

    Keys must be strings or enum members; any other key type fails on use.
    """

    def __init__(self, key: TypeKey, key_codec: Codec, value: Codec, container: type = dict) -> None:
        self.key = key
        self.key_codec = key_codec
        self.value = value
        self.container = container

    def encode(self, obj: Any) -> JsonValue:
        if not _is_string_key(self.key_codec):
            raise EncodeError(f"unsupported key type {self.key_codec.key} in {self.key}")
        if not isinstance(obj, Mapping):
            raise EncodeError(f"expected a mapping for {self.key}, got {type(obj).__name__}")
        result: dict[str, Any] = {}
        for k, v in obj.items():
            json_key = self.key_codec.encode(k)
            if v is None:
                result[json_key] = None
                continue
            try:
                result[json_key] = self.value.encode(v)
            except CodecError as e:
                raise e.at(json_key) from e
        return result

    def decode(self, value: JsonValue) -> Any:
        if not _is_string_key(self.key_codec):
            raise DecodeError(f"unsupported key type {self.key_codec.key} in {self.key}")
        if not isinstance(value, dict):
            raise DecodeError(f"expected object for {self.key}, got {json_kind(value)}")
        result = {}
        for k, v in value.items():
            try:
                decoded_key = self.key_codec.decode(k)
                result[decoded_key] = None if v is None else self.value.decode(v)
            except CodecError as e:
                raise e.at(k) from e
        return result if self.container is dict else self.container(result)

    def generate_schema(self, collector: SchemaCollector) -> dict[str, Any]:
        if not _is_string_key(self.key_codec):
            raise UnsupportedTypeError(
                f"Map {self.key} has unsupported key type {self.key_codec.key}; "
                f"use str or an enum"
            )
        return {'type': 'object', 'additionalProperties': collector.schema_of(self.value)}
