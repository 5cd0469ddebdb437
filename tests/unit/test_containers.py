"""Unit tests for collection, map and enum codecs."""

import enum
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional

import pytest

from shapecodec import CollectionCodec, EnumCodec, MapCodec
from shapecodec.exc import DecodeError, EncodeError, UnsupportedTypeError


class Color(enum.Enum):
    RED = 1
    GREEN = 2


class Size(enum.Enum):
    SMALL = 's'
    LARGE = 'l'

    def json_label(self) -> str:
        return self.name.lower()


@dataclass
class Item:
    sku: str


class TestCollectionCodec:
    def test_list_of_strings(self, registry):
        codec = registry.get_codec(list[str])
        assert isinstance(codec, CollectionCodec)
        assert codec.encode(["a", "b"]) == ["a", "b"]
        assert codec.decode(["a", "b"]) == ["a", "b"]

    def test_none_elements(self, registry):
        codec = registry.get_codec(list[Optional[int]])
        assert codec.encode([1, None, 3]) == [1, None, 3]
        assert codec.decode([1, None]) == [1, None]

    def test_element_error_path(self, registry):
        with pytest.raises(DecodeError) as info:
            registry.get_codec(list[str]).decode(["a", 2])
        assert info.value.path == "[1]"

    def test_requires_array(self, registry):
        with pytest.raises(DecodeError, match="expected array"):
            registry.get_codec(list[str]).decode("a")
        with pytest.raises(EncodeError):
            registry.get_codec(list[str]).encode("abc")

    def test_set_and_frozenset(self, registry):
        assert registry.get_codec(set[int]).decode([1, 2, 2]) == {1, 2}
        assert isinstance(registry.get_codec(frozenset[int]).decode([1]), frozenset)

    def test_tuple_array(self, registry):
        codec = registry.get_codec(tuple[Item, ...])
        assert codec.decode([{"sku": "x"}]) == (Item("x"),)
        assert codec.encode((Item("y"),)) == [{"sku": "y"}]

    def test_abstract_sequence_decodes_to_list(self, registry):
        assert registry.get_codec(Sequence[str]).decode(["a"]) == ["a"]

    def test_preserves_order(self, registry):
        values = [5, 3, 9, 1]
        assert registry.get_codec(list[int]).encode(values) == values


class TestMapCodec:
    def test_string_keys(self, registry):
        codec = registry.get_codec(dict[str, Item])
        assert isinstance(codec, MapCodec)
        data = {"a": {"sku": "1"}}
        assert codec.decode(data) == {"a": Item("1")}
        assert codec.encode({"a": Item("1")}) == data

    def test_enum_keys(self, registry):
        codec = registry.get_codec(dict[Size, int])
        assert codec.encode({Size.SMALL: 1}) == {"small": 1}
        assert codec.decode({"large": 2}) == {Size.LARGE: 2}

    def test_null_values(self, registry):
        codec = registry.get_codec(dict[str, Optional[int]])
        assert codec.decode({"a": None}) == {"a": None}
        assert codec.encode({"a": None}) == {"a": None}

    def test_value_error_path(self, registry):
        with pytest.raises(DecodeError) as info:
            registry.get_codec(dict[str, int]).decode({"k": "v"})
        assert info.value.path == "k"

    def test_unsupported_key_type(self, registry, collector):
        codec = registry.get_codec(dict[int, str])
        with pytest.raises(EncodeError, match="unsupported key type"):
            codec.encode({1: "a"})
        with pytest.raises(DecodeError, match="unsupported key type"):
            codec.decode({"1": "a"})
        with pytest.raises(UnsupportedTypeError):
            collector.generate_schema(dict[int, str])

    def test_schema(self, collector):
        assert collector.generate_schema(dict[str, int]) == {
            "type": "object",
            "additionalProperties": {"type": "integer", "format": "int64"},
        }


class TestEnumCodec:
    def test_default_labels(self, registry):
        codec = registry.get_codec(Color)
        assert isinstance(codec, EnumCodec)
        assert codec.encode(Color.GREEN) == "GREEN"
        assert codec.decode("RED") is Color.RED

    def test_unknown_label_lists_valid(self, registry):
        with pytest.raises(DecodeError, match="expected one of: RED, GREEN"):
            registry.get_codec(Color).decode("BLUE")

    def test_requires_string(self, registry):
        with pytest.raises(DecodeError, match="expected string"):
            registry.get_codec(Color).decode(1)

    def test_label_override(self, registry):
        codec = registry.get_codec(Size)
        assert codec.encode(Size.LARGE) == "large"
        assert codec.decode("small") is Size.SMALL
        with pytest.raises(DecodeError):
            codec.decode("SMALL")

    def test_encode_non_member(self, registry):
        with pytest.raises(EncodeError, match="not a member"):
            registry.get_codec(Color).encode(Size.SMALL)

    def test_schema(self, collector):
        assert collector.generate_schema(Color) == {"type": "string", "enum": ["RED", "GREEN"]}
        assert collector.collected_schemas == {}
