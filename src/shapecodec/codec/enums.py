"""Enum codec: members are written as their string labels."""

from __future__ import annotations

from typing import Any

from ..exc import DecodeError, EncodeError
from ..types.key import TypeKey
from .base import Codec, JsonValue, json_kind


class EnumCodec(Codec):
    """Maps each member of an enumeration to an external string label.

    Parameters
    ----------
    key : TypeKey
        Key of the enumeration type.
    members : tuple[str, ...]
        Member identifiers, looked up as attributes of the enumeration.
    labels : tuple[str, ...]
        External label of each member, in the same order.
    """

    def __init__(self, key: TypeKey, members: tuple[str, ...], labels: tuple[str, ...]) -> None:
        self.key = key
        enum_type = key.raw_type
        self.labels = tuple(labels)
        self._by_label = {
            label: getattr(enum_type, member) for member, label in zip(members, labels)
        }
        self._by_member = {value: label for label, value in self._by_label.items()}

    def encode(self, obj: Any) -> JsonValue:
        try:
            return self._by_member[obj]
        except (KeyError, TypeError):
            raise EncodeError(f"{obj!r} is not a member of {self.key}") from None

    def decode(self, value: JsonValue) -> Any:
        if not isinstance(value, str):
            raise DecodeError(f"expected string for {self.key}, got {json_kind(value)}")
        try:
            return self._by_label[value]
        except KeyError:
            raise DecodeError(
                f"unknown label {value!r} for {self.key}; "
                f"expected one of: {', '.join(self.labels)}"
            ) from None

    def generate_schema(self, collector: Any) -> dict[str, Any]:
        return {'type': 'string', 'enum': list(self.labels)}
