"""Codecs for the atomic scalar kinds."""

from __future__ import annotations

from typing import Any

from ..exc import DecodeError, EncodeError
from ..types.atoms import AtomicKind, AtomicType
from ..types.key import TypeKey
from .base import Codec, JsonValue, json_kind

_INT32_MIN = -(2 ** 31)
_INT32_MAX = 2 ** 31 - 1
_INT64_MIN = -(2 ** 63)
_INT64_MAX = 2 ** 63 - 1


class AtomicCodec(Codec):
    """Codec for one :class:`AtomicType`.

    Values are never coerced across JSON kinds: a string field does not accept
    a number, and null is rejected rather than turned into ``""`` or ``0``.
    Integral floats (``3.0``) are accepted for integer kinds.
    """

    def __init__(self, atom: AtomicType, key: TypeKey | None = None) -> None:
        self.atom = atom
        self.key = key if key is not None else TypeKey(atom)

    def encode(self, obj: Any) -> JsonValue:
        kind = self.atom.kind
        if kind is AtomicKind.STRING:
            if isinstance(obj, str):
                return str(obj)
        elif kind is AtomicKind.BOOL:
            if isinstance(obj, bool):
                return obj
        elif kind is AtomicKind.DOUBLE:
            if isinstance(obj, (int, float)) and not isinstance(obj, bool):
                return float(obj)
        elif isinstance(obj, int) and not isinstance(obj, bool):
            self._check_range(int(obj), EncodeError)
            return int(obj)
        raise EncodeError(f"expected {self.atom.name}, got {type(obj).__name__}")

    def decode(self, value: JsonValue) -> Any:
        kind = self.atom.kind
        if kind is AtomicKind.STRING:
            if isinstance(value, str):
                return value
        elif kind is AtomicKind.BOOL:
            if isinstance(value, bool):
                return value
        elif isinstance(value, bool):
            pass
        elif kind is AtomicKind.DOUBLE:
            if isinstance(value, (int, float)):
                return float(value)
        elif isinstance(value, int):
            self._check_range(value, DecodeError)
            return value
        elif isinstance(value, float) and value.is_integer():
            self._check_range(int(value), DecodeError)
            return int(value)
        raise DecodeError(f"expected {self.atom.json_type} for {self.atom.name}, got {json_kind(value)}")

    def _check_range(self, value: int, error: type[Exception]) -> None:
        if self.atom.kind is AtomicKind.INT:
            low, high = _INT32_MIN, _INT32_MAX
        else:
            low, high = _INT64_MIN, _INT64_MAX
        if not low <= value <= high:
            raise error(f"{value} out of range for {self.atom.name}")

    def generate_schema(self, collector: Any) -> dict[str, Any]:
        schema: dict[str, Any] = {'type': self.atom.json_type}
        if self.atom.format:
            schema['format'] = self.atom.format
        return schema

    def __repr__(self) -> str:
        return f"AtomicCodec({self.atom.name})"
