"""Built-in custom codecs for types without a useful introspected shape.

Registered by :class:`~shapecodec.registry.CodecRegistry` unless disabled.
"""

from __future__ import annotations

import base64
import binascii
import datetime
import decimal
import importlib
import uuid
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Callable, Protocol

from ..exc import CodecError, DecodeError, EncodeError, UnsupportedTypeError
from ..types.atoms import atom_double
from ..types.key import TypeKey
from .atomic import AtomicCodec
from .base import Codec, DelegatingCodec, JsonValue, json_kind

if TYPE_CHECKING:
    from ..registry import CodecRegistry
    from ..schema import SchemaCollector


class CodecFactory(Protocol):
    """Builds a codec for a concrete (usually parameterized) key."""

    def __call__(self, key: TypeKey, registry: CodecRegistry) -> Codec:
        ...


class StringFormatCodec(Codec):
    """Codec writing values as JSON strings with a schema ``format``.

    Parameters
    ----------
    python_type : type
        Accepted type on encode.
    to_text, from_text : Callable
        Conversions to and from the string form. ``from_text`` signals bad
        input with ``ValueError``.
    format : str
        JSON-Schema format keyword.
    """

    def __init__(
        self,
        python_type: type,
        to_text: Callable[[Any], str],
        from_text: Callable[[str], Any],
        format: str,
    ) -> None:
        self.key = TypeKey(python_type)
        self._python_type = python_type
        self._to_text = to_text
        self._from_text = from_text
        self.format = format

    def encode(self, obj: Any) -> JsonValue:
        if not isinstance(obj, self._python_type):
            raise EncodeError(f"expected {self._python_type.__name__}, got {type(obj).__name__}")
        return self._to_text(obj)

    def decode(self, value: JsonValue) -> Any:
        if not isinstance(value, str):
            raise DecodeError(f"expected string for {self.key}, got {json_kind(value)}")
        try:
            return self._from_text(value)
        except (ValueError, ArithmeticError, binascii.Error) as e:
            raise DecodeError(f"invalid {self.format} value {value!r}: {e}") from e

    def generate_schema(self, collector: Any) -> dict[str, Any]:
        return {'type': 'string', 'format': self.format}


# ── Temporal ───────────────────────────────────────────────────────

def _parse_datetime(text: str) -> datetime.datetime:
    # fromisoformat only accepts a trailing Z from Python 3.11 on
    if text.endswith(('Z', 'z')):
        text = text[:-1] + '+00:00'
    return datetime.datetime.fromisoformat(text)


def datetime_codec() -> Codec:
    return StringFormatCodec(
        datetime.datetime, datetime.datetime.isoformat, _parse_datetime, 'date-time',
    )


def date_codec() -> Codec:
    return StringFormatCodec(datetime.date, datetime.date.isoformat, datetime.date.fromisoformat, 'date')


def time_codec() -> Codec:
    return StringFormatCodec(datetime.time, datetime.time.isoformat, datetime.time.fromisoformat, 'time')


def timedelta_codec() -> Codec:
    """Durations as a number of seconds."""
    return DelegatingCodec(
        AtomicCodec(atom_double),
        to_delegate=lambda td: td.total_seconds(),
        from_delegate=lambda seconds: datetime.timedelta(seconds=seconds),
        key=TypeKey(datetime.timedelta),
    )


# ── Identifiers and numbers ───────────────────────────────────────

def uuid_codec() -> Codec:
    return StringFormatCodec(uuid.UUID, str, uuid.UUID, 'uuid')


class DecimalCodec(Codec):
    """Decimals are written as strings to keep their exact precision.

    JSON numbers are accepted on decode.
    """

    key = TypeKey(decimal.Decimal)

    def encode(self, obj: Any) -> JsonValue:
        if isinstance(obj, bool) or not isinstance(obj, (decimal.Decimal, int)):
            raise EncodeError(f"expected Decimal, got {type(obj).__name__}")
        return str(obj)

    def decode(self, value: JsonValue) -> Any:
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            raise DecodeError(f"expected decimal string or number, got {json_kind(value)}")
        try:
            result = decimal.Decimal(str(value))
        except decimal.InvalidOperation as e:
            raise DecodeError(f"invalid decimal value {value!r}") from e
        if not result.is_finite():
            raise DecodeError(f"invalid decimal value {value!r}")
        return result

    def generate_schema(self, collector: Any) -> dict[str, Any]:
        return {'type': 'string', 'format': 'decimal'}


def bytes_codec() -> Codec:
    return StringFormatCodec(
        bytes,
        lambda b: base64.b64encode(b).decode('ascii'),
        lambda s: base64.b64decode(s, validate=True),
        'byte',
    )


# ── Class handles ─────────────────────────────────────────────────

def resolve_dotted(name: str) -> Any:
    """Import ``module.attr`` or ``module:attr`` and return the attribute.

    Raises
    ------
    ValueError
        If the name is malformed or cannot be resolved.
    """
    if ':' in name:
        module_name, _, attr_path = name.partition(':')
        try:
            target: Any = importlib.import_module(module_name)
        except ImportError as e:
            raise ValueError(f"cannot import module {module_name!r}: {e}") from e
    else:
        parts = name.split('.')
        target = None
        for i in range(len(parts) - 1, 0, -1):
            try:
                target = importlib.import_module('.'.join(parts[:i]))
            except ImportError:
                continue
            attr_path = '.'.join(parts[i:])
            break
        else:
            raise ValueError(f"cannot resolve {name!r}: expected module.attribute")
    for part in attr_path.split('.'):
        try:
            target = getattr(target, part)
        except AttributeError:
            raise ValueError(f"cannot resolve {name!r}: no attribute {part!r}") from None
    return target


class ClassHandleCodec(Codec):
    """Writes classes as their importable dotted name."""

    key = TypeKey(type)

    def encode(self, obj: Any) -> JsonValue:
        if not isinstance(obj, type):
            raise EncodeError(f"expected a class, got {type(obj).__name__}")
        if '<locals>' in obj.__qualname__:
            raise EncodeError(f"class {obj.__qualname__} is not importable")
        return f"{obj.__module__}.{obj.__qualname__}"

    def decode(self, value: JsonValue) -> Any:
        if not isinstance(value, str):
            raise DecodeError(f"expected class name string, got {json_kind(value)}")
        try:
            result = resolve_dotted(value)
        except ValueError as e:
            raise DecodeError(str(e)) from e
        if not isinstance(result, type):
            raise DecodeError(f"{value!r} does not name a class")
        return result

    def generate_schema(self, collector: Any) -> dict[str, Any]:
        return {'type': 'string'}


# ── Dynamic values ────────────────────────────────────────────────

class DynamicCodec(Codec):
    """Codec for values typed as ``object`` or ``Any``.

    Encoding dispatches on the runtime type of the value; plain JSON values
    pass through. Decoding returns the JSON value unchanged.
    """

    key = TypeKey(object)

    def __init__(self, registry: CodecRegistry) -> None:
        self._registry = registry

    def encode(self, obj: Any) -> JsonValue:
        if obj is None or isinstance(obj, (str, bool, int, float)):
            return obj
        if isinstance(obj, (list, tuple)):
            return [self.encode(item) for item in obj]
        if isinstance(obj, Mapping) and type(obj) is dict:
            result = {}
            for k, v in obj.items():
                if not isinstance(k, str):
                    raise EncodeError(f"unsupported key type {type(k).__name__}")
                try:
                    result[k] = self.encode(v)
                except CodecError as e:
                    raise e.at(k) from e
            return result
        try:
            codec = self._registry.get_codec(TypeKey(type(obj)))
        except UnsupportedTypeError as e:
            raise EncodeError(f"cannot encode {type(obj).__name__}: {e}") from e
        return codec.encode(obj)

    def decode(self, value: JsonValue) -> Any:
        return value

    def generate_schema(self, collector: SchemaCollector) -> dict[str, Any]:
        return {}


# ── Exceptions ────────────────────────────────────────────────────

class ErrorCodec(Codec):
    """Encode-only codec describing an exception by type, message and cause.

    ``cause`` is written only when the exception has an explicit ``__cause__``.
    """

    def __init__(self, key: TypeKey) -> None:
        self.key = key

    def encode(self, obj: Any) -> JsonValue:
        if not isinstance(obj, BaseException):
            raise EncodeError(f"expected an exception, got {type(obj).__name__}")
        result = {'type': type(obj).__qualname__, 'message': str(obj)}
        if obj.__cause__ is not None:
            result['cause'] = str(obj.__cause__)
        return result

    def decode(self, value: JsonValue) -> Any:
        raise DecodeError(f"{self.key} cannot be decoded")

    def generate_schema(self, collector: Any) -> dict[str, Any]:
        return {
            'type': 'object',
            'properties': {
                'type': {'type': 'string', 'readOnly': True},
                'message': {'type': 'string', 'readOnly': True},
                'cause': {'type': 'string', 'readOnly': True},
            },
            'required': ['type', 'message'],
        }


def error_codec_factory(key: TypeKey, registry: CodecRegistry) -> Codec:
    return ErrorCodec(key)


def register_builtin_codecs(registry: CodecRegistry) -> None:
    """Install the built-in custom codecs and factories into ``registry``.

    Keys that already have a codec keep it.
    """
    for codec in (
        datetime_codec(), date_codec(), time_codec(), timedelta_codec(),
        uuid_codec(), DecimalCodec(), bytes_codec(), ClassHandleCodec(),
        DynamicCodec(registry),
    ):
        if codec.key not in registry:
            registry.register_custom(codec.key, codec)
    registry.register_factory(BaseException, error_codec_factory)
