"""Codec family: bidirectional JSON mapping for every descriptor kind."""

from .base import Codec, CodecReference, DelegatingCodec, JsonValue, json_kind
from .atomic import AtomicCodec
from .objects import ObjectCodec, StructuredObjectCodec, SyntheticProperty
from .enums import EnumCodec
from .containers import CollectionCodec, MapCodec
from .polymorphic import PolymorphicCodec
from .custom import (
    CodecFactory, StringFormatCodec, DecimalCodec, ClassHandleCodec,
    DynamicCodec, ErrorCodec, register_builtin_codecs, resolve_dotted,
)

__all__ = [
    'Codec', 'CodecReference', 'DelegatingCodec', 'JsonValue', 'json_kind',
    'AtomicCodec', 'ObjectCodec', 'StructuredObjectCodec', 'SyntheticProperty',
    'EnumCodec', 'CollectionCodec', 'MapCodec', 'PolymorphicCodec',
    'CodecFactory', 'StringFormatCodec', 'DecimalCodec', 'ClassHandleCodec',
    'DynamicCodec', 'ErrorCodec', 'register_builtin_codecs', 'resolve_dotted',
]
