"""shapecodec: JSON codecs and JSON Schemas derived from Python types.

Usage::

    from dataclasses import dataclass
    from shapecodec import CodecRegistry, SchemaCollector

    @dataclass
    class Person:
        name: str
        age: int | None = None

    registry = CodecRegistry()
    codec = registry.get_codec(Person)

    codec.encode(Person("Ann"))              # {"name": "Ann"}
    codec.decode({"name": "Bob", "age": 7})  # Person(name='Bob', age=7)

    collector = SchemaCollector(registry)
    collector.generate_schema(list[Person])
    # {"type": "array", "items": {"$ref": "#/components/schemas/Person"}}
    collector.collected_schemas["Person"]
"""

from .types import (
    String, Int, Long, Double, Boolean,
    AtomicKind, AtomicType, TypeKey,
    TypeDescriptor, AtomicDescriptor, ComposableDescriptor,
    CollectionDescriptor, ArrayDescriptor, MapDescriptor,
    EnumDescriptor, PolymorphicDescriptor, OpaqueDescriptor,
    PropertyDescriptor, ConstructorDescriptor,
    ConstructorSlot, GetterSetterPair, ReadOnly, Calculated,
)
from .introspect import (
    Introspector, CachingIntrospector, ReflectionIntrospector,
    json_field, calculated, polymorphic, subtype,
)
from .codec import (
    Codec, CodecReference, DelegatingCodec, AtomicCodec,
    ObjectCodec, StructuredObjectCodec, SyntheticProperty,
    EnumCodec, CollectionCodec, MapCodec, PolymorphicCodec,
    DynamicCodec, ClassHandleCodec, CodecFactory,
)
from .registry import CodecRegistry
from .schema import SchemaCollector, DEFAULT_PREFIX
from .config import RegistrySettings, load_config, registry_from_config
from .jsonio import dumps, loads
from .exc import (
    ShapeCodecError, CodecError, DecodeError, EncodeError, ConstructionError,
    UnsupportedTypeError, CodecRegistrationError, IntrospectionError,
    SchemaError, ConfigError,
)

__version__ = "0.1.0"

__all__ = [
    # Core
    'CodecRegistry', 'SchemaCollector', 'DEFAULT_PREFIX',
    'RegistrySettings', 'load_config', 'registry_from_config',
    'dumps', 'loads',
    # Types
    'String', 'Int', 'Long', 'Double', 'Boolean',
    'AtomicKind', 'AtomicType', 'TypeKey',
    'TypeDescriptor', 'AtomicDescriptor', 'ComposableDescriptor',
    'CollectionDescriptor', 'ArrayDescriptor', 'MapDescriptor',
    'EnumDescriptor', 'PolymorphicDescriptor', 'OpaqueDescriptor',
    'PropertyDescriptor', 'ConstructorDescriptor',
    'ConstructorSlot', 'GetterSetterPair', 'ReadOnly', 'Calculated',
    # Introspection
    'Introspector', 'CachingIntrospector', 'ReflectionIntrospector',
    'json_field', 'calculated', 'polymorphic', 'subtype',
    # Codecs
    'Codec', 'CodecReference', 'DelegatingCodec', 'AtomicCodec',
    'ObjectCodec', 'StructuredObjectCodec', 'SyntheticProperty',
    'EnumCodec', 'CollectionCodec', 'MapCodec', 'PolymorphicCodec',
    'DynamicCodec', 'ClassHandleCodec', 'CodecFactory',
    # Exceptions
    'ShapeCodecError', 'CodecError', 'DecodeError', 'EncodeError', 'ConstructionError',
    'UnsupportedTypeError', 'CodecRegistrationError', 'IntrospectionError',
    'SchemaError', 'ConfigError',
]
