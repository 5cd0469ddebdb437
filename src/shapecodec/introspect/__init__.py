"""Type introspection: turning raw Python types into descriptors."""

from .base import Introspector, CachingIntrospector
from .reflect import ReflectionIntrospector
from .markers import json_field, calculated, polymorphic, subtype

__all__ = [
    'Introspector', 'CachingIntrospector', 'ReflectionIntrospector',
    'json_field', 'calculated', 'polymorphic', 'subtype',
]
