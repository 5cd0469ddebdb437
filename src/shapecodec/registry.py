"""Codec registry: derives, caches and overrides codecs per type key."""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Iterable

from .codec.atomic import AtomicCodec
from .codec.base import Codec, CodecReference
from .codec.containers import CollectionCodec, MapCodec
from .codec.custom import CodecFactory, register_builtin_codecs
from .codec.enums import EnumCodec
from .codec.objects import ObjectCodec
from .codec.polymorphic import PolymorphicCodec
from .exc import CodecRegistrationError, UnsupportedTypeError
from .introspect.base import CachingIntrospector, Introspector
from .introspect.reflect import ReflectionIntrospector
from .types.descriptors import (
    TypeDescriptor, AtomicDescriptor, ComposableDescriptor, CollectionDescriptor,
    ArrayDescriptor, MapDescriptor, EnumDescriptor, PolymorphicDescriptor,
    OpaqueDescriptor,
)
from .types.key import TypeKey, schema_type_name

log = logging.getLogger("shapecodec.registry")


class CodecRegistry:
    """Lazily derives one codec per type key and caches it for its lifetime.

    Usage::

        registry = CodecRegistry()
        codec = registry.get_codec(list[Person])
        data = codec.encode(people)
        people = codec.decode(data)

    Custom codecs must be registered before the key is first used::

        registry.register_custom(TypeKey(Money), MoneyCodec(registry))

    Parameters
    ----------
    introspector : Introspector | None
        Source of type descriptors. Defaults to a caching
        :class:`ReflectionIntrospector`.
    raw_types : Iterable[type]
        Types whose type arguments never affect their codec.
    builtins : bool
        Install the built-in custom codecs (datetime, UUID, Decimal, ...).
    """

    def __init__(
        self,
        introspector: Introspector | None = None,
        *,
        raw_types: Iterable[Any] = (type,),
        builtins: bool = True,
    ) -> None:
        self._introspector = introspector or CachingIntrospector(ReflectionIntrospector())
        self._cache: dict[TypeKey, Codec] = {}
        self._pending: dict[TypeKey, CodecReference] = {}
        self._custom_keys: set[TypeKey] = set()
        self._factories: dict[type, CodecFactory] = {}
        self._raw_types: set[Any] = set(raw_types)
        self._lock = threading.RLock()
        self._derivations = 0
        # Codecs built by the derivation in progress; published to _cache only
        # when the outermost get_codec call succeeds
        self._staging: dict[TypeKey, Codec] = {}
        self._depth = 0
        self._builders: dict[str, Callable[[TypeKey, Any], Codec]] = {
            'atomic': self._build_atomic,
            'composable': self._build_object,
            'collection': self._build_collection,
            'array': self._build_array,
            'map': self._build_map,
            'enum': self._build_enum,
            'polymorphic': self._build_polymorphic,
        }
        if builtins:
            register_builtin_codecs(self)

    @property
    def introspector(self) -> Introspector:
        return self._introspector

    @property
    def derivation_count(self) -> int:
        """Number of codecs derived (custom registrations excluded)."""
        return self._derivations

    @property
    def raw_types(self) -> frozenset[Any]:
        return frozenset(self._raw_types)

    # ── Registration ───────────────────────────────────────────────

    def register_custom(self, key: Any, codec: Codec) -> None:
        """Use ``codec`` for ``key`` instead of deriving one.

        A custom codec registered for an unparameterized key also serves all
        parameterizations of that raw type.

        Raises
        ------
        CodecRegistrationError
            If a codec for ``key`` was already registered or derived.
        """
        key = _as_key(key)
        with self._lock:
            if key in self._cache or key in self._staging or key in self._pending:
                raise CodecRegistrationError(
                    f"Codec for {key} is already in use; register custom codecs before first use"
                )
            self._cache[key] = codec
            self._custom_keys.add(key)
        log.debug("registered custom codec %r for %s", codec, key)

    def register_factory(self, raw_type: type, factory: CodecFactory) -> None:
        """Build codecs for ``raw_type`` and its subclasses with ``factory``.

        The factory is called as ``factory(key, registry)`` once per key, which
        lets the codec depend on the actual type arguments.

        Raises
        ------
        CodecRegistrationError
            If ``raw_type`` is not a class, or a codec for it (or a subclass)
            was already derived.
        """
        if not isinstance(raw_type, type):
            raise CodecRegistrationError(f"Codec factories are keyed by class, got {raw_type!r}")
        with self._lock:
            for key in (*self._cache, *self._staging, *self._pending):
                if isinstance(key.raw_type, type) and issubclass(key.raw_type, raw_type) \
                        and key not in self._custom_keys:
                    raise CodecRegistrationError(
                        f"Codec for {key} is already in use; register factories before first use"
                    )
            self._factories[raw_type] = factory
        log.debug("registered codec factory %r for %s", factory, raw_type.__qualname__)

    def add_raw_type(self, raw_type: Any) -> None:
        """Treat ``raw_type`` as always-raw: its type arguments are ignored."""
        with self._lock:
            self._raw_types.add(raw_type)

    # ── Lookup ────────────────────────────────────────────────────

    def get_codec(self, key: Any) -> Codec:
        """Return the codec for ``key`` (a :class:`TypeKey` or an annotation).

        Raises
        ------
        UnsupportedTypeError
            If no codec can be built for the key or one of its nested keys.
        """
        key = _as_key(key)
        codec = self._cache.get(key)
        if codec is not None:
            return codec

        with self._lock:
            codec = self._cache.get(key)
            if codec is None:
                codec = self._staging.get(key)
            if codec is not None:
                return codec
            pending = self._pending.get(key)
            if pending is not None:
                return pending

            self._depth += 1
            try:
                codec = self._resolve(key)
            except BaseException:
                if self._depth == 1:
                    # Staged codecs may hold references that will never be bound
                    self._staging.clear()
                raise
            finally:
                self._depth -= 1
            if self._depth == 0:
                self._cache.update(self._staging)
                self._staging.clear()
            return codec

    def __contains__(self, key: Any) -> bool:
        return _as_key(key) in self._cache

    def _resolve(self, key: TypeKey) -> Codec:
        if key.is_parameterized:
            erased = key.erased
            if key.raw_type in self._raw_types or erased in self._custom_keys:
                codec = self.get_codec(erased)
                self._store(key, codec)
                return codec

        ref = CodecReference(key)
        self._pending[key] = ref
        try:
            codec = self._derive(key)
        finally:
            del self._pending[key]
        ref.bind(codec)
        self._store(key, codec)
        self._derivations += 1
        log.debug("derived %r for %s", codec, key)
        return codec

    def _store(self, key: TypeKey, codec: Codec) -> None:
        self._staging[key] = codec

    def _derive(self, key: TypeKey) -> Codec:
        if key.is_type_variable:
            return self.get_codec(key.substitute({}))

        factory = self._find_factory(key.raw_type)
        if factory is not None:
            return factory(key, self)

        descriptor = self._introspector.describe(key.raw_type)
        if isinstance(descriptor, OpaqueDescriptor):
            reason = f": {descriptor.reason}" if descriptor.reason else ""
            raise UnsupportedTypeError(
                f"No codec for {key}{reason}; register a custom codec for it"
            )
        builder = self._builders.get(descriptor.kind)
        if builder is None:
            raise UnsupportedTypeError(f"No codec builder for {descriptor.kind!r} type {key}")
        return builder(key, descriptor)

    def _find_factory(self, raw_type: Any) -> CodecFactory | None:
        if not self._factories or not isinstance(raw_type, type):
            return None
        for klass in raw_type.__mro__:
            factory = self._factories.get(klass)
            if factory is not None:
                return factory
        return None

    # ── Builders ──────────────────────────────────────────────────

    def _bindings(self, key: TypeKey, descriptor: TypeDescriptor) -> dict[Any, TypeKey]:
        params = descriptor.type_parameters
        args = key.type_arguments
        if args and len(args) != len(params):
            raise UnsupportedTypeError(
                f"{key} has {len(args)} type arguments but "
                f"{key.raw_type!r} declares {len(params)} type parameters"
            )
        return dict(zip(params, args))

    def _nested(self, key: TypeKey, bindings: dict[Any, TypeKey]) -> Codec:
        return self.get_codec(key.substitute(bindings))

    def _build_atomic(self, key: TypeKey, descriptor: AtomicDescriptor) -> Codec:
        return AtomicCodec(descriptor.atom, key)

    def _build_object(self, key: TypeKey, descriptor: ComposableDescriptor) -> Codec:
        bindings = self._bindings(key, descriptor)
        properties = [
            (prop, self._nested(prop.value_type, bindings))
            for prop in descriptor.properties.values()
        ]
        return ObjectCodec(key, descriptor.constructor, properties, schema_type_name(key))

    def _build_collection(self, key: TypeKey, descriptor: CollectionDescriptor) -> Codec:
        bindings = self._bindings(key, descriptor)
        element = self._nested(descriptor.element, bindings)
        return CollectionCodec(key, element, descriptor.container)

    def _build_array(self, key: TypeKey, descriptor: ArrayDescriptor) -> Codec:
        bindings = self._bindings(key, descriptor)
        return CollectionCodec(key, self._nested(descriptor.element, bindings), tuple)

    def _build_map(self, key: TypeKey, descriptor: MapDescriptor) -> Codec:
        bindings = self._bindings(key, descriptor)
        return MapCodec(
            key,
            self._nested(descriptor.key, bindings),
            self._nested(descriptor.value, bindings),
            descriptor.container,
        )

    def _build_enum(self, key: TypeKey, descriptor: EnumDescriptor) -> Codec:
        return EnumCodec(key, descriptor.members, descriptor.labels)

    def _build_polymorphic(self, key: TypeKey, descriptor: PolymorphicDescriptor) -> Codec:
        subtypes = [
            (disc, sub_key, self.get_codec(sub_key))
            for disc, sub_key in descriptor.subtypes.items()
        ]
        return PolymorphicCodec(key, subtypes, schema_type_name(key))

    def __repr__(self) -> str:
        return (
            f"CodecRegistry(cached={len(self._cache)}, "
            f"derived={self._derivations}, factories={len(self._factories)})"
        )


def _as_key(key: Any) -> TypeKey:
    return key if isinstance(key, TypeKey) else TypeKey.of(key)
