"""Unit tests for the codec registry."""

import threading
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

import pytest

from shapecodec import (
    CodecRegistry, CodecReference, ObjectCodec, TypeKey,
)
from shapecodec.codec import AtomicCodec, Codec
from shapecodec.exc import CodecRegistrationError, UnsupportedTypeError
from shapecodec.introspect import CachingIntrospector, ReflectionIntrospector
from shapecodec.types import OpaqueDescriptor, atom_string

T = TypeVar('T')


@dataclass
class Person:
    name: str


@dataclass
class Node:
    value: int
    next: Optional["Node"] = None


@dataclass
class Tree:
    children: "list[Tree]"


@dataclass
class Left:
    right: Optional["Right"] = None


@dataclass
class Right:
    left: Optional[Left] = None


class Opaque:
    def __init__(self, handle):
        self.handle = handle


@dataclass
class HoldsOpaque:
    person: Person
    thing: Opaque


@dataclass
class Wrapper(Generic[T]):
    value: T


class Amount(Generic[T]):
    def __init__(self, quantity: int, token: T) -> None:
        self.quantity = quantity
        self.token = token


@dataclass
class Hub:
    spoke: Optional["Spoke"] = None
    leaf: Optional["Leaf"] = None


@dataclass
class Spoke:
    hub: Optional[Hub] = None


@dataclass
class Leaf:
    label: str = ""


class GatedIntrospector:
    """Blocks while describing Leaf until released."""

    def __init__(self, fail=False):
        self.entered = threading.Event()
        self.release = threading.Event()
        self.fail = fail
        self._reflect = ReflectionIntrospector()

    def describe(self, raw_type):
        if raw_type is Leaf:
            self.entered.set()
            self.release.wait(5)
            if self.fail:
                return OpaqueDescriptor("leaf unavailable")
        return self._reflect.describe(raw_type)


class UpperCodec(Codec):
    key = TypeKey(str)

    def encode(self, obj):
        return obj.upper()

    def decode(self, value):
        return value.lower()

    def generate_schema(self, collector):
        return {"type": "string"}


class TestCaching:
    def test_same_key_same_codec(self, registry):
        assert registry.get_codec(list[Person]) is registry.get_codec(list[Person])
        assert registry.get_codec(TypeKey.of(list[Person])) is registry.get_codec(list[Person])

    def test_nested_codecs_shared(self, registry):
        list_codec = registry.get_codec(list[Person])
        assert list_codec.element is registry.get_codec(Person)

    def test_derivation_count(self, registry):
        registry.get_codec(Person)
        after_first = registry.derivation_count
        registry.get_codec(Person)
        assert registry.derivation_count == after_first
        registry.get_codec(list[Person])
        assert registry.derivation_count == after_first + 1

    def test_custom_codecs_not_counted(self, registry):
        assert registry.derivation_count == 0
        assert TypeKey(object) in registry

    def test_concurrent_first_access(self):
        registry = CodecRegistry()
        barrier = threading.Barrier(10)
        results = []

        def worker():
            barrier.wait()
            results.append(registry.get_codec(dict[str, list[Person]]))

        threads = [threading.Thread(target=worker) for _ in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert all(r is results[0] for r in results)
        # dict[str, list[Person]], str, list[Person], Person
        assert registry.derivation_count == 4


class TestRecursion:
    def test_self_reference(self, registry):
        codec = registry.get_codec(Node)
        data = {"value": 1, "next": {"value": 2}}
        node = codec.decode(data)
        assert node == Node(1, Node(2))
        assert codec.encode(node) == data

    def test_pending_reference_bound(self, registry):
        codec = registry.get_codec(Node)
        next_codec = dict((p.name, c) for p, c in codec._properties)["next"]
        assert isinstance(next_codec, CodecReference)
        assert next_codec.bound
        assert next_codec.resolve() is codec
        assert TypeKey(Node) in registry

    def test_recursive_collection(self, registry):
        codec = registry.get_codec(Tree)
        tree = codec.decode({"children": [{"children": []}]})
        assert tree == Tree([Tree([])])

    def test_mutual_recursion(self, registry):
        codec = registry.get_codec(Left)
        assert codec.decode({"right": {"left": {}}}) == Left(Right(Left()))

    def test_only_real_codecs_cached(self, registry):
        registry.get_codec(Left)
        assert isinstance(registry.get_codec(Right), ObjectCodec)
        assert isinstance(registry.get_codec(Left), ObjectCodec)


class TestCustomRegistration:
    def test_custom_overrides_derivation(self):
        registry = CodecRegistry()
        registry.register_custom(str, UpperCodec())
        assert registry.get_codec(list[str]).encode(["a"]) == ["A"]

    def test_late_registration_rejected(self, registry):
        registry.get_codec(Person)
        with pytest.raises(CodecRegistrationError, match="already in use"):
            registry.register_custom(Person, UpperCodec())

    def test_duplicate_registration_rejected(self, registry):
        with pytest.raises(CodecRegistrationError):
            registry.register_custom(TypeKey(object), UpperCodec())

    def test_custom_serves_parameterizations(self, registry):
        custom = UpperCodec()
        registry.register_custom(Wrapper, custom)
        assert registry.get_codec(Wrapper[int]) is custom

    def test_opaque_without_custom(self, registry):
        with pytest.raises(UnsupportedTypeError, match="register a custom codec"):
            registry.get_codec(Opaque)

    def test_opaque_with_custom(self, registry):
        registry.register_custom(Opaque, UpperCodec())
        assert isinstance(registry.get_codec(HoldsOpaque), ObjectCodec)

    def test_failed_derivation_not_cached(self, registry):
        with pytest.raises(UnsupportedTypeError):
            registry.get_codec(HoldsOpaque)
        assert TypeKey(HoldsOpaque) not in registry
        assert TypeKey(Person) not in registry
        registry.register_custom(Opaque, UpperCodec())
        assert isinstance(registry.get_codec(HoldsOpaque), ObjectCodec)


class TestFactories:
    def test_factory_sees_type_arguments(self, registry):
        seen = []

        def factory(key, reg):
            seen.append(key)
            return reg.get_codec(TypeKey(atom_string))

        registry.register_factory(Amount, factory)
        registry.get_codec(Amount[str])
        registry.get_codec(Amount[int])
        registry.get_codec(Amount[str])
        assert seen == [TypeKey.of(Amount[str]), TypeKey.of(Amount[int])]

    def test_factory_covers_subclasses(self, registry):
        class Sub(Amount):
            pass

        registry.register_factory(Amount, lambda key, reg: AtomicCodec(atom_string, key))
        assert registry.get_codec(Sub).key == TypeKey(Sub)

    def test_factory_requires_class(self, registry):
        with pytest.raises(CodecRegistrationError, match="keyed by class"):
            registry.register_factory(TypeKey(Amount), lambda key, reg: None)

    def test_late_factory_rejected(self, registry):
        registry.get_codec(Amount[str])
        with pytest.raises(CodecRegistrationError, match="already in use"):
            registry.register_factory(Amount, lambda key, reg: None)

    def test_derived_generic_without_factory(self, registry):
        codec = registry.get_codec(Amount[str])
        amount = codec.decode({"quantity": 3, "token": "x"})
        assert (amount.quantity, amount.token) == (3, "x")
        with pytest.raises(UnsupportedTypeError, match="type arguments"):
            registry.get_codec(TypeKey(Amount, (TypeKey(str), TypeKey(int))))


class TestRawTypes:
    def test_type_is_raw_by_default(self, registry):
        assert registry.get_codec(type[Person]) is registry.get_codec(type)
        assert type in registry.raw_types

    def test_added_raw_type(self, registry):
        registry.add_raw_type(Wrapper)
        assert registry.get_codec(Wrapper[int]) is registry.get_codec(Wrapper)


class TestIntrospectorInjection:
    def test_custom_introspector(self):
        class Everything:
            def describe(self, raw_type):
                return OpaqueDescriptor("nothing is known")

        registry = CodecRegistry(Everything(), builtins=False)
        with pytest.raises(UnsupportedTypeError, match="nothing is known"):
            registry.get_codec(Person)

    def test_default_introspector_caches(self, registry):
        assert isinstance(registry.introspector, CachingIntrospector)
        assert isinstance(registry.introspector.delegate, ReflectionIntrospector)

    def test_repr(self, registry):
        registry.get_codec(Person)
        assert "derived=2" in repr(registry)


class TestConcurrentDerivation:
    def test_partial_codecs_not_visible(self):
        introspector = GatedIntrospector()
        registry = CodecRegistry(introspector)
        results = []
        deriving = threading.Thread(target=lambda: registry.get_codec(Hub))
        deriving.start()
        assert introspector.entered.wait(5)

        assert TypeKey(Spoke) not in registry
        reader = threading.Thread(target=lambda: results.append(registry.get_codec(Spoke)))
        reader.start()
        reader.join(0.2)
        assert reader.is_alive()

        introspector.release.set()
        deriving.join(5)
        reader.join(5)
        spoke = results[0]
        assert spoke is registry.get_codec(Spoke)
        assert spoke.encode(Spoke(hub=Hub())) == {"hub": {}}

    def test_failed_derivation_publishes_nothing(self):
        introspector = GatedIntrospector(fail=True)
        registry = CodecRegistry(introspector)
        errors = []

        def derive():
            try:
                registry.get_codec(Hub)
            except UnsupportedTypeError as e:
                errors.append(e)

        deriving = threading.Thread(target=derive)
        deriving.start()
        assert introspector.entered.wait(5)
        assert TypeKey(Spoke) not in registry
        introspector.release.set()
        deriving.join(5)

        assert len(errors) == 1
        assert "leaf unavailable" in str(errors[0])
        assert TypeKey(Spoke) not in registry
        assert TypeKey(Hub) not in registry

        introspector.fail = False
        spoke = registry.get_codec(Spoke)
        assert spoke is registry.get_codec(Spoke)
        assert registry.get_codec(Hub).encode(Hub(leaf=Leaf("x"))) == {"leaf": {"label": "x"}}
