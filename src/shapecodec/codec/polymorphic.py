"""Polymorphic codec: a single-key object naming the concrete subtype."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Sequence

from ..exc import CodecError, DecodeError, EncodeError
from ..types.key import TypeKey
from .base import Codec, JsonValue, json_kind

if TYPE_CHECKING:
    from ..schema import SchemaCollector


class PolymorphicCodec(Codec):
    """Codec for a closed family of subtypes.

    An object is written as ``{discriminator: <subtype encoding>}``. On
    encode the first subtype (in registration order) the object is an
    instance of wins.
    """

    def __init__(
        self,
        key: TypeKey,
        subtypes: Sequence[tuple[str, TypeKey, Codec]],
        schema_name: str,
    ) -> None:
        self.key = key
        self.schema_name = schema_name
        self._subtypes = tuple(subtypes)
        self._by_discriminator = {disc: codec for disc, _, codec in self._subtypes}

    @property
    def discriminators(self) -> tuple[str, ...]:
        return tuple(self._by_discriminator)

    def encode(self, obj: Any) -> JsonValue:
        for disc, sub_key, codec in self._subtypes:
            if isinstance(obj, sub_key.raw_type):
                try:
                    return {disc: codec.encode(obj)}
                except CodecError as e:
                    raise e.at(disc) from e
        raise EncodeError(f"no mapping for concrete type {type(obj).__qualname__} in {self.key}")

    def decode(self, value: JsonValue) -> Any:
        if not isinstance(value, dict):
            raise DecodeError(f"expected object for {self.key}, got {json_kind(value)}")
        # Keys outside the discriminator set are ignored
        found = [k for k in value if k in self._by_discriminator]
        if len(found) != 1:
            raise DecodeError(
                f"ambiguous or missing discriminator for {self.key}; "
                f"expected exactly one of: {', '.join(self._by_discriminator)}"
            )
        disc = found[0]
        body = value[disc]
        codec = self._by_discriminator[disc]
        try:
            return codec.decode(body)
        except CodecError as e:
            raise e.at(disc) from e

    def generate_schema(self, collector: SchemaCollector) -> dict[str, Any]:
        return {
            'type': 'object',
            'properties': {
                disc: collector.schema_of(codec) for disc, _, codec in self._subtypes
            },
        }
