"""Exception hierarchy for shapecodec."""

from __future__ import annotations


class ShapeCodecError(Exception):
    """Base exception for all shapecodec errors."""


class CodecError(ShapeCodecError):
    """A single value could not be encoded or decoded.

    ``path`` records where in the JSON document the failure happened,
    e.g. ``items[2].owner``. Empty for failures at the document root.
    """

    def __init__(self, message: str, path: str = '') -> None:
        self.message = message
        self.path = path
        super().__init__(f"{path}: {message}" if path else message)

    def at(self, segment: str) -> CodecError:
        """Return a copy of this error with ``segment`` prepended to the path."""
        if not self.path:
            path = segment
        elif self.path.startswith('['):
            path = f"{segment}{self.path}"
        else:
            path = f"{segment}.{self.path}"
        err = type(self).__new__(type(self))
        err.__dict__.update(self.__dict__)
        CodecError.__init__(err, self.message, path)
        err.__cause__ = self.__cause__
        return err


class DecodeError(CodecError):
    """JSON value could not be turned into a Python object."""


class EncodeError(CodecError):
    """Python object could not be written as a JSON value."""


class ConstructionError(DecodeError):
    """Invoking a type's constructor (or setter) failed during decoding."""

    def __init__(self, message: str, cause: BaseException | None = None, path: str = '') -> None:
        self.cause = cause
        super().__init__(message, path)


class UnsupportedTypeError(ShapeCodecError):
    """No codec can be built for a type."""


class CodecRegistrationError(ShapeCodecError):
    """Custom codec or factory registered too late or for the wrong type."""


class IntrospectionError(ShapeCodecError):
    """A type descriptor violates its structural invariants."""


class SchemaError(ShapeCodecError):
    """JSON-Schema generation failed."""


class ConfigError(ShapeCodecError):
    """Invalid configuration file or value."""
