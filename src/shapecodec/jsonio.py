"""Text I/O helpers pairing codecs with the ``json`` module."""

from __future__ import annotations

import json
from typing import Any

from .codec.base import Codec
from .exc import DecodeError


def dumps(codec: Codec, obj: Any, **kwargs: Any) -> str:
    """Encode ``obj`` with ``codec`` and serialize it to JSON text.

    Extra keyword arguments are passed to :func:`json.dumps`.
    """
    return json.dumps(codec.encode(obj), **kwargs)


def loads(codec: Codec, text: str | bytes) -> Any:
    """Parse JSON text and decode it with ``codec``.

    Raises
    ------
    DecodeError
        If the text is not valid JSON or does not match the codec.
    """
    try:
        value = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DecodeError(f"invalid JSON: {e}") from e
    return codec.decode(value)
