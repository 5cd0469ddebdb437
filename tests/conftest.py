"""Shared fixtures for shapecodec tests."""

from __future__ import annotations

import pytest

from shapecodec import CodecRegistry, SchemaCollector


@pytest.fixture
def registry() -> CodecRegistry:
    """A fresh registry with the built-in custom codecs."""
    return CodecRegistry()


@pytest.fixture
def collector(registry: CodecRegistry) -> SchemaCollector:
    """A schema collector over the ``registry`` fixture."""
    return SchemaCollector(registry)
