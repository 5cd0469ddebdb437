"""Load registry settings from YAML, TOML, or JSON files."""

from __future__ import annotations

import dataclasses
import json
import os
from pathlib import Path
from typing import Any

from .codec.custom import register_builtin_codecs, resolve_dotted
from .exc import ConfigError
from .registry import CodecRegistry
from .schema import DEFAULT_PREFIX, SchemaCollector
from .types.key import TypeKey


def load_config(path: str | Path) -> dict[str, Any]:
    """Load a configuration dict from a file, dispatched by extension.

    Supported extensions: ``.json``, ``.toml``, ``.yaml`` / ``.yml``.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    suffix = path.suffix.lower()

    if suffix == '.json':
        with open(path) as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigError(f"Invalid JSON in {path}: {e}") from e
    elif suffix == '.toml':
        data = _load_toml(path)
    elif suffix in ('.yaml', '.yml'):
        data = _load_yaml(path)
    else:
        raise ConfigError(
            f"Unsupported config file extension {suffix!r}. "
            "Use .json, .toml, .yaml, or .yml."
        )

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping at the top level")
    return data


@dataclasses.dataclass
class RegistrySettings:
    """Settings for building a :class:`CodecRegistry` and its collectors.

    Attributes
    ----------
    schema_prefix : str
        ``$ref`` prefix used by schema collectors.
    raw_types : list[str]
        Dotted names of extra always-raw types.
    custom_codecs : dict[str, str]
        Dotted type name to dotted name of a zero-argument callable (often a
        codec class) producing its codec.
    """
    schema_prefix: str = DEFAULT_PREFIX
    raw_types: list[str] = dataclasses.field(default_factory=list)
    custom_codecs: dict[str, str] = dataclasses.field(default_factory=dict)

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> RegistrySettings:
        """Build settings from a config dict, rejecting unknown keys::

            RegistrySettings.from_config({
                "schema_prefix": "#/definitions/",
                "raw_types": ["myapp.money.Amount"],
                "custom_codecs": {"myapp.money.Money": "myapp.codecs.MoneyCodec"},
            })
        """
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(config) - known)
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(unknown)}")

        prefix = config.get('schema_prefix', DEFAULT_PREFIX)
        if not isinstance(prefix, str):
            raise ConfigError("schema_prefix must be a string")
        raw_types = config.get('raw_types', [])
        if not isinstance(raw_types, list) or not all(isinstance(r, str) for r in raw_types):
            raise ConfigError("raw_types must be a list of dotted names")
        customs = config.get('custom_codecs', {})
        if not isinstance(customs, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in customs.items()
        ):
            raise ConfigError("custom_codecs must map dotted type names to dotted codec names")
        return cls(schema_prefix=prefix, raw_types=list(raw_types), custom_codecs=dict(customs))

    @classmethod
    def from_env(cls, prefix: str = "SHAPECODEC") -> RegistrySettings:
        """Build settings from environment variables.

        Reads ``{PREFIX}_SCHEMA_PREFIX``::

            # SHAPECODEC_SCHEMA_PREFIX=#/definitions/
            RegistrySettings.from_env()
        """
        return cls(schema_prefix=os.environ.get(f"{prefix}_SCHEMA_PREFIX", DEFAULT_PREFIX))

    def build_registry(self) -> CodecRegistry:
        """Create a registry with these settings applied.

        Configured custom codecs take precedence over the built-in ones.
        """
        registry = CodecRegistry(builtins=False)
        for name in self.raw_types:
            registry.add_raw_type(_resolve(name, "raw type"))
        for type_name, codec_name in self.custom_codecs.items():
            raw_type = _resolve(type_name, "type")
            make_codec = _resolve(codec_name, "codec")
            if not callable(make_codec):
                raise ConfigError(f"Codec {codec_name!r} is not callable")
            registry.register_custom(TypeKey(raw_type), make_codec())
        register_builtin_codecs(registry)
        return registry

    def collector(self, registry: CodecRegistry) -> SchemaCollector:
        return SchemaCollector(registry, prefix=self.schema_prefix)


def settings_from_config(path: str | Path) -> RegistrySettings:
    """Load :class:`RegistrySettings` from a config file."""
    return RegistrySettings.from_config(load_config(path))


def registry_from_config(path: str | Path) -> CodecRegistry:
    """Load a configured :class:`CodecRegistry` from a config file."""
    return settings_from_config(path).build_registry()


def _resolve(name: str, what: str) -> Any:
    try:
        return resolve_dotted(name)
    except ValueError as e:
        raise ConfigError(f"Cannot resolve {what} {name!r}: {e}") from e


# ── Internal loaders ─────────────────────────────────────────────

def _load_toml(path: Path) -> dict[str, Any]:
    """Load TOML using ``tomllib`` (3.11+) or ``tomli``."""
    try:
        import tomllib  # type: ignore[import-not-found]
    except ModuleNotFoundError:
        try:
            import tomli as tomllib  # type: ignore[no-redef]
        except ModuleNotFoundError:
            raise ImportError(
                "TOML support requires Python 3.11+ (built-in tomllib) "
                "or the 'tomli' package. Install with: pip install shapecodec[toml]"
            )
    with open(path, 'rb') as f:
        try:
            return tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML in {path}: {e}") from e


def _load_yaml(path: Path) -> dict[str, Any]:
    """Load YAML using ``pyyaml``."""
    try:
        import yaml
    except ModuleNotFoundError:
        raise ImportError(
            "YAML support requires the 'pyyaml' package. "
            "Install with: pip install shapecodec[yaml]"
        )
    with open(path) as f:
        try:
            return yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e
