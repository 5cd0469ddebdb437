"""Command-line interface for shapecodec.

Usage::

    shapecodec schema myapp.models:Person [--prefix P] [--config FILE] [--output FILE]
    shapecodec roundtrip myapp.models:Person person.json
    python -m shapecodec schema ...
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from .codec.custom import resolve_dotted
from .config import RegistrySettings, settings_from_config
from .exc import ConfigError, ShapeCodecError


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shapecodec",
        description="shapecodec CLI: JSON schemas and round trips for Python types.",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", default=False,
        help="Log codec derivation and schema extraction.",
    )
    sub = parser.add_subparsers(dest="command")

    schema = sub.add_parser(
        "schema",
        help="Print the JSON schema of a type and all schemas it references.",
    )
    schema.add_argument("type", help="Type to describe, as module:Name or module.Name")
    schema.add_argument("--prefix", help="$ref prefix (default: from config or #/components/schemas/)")
    schema.add_argument("--config", help="Registry config file (.json, .toml, .yaml)")
    schema.add_argument("--output", help="Write the schema document to this file instead of stdout")

    roundtrip = sub.add_parser(
        "roundtrip",
        help="Decode a JSON file as a type and print its re-encoded form.",
    )
    roundtrip.add_argument("type", help="Type to decode, as module:Name or module.Name")
    roundtrip.add_argument("file", help="JSON document to decode")
    roundtrip.add_argument("--config", help="Registry config file (.json, .toml, .yaml)")

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    try:
        settings = settings_from_config(args.config) if args.config else RegistrySettings.from_env()
        target = resolve_dotted(args.type)
    except (ConfigError, FileNotFoundError, ImportError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    if args.command == "schema":
        return _cmd_schema(args, settings, target)
    if args.command == "roundtrip":
        return _cmd_roundtrip(args, settings, target)
    return 0


def _cmd_schema(args: argparse.Namespace, settings: RegistrySettings, target: object) -> int:
    if args.prefix is not None:
        settings.schema_prefix = args.prefix
    try:
        registry = settings.build_registry()
        collector = settings.collector(registry)
        root = collector.generate_schema(target)
    except ShapeCodecError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    document = json.dumps({"root": root, "schemas": collector.collected_schemas}, indent=2)
    if args.output:
        Path(args.output).write_text(document + "\n")
        print(f"  wrote {args.output}")
    else:
        print(document)
    return 0


def _cmd_roundtrip(args: argparse.Namespace, settings: RegistrySettings, target: object) -> int:
    try:
        with open(args.file, encoding='utf-8') as f:
            value = json.load(f)
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
        print(f"error: cannot read {args.file}: {e}", file=sys.stderr)
        return 1

    try:
        codec = settings.build_registry().get_codec(target)
        obj = codec.decode(value)
        encoded = codec.encode(obj)
    except ShapeCodecError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    print(json.dumps(encoded, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
