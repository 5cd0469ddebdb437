"""Unit tests for the command-line interface."""

import json
from dataclasses import dataclass
from typing import Optional

import pytest

from shapecodec.cli import main


@dataclass
class Person:
    name: str
    age: Optional[int] = None


@dataclass
class Crowd:
    people: list[Person]


PERSON = f"{__name__}:Person"


class TestSchemaCommand:
    def test_prints_root_and_schemas(self, capsys):
        assert main(["schema", f"{__name__}:Crowd"]) == 0
        document = json.loads(capsys.readouterr().out)
        assert document["root"] == {"$ref": "#/components/schemas/Crowd"}
        assert sorted(document["schemas"]) == ["Crowd", "Person"]

    def test_prefix(self, capsys):
        assert main(["schema", PERSON, "--prefix", "#/definitions/"]) == 0
        document = json.loads(capsys.readouterr().out)
        assert document["root"] == {"$ref": "#/definitions/Person"}

    def test_config_prefix(self, tmp_path, capsys):
        config = tmp_path / "shapecodec.json"
        config.write_text(json.dumps({"schema_prefix": "#/defs/"}))
        assert main(["schema", PERSON, "--config", str(config)]) == 0
        assert json.loads(capsys.readouterr().out)["root"] == {"$ref": "#/defs/Person"}

    def test_output_file(self, tmp_path, capsys):
        out = tmp_path / "schema.json"
        assert main(["schema", PERSON, "--output", str(out)]) == 0
        assert "wrote" in capsys.readouterr().out
        assert json.loads(out.read_text())["schemas"]["Person"]["required"] == ["name"]

    def test_dotted_type_name(self, capsys):
        assert main(["schema", "uuid.UUID"]) == 0
        assert json.loads(capsys.readouterr().out)["root"] == {"type": "string", "format": "uuid"}

    def test_unknown_type(self, capsys):
        assert main(["schema", "no_such_module:Thing"]) == 1
        assert "error:" in capsys.readouterr().err

    def test_unsupported_type(self, capsys):
        assert main(["schema", "threading:Lock"]) == 1
        assert "error:" in capsys.readouterr().err


class TestRoundtripCommand:
    def test_round_trip(self, tmp_path, capsys):
        f = tmp_path / "person.json"
        f.write_text(json.dumps({"name": "Ann", "age": None, "extra": 1}))
        assert main(["roundtrip", PERSON, str(f)]) == 0
        assert json.loads(capsys.readouterr().out) == {"name": "Ann"}

    def test_decode_error_exit_code(self, tmp_path, capsys):
        f = tmp_path / "person.json"
        f.write_text(json.dumps({"age": 3}))
        assert main(["roundtrip", PERSON, str(f)]) == 1
        assert "missing mandatory field name" in capsys.readouterr().err

    def test_unreadable_file(self, tmp_path, capsys):
        assert main(["roundtrip", PERSON, str(tmp_path / "missing.json")]) == 1
        assert "cannot read" in capsys.readouterr().err

    def test_undecodable_file(self, tmp_path, capsys):
        f = tmp_path / "person.json"
        f.write_bytes(b'{"name": "\xff"}')
        assert main(["roundtrip", PERSON, str(f)]) == 1
        assert "cannot read" in capsys.readouterr().err


class TestParser:
    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1
        assert "usage" in capsys.readouterr().out

    def test_missing_argument(self):
        with pytest.raises(SystemExit):
            main(["schema"])
