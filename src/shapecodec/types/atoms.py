"""Atomic JSON scalar types and their registry."""

from __future__ import annotations

import dataclasses
import enum


class AtomicKind(enum.Enum):
    """The primitive scalar kinds the codec layer understands natively."""
    STRING = 'string'
    INT = 'int'
    LONG = 'long'
    DOUBLE = 'double'
    BOOL = 'bool'


@dataclasses.dataclass(frozen=True, slots=True)
class AtomicType:
    """Describes an atomic scalar for use in ``Annotated`` property hints.

    Parameters
    ----------
    kind : AtomicKind
        Which primitive this is.
    python_type : type
        The canonical Python type used to represent values.
    json_type : str
        JSON-Schema ``type`` keyword.
    format : str | None
        JSON-Schema ``format`` keyword, if any.
    """
    kind: AtomicKind
    python_type: type
    json_type: str
    format: str | None = None

    @property
    def name(self) -> str:
        return self.kind.value


# ── Registry ──────────────────────────────────────────────────────
_REGISTRY_BY_KIND: dict[AtomicKind, AtomicType] = {}


def register_atom(atom: AtomicType) -> AtomicType:
    """Register an AtomicType in the fixed atom table."""
    _REGISTRY_BY_KIND[atom.kind] = atom
    return atom


def get_atom(kind: AtomicKind | str) -> AtomicType:
    """Look up an AtomicType by its kind."""
    return _REGISTRY_BY_KIND[AtomicKind(kind)]


def all_atoms() -> list[AtomicType]:
    """Return all registered atoms."""
    return list(_REGISTRY_BY_KIND.values())


atom_string = register_atom(AtomicType(
    kind=AtomicKind.STRING, python_type=str, json_type='string',
))

atom_int = register_atom(AtomicType(
    kind=AtomicKind.INT, python_type=int, json_type='integer', format='int32',
))

atom_long = register_atom(AtomicType(
    kind=AtomicKind.LONG, python_type=int, json_type='integer', format='int64',
))

atom_double = register_atom(AtomicType(
    kind=AtomicKind.DOUBLE, python_type=float, json_type='number', format='double',
))

atom_bool = register_atom(AtomicType(
    kind=AtomicKind.BOOL, python_type=bool, json_type='boolean',
))


# Plain Python types that map to an atom without an explicit annotation
PYTHON_TO_ATOM: dict[type, AtomicType] = {
    str: atom_string,
    int: atom_long,
    float: atom_double,
    bool: atom_bool,
}
