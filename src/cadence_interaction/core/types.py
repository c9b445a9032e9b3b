"""
Type descriptor builder: syntax tree type nodes -> CadenceType.

Arrays, dictionaries and optionals are handled structurally. Every other
type is looked up by its rendered name in a fixed table; names that are
not in the table classify as UNKNOWN.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Mapping

from .models import ArrayType, CadenceType, CadenceTypeKind, DictionaryType, UNBOUNDED_SIZE
from ..syntax import nodes

logger = logging.getLogger(__name__)

_INT_SIZES = ("8", "16", "32", "64", "128", "256")

KIND_GROUPS: dict[CadenceTypeKind, tuple[str, ...]] = {
    CadenceTypeKind.ADDRESS: ("Address",),
    CadenceTypeKind.BOOLEAN: ("Bool",),
    CadenceTypeKind.TEXTUAL: (
        "String", "Character", "Bytes",
        "Path", "CapabilityPath", "StoragePath", "PublicPath", "PrivatePath",
    ),
    CadenceTypeKind.NUMERIC: (
        "Number", "SignedNumber", "Integer", "SignedInteger", "FixedPoint", "SignedFixedPoint",
        "Int", *(f"Int{s}" for s in _INT_SIZES),
        "UInt", *(f"UInt{s}" for s in _INT_SIZES),
        *(f"Word{s}" for s in _INT_SIZES),
        "Fix64", "UFix64",
    ),
}

# Legacy table: UFix64 spelled UFIx64, no Word types.
LEGACY_KIND_GROUPS: dict[CadenceTypeKind, tuple[str, ...]] = {
    **KIND_GROUPS,
    CadenceTypeKind.NUMERIC: tuple(
        "UFIx64" if name == "UFix64" else name
        for name in KIND_GROUPS[CadenceTypeKind.NUMERIC]
        if not name.startswith("Word")
    ),
}

_REQUIRED_NAMES = ("Address", "Bool", "String", "Int")


def build_kind_table(
    groups: Mapping[CadenceTypeKind, tuple[str, ...]],
    required: tuple[str, ...] = _REQUIRED_NAMES,
) -> Mapping[str, CadenceTypeKind]:
    """Flatten kind groups into a read-only name -> kind mapping.

    Raises ValueError if a name is listed more than once or a required
    name is missing.
    """
    table: dict[str, CadenceTypeKind] = {}
    for kind, names in groups.items():
        for name in names:
            if name in table:
                raise ValueError(f"type name {name!r} listed under both {table[name].name} and {kind.name}")
            table[name] = kind
    missing = [name for name in required if name not in table]
    if missing:
        raise ValueError(f"type table is missing {', '.join(missing)}")
    return MappingProxyType(table)


TYPE_KINDS = build_kind_table(KIND_GROUPS, _REQUIRED_NAMES + ("UFix64",))
LEGACY_TYPE_KINDS = build_kind_table(LEGACY_KIND_GROUPS)


def named_type_kind(name: str, table: Mapping[str, CadenceTypeKind] = TYPE_KINDS) -> CadenceTypeKind:
    return table.get(name, CadenceTypeKind.UNKNOWN)


def build_cadence_type(
    node: nodes.Type,
    table: Mapping[str, CadenceTypeKind] = TYPE_KINDS,
) -> CadenceType:
    """Classify one type node, recursing into optionals, arrays and dictionaries."""
    raw_type = str(node)

    if isinstance(node, nodes.OptionalType):
        nested = build_cadence_type(node.type, table)
        return CadenceType(
            kind=nested.kind,
            raw_type=nested.raw_type,
            optional=True,
            array_type=nested.array_type,
            dictionary_type=nested.dictionary_type,
        )
    elif isinstance(node, nodes.VariableSizedType):
        return CadenceType(
            kind=CadenceTypeKind.ARRAY,
            raw_type=raw_type,
            array_type=ArrayType(element=build_cadence_type(node.type, table), size=UNBOUNDED_SIZE),
        )
    elif isinstance(node, nodes.ConstantSizedType):
        return CadenceType(
            kind=CadenceTypeKind.ARRAY,
            raw_type=raw_type,
            array_type=ArrayType(element=build_cadence_type(node.type, table), size=node.size),
        )
    elif isinstance(node, nodes.DictionaryType):
        return CadenceType(
            kind=CadenceTypeKind.DICTIONARY,
            raw_type=raw_type,
            dictionary_type=DictionaryType(
                key=build_cadence_type(node.key_type, table),
                value=build_cadence_type(node.value_type, table),
            ),
        )

    kind = named_type_kind(raw_type, table)
    if kind == CadenceTypeKind.UNKNOWN:
        logger.debug("no classification for type %r", raw_type)
    return CadenceType(kind=kind, raw_type=raw_type)
