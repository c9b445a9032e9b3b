"""
Domain models for classified interactions.

Pure dataclasses. JSON field names and integer enum values match what
existing consumers of interaction responses read.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Optional


class InteractionKind(IntEnum):
    UNKNOWN = 0
    SCRIPT = 1
    TRANSACTION = 2


class CadenceTypeKind(IntEnum):
    UNKNOWN = 0
    NUMERIC = 1
    TEXTUAL = 2
    BOOLEAN = 3
    ADDRESS = 4
    ARRAY = 5
    DICTIONARY = 6


UNBOUNDED_SIZE = -1


@dataclass(frozen=True)
class ArrayType:
    """Element type and size of an array. Size is -1 for variable-sized arrays."""
    element: CadenceType
    size: int = UNBOUNDED_SIZE

    def to_dict(self) -> dict[str, Any]:
        return {"Element": self.element.to_dict(), "Size": self.size}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ArrayType":
        return cls(element=CadenceType.from_dict(data["Element"]), size=int(data["Size"]))


@dataclass(frozen=True)
class DictionaryType:
    key: CadenceType
    value: CadenceType

    def to_dict(self) -> dict[str, Any]:
        return {"Key": self.key.to_dict(), "Value": self.value.to_dict()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DictionaryType":
        return cls(key=CadenceType.from_dict(data["Key"]), value=CadenceType.from_dict(data["Value"]))


@dataclass(frozen=True)
class CadenceType:
    """Classified type of one declared parameter.

    array_type is set only for ARRAY kinds and dictionary_type only for
    DICTIONARY kinds. Optionality is a flag on the type itself rather than
    a wrapper around it.
    """
    kind: CadenceTypeKind = CadenceTypeKind.UNKNOWN
    raw_type: str = ""
    optional: bool = False
    array_type: Optional[ArrayType] = None
    dictionary_type: Optional[DictionaryType] = None

    def __post_init__(self):
        if (self.array_type is not None) != (self.kind == CadenceTypeKind.ARRAY):
            raise ValueError(f"array_type must be set iff kind is ARRAY (kind={self.kind.name})")
        if (self.dictionary_type is not None) != (self.kind == CadenceTypeKind.DICTIONARY):
            raise ValueError(f"dictionary_type must be set iff kind is DICTIONARY (kind={self.kind.name})")

    def to_dict(self) -> dict[str, Any]:
        return {
            "Kind": int(self.kind),
            "RawType": self.raw_type,
            "Optional": self.optional,
            "ArrayType": self.array_type.to_dict() if self.array_type else None,
            "DictionaryType": self.dictionary_type.to_dict() if self.dictionary_type else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CadenceType":
        array_type = data.get("ArrayType")
        dictionary_type = data.get("DictionaryType")
        return cls(
            kind=CadenceTypeKind(data.get("Kind", 0)),
            raw_type=data.get("RawType", ""),
            optional=bool(data.get("Optional", False)),
            array_type=ArrayType.from_dict(array_type) if array_type else None,
            dictionary_type=DictionaryType.from_dict(dictionary_type) if dictionary_type else None,
        )


@dataclass(frozen=True)
class Interaction:
    """The entry point a program declares and the types of its parameters."""
    kind: InteractionKind = InteractionKind.UNKNOWN
    parameters: tuple[CadenceType, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {"Kind": int(self.kind), "Parameters": [p.to_dict() for p in self.parameters]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Interaction":
        return cls(
            kind=InteractionKind(data.get("Kind", 0)),
            parameters=tuple(CadenceType.from_dict(p) for p in data.get("Parameters") or []),
        )
