"""
Syntax tree for Cadence programs.

Pure dataclasses produced by the parser. Each node knows how to render
itself as JSON (the "program" field of a response) and type nodes render
back to their Cadence source form via str().
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class Position:
    """A point in the source. Line is 1-based, column is 0-based."""
    offset: int = 0
    line: int = 0
    column: int = 0

    def to_dict(self) -> dict[str, int]:
        return {"Offset": self.offset, "Line": self.line, "Column": self.column}


@dataclass
class Node:
    """Common base: every node spans a range of the source."""
    start_pos: Position = field(default_factory=Position)
    end_pos: Position = field(default_factory=Position)

    def _span(self) -> dict[str, Any]:
        return {"StartPos": self.start_pos.to_dict(), "EndPos": self.end_pos.to_dict()}

    def to_dict(self) -> dict[str, Any]:
        raise NotImplementedError


@dataclass
class Identifier:
    identifier: str = ""
    pos: Position = field(default_factory=Position)

    def __str__(self) -> str:
        return self.identifier

    def to_dict(self) -> dict[str, Any]:
        return {"Identifier": self.identifier, "Pos": self.pos.to_dict()}


# ── Types ──

@dataclass
class Type(Node):
    """Base of all type nodes."""


@dataclass
class NominalType(Type):
    """A possibly qualified type name, e.g. `Address` or `FungibleToken.Vault`."""
    identifier: Identifier = field(default_factory=Identifier)
    nested_identifiers: list[Identifier] = field(default_factory=list)

    def __str__(self) -> str:
        return ".".join([self.identifier.identifier] + [i.identifier for i in self.nested_identifiers])

    def to_dict(self) -> dict[str, Any]:
        return {
            "Type": "NominalType",
            "Identifier": self.identifier.to_dict(),
            "NestedIdentifiers": [i.to_dict() for i in self.nested_identifiers],
            **self._span(),
        }


@dataclass
class OptionalType(Type):
    type: Optional[Type] = None

    def __str__(self) -> str:
        return f"{self.type}?"

    def to_dict(self) -> dict[str, Any]:
        return {"Type": "OptionalType", "ElementType": self.type.to_dict(), **self._span()}


@dataclass
class VariableSizedType(Type):
    type: Optional[Type] = None

    def __str__(self) -> str:
        return f"[{self.type}]"

    def to_dict(self) -> dict[str, Any]:
        return {"Type": "VariableSizedType", "ElementType": self.type.to_dict(), **self._span()}


@dataclass
class ConstantSizedType(Type):
    """`[T; N]`. The size keeps the literal text for rendering and its value."""
    type: Optional[Type] = None
    size: int = 0
    size_literal: str = ""

    def __str__(self) -> str:
        return f"[{self.type}; {self.size_literal or self.size}]"

    def to_dict(self) -> dict[str, Any]:
        return {
            "Type": "ConstantSizedType",
            "ElementType": self.type.to_dict(),
            "Size": {"Type": "IntegerExpression", "Value": self.size, "Literal": self.size_literal},
            **self._span(),
        }


@dataclass
class DictionaryType(Type):
    key_type: Optional[Type] = None
    value_type: Optional[Type] = None

    def __str__(self) -> str:
        return f"{{{self.key_type}: {self.value_type}}}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "Type": "DictionaryType",
            "KeyType": self.key_type.to_dict(),
            "ValueType": self.value_type.to_dict(),
            **self._span(),
        }


@dataclass
class InstantiationType(Type):
    """A parameterized type, e.g. `Capability<&Vault>`."""
    type: Optional[Type] = None
    type_arguments: list[TypeAnnotation] = field(default_factory=list)

    def __str__(self) -> str:
        args = ", ".join(str(a) for a in self.type_arguments)
        return f"{self.type}<{args}>"

    def to_dict(self) -> dict[str, Any]:
        return {
            "Type": "InstantiationType",
            "InstantiatedType": self.type.to_dict(),
            "TypeArguments": [a.to_dict() for a in self.type_arguments],
            **self._span(),
        }


@dataclass
class ReferenceType(Type):
    authorized: bool = False
    entitlements: list[NominalType] = field(default_factory=list)
    type: Optional[Type] = None

    def __str__(self) -> str:
        if self.entitlements:
            auth = "auth(" + ", ".join(str(e) for e in self.entitlements) + ") "
        elif self.authorized:
            auth = "auth "
        else:
            auth = ""
        return f"{auth}&{self.type}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "Type": "ReferenceType",
            "Authorized": self.authorized,
            "Entitlements": [e.to_dict() for e in self.entitlements],
            "ReferencedType": self.type.to_dict(),
            **self._span(),
        }


@dataclass
class IntersectionType(Type):
    """`{I1, I2}`: a value conforming to all listed interfaces."""
    types: list[NominalType] = field(default_factory=list)

    def __str__(self) -> str:
        return "{" + ", ".join(str(t) for t in self.types) + "}"

    def to_dict(self) -> dict[str, Any]:
        return {"Type": "IntersectionType", "Types": [t.to_dict() for t in self.types], **self._span()}


@dataclass
class RestrictedType(Type):
    """`T{I1, I2}`: a `T` usable only through the listed interfaces."""
    type: Optional[NominalType] = None
    restrictions: list[NominalType] = field(default_factory=list)

    def __str__(self) -> str:
        return f"{self.type}{{" + ", ".join(str(r) for r in self.restrictions) + "}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "Type": "RestrictedType",
            "RestrictedType": self.type.to_dict(),
            "Restrictions": [r.to_dict() for r in self.restrictions],
            **self._span(),
        }


@dataclass
class FunctionType(Type):
    parameter_types: list[TypeAnnotation] = field(default_factory=list)
    return_type: Optional[TypeAnnotation] = None

    def __str__(self) -> str:
        params = ", ".join(str(p) for p in self.parameter_types)
        return f"fun({params}): {self.return_type}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "Type": "FunctionType",
            "ParameterTypeAnnotations": [p.to_dict() for p in self.parameter_types],
            "ReturnTypeAnnotation": self.return_type.to_dict() if self.return_type else None,
            **self._span(),
        }


@dataclass
class TypeAnnotation(Node):
    """A type in a declaration, with the `@` resource marker if present."""
    is_resource: bool = False
    type: Optional[Type] = None

    def __str__(self) -> str:
        return f"@{self.type}" if self.is_resource else str(self.type)

    def to_dict(self) -> dict[str, Any]:
        return {
            "IsResource": self.is_resource,
            "AnnotatedType": self.type.to_dict(),
            "StartPos": self.start_pos.to_dict(),
        }


# ── Declarations ──

@dataclass
class Parameter(Node):
    label: str = ""
    identifier: Identifier = field(default_factory=Identifier)
    type_annotation: TypeAnnotation = field(default_factory=TypeAnnotation)

    def to_dict(self) -> dict[str, Any]:
        return {
            "Label": self.label,
            "Identifier": self.identifier.to_dict(),
            "TypeAnnotation": self.type_annotation.to_dict(),
            **self._span(),
        }


@dataclass
class ParameterList(Node):
    parameters: list[Parameter] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"Parameters": [p.to_dict() for p in self.parameters], **self._span()}


@dataclass
class Block(Node):
    """A brace-delimited body. Its statements are kept as raw source text."""
    source: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"Type": "Block", "Source": self.source, **self._span()}


@dataclass
class Declaration(Node):
    """Base of all top-level declarations."""


@dataclass
class ImportDeclaration(Declaration):
    identifiers: list[Identifier] = field(default_factory=list)
    location: str = ""
    location_kind: str = "identifier"  # address, string, identifier

    def to_dict(self) -> dict[str, Any]:
        return {
            "Type": "ImportDeclaration",
            "Identifiers": [i.to_dict() for i in self.identifiers],
            "Location": {"Type": self.location_kind, "Value": self.location},
            **self._span(),
        }


@dataclass
class PragmaDeclaration(Declaration):
    name: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"Type": "PragmaDeclaration", "Name": self.name, **self._span()}


@dataclass
class FieldDeclaration(Declaration):
    access: str = ""
    variable_kind: str = "let"
    identifier: Identifier = field(default_factory=Identifier)
    type_annotation: TypeAnnotation = field(default_factory=TypeAnnotation)

    def to_dict(self) -> dict[str, Any]:
        return {
            "Type": "FieldDeclaration",
            "Access": self.access,
            "VariableKind": self.variable_kind,
            "Identifier": self.identifier.to_dict(),
            "TypeAnnotation": self.type_annotation.to_dict(),
            **self._span(),
        }


@dataclass
class FunctionDeclaration(Declaration):
    access: str = ""
    is_view: bool = False
    identifier: Identifier = field(default_factory=Identifier)
    parameter_list: ParameterList = field(default_factory=ParameterList)
    return_type: Optional[TypeAnnotation] = None
    body: Optional[Block] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "Type": "FunctionDeclaration",
            "Access": self.access,
            "Purity": "view" if self.is_view else "",
            "Identifier": self.identifier.to_dict(),
            "ParameterList": self.parameter_list.to_dict(),
            "ReturnTypeAnnotation": self.return_type.to_dict() if self.return_type else None,
            "FunctionBlock": self.body.to_dict() if self.body else None,
            **self._span(),
        }


@dataclass
class SpecialFunctionDeclaration(Declaration):
    """A transaction phase: prepare, pre, execute or post."""
    kind: str = ""
    parameter_list: Optional[ParameterList] = None
    body: Block = field(default_factory=Block)

    def to_dict(self) -> dict[str, Any]:
        return {
            "Type": "SpecialFunctionDeclaration",
            "Kind": self.kind,
            "ParameterList": self.parameter_list.to_dict() if self.parameter_list else None,
            "FunctionBlock": self.body.to_dict(),
            **self._span(),
        }


@dataclass
class TransactionDeclaration(Declaration):
    parameter_list: ParameterList = field(default_factory=ParameterList)
    fields: list[FieldDeclaration] = field(default_factory=list)
    prepare: Optional[SpecialFunctionDeclaration] = None
    pre_conditions: Optional[SpecialFunctionDeclaration] = None
    execute: Optional[SpecialFunctionDeclaration] = None
    post_conditions: Optional[SpecialFunctionDeclaration] = None

    def to_dict(self) -> dict[str, Any]:
        def opt(d: Optional[Node]) -> Optional[dict[str, Any]]:
            return d.to_dict() if d else None

        return {
            "Type": "TransactionDeclaration",
            "ParameterList": self.parameter_list.to_dict(),
            "Fields": [f.to_dict() for f in self.fields],
            "Prepare": opt(self.prepare),
            "PreConditions": opt(self.pre_conditions),
            "Execute": opt(self.execute),
            "PostConditions": opt(self.post_conditions),
            **self._span(),
        }


@dataclass
class CompositeDeclaration(Declaration):
    access: str = ""
    composite_kind: str = ""  # contract, resource, struct, enum
    is_interface: bool = False
    identifier: Identifier = field(default_factory=Identifier)
    conformances: list[NominalType] = field(default_factory=list)
    body: Block = field(default_factory=Block)

    def to_dict(self) -> dict[str, Any]:
        return {
            "Type": "InterfaceDeclaration" if self.is_interface else "CompositeDeclaration",
            "Access": self.access,
            "CompositeKind": self.composite_kind,
            "Identifier": self.identifier.to_dict(),
            "Conformances": [c.to_dict() for c in self.conformances],
            "Members": self.body.to_dict(),
            **self._span(),
        }


@dataclass
class EventDeclaration(Declaration):
    access: str = ""
    identifier: Identifier = field(default_factory=Identifier)
    parameter_list: ParameterList = field(default_factory=ParameterList)

    def to_dict(self) -> dict[str, Any]:
        return {
            "Type": "EventDeclaration",
            "Access": self.access,
            "Identifier": self.identifier.to_dict(),
            "ParameterList": self.parameter_list.to_dict(),
            **self._span(),
        }


@dataclass
class EntitlementDeclaration(Declaration):
    access: str = ""
    identifier: Identifier = field(default_factory=Identifier)

    def to_dict(self) -> dict[str, Any]:
        return {
            "Type": "EntitlementDeclaration",
            "Access": self.access,
            "Identifier": self.identifier.to_dict(),
            **self._span(),
        }


@dataclass
class Program:
    declarations: list[Declaration] = field(default_factory=list)

    def transaction_declarations(self) -> list[TransactionDeclaration]:
        return [d for d in self.declarations if isinstance(d, TransactionDeclaration)]

    def function_declarations(self) -> list[FunctionDeclaration]:
        return [d for d in self.declarations if isinstance(d, FunctionDeclaration)]

    def to_dict(self) -> dict[str, Any]:
        return {"Type": "Program", "Declarations": [d.to_dict() for d in self.declarations]}
