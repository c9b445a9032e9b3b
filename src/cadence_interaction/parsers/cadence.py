"""
Cadence parser using lark.

Parses declaration headers, parameter lists and the full type syntax.
Bodies of functions, composites and transaction phases are parsed as
balanced brace blocks and kept as raw text.

Only errors in declaration headers and unbalanced braces are reported.
Statements inside a body are never checked, so `execute { let x = ) }`
parses without error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from lark import Lark, Token, Transformer, v_args
from lark.exceptions import (
    UnexpectedCharacters,
    UnexpectedEOF,
    UnexpectedInput,
    UnexpectedToken,
    VisitError,
)

from .base import ParseResult, ProgramParser
from ..errors import CadenceSyntaxError
from ..syntax.nodes import (
    Block,
    CompositeDeclaration,
    ConstantSizedType,
    Declaration,
    DictionaryType,
    EntitlementDeclaration,
    EventDeclaration,
    FieldDeclaration,
    FunctionDeclaration,
    FunctionType,
    Identifier,
    ImportDeclaration,
    InstantiationType,
    IntersectionType,
    NominalType,
    OptionalType,
    Parameter,
    ParameterList,
    Position,
    PragmaDeclaration,
    Program,
    ReferenceType,
    RestrictedType,
    SpecialFunctionDeclaration,
    TransactionDeclaration,
    Type,
    TypeAnnotation,
    VariableSizedType,
)

logger = logging.getLogger(__name__)

CADENCE_GRAMMAR = r"""
start: _declaration*

type_expression: type_annotation

_declaration: import_declaration
            | pragma_declaration
            | transaction_declaration
            | function_declaration
            | composite_declaration
            | event_declaration
            | entitlement_declaration
            | ";"

// ── declarations ──

import_declaration: "import" import_names "from" import_location
                  | "import" import_location
import_names: NAME ("," NAME)*
import_location: HEX_ADDRESS  -> address_location
               | STRING       -> string_location
               | NAME         -> identifier_location

pragma_declaration: "#" NAME

transaction_declaration: "transaction" parameter_list? "{" _transaction_member* "}"
_transaction_member: field_declaration
                   | prepare_block
                   | pre_block
                   | execute_block
                   | post_block

field_declaration: access_modifier? variable_kind NAME ":" type_annotation
!variable_kind: "let" | "var"

prepare_block: "prepare" parameter_list block
pre_block: "pre" block
execute_block: "execute" block
post_block: "post" block

function_declaration: access_modifier? VIEW? "fun" NAME parameter_list (":" return_annotation)? block

composite_declaration: access_modifier? composite_kind INTERFACE? NAME conformances? block
!composite_kind: "contract" | "resource" | "struct" | "enum"
conformances: ":" nominal_type ("," nominal_type)*

event_declaration: access_modifier? "event" NAME parameter_list

entitlement_declaration: access_modifier? "entitlement" NAME

!access_modifier: "pub"
                | "priv"
                | "pub" "(" "set" ")"
                | "access" "(" NAME (("," | "|") NAME)* ")"

parameter_list: "(" (parameter ("," parameter)*)? ")"
parameter: NAME ":" type_annotation
         | NAME NAME ":" type_annotation       -> labeled_parameter

// Nested blocks get their own rule so the state after a body's closing
// brace only accepts what may follow a declaration, never BODY_TEXT.
block: "{" _block_item* "}"
_nested_block: "{" _block_item* "}"
_block_item: _nested_block
           | STRING
           | BODY_TEXT

// ── types ──

type_annotation: RESOURCE? type

?type: postfix_type
     | function_type

?postfix_type: primary_type
             | postfix_type "?"                          -> optional_type

?primary_type: nominal_type
             | instantiation_type
             | reference_type
             | nominal_type "{" (nominal_type ("," nominal_type)*)? "}"  -> restricted_type
             | "[" type "]"                              -> variable_sized_type
             | "[" type ";" INTEGER "]"                  -> constant_sized_type
             | "{" type ":" type "}"                     -> dictionary_type
             | "{" (nominal_type ("," nominal_type)*)? "}"  -> intersection_type
             | "(" type ")"

// A return type is followed by the function body, so its outermost type
// takes no restriction list: `{` there opens the body.
return_annotation: RESOURCE? return_type                 -> type_annotation

?return_type: return_postfix
            | "fun" "(" (type_annotation ("," type_annotation)*)? ")" ":" return_annotation  -> function_type

?return_postfix: return_primary
               | return_postfix "?"                      -> optional_type

?return_primary: nominal_type
               | instantiation_type
               | auth? "&" return_primary                -> reference_type
               | "[" type "]"                            -> variable_sized_type
               | "[" type ";" INTEGER "]"                -> constant_sized_type
               | "{" type ":" type "}"                   -> dictionary_type
               | "{" (nominal_type ("," nominal_type)*)? "}"  -> intersection_type
               | "(" type ")"

nominal_type: NAME ("." NAME)*
instantiation_type: nominal_type "<" (type_annotation ("," type_annotation)*)? ">"
reference_type: auth? "&" primary_type
auth: "auth" ("(" nominal_type (("," | "|") nominal_type)* ")")?
function_type: "fun" "(" (type_annotation ("," type_annotation)*)? ")" ":" type_annotation

// ── terminals ──

VIEW: "view"
INTERFACE: "interface"
RESOURCE: "@"

NAME: /[A-Za-z_][A-Za-z0-9_]*/
HEX_ADDRESS: /0x[0-9a-fA-F]+/
INTEGER: /0[xX][0-9a-fA-F_]+|0[bB][01_]+|0[oO][0-7_]+|[0-9][0-9_]*/
STRING: /"(\\.|[^"\\\n])*"/
BODY_TEXT: /[^{}"\/\s]+|\/(?![\/*])/

COMMENT: /\/\/[^\n]*/
BLOCK_COMMENT: /\/\*[\s\S]*?\*\//

%import common.WS
%ignore WS
%ignore COMMENT
%ignore BLOCK_COMMENT
"""

# Friendlier names for regex terminals in error messages
_TERMINAL_NAMES = {
    "NAME": "identifier",
    "HEX_ADDRESS": "address",
    "INTEGER": "integer literal",
    "STRING": "string literal",
    "BODY_TEXT": "statement",
    "$END": "end of program",
}


@dataclass
class _Keyword:
    """A keyword-ish rule result, tagged so declaration builders can find it."""
    kind: str
    value: str


def _position(offset: int, line: int, column: int) -> Position:
    # lark columns are 1-based
    return Position(offset=offset, line=line, column=column - 1)


def _token_position(token: Token) -> Position:
    return _position(token.start_pos, token.line, token.column)


def _identifier(token: Token) -> Identifier:
    return Identifier(identifier=str(token), pos=_token_position(token))


def _pick(children: list, kind: str) -> str:
    for c in children:
        if isinstance(c, _Keyword) and c.kind == kind:
            return c.value
    return ""


def _names(children: list) -> list[Token]:
    return [c for c in children if isinstance(c, Token) and c.type == "NAME"]


def parse_integer_literal(text: str) -> int:
    """Value of a Cadence integer literal: decimal, 0x, 0o or 0b, with optional underscores."""
    cleaned = text.replace("_", "")
    try:
        if cleaned[:2].lower() in ("0x", "0o", "0b"):
            return int(cleaned, 0)
        return int(cleaned, 10)
    except ValueError:
        raise CadenceSyntaxError(f"invalid integer literal: {text}") from None


@v_args(meta=True)
class _ProgramBuilder(Transformer):
    """Turns the lark parse tree into syntax.nodes dataclasses."""

    def __init__(self, source: str):
        super().__init__()
        self._source = source

    def _span(self, meta) -> dict[str, Position]:
        if getattr(meta, "empty", True):
            return {}
        return {
            "start_pos": _position(meta.start_pos, meta.line, meta.column),
            # end positions are inclusive of the last character
            "end_pos": _position(meta.end_pos - 1, meta.end_line, meta.end_column - 1),
        }

    # ── program ──

    def start(self, meta, children):
        return Program(declarations=[c for c in children if isinstance(c, Declaration)])

    def type_expression(self, meta, children):
        return children[0]

    # ── declarations ──

    def import_declaration(self, meta, children):
        identifiers: list[Identifier] = []
        location_kind, location = "identifier", ""
        for c in children:
            if isinstance(c, list):
                identifiers = c
            elif isinstance(c, tuple):
                location_kind, location = c
        return ImportDeclaration(
            identifiers=identifiers, location=location, location_kind=location_kind,
            **self._span(meta),
        )

    def import_names(self, meta, children):
        return [_identifier(t) for t in children]

    def address_location(self, meta, children):
        return ("address", str(children[0]))

    def string_location(self, meta, children):
        return ("string", str(children[0])[1:-1])

    def identifier_location(self, meta, children):
        return ("identifier", str(children[0]))

    def pragma_declaration(self, meta, children):
        return PragmaDeclaration(name=str(children[0]), **self._span(meta))

    def transaction_declaration(self, meta, children):
        decl = TransactionDeclaration(**self._span(meta))
        for c in children:
            if isinstance(c, ParameterList):
                decl.parameter_list = c
            elif isinstance(c, FieldDeclaration):
                decl.fields.append(c)
            elif isinstance(c, SpecialFunctionDeclaration):
                if c.kind == "prepare":
                    decl.prepare = c
                elif c.kind == "pre":
                    decl.pre_conditions = c
                elif c.kind == "execute":
                    decl.execute = c
                elif c.kind == "post":
                    decl.post_conditions = c
        return decl

    def field_declaration(self, meta, children):
        return FieldDeclaration(
            access=_pick(children, "access"),
            variable_kind=_pick(children, "variable"),
            identifier=_identifier(_names(children)[0]),
            type_annotation=children[-1],
            **self._span(meta),
        )

    def variable_kind(self, meta, children):
        return _Keyword("variable", str(children[0]))

    def access_modifier(self, meta, children):
        text = ""
        for t in children:
            if t == ",":
                text += ", "
            elif t == "|":
                text += " | "
            else:
                text += str(t)
        return _Keyword("access", text)

    def prepare_block(self, meta, children):
        return SpecialFunctionDeclaration(
            kind="prepare", parameter_list=children[0], body=children[1], **self._span(meta),
        )

    def pre_block(self, meta, children):
        return SpecialFunctionDeclaration(kind="pre", body=children[0], **self._span(meta))

    def execute_block(self, meta, children):
        return SpecialFunctionDeclaration(kind="execute", body=children[0], **self._span(meta))

    def post_block(self, meta, children):
        return SpecialFunctionDeclaration(kind="post", body=children[0], **self._span(meta))

    def function_declaration(self, meta, children):
        decl = FunctionDeclaration(access=_pick(children, "access"), **self._span(meta))
        for c in children:
            if isinstance(c, Token):
                if c.type == "VIEW":
                    decl.is_view = True
                elif c.type == "NAME":
                    decl.identifier = _identifier(c)
            elif isinstance(c, ParameterList):
                decl.parameter_list = c
            elif isinstance(c, TypeAnnotation):
                decl.return_type = c
            elif isinstance(c, Block):
                decl.body = c
        return decl

    def composite_declaration(self, meta, children):
        decl = CompositeDeclaration(
            access=_pick(children, "access"),
            composite_kind=_pick(children, "composite"),
            **self._span(meta),
        )
        for c in children:
            if isinstance(c, Token):
                if c.type == "INTERFACE":
                    decl.is_interface = True
                elif c.type == "NAME":
                    decl.identifier = _identifier(c)
            elif isinstance(c, list):
                decl.conformances = c
            elif isinstance(c, Block):
                decl.body = c
        return decl

    def composite_kind(self, meta, children):
        return _Keyword("composite", str(children[0]))

    def conformances(self, meta, children):
        return list(children)

    def event_declaration(self, meta, children):
        return EventDeclaration(
            access=_pick(children, "access"),
            identifier=_identifier(_names(children)[0]),
            parameter_list=children[-1],
            **self._span(meta),
        )

    def entitlement_declaration(self, meta, children):
        return EntitlementDeclaration(
            access=_pick(children, "access"),
            identifier=_identifier(_names(children)[0]),
            **self._span(meta),
        )

    def parameter_list(self, meta, children):
        return ParameterList(parameters=list(children), **self._span(meta))

    def parameter(self, meta, children):
        name, annotation = children
        return Parameter(identifier=_identifier(name), type_annotation=annotation, **self._span(meta))

    def labeled_parameter(self, meta, children):
        label, name, annotation = children
        return Parameter(
            label=str(label), identifier=_identifier(name), type_annotation=annotation,
            **self._span(meta),
        )

    def block(self, meta, children):
        span = self._span(meta)
        source = self._source[meta.start_pos:meta.end_pos] if span else ""
        return Block(source=source, **span)

    # ── types ──

    def type_annotation(self, meta, children):
        is_resource = isinstance(children[0], Token) and children[0].type == "RESOURCE"
        return TypeAnnotation(is_resource=is_resource, type=children[-1], **self._span(meta))

    def optional_type(self, meta, children):
        return OptionalType(type=children[0], **self._span(meta))

    def variable_sized_type(self, meta, children):
        return VariableSizedType(type=children[0], **self._span(meta))

    def constant_sized_type(self, meta, children):
        element, size = children
        return ConstantSizedType(
            type=element, size=parse_integer_literal(str(size)), size_literal=str(size),
            **self._span(meta),
        )

    def dictionary_type(self, meta, children):
        key, value = children
        return DictionaryType(key_type=key, value_type=value, **self._span(meta))

    def intersection_type(self, meta, children):
        return IntersectionType(types=list(children), **self._span(meta))

    def restricted_type(self, meta, children):
        return RestrictedType(type=children[0], restrictions=list(children[1:]), **self._span(meta))

    def nominal_type(self, meta, children):
        names = [_identifier(t) for t in children]
        return NominalType(identifier=names[0], nested_identifiers=names[1:], **self._span(meta))

    def instantiation_type(self, meta, children):
        return InstantiationType(type=children[0], type_arguments=list(children[1:]), **self._span(meta))

    def reference_type(self, meta, children):
        ref = ReferenceType(type=children[-1], **self._span(meta))
        if len(children) == 2:
            ref.authorized = True
            ref.entitlements = children[0]
        return ref

    def auth(self, meta, children):
        return list(children)

    def function_type(self, meta, children):
        return FunctionType(
            parameter_types=list(children[:-1]), return_type=children[-1], **self._span(meta),
        )


class CadenceParser(ProgramParser):
    """Cadence source parser backed by a lark LALR grammar."""

    _lark: Optional[Lark] = None

    @property
    def language(self) -> str:
        return "cadence"

    @classmethod
    def _get_lark(cls) -> Lark:
        if cls._lark is None:
            cls._lark = Lark(
                CADENCE_GRAMMAR,
                parser="lalr",
                start=["start", "type_expression"],
                propagate_positions=True,
                maybe_placeholders=False,
            )
        return cls._lark

    def parse(self, source: str) -> ParseResult:
        try:
            program = self._build(source, "start")
        except CadenceSyntaxError as e:
            logger.info("%s parse failed: %s", self.language, e.message)
            return ParseResult(parse_error=str(e))
        logger.debug("parsed %d top-level %s declarations", len(program.declarations), self.language)
        return ParseResult(program=program)

    def parse_type(self, text: str) -> Type:
        annotation = self._build(text, "type_expression")
        return annotation.type

    def _build(self, source: str, start: str) -> Any:
        lark = self._get_lark()
        try:
            tree = lark.parse(source, start=start)
        except UnexpectedInput as e:
            raise self._syntax_error(e) from None
        try:
            return _ProgramBuilder(source).transform(tree)
        except VisitError as e:
            if isinstance(e.orig_exc, CadenceSyntaxError):
                raise e.orig_exc from None
            raise

    def _syntax_error(self, e: UnexpectedInput) -> CadenceSyntaxError:
        # lark uses -1 or '?' when the position is unknown
        line = e.line if isinstance(e.line, int) and e.line > 0 else None
        column = e.column - 1 if isinstance(e.column, int) and e.column > 0 else None
        if isinstance(e, UnexpectedToken):
            if e.token.type == "$END":
                message = "unexpected end of program"
            else:
                message = f"unexpected token '{e.token}'"
            expected = self._describe_expected(e.expected)
            if expected:
                message += f", expected {expected}"
        elif isinstance(e, UnexpectedCharacters):
            message = f"unexpected character '{e.char}'"
            expected = self._describe_expected(e.allowed or ())
            if expected:
                message += f", expected {expected}"
        elif isinstance(e, UnexpectedEOF):
            message = "unexpected end of program"
        else:
            message = str(e)
        return CadenceSyntaxError(message, line=line, column=column)

    def _describe_expected(self, names) -> str:
        described = set()
        for name in names:
            if name in _TERMINAL_NAMES:
                described.add(_TERMINAL_NAMES[name])
                continue
            try:
                pattern = self._get_lark().get_terminal(name).pattern
            except KeyError:
                described.add(name)
                continue
            if pattern.type == "str":
                described.add(f"'{pattern.value}'")
            else:
                described.add(name)
        return ", ".join(sorted(described))
