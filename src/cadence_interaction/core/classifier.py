"""
Interaction classifier: find the entry point of a program and classify its parameters.

A transaction declaration makes the program a transaction. Otherwise a
function named `main` makes it a script. Anything else is unknown.
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional, Sequence, TypeVar

from .models import CadenceTypeKind, Interaction, InteractionKind
from .types import TYPE_KINDS, build_cadence_type
from ..errors import DuplicateEntryPointError
from ..syntax.nodes import FunctionDeclaration, ParameterList, Program, TransactionDeclaration

logger = logging.getLogger(__name__)

POLICY_LAST = "last"
POLICY_STRICT = "strict"
ENTRY_POINT_POLICIES = (POLICY_LAST, POLICY_STRICT)

MAIN_FUNCTION_NAME = "main"

_D = TypeVar("_D")


def _select(candidates: Sequence[_D], what: str, policy: str) -> Optional[_D]:
    """Pick the entry point among candidates: the last one, or fail on duplicates when strict."""
    if not candidates:
        return None
    if len(candidates) > 1:
        if policy == POLICY_STRICT:
            raise DuplicateEntryPointError(f"program declares {len(candidates)} {what}s, expected at most one")
        logger.debug("%d %ss declared, using the last one", len(candidates), what)
    return candidates[-1]


def get_transaction_declaration(program: Program, policy: str = POLICY_LAST) -> Optional[TransactionDeclaration]:
    return _select(program.transaction_declarations(), "transaction declaration", policy)


def get_main_function_declaration(program: Program, policy: str = POLICY_LAST) -> Optional[FunctionDeclaration]:
    mains = [f for f in program.function_declarations() if f.identifier.identifier == MAIN_FUNCTION_NAME]
    return _select(mains, "main function", policy)


def build_parameters(parameter_list: ParameterList, table: Mapping[str, CadenceTypeKind] = TYPE_KINDS):
    return tuple(
        build_cadence_type(p.type_annotation.type, table)
        for p in parameter_list.parameters
    )


def build_interaction(
    program: Program,
    policy: str = POLICY_LAST,
    table: Mapping[str, CadenceTypeKind] = TYPE_KINDS,
) -> Interaction:
    """Classify a parsed program.

    Raises DuplicateEntryPointError under the strict policy when more than
    one candidate entry point of the winning kind is declared.
    """
    if policy not in ENTRY_POINT_POLICIES:
        raise ValueError(f"unknown entry point policy: {policy!r}")

    transaction = get_transaction_declaration(program, policy)
    if transaction is not None:
        return Interaction(
            kind=InteractionKind.TRANSACTION,
            parameters=build_parameters(transaction.parameter_list, table),
        )

    main = get_main_function_declaration(program, policy)
    if main is not None:
        return Interaction(
            kind=InteractionKind.SCRIPT,
            parameters=build_parameters(main.parameter_list, table),
        )

    return Interaction(kind=InteractionKind.UNKNOWN)
