"""
Parse one source text and assemble the response document.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from .classifier import build_interaction
from .models import Interaction
from ..config import ClassifierConfig
from ..errors import DuplicateEntryPointError
from ..parsers.base import ProgramParser
from ..parsers.cadence import CadenceParser
from ..syntax.nodes import Program

logger = logging.getLogger(__name__)


@dataclass
class Response:
    """What the tool prints: the interaction, the syntax tree, or an error."""
    interaction: Optional[Interaction] = None
    program: Optional[Program] = None
    error: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "interaction": self.interaction.to_dict() if self.interaction else None,
            "program": self.program.to_dict() if self.program else None,
            "error": self.error,
        }


def get_parsed_interaction(
    source: str,
    config: Optional[ClassifierConfig] = None,
    parser: Optional[ProgramParser] = None,
) -> Response:
    """Parse and classify a source text. Syntax errors end up in Response.error."""
    config = config or ClassifierConfig()
    parser = parser or CadenceParser()

    result = parser.parse(source)
    if not result.ok:
        return Response(error=result.parse_error)

    program = result.program if config.include_program else None
    try:
        interaction = build_interaction(result.program, policy=config.entry_points, table=config.type_table)
    except DuplicateEntryPointError as e:
        logger.info("classification failed: %s", e)
        return Response(program=program, error=str(e))

    logger.debug("classified as %s with %d parameters", interaction.kind.name, len(interaction.parameters))
    return Response(interaction=interaction, program=program)
