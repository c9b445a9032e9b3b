"""
Base parser types and abstract interface.

A parser turns source text into a Program or a syntax error message.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ..syntax.nodes import Program, Type


@dataclass
class ParseResult:
    """Output of parsing a single source text."""
    program: Optional[Program] = None
    parse_error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.parse_error is None


class ProgramParser(ABC):
    """Abstract base for source-language parsers."""

    @property
    @abstractmethod
    def language(self) -> str:
        """Language identifier (e.g. 'cadence')."""

    @abstractmethod
    def parse(self, source: str) -> ParseResult:
        """Parse a whole program. Syntax errors are reported, not raised."""

    @abstractmethod
    def parse_type(self, text: str) -> Type:
        """Parse a standalone type annotation. Raises CadenceSyntaxError."""
