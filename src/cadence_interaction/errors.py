"""
Exception hierarchy for cadence_interaction.

Syntax and entry point errors are recoverable and end up in the response's
"error" field. Config and I/O errors abort the process.
"""

from __future__ import annotations

from typing import Optional


class InteractionError(Exception):
    """Base class for all errors raised by this package."""


class CadenceSyntaxError(InteractionError):
    """The source text is not valid Cadence."""

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        self.message = message
        self.line = line
        self.column = column
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.line is None:
            return self.message
        return f"Parsing failed:\nerror: {self.message}\n --> {self.line}:{self.column}"


class DuplicateEntryPointError(InteractionError):
    """More than one transaction or main function under the strict policy."""


class ConfigError(InteractionError):
    """Config file is missing or malformed."""


class InputError(InteractionError):
    """Reading the source text failed."""


class OutputError(InteractionError):
    """Writing the response failed."""
