"""
Human-readable output formatting for CLI.
"""

from __future__ import annotations

from ..core.models import CadenceType, Interaction, UNBOUNDED_SIZE
from ..core.response import Response


def format_cadence_type(t: CadenceType, indent: int = 0) -> list[str]:
    """One line for the type, plus indented lines for array elements or dictionary entries."""
    pad = " " * indent
    flags = ", optional" if t.optional else ""
    lines = [f"{pad}{t.raw_type}  ({t.kind.name.lower()}{flags})"]

    if t.array_type is not None:
        size = "unbounded" if t.array_type.size == UNBOUNDED_SIZE else str(t.array_type.size)
        lines.append(f"{pad}  size: {size}")
        lines.append(f"{pad}  element:")
        lines.extend(format_cadence_type(t.array_type.element, indent + 4))
    if t.dictionary_type is not None:
        lines.append(f"{pad}  key:")
        lines.extend(format_cadence_type(t.dictionary_type.key, indent + 4))
        lines.append(f"{pad}  value:")
        lines.extend(format_cadence_type(t.dictionary_type.value, indent + 4))
    return lines


def format_interaction(interaction: Interaction) -> str:
    count = len(interaction.parameters)
    noun = "parameter" if count == 1 else "parameters"
    lines = [f"{interaction.kind.name.capitalize()} ({count} {noun})"]
    for i, param in enumerate(interaction.parameters):
        lines.append(f"  #{i}")
        lines.extend(format_cadence_type(param, indent=4))
    return "\n".join(lines)


def format_response(response: Response) -> str:
    if response.error:
        return f"Error: {response.error}"
    if response.interaction is None:
        return "No interaction."
    return format_interaction(response.interaction)
