"""
CLI commands: argparse subcommands for cadence-interaction.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional, TextIO

from ..config import ClassifierConfig
from ..core.classifier import POLICY_STRICT
from ..core.response import get_parsed_interaction
from ..core.types import build_cadence_type
from ..errors import CadenceSyntaxError, ConfigError, InputError, OutputError
from ..parsers.cadence import CadenceParser
from . import formatter

logger = logging.getLogger(__name__)


def read_source(stream: TextIO) -> str:
    """Read one newline-terminated line. A trailing NUL end-of-input marker is dropped."""
    try:
        line = stream.readline()
    except (OSError, UnicodeDecodeError) as e:
        raise InputError(f"reading source failed: {e}") from e
    if not line.endswith("\n"):
        raise InputError("reading source failed: end of input before newline")
    return line.rstrip("\n").rstrip("\r").rstrip("\x00")


def read_source_file(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise InputError(f"reading {path} failed: {e}") from e


def write_output(stream: TextIO, text: str):
    try:
        stream.write(text + "\n")
        stream.flush()
    except OSError as e:
        raise OutputError(f"writing response failed: {e}") from e


def _dump(data: Any, args) -> str:
    return json.dumps(data, indent=args.indent)


def _get_config(args) -> ClassifierConfig:
    """Load config from --config, then apply flag overrides."""
    config = ClassifierConfig.load(Path(args.config)) if args.config else ClassifierConfig()
    if args.strict:
        config.entry_points = POLICY_STRICT
    if getattr(args, "no_program", False):
        config.include_program = False
    return config


def _configure_logging(level: str):
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )


def cmd_parse(args, config: ClassifierConfig):
    """Parse source and print the interaction it declares."""
    if args.file:
        source = read_source_file(Path(args.file))
    else:
        source = read_source(sys.stdin)

    response = get_parsed_interaction(source, config)

    if args.text:
        write_output(sys.stdout, formatter.format_response(response))
    else:
        write_output(sys.stdout, _dump(response.to_dict(), args))


def cmd_classify_type(args, config: ClassifierConfig):
    """Classify a single type expression."""
    parser = CadenceParser()
    try:
        cadence_type = build_cadence_type(parser.parse_type(args.type), config.type_table)
    except CadenceSyntaxError as e:
        logger.info("type did not parse: %s", e.message)
        if args.text:
            write_output(sys.stdout, f"Error: {e}")
        else:
            write_output(sys.stdout, _dump({"type": None, "error": str(e)}, args))
        return

    if args.text:
        write_output(sys.stdout, "\n".join(formatter.format_cadence_type(cadence_type)))
    else:
        write_output(sys.stdout, _dump({"type": cadence_type.to_dict(), "error": ""}, args))


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="cadence-interaction",
        description="Classify the entry point and parameter types of Cadence source",
    )
    parser.add_argument(
        "--config", "-c", default=None,
        help="Path to a YAML config file",
    )
    parser.add_argument(
        "--strict", action="store_true", default=False,
        help="Fail on duplicate transaction or main declarations instead of using the last one",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", default=False,
        help="Log debug output to stderr",
    )
    parser.add_argument(
        "--text", "-t", action="store_true", default=False,
        help="Human-readable output instead of JSON",
    )
    parser.add_argument(
        "--indent", type=int, default=None,
        help="Indent JSON output by this many spaces",
    )
    # defaults for running `parse` without naming it
    parser.set_defaults(file=None, no_program=False)

    sub = parser.add_subparsers(dest="command", help="Available commands")

    # parse
    p = sub.add_parser(
        "parse", aliases=["get-parsed-interaction"],
        help="Parse one line of source from stdin and print the interaction (default)",
    )
    p.add_argument("--file", "-f", default=None, help="Read the whole source from a file instead")
    p.add_argument("--no-program", action="store_true", default=False, help="Leave the syntax tree out")

    # classify-type
    p = sub.add_parser("classify-type", help="Classify a single type expression")
    p.add_argument("type", help="Cadence type, e.g. '[Address?]?'")

    return parser


def run_cli(argv: Optional[list[str]] = None) -> int:
    """Main CLI entry point. Returns the process exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)
    command = args.command or "parse"

    commands = {
        "parse": cmd_parse,
        "get-parsed-interaction": cmd_parse,
        "classify-type": cmd_classify_type,
    }

    try:
        config = _get_config(args)
    except ConfigError as e:
        _configure_logging("WARNING")
        logger.critical("%s", e)
        return 1
    _configure_logging("DEBUG" if args.verbose else config.log_level)

    try:
        commands[command](args, config)
    except (InputError, OutputError) as e:
        logger.critical("%s", e)
        return 1
    return 0
