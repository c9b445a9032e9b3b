"""
Classifier configuration, loaded from a YAML file.

Supports:
- entry point policy (last declaration wins, or strict)
- whether responses include the syntax tree
- the legacy type-name table
- log level
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from .core.classifier import ENTRY_POINT_POLICIES, POLICY_LAST
from .core.models import CadenceTypeKind
from .core.types import LEGACY_TYPE_KINDS, TYPE_KINDS
from .errors import ConfigError

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ClassifierConfig:
    """Options for parsing and classifying one source text."""
    entry_points: str = POLICY_LAST  # last, strict
    include_program: bool = True
    legacy_type_names: bool = False  # legacy table, UFIx64 spelling included
    log_level: str = "WARNING"

    def __post_init__(self):
        if self.entry_points not in ENTRY_POINT_POLICIES:
            raise ConfigError(
                f"entry_points must be one of {', '.join(ENTRY_POINT_POLICIES)}, got {self.entry_points!r}"
            )
        self.log_level = str(self.log_level).upper()
        if self.log_level not in _LOG_LEVELS:
            raise ConfigError(f"unknown log_level: {self.log_level!r}")

    @property
    def type_table(self) -> Mapping[str, CadenceTypeKind]:
        return LEGACY_TYPE_KINDS if self.legacy_type_names else TYPE_KINDS

    @classmethod
    def load(cls, config_path: Path) -> "ClassifierConfig":
        """Load config from a YAML file. Raises ConfigError if it is missing or malformed."""
        if not config_path.exists():
            raise ConfigError(f"config file not found: {config_path}")
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"malformed config file {config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"config file {config_path} must contain a mapping")
        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> "ClassifierConfig":
        defaults = cls()
        return cls(
            entry_points=data.get("entry_points", defaults.entry_points),
            include_program=bool(data.get("include_program", defaults.include_program)),
            legacy_type_names=bool(data.get("legacy_type_names", defaults.legacy_type_names)),
            log_level=data.get("log_level", defaults.log_level),
        )

    def to_dict(self) -> dict[str, Any]:
        defaults = ClassifierConfig()
        result: dict[str, Any] = {}
        if self.entry_points != defaults.entry_points:
            result["entry_points"] = self.entry_points
        if self.include_program != defaults.include_program:
            result["include_program"] = self.include_program
        if self.legacy_type_names != defaults.legacy_type_names:
            result["legacy_type_names"] = self.legacy_type_names
        if self.log_level != defaults.log_level:
            result["log_level"] = self.log_level
        return result
