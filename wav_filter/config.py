from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .models import ConfigurationError

WAV_EXTENSION = ".wav"
# Mirrors the largest unsigned 64-bit value: "no upper bound".
MAX_LENGTH_MS = 2**64 - 1

CONFIG_FILENAMES = ("wav-filter.yaml", "wav-filter.yml")


class FilterSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    input_root: Path
    output_root: Path
    min_length_ms: int = Field(default=0, ge=0)
    max_length_ms: int = Field(default=MAX_LENGTH_MS, ge=0)
    extension: str = WAV_EXTENSION
    fail_fast: bool = True
    dry_run: bool = False

    @field_validator("input_root", "output_root", mode="before")
    @classmethod
    def _expand_path(cls, value: str | Path) -> Path:
        return Path(value).expanduser().resolve()

    def matches(self, duration_ms: int) -> bool:
        return self.min_length_ms <= duration_ms <= self.max_length_ms

    def validate_input(self) -> None:
        if not self.input_root.exists():
            raise ConfigurationError(f"Input directory does not exist: {self.input_root}")
        if not self.input_root.is_dir():
            raise ConfigurationError(f"Input path is not a directory: {self.input_root}")

    @classmethod
    def build(cls, values: Dict[str, Any]) -> "FilterSettings":
        try:
            return cls.model_validate(values)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid settings: {exc}") from exc


def load_defaults(path: Path) -> Dict[str, Any]:
    """Read a YAML mapping of FilterSettings defaults.

    Keys use the settings field names; ``input``/``output``/``min_length``/
    ``max_length`` are accepted as aliases matching the command-line flags.
    """
    try:
        with path.open("r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Failed to read config file {path}: {exc}") from exc
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")
    aliases = {
        "input": "input_root",
        "output": "output_root",
        "min_length": "min_length_ms",
        "max_length": "max_length_ms",
    }
    return {aliases.get(key, key): value for key, value in raw.items()}


def find_config(explicit_path: Optional[Path]) -> Optional[Path]:
    if explicit_path:
        if not explicit_path.exists():
            raise ConfigurationError(f"Config file does not exist: {explicit_path}")
        return explicit_path
    cwd = Path.cwd()
    for name in CONFIG_FILENAMES:
        candidate = cwd / name
        if candidate.exists():
            return candidate
    return None
