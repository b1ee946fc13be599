"""Configuration for the harness."""

import re
from collections.abc import Sequence
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

CONFIG_FILENAME = "cli-harness.yaml"
DEFAULT_EXTENSION = ".test"
DEFAULT_COMMAND_TIMEOUT = 300.0

DURATION_PATTERN = re.compile(r"^\s*(?P<value>\d+(?:\.\d+)?)\s*(?P<unit>[smh]?)\s*$")
UNIT_SECONDS = {"": 1, "s": 1, "m": 60, "h": 3600}


class ConfigError(Exception):
    """Raised when the configuration file cannot be loaded."""


def parse_duration(value: str | float) -> float:
    """Convert a duration such as ``"30s"``, ``"5m"`` or ``90`` to seconds."""
    if isinstance(value, int | float):
        seconds = float(value)
    else:
        match = DURATION_PATTERN.match(value)
        if match is None:
            raise ValueError(f"Invalid duration: '{value}'")
        seconds = float(match["value"]) * UNIT_SECONDS[match["unit"]]

    if seconds <= 0:
        raise ValueError(f"Duration must be positive: '{value}'")
    return seconds


class HarnessConfig(BaseModel):
    """Configuration for discovering and running test units."""

    fixture_dir: Path = Path(".")
    extension: str = DEFAULT_EXTENSION
    temp_root: Path | None = None
    command_timeout: float = DEFAULT_COMMAND_TIMEOUT
    # Housekeeping defaults for entangled fixtures.
    clean_patterns: Sequence[str] = ("entangled.db", "*.scm")
    restore_patterns: Sequence[str] = ("*.md",)

    @field_validator("command_timeout", mode="before")
    @classmethod
    def _parse_timeout(cls, value: str | float) -> float:
        return parse_duration(value)

    @field_validator("extension")
    @classmethod
    def _leading_dot(cls, value: str) -> str:
        return value if value.startswith(".") else f".{value}"


def load_config(fixture_dir: Path, config_path: Path | None = None) -> HarnessConfig:
    """Load configuration for a fixture directory.

    Args:
        fixture_dir: Directory holding the test units
        config_path: Explicit config file. Without one, ``cli-harness.yaml``
            in the fixture directory is read when it exists.

    Returns:
        Configuration with ``fixture_dir`` set to the given directory

    Raises:
        ConfigError: If the file cannot be read or does not validate

    """
    path = config_path or fixture_dir / CONFIG_FILENAME
    data: object = {}
    if config_path is not None or path.is_file():
        try:
            data = yaml.safe_load(path.read_text()) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigError(f"Cannot read config {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must be a mapping")

    try:
        return HarnessConfig.model_validate({**data, "fixture_dir": fixture_dir})
    except ValidationError as exc:
        raise ConfigError(f"Invalid config {path}: {exc}") from exc
