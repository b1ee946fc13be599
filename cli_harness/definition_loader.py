"""Discovery and loading of test units from a fixture directory."""

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

import yaml
from pydantic import ValidationError

from cli_harness.config import DEFAULT_EXTENSION
from cli_harness.models.definition import UnitDefinition


class DefinitionError(Exception):
    """Raised when a unit definition cannot be parsed or executed as written."""


class UnitNotFoundError(Exception):
    """Raised when a unit selected by name does not exist."""


class FixtureDirError(Exception):
    """Raised when the fixture directory does not exist."""


@dataclass(frozen=True, kw_only=True)
class TestUnit:
    """A discovered test unit and the file defining it."""

    __test__ = False

    name: str
    path: Path


def unit_name(name: str, extension: str = DEFAULT_EXTENSION) -> str:
    """Reduce a user-supplied unit reference to its bare name."""
    return Path(name).name.removesuffix(extension)


def discover(
    fixture_dir: Path, extension: str = DEFAULT_EXTENSION
) -> Sequence[TestUnit]:
    """List the units in a fixture directory, sorted by name.

    Hidden files are skipped, the same as when the fixtures are copied into a
    workspace.

    Raises:
        FixtureDirError: If ``fixture_dir`` is not a directory

    """
    if not fixture_dir.is_dir():
        raise FixtureDirError(f"Fixture directory not found: {fixture_dir}")
    return [
        TestUnit(name=path.name.removesuffix(extension), path=path)
        for path in sorted(fixture_dir.glob(f"*{extension}"))
        if not path.name.startswith(".") and path.is_file()
    ]


def find_unit(
    fixture_dir: Path, name: str, extension: str = DEFAULT_EXTENSION
) -> TestUnit:
    """Look up a single unit by name.

    Raises:
        UnitNotFoundError: If no matching definition file exists

    """
    bare_name = unit_name(name, extension)
    path = fixture_dir / f"{bare_name}{extension}"
    if not bare_name or not path.is_file():
        raise UnitNotFoundError(f"Could not find test: {bare_name}")
    return TestUnit(name=bare_name, path=path)


def load_unit_definition(path: Path) -> UnitDefinition:
    """Parse a .test file into a unit definition.

    Raises:
        DefinitionError: If the file cannot be read, is not valid YAML or does
            not match the definition schema

    """
    try:
        data = yaml.safe_load(path.read_text())
    except (OSError, yaml.YAMLError) as exc:
        raise DefinitionError(f"Cannot read unit definition {path}: {exc}") from exc

    try:
        return UnitDefinition.model_validate(data or {})
    except ValidationError as exc:
        raise DefinitionError(f"Invalid unit definition {path}: {exc}") from exc
