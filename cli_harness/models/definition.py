"""Models for unit definitions loaded from .test files."""

from collections.abc import Callable, Mapping, Sequence
from typing import Annotated, Any, Literal, TypeAlias

from pydantic import Discriminator, Field, Tag, field_validator

from cli_harness.config import parse_duration
from cli_harness.models.base import Model

Resolve: TypeAlias = Callable[[str], str]


class CommandStep(Model):
    """Shell command executed in the unit's working directory."""

    run: str = Field(..., description="Command line passed to the shell")
    id: str | None = Field(
        default=None,
        pattern=r"^[A-Za-z_][\w-]*$",
        description="Name under which later steps can reference the output",
    )
    timeout: float | None = Field(
        default=None, description="Command timeout (e.g., '30s', '5m')"
    )
    check: bool = Field(
        default=False,
        description="Report an exit-code-success assertion for the command",
    )

    @field_validator("timeout", mode="before")
    @classmethod
    def _parse_timeout(cls, value: str | float | None) -> float | None:
        return None if value is None else parse_duration(value)


class StringEqualStep(Model):
    """Byte-for-byte string comparison."""

    kind: Literal["string-equal"] = Field(..., alias="assert")
    description: str
    actual: str
    expected: str

    def arguments(self, resolve: Resolve) -> tuple[object, ...]:
        return resolve(self.actual), resolve(self.expected)


class ArrayEqualStep(Model):
    """Element-wise comparison of two lists.

    Strings are split on whitespace after references are resolved, so
    ``actual: "${ls.stdout}"`` compares one entry per listed file.
    """

    kind: Literal["array-equal"] = Field(..., alias="assert")
    description: str
    actual: str | Sequence[str]
    expected: str | Sequence[str]
    sort: bool = Field(default=False, description="Sort both sides first")

    def arguments(self, resolve: Resolve) -> tuple[object, ...]:
        actual = _resolve_items(self.actual, resolve)
        expected = _resolve_items(self.expected, resolve)
        if self.sort:
            return sorted(actual), sorted(expected)
        return actual, expected


class PathStep(Model):
    """Check for the presence or absence of a filesystem entry."""

    kind: Literal["path-exists", "path-not-exists"] = Field(..., alias="assert")
    description: str
    path: str

    def arguments(self, resolve: Resolve) -> tuple[object, ...]:
        return (resolve(self.path),)


class ExitCodeStep(Model):
    """Check a process exit code for success or failure."""

    kind: Literal["exit-code-success", "exit-code-failure"] = Field(
        ..., alias="assert"
    )
    description: str
    code: int | str

    def arguments(self, resolve: Resolve) -> tuple[object, ...]:
        if isinstance(self.code, str):
            return (resolve(self.code),)
        return (self.code,)


AssertionStep: TypeAlias = StringEqualStep | ArrayEqualStep | PathStep | ExitCodeStep

STEP_TAGS: Mapping[str, str] = {
    "string-equal": "string",
    "array-equal": "array",
    "path-exists": "path",
    "path-not-exists": "path",
    "exit-code-success": "exit-code",
    "exit-code-failure": "exit-code",
}


def step_tag(value: Any) -> str | None:
    """Pick the step model for raw YAML data or an already built step."""
    if isinstance(value, CommandStep):
        return "command"
    if isinstance(value, Mapping):
        if "assert" not in value and "kind" not in value:
            return "command"
        kind = value.get("assert", value.get("kind"))
    else:
        kind = getattr(value, "kind", None)
    if not isinstance(kind, str):
        return None
    return STEP_TAGS.get(kind)


Step = Annotated[
    Annotated[CommandStep, Tag("command")]
    | Annotated[StringEqualStep, Tag("string")]
    | Annotated[ArrayEqualStep, Tag("array")]
    | Annotated[PathStep, Tag("path")]
    | Annotated[ExitCodeStep, Tag("exit-code")],
    Discriminator(step_tag),
]


class UnitDefinition(Model):
    """Complete unit definition loaded from a .test file."""

    description: str | None = Field(default=None, description="What the unit covers")
    steps: Sequence[Step] = Field(
        default_factory=list, description="Steps executed top to bottom"
    )


def _resolve_items(value: str | Sequence[str], resolve: Resolve) -> list[str]:
    if isinstance(value, str):
        return resolve(value).split()
    return [resolve(item) for item in value]
