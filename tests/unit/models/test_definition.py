"""Tests for unit definition models."""

import pytest
from pydantic import ValidationError

from cli_harness.models.definition import (
    ArrayEqualStep,
    CommandStep,
    ExitCodeStep,
    PathStep,
    StringEqualStep,
    UnitDefinition,
    step_tag,
)


def identity(value: str) -> str:
    return value


def test_steps_are_selected_by_assert_field() -> None:
    """Builds the model matching each step's assertion kind."""
    definition = UnitDefinition.model_validate(
        {
            "steps": [
                {"run": "true", "id": "ok"},
                {
                    "assert": "string-equal",
                    "description": "s",
                    "actual": "a",
                    "expected": "a",
                },
                {
                    "assert": "array-equal",
                    "description": "a",
                    "actual": "x",
                    "expected": ["x"],
                },
                {"assert": "path-exists", "description": "p", "path": "f"},
                {"assert": "path-not-exists", "description": "p", "path": "f"},
                {"assert": "exit-code-success", "description": "e", "code": 0},
                {
                    "assert": "exit-code-failure",
                    "description": "e",
                    "code": "${ok.returncode}",
                },
            ]
        }
    )

    assert [type(step) for step in definition.steps] == [
        CommandStep,
        StringEqualStep,
        ArrayEqualStep,
        PathStep,
        PathStep,
        ExitCodeStep,
        ExitCodeStep,
    ]


def test_models_are_frozen() -> None:
    """Steps cannot be modified after parsing."""
    step = CommandStep(run="true")

    with pytest.raises(ValidationError):
        step.run = "false"  # type: ignore[misc]


def test_command_step_parses_timeout() -> None:
    """Duration strings are converted to seconds."""
    assert CommandStep(run="sleep 1", timeout="2m").timeout == 120.0
    assert CommandStep(run="sleep 1", timeout=5).timeout == 5.0
    assert CommandStep(run="sleep 1").timeout is None


def test_command_step_rejects_bad_timeout() -> None:
    """Unparseable durations are rejected."""
    with pytest.raises(ValidationError, match="Invalid duration"):
        CommandStep(run="sleep 1", timeout="soon")


def test_command_step_rejects_bad_id() -> None:
    """Ids must be usable in ${id.field} references."""
    with pytest.raises(ValidationError):
        CommandStep(run="true", id="has space")


def test_unknown_keys_are_rejected() -> None:
    """Misspelled fields are errors rather than silently ignored."""
    with pytest.raises(ValidationError):
        UnitDefinition.model_validate({"steps": [{"run": "true", "chekc": True}]})


def test_array_step_splits_strings_and_sorts() -> None:
    """String sides are split, and sorted when requested."""
    step = ArrayEqualStep.model_validate(
        {
            "assert": "array-equal",
            "description": "files",
            "actual": "b.md a.md",
            "expected": ["a.md", "b.md"],
            "sort": True,
        }
    )

    assert step.arguments(identity) == (["a.md", "b.md"], ["a.md", "b.md"])


def test_exit_code_step_keeps_integers() -> None:
    """Integer codes pass through unchanged."""
    step = ExitCodeStep(kind="exit-code-success", description="ok", code=0)

    assert step.arguments(identity) == (0,)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ({"run": "true"}, "command"),
        ({"assert": "string-equal"}, "string"),
        ({"assert": "path-not-exists"}, "path"),
        ({"assert": "nonsense"}, None),
        ({"assert": ["string-equal"]}, None),
        ("not a step", None),
        (CommandStep(run="true"), "command"),
        (PathStep(kind="path-exists", description="p", path="f"), "path"),
    ],
)
def test_step_tag(value: object, expected: str | None) -> None:
    """Maps raw data and built steps to their union tag."""
    assert step_tag(value) == expected
