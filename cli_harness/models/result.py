"""Models for assertion and unit execution results."""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

UnitStatus = Literal["passed", "failed", "error"]


@dataclass(frozen=True, kw_only=True)
class AssertionResult:
    """Outcome of a single assertion.

    ``args`` holds the raw values the assertion was called with, minus the
    description, so a failure can be shown exactly as it was evaluated.
    """

    kind: str
    description: str
    passed: bool
    args: tuple[object, ...] = ()


@dataclass(frozen=True, kw_only=True)
class UnitResult:
    """Result of running one test unit."""

    name: str
    status: UnitStatus
    duration: float
    assertions: Sequence[AssertionResult] = ()
    message: str | None = None

    @property
    def failures(self) -> Sequence[AssertionResult]:
        return [result for result in self.assertions if not result.passed]
