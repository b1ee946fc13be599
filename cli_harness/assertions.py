"""Assertion library used by test unit bodies.

Every assertion produces exactly one ``AssertionResult`` and hands it to the
reporter straight away. Assertions never raise on a failed check; only the
reporter may stop a unit, and only when fail-fast is enabled.
"""

import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from cli_harness.models.result import AssertionResult
from cli_harness.reporter import Reporter

ASSERTION_KINDS: Mapping[str, str] = {
    "string-equal": "string_equal",
    "array-equal": "array_equal",
    "path-exists": "path_exists",
    "path-not-exists": "path_not_exists",
    "exit-code-success": "exit_code_success",
    "exit-code-failure": "exit_code_failure",
}


@dataclass(frozen=True, kw_only=True)
class Assertions:
    """Assertions bound to a reporter."""

    reporter: Reporter

    def string_equal(
        self, description: str, actual: str, expected: str
    ) -> AssertionResult:
        """Pass iff both strings are equal."""
        return self._record(
            "string-equal", description, actual == expected, actual, expected
        )

    def array_equal(
        self,
        description: str,
        actual: str | Sequence[str],
        expected: str | Sequence[str],
    ) -> AssertionResult:
        """Pass iff the lists agree on every index of the shorter one.

        Strings are split on whitespace. Comparison stops at the first
        mismatch. Order matters, so callers sort beforehand when it should not.
        """
        passed = all(
            left == right
            for left, right in zip(_as_items(actual), _as_items(expected))
        )
        return self._record("array-equal", description, passed, actual, expected)

    def path_exists(
        self, description: str, path: str | os.PathLike[str]
    ) -> AssertionResult:
        """Pass iff an entry of any type exists at ``path``."""
        return self._record("path-exists", description, os.path.lexists(path), path)

    def path_not_exists(
        self, description: str, path: str | os.PathLike[str]
    ) -> AssertionResult:
        """Pass iff nothing exists at ``path``."""
        return self._record(
            "path-not-exists", description, not os.path.lexists(path), path
        )

    def exit_code_success(self, description: str, code: int | str) -> AssertionResult:
        """Pass iff the exit code is zero.

        A code that is not an integer fails.
        """
        return self._record(
            "exit-code-success", description, _as_code(code) == 0, code
        )

    def exit_code_failure(self, description: str, code: int | str) -> AssertionResult:
        """Pass iff the exit code is a non-zero integer.

        A code that is not an integer fails.
        """
        value = _as_code(code)
        return self._record(
            "exit-code-failure", description, value is not None and value != 0, code
        )

    def _record(
        self, kind: str, description: str, passed: bool, *args: object
    ) -> AssertionResult:
        result = AssertionResult(
            kind=kind, description=description, passed=passed, args=args
        )
        self.reporter.report(result)
        return result


def _as_items(value: str | Sequence[str]) -> Sequence[str]:
    if isinstance(value, str):
        return value.split()
    return value


def _as_code(code: int | str) -> int | None:
    try:
        return int(code)
    except ValueError:
        return None
