"""Console reporting of assertion outcomes."""

import logging
import sys
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TextIO

from cli_harness.models.result import AssertionResult
from cli_harness.models.state import RunState

log = logging.getLogger(__name__)

SUCCESS_SYMBOL = "✓"
FAILURE_SYMBOL = "✗"


class FailFastError(Exception):
    """Raised after a reported failure when fail-fast is enabled.

    It unwinds the running unit body so the workspace is still torn down
    before the runner stops.
    """

    def __init__(self, result: AssertionResult) -> None:
        super().__init__(f"{result.kind} failed: {result.description}")
        self.result = result


@dataclass(kw_only=True)
class Reporter:
    """Prints assertion results and records failures on the run state."""

    state: RunState
    stream: TextIO = field(default_factory=lambda: sys.stdout)
    _results: list[AssertionResult] = field(default_factory=list, repr=False)

    @property
    def results(self) -> Sequence[AssertionResult]:
        """Results reported since the last ``drain``, in reporting order."""
        return tuple(self._results)

    def drain(self) -> Sequence[AssertionResult]:
        """Return the pending results and start collecting afresh."""
        results = tuple(self._results)
        self._results.clear()
        return results

    def report(self, result: AssertionResult) -> None:
        if result.passed:
            self.report_success(result)
        else:
            self.report_failure(result)

    def report_success(self, result: AssertionResult) -> None:
        self._results.append(result)
        self._write(f"{SUCCESS_SYMBOL}  {result.description}")

    def report_failure(self, result: AssertionResult) -> None:
        """Print the failing assertion with its arguments and mark the run failed.

        Raises:
            FailFastError: If fail-fast is enabled

        """
        self._results.append(result)
        self._write(f"{FAILURE_SYMBOL}  {result.description}, {result.kind} args:")
        for arg in result.args:
            self._write(f'    - "{arg}"')

        self.state.mark_failed()
        if self.state.fail_fast:
            log.debug("Fail-fast enabled, aborting on %s", result.kind)
            raise FailFastError(result)

    def banner(self, name: str) -> None:
        self._write(f" ~~~ {name} ~~~")

    def message(self, text: str = "") -> None:
        self._write(text)

    def _write(self, line: str) -> None:
        print(line, file=self.stream)
