"""Test runner for discovering and executing test units one after another."""

import logging
import time
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import TypeAlias

from cli_harness.assertions import Assertions
from cli_harness.config import HarnessConfig
from cli_harness.definition_loader import (
    FixtureDirError,
    TestUnit,
    UnitNotFoundError,
    discover,
    find_unit,
)
from cli_harness.environment import EnvironmentSetupError, isolated_environment
from cli_harness.models.result import UnitResult, UnitStatus
from cli_harness.models.state import RunState
from cli_harness.reporter import FailFastError, Reporter
from cli_harness.script import load_script_body

log = logging.getLogger(__name__)

TestBody: TypeAlias = Callable[[Assertions], None]


@dataclass(frozen=True, kw_only=True)
class TestRunner:
    """Runs test units sequentially, each in its own workspace.

    Each unit is backed by the script in its .test file unless a body is
    registered under its name in ``bodies``. A body is any callable taking an
    ``Assertions`` instance.
    """

    __test__ = False

    config: HarnessConfig
    state: RunState
    reporter: Reporter
    bodies: Mapping[str, TestBody] = field(default_factory=dict)

    def units(self) -> Sequence[TestUnit]:
        """Units selected for this run.

        Raises:
            UnitNotFoundError: If a single unit was requested and is missing
            FixtureDirError: If the fixture directory does not exist

        """
        if self.state.only_unit is not None:
            return [
                find_unit(
                    self.config.fixture_dir,
                    self.state.only_unit,
                    self.config.extension,
                )
            ]
        return discover(self.config.fixture_dir, self.config.extension)

    def run_all(self) -> Sequence[UnitResult]:
        """Run the selected units in order.

        A missing single unit or fixture directory is reported and counts as a
        failure. With fail-fast enabled the run stops after the first unit that
        did not pass.

        Returns:
            One result per unit that was run

        """
        try:
            units = self.units()
        except (UnitNotFoundError, FixtureDirError) as exc:
            self.reporter.message(str(exc))
            log.error("%s", exc)
            self.state.mark_failed()
            return []

        if not units:
            log.warning(
                "No *%s units found in %s",
                self.config.extension,
                self.config.fixture_dir,
            )
            return []

        log.info("Running %d unit(s)...", len(units))
        results: list[UnitResult] = []
        for unit in units:
            result = self.run_one(unit)
            results.append(result)
            if self.state.fail_fast and result.status != "passed":
                log.info("Stopping after %s (fail-fast)", unit.name)
                break

        return results

    def run_one(self, unit: TestUnit) -> UnitResult:
        """Set up a workspace, run the unit's body in it and tear it down.

        Errors are contained here: they mark the run as failed and turn into
        an ``error`` result rather than propagating.
        """
        self.reporter.banner(unit.name)
        self.reporter.drain()
        started = time.monotonic()
        status: UnitStatus = "passed"
        message: str | None = None

        try:
            body = self.resolve_body(unit)
            with isolated_environment(
                self.config.fixture_dir,
                skip_setup=self.state.skip_setup,
                temp_root=self.config.temp_root,
            ):
                body(Assertions(reporter=self.reporter))
        except FailFastError as exc:
            status, message = "failed", str(exc)
        except EnvironmentSetupError as exc:
            self.reporter.message(f"Environment error: {exc}")
            log.error("Environment error in unit %s: %s", unit.name, exc)
            self.state.mark_failed()
            status, message = "error", str(exc)
        except Exception as exc:
            self.reporter.message(f"Error: {exc}")
            log.error("Unit %s raised an error: %s", unit.name, exc, exc_info=exc)
            self.state.mark_failed()
            status, message = "error", str(exc)

        assertions = self.reporter.drain()
        if status == "passed" and any(not result.passed for result in assertions):
            status = "failed"

        self.reporter.message()
        return UnitResult(
            name=unit.name,
            status=status,
            duration=time.monotonic() - started,
            assertions=assertions,
            message=message,
        )

    def resolve_body(self, unit: TestUnit) -> TestBody:
        if unit.name in self.bodies:
            return self.bodies[unit.name]
        return load_script_body(
            unit,
            command_timeout=self.config.command_timeout,
            verbose=self.state.verbose,
        )
