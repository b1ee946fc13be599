"""Execution of script bodies defined in .test files."""

import logging
import os
import re
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass

from cli_harness.assertions import ASSERTION_KINDS, Assertions
from cli_harness.config import DEFAULT_COMMAND_TIMEOUT
from cli_harness.definition_loader import (
    DefinitionError,
    TestUnit,
    load_unit_definition,
)
from cli_harness.models.definition import AssertionStep, CommandStep, UnitDefinition
from cli_harness.models.result import AssertionResult

log = logging.getLogger(__name__)

VERBOSE_ENV = "CLI_HARNESS_VERBOSE"

REFERENCE_PATTERN = re.compile(
    r"\$\{(?P<id>[A-Za-z_][\w-]*)\.(?P<field>stdout|stderr|returncode)\}"
)


class CommandTimeoutError(Exception):
    """Raised when a command runs longer than its timeout."""


@dataclass(frozen=True, kw_only=True)
class CommandOutput:
    """Captured result of one shell command."""

    command: str
    returncode: int
    stdout: str
    stderr: str


def run_command(
    command: str,
    *,
    timeout: float = DEFAULT_COMMAND_TIMEOUT,
    verbose: bool = False,
) -> CommandOutput:
    """Run a command through the shell in the current working directory.

    Trailing newlines are stripped from the captured output so it compares
    cleanly against expected strings. Bytes that are not valid UTF-8 are kept
    as ``\\xNN`` escapes, so ``printf 'ab\\377'`` captures ``ab\\xff``.

    Raises:
        CommandTimeoutError: If the command does not finish within ``timeout``

    """
    env = dict(os.environ)
    if verbose:
        env[VERBOSE_ENV] = "1"

    log.debug("Running command: %s", command)
    try:
        completed = subprocess.run(
            command,
            shell=True,
            capture_output=True,
            encoding="utf-8",
            errors="backslashreplace",
            timeout=timeout,
            env=env,
            check=False,
        )
    except subprocess.TimeoutExpired as exc:
        raise CommandTimeoutError(
            f"Command timed out after {timeout:g} seconds: {command}"
        ) from exc

    log.debug("Command exited with %d: %s", completed.returncode, command)
    return CommandOutput(
        command=command,
        returncode=completed.returncode,
        stdout=completed.stdout.rstrip("\n"),
        stderr=completed.stderr.rstrip("\n"),
    )


def substitute(value: str, outputs: Mapping[str, CommandOutput]) -> str:
    """Replace ``${id.stdout}``-style references with captured command output.

    Raises:
        DefinitionError: If a reference names a command that has not run

    """

    def _replace(match: re.Match[str]) -> str:
        output = outputs.get(match["id"])
        if output is None:
            raise DefinitionError(
                f"Unknown command id '{match['id']}' referenced in '{value}'"
            )
        return str(getattr(output, match["field"]))

    return REFERENCE_PATTERN.sub(_replace, value)


@dataclass(frozen=True, kw_only=True)
class ScriptBody:
    """Test body that runs the steps of a unit definition in order."""

    definition: UnitDefinition
    command_timeout: float = DEFAULT_COMMAND_TIMEOUT
    verbose: bool = False

    def __call__(self, assertions: Assertions) -> None:
        outputs: dict[str, CommandOutput] = {}

        for step in self.definition.steps:
            if isinstance(step, CommandStep):
                output = self.run_step(step, outputs)
                if step.id is not None:
                    outputs[step.id] = output
                if step.check:
                    assertions.exit_code_success(step.run, output.returncode)
            else:
                self.check_step(step, assertions, outputs)

    def run_step(
        self, step: CommandStep, outputs: Mapping[str, CommandOutput]
    ) -> CommandOutput:
        timeout = step.timeout if step.timeout is not None else self.command_timeout
        return run_command(
            substitute(step.run, outputs), timeout=timeout, verbose=self.verbose
        )

    def check_step(
        self,
        step: AssertionStep,
        assertions: Assertions,
        outputs: Mapping[str, CommandOutput],
    ) -> AssertionResult:
        assertion = getattr(assertions, ASSERTION_KINDS[step.kind])
        arguments = step.arguments(lambda value: substitute(value, outputs))
        result: AssertionResult = assertion(step.description, *arguments)
        return result


def load_script_body(
    unit: TestUnit,
    *,
    command_timeout: float = DEFAULT_COMMAND_TIMEOUT,
    verbose: bool = False,
) -> ScriptBody:
    """Build the script body for a unit from its definition file."""
    return ScriptBody(
        definition=load_unit_definition(unit.path),
        command_timeout=command_timeout,
        verbose=verbose,
    )
