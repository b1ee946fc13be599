"""CLI entry point for the integration-test harness."""

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import NoReturn

from cli_harness.config import ConfigError, HarnessConfig, load_config
from cli_harness.definition_loader import discover, unit_name
from cli_harness.housekeeping import HousekeepingError, clean
from cli_harness.models.result import UnitResult
from cli_harness.models.state import RunState
from cli_harness.reporter import Reporter
from cli_harness.runner import TestRunner

STATUS_SYMBOLS = {
    "passed": "✓",
    "failed": "✗",
    "error": "!",
}


class HelpOnErrorParser(argparse.ArgumentParser):
    """Argument parser that prints the full help on a usage error."""

    def error(self, message: str) -> NoReturn:
        self.print_help(sys.stderr)
        self.exit(2, f"\n{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = HelpOnErrorParser(
        prog="cli-harness",
        description="Run integration test units in isolated temporary workspaces",
        add_help=False,
    )
    parser.add_argument(
        "-h",
        "--help",
        action="store_true",
        help="show this help and the available units",
    )
    parser.add_argument(
        "-d",
        "--debug",
        dest="skip_setup",
        action="store_true",
        help="debug: run in the current directory instead of a temporary one",
    )
    parser.add_argument(
        "-x",
        "--exitfirst",
        dest="fail_fast",
        action="store_true",
        help="stop at the first failure",
    )
    parser.add_argument(
        "-u",
        "--unit",
        metavar="UNIT",
        help="only run UNIT (a trailing .test is ignored)",
    )
    parser.add_argument(
        "-c",
        "--clean",
        action="store_true",
        help="remove generated files and restore tracked fixtures, then exit",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="ask the tool under test to be verbose",
    )
    parser.add_argument(
        "--fixture-dir",
        type=Path,
        default=Path("."),
        help="directory holding the test units (default: current directory)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="YAML configuration file (default: <fixture-dir>/cli-harness.yaml)",
    )
    return parser


def format_help(parser: argparse.ArgumentParser, config: HarnessConfig) -> str:
    """Help text followed by the units available in the fixture directory."""
    lines = [parser.format_help(), "Available units:"]
    if config.fixture_dir.is_dir():
        lines.extend(
            f"    - {unit.name}"
            for unit in discover(config.fixture_dir, config.extension)
        )
    return "\n".join(lines)


def log_results_summary(log: logging.Logger, results: Sequence[UnitResult]) -> None:
    """Log a summary of unit results."""
    if not results:
        return

    log.info("=" * 80)
    log.info("Test Results Summary:")
    log.info("=" * 80)

    for result in results:
        symbol = STATUS_SYMBOLS.get(result.status, "?")
        log.info(
            "%s %s: %s (%d/%d assertions passed, %.2fs)",
            symbol,
            result.name,
            result.status,
            len(result.assertions) - len(result.failures),
            len(result.assertions),
            result.duration,
        )
        if result.message:
            log.info("  Message: %s", result.message)


def run(config: HarnessConfig, state: RunState) -> int:
    """Run the selected units and return the exit code."""
    log = logging.getLogger("cli_harness")

    runner = TestRunner(config=config, state=state, reporter=Reporter(state=state))
    results = runner.run_all()

    log_results_summary(log, results)
    return state.exit_code


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    log = logging.getLogger("cli_harness")

    fixture_dir = args.fixture_dir.resolve()
    try:
        config = load_config(fixture_dir, args.config)
    except ConfigError as exc:
        if not args.help:
            log.error("%s", exc)
            sys.exit(2)
        # Help still lists units with the default settings.
        log.warning("%s", exc)
        config = HarnessConfig(fixture_dir=fixture_dir)

    if args.help:
        print(format_help(parser, config))
        sys.exit(0)

    if args.clean:
        try:
            clean(config)
        except HousekeepingError as exc:
            log.error("Housekeeping failed: %s", exc)
            sys.exit(1)
        sys.exit(0)

    state = RunState(
        fail_fast=args.fail_fast,
        verbose=args.verbose,
        skip_setup=args.skip_setup,
        only_unit=(
            unit_name(args.unit, config.extension) if args.unit is not None else None
        ),
    )
    sys.exit(run(config, state))


if __name__ == "__main__":  # pragma: no cover
    main()
