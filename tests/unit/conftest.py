"""Fixtures for unit tests."""

import io

import pytest

from cli_harness.assertions import Assertions
from cli_harness.models.state import RunState
from cli_harness.reporter import Reporter


@pytest.fixture
def state() -> RunState:
    """Create a fresh run state."""
    return RunState()


@pytest.fixture
def stream() -> io.StringIO:
    """Capture reporter output."""
    return io.StringIO()


@pytest.fixture
def reporter(state: RunState, stream: io.StringIO) -> Reporter:
    """Create a reporter writing to the captured stream."""
    return Reporter(state=state, stream=stream)


@pytest.fixture
def assertions(reporter: Reporter) -> Assertions:
    """Create assertions bound to the reporter."""
    return Assertions(reporter=reporter)
