"""Fixtures for integration tests."""

import subprocess
from pathlib import Path
from typing import Protocol

import pytest


class WriteUnitFn(Protocol):
    """Protocol for unit file creation function."""

    def __call__(self, name: str, content: str) -> Path:
        """Write a .test file and return its path."""


@pytest.fixture
def fixture_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Create an empty fixture directory and start the test outside it."""
    fixtures = tmp_path / "fixtures"
    fixtures.mkdir()
    monkeypatch.chdir(tmp_path)
    return fixtures


@pytest.fixture
def write_unit(fixture_dir: Path) -> WriteUnitFn:
    """Return a function to write unit definitions into the fixture directory."""

    def _write(name: str, content: str) -> Path:
        path = fixture_dir / f"{name}.test"
        path.write_text(content)
        return path

    return _write


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    """Create an initialized git repository."""
    repo = tmp_path / "repo"
    repo.mkdir()
    for command in (
        ["git", "init"],
        ["git", "config", "user.email", "test@example.com"],
        ["git", "config", "user.name", "Test"],
    ):
        subprocess.run(command, cwd=repo, check=True, capture_output=True)
    return repo
