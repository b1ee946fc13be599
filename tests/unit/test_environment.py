"""Tests for the workspace lifecycle."""

import logging
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from cli_harness.environment import (
    TEMP_PREFIX,
    EnvironmentSetupError,
    fixture_files,
    isolated_environment,
    make_temp_dir,
    setup,
    teardown,
)


@pytest.fixture
def fixture_dir(tmp_path: Path) -> Path:
    """Create a fixture directory with visible, hidden and nested entries."""
    fixtures = tmp_path / "fixtures"
    fixtures.mkdir()
    (fixtures / "hello.test").write_text("steps: []\n")
    (fixtures / "input.md").write_text("# input\n")
    (fixtures / ".hidden").write_text("secret\n")
    (fixtures / "nested").mkdir()
    (fixtures / "nested" / "deep.txt").write_text("deep\n")
    return fixtures


@pytest.fixture
def temp_root(tmp_path: Path) -> Path:
    """Directory to create workspaces in."""
    root = tmp_path / "tmp"
    root.mkdir()
    return root


def test_fixture_files_skips_hidden_files_and_directories(fixture_dir: Path) -> None:
    """Only regular, visible files are listed."""
    names = [path.name for path in fixture_files(fixture_dir)]

    assert names == ["hello.test", "input.md"]


def test_make_temp_dir_uses_prefix(temp_root: Path) -> None:
    """Creates a prefixed directory under the given root."""
    path = make_temp_dir(temp_root)

    assert path.is_dir()
    assert path.parent == temp_root
    assert path.name.startswith(TEMP_PREFIX)


def test_make_temp_dir_falls_back_to_system_temp(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    """Falls back to the system temp directory when the root is unusable."""
    missing_root = tmp_path / "does-not-exist"

    with caplog.at_level(logging.WARNING):
        path = make_temp_dir(missing_root)

    try:
        assert path.is_dir()
        assert path.parent != missing_root
        assert "Cannot create temporary directory" in caplog.text
    finally:
        path.rmdir()


def test_make_temp_dir_raises_when_no_directory_can_be_created() -> None:
    """Raises EnvironmentSetupError when every attempt fails."""
    with (
        patch(
            "cli_harness.environment.tempfile.mkdtemp",
            side_effect=PermissionError("denied"),
        ),
        pytest.raises(EnvironmentSetupError, match="denied"),
    ):
        make_temp_dir(Path("/nonexistent"))


def test_setup_copies_fixtures_and_enters_workspace(
    fixture_dir: Path,
    temp_root: Path,
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Copies the flat fixture files and changes into the workspace."""
    monkeypatch.chdir(tmp_path)

    context = setup(fixture_dir, temp_root)

    assert Path.cwd() == context.workspace.resolve()
    assert context.previous_cwd == tmp_path
    assert context.copied_files == ("hello.test", "input.md")
    assert sorted(os.listdir(context.workspace)) == ["hello.test", "input.md"]
    assert (context.workspace / "input.md").read_text() == "# input\n"

    teardown(context)


def test_teardown_restores_cwd_and_removes_workspace(
    fixture_dir: Path,
    temp_root: Path,
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Returns to the previous directory and deletes the workspace tree."""
    monkeypatch.chdir(tmp_path)
    context = setup(fixture_dir, temp_root)
    (context.workspace / "sub").mkdir()
    (context.workspace / "sub" / "made-by-test.txt").write_text("x")

    teardown(context)

    assert Path.cwd() == tmp_path
    assert not context.workspace.exists()


def test_setup_removes_workspace_when_copy_fails(
    fixture_dir: Path,
    temp_root: Path,
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """A failed copy leaves neither a workspace nor a changed cwd behind."""
    monkeypatch.chdir(tmp_path)

    with (
        patch(
            "cli_harness.environment.shutil.copy2",
            side_effect=OSError("disk full"),
        ),
        pytest.raises(EnvironmentSetupError, match="disk full"),
    ):
        setup(fixture_dir, temp_root)

    assert Path.cwd() == tmp_path
    assert list(temp_root.iterdir()) == []


def test_isolated_environment_tears_down_on_error(
    fixture_dir: Path,
    temp_root: Path,
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Teardown runs even when the enclosed block raises."""
    monkeypatch.chdir(tmp_path)

    with (
        pytest.raises(RuntimeError, match="boom"),
        isolated_environment(fixture_dir, temp_root=temp_root) as context,
    ):
        assert context is not None
        raise RuntimeError("boom")

    assert Path.cwd() == tmp_path
    assert list(temp_root.iterdir()) == []


def test_isolated_environment_skip_setup_runs_in_place(
    fixture_dir: Path,
    temp_root: Path,
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """With skip_setup nothing is created and the cwd is untouched."""
    monkeypatch.chdir(tmp_path)

    with isolated_environment(
        fixture_dir, skip_setup=True, temp_root=temp_root
    ) as context:
        assert context is None
        assert Path.cwd() == tmp_path

    assert list(temp_root.iterdir()) == []


def test_workspaces_are_never_reused(
    fixture_dir: Path,
    temp_root: Path,
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Files made in one workspace do not appear in the next one."""
    monkeypatch.chdir(tmp_path)

    with isolated_environment(fixture_dir, temp_root=temp_root) as first:
        Path("hello.txt").write_text("hello")
    with isolated_environment(fixture_dir, temp_root=temp_root) as second:
        assert not Path("hello.txt").exists()

    assert first is not None
    assert second is not None
    assert first.workspace != second.workspace
