"""Isolated workspace lifecycle for test units."""

import logging
import os
import shutil
import tempfile
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

log = logging.getLogger(__name__)

TEMP_PREFIX = "cli-harness-"


class EnvironmentSetupError(Exception):
    """Raised when a workspace cannot be created, entered or left."""


@dataclass(frozen=True, kw_only=True)
class ExecutionContext:
    """One live workspace and the directory to return to afterwards."""

    workspace: Path
    previous_cwd: Path
    copied_files: Sequence[str] = ()


def fixture_files(fixture_dir: Path) -> Sequence[Path]:
    """List the regular, non-hidden files directly inside the fixture directory."""
    return sorted(
        path
        for path in fixture_dir.iterdir()
        if not path.name.startswith(".") and path.is_file()
    )


def make_temp_dir(temp_root: Path | None = None) -> Path:
    """Create a unique temporary directory.

    The configured root is tried first. If it is unusable the system temp
    directory is used instead.
    """
    try:
        return Path(tempfile.mkdtemp(prefix=TEMP_PREFIX, dir=temp_root))
    except OSError as exc:
        if temp_root is None:
            raise EnvironmentSetupError(
                f"Cannot create temporary directory: {exc}"
            ) from exc
        log.warning(
            "Cannot create temporary directory in %s (%s), using %s",
            temp_root,
            exc,
            tempfile.gettempdir(),
        )

    try:
        return Path(tempfile.mkdtemp(prefix=TEMP_PREFIX))
    except OSError as exc:
        raise EnvironmentSetupError(
            f"Cannot create temporary directory: {exc}"
        ) from exc


def setup(fixture_dir: Path, temp_root: Path | None = None) -> ExecutionContext:
    """Create a workspace holding a copy of the fixture files and enter it.

    Raises:
        EnvironmentSetupError: If the workspace cannot be created or entered

    """
    workspace = make_temp_dir(temp_root)
    log.info("Setting up in %s ...", workspace)

    copied: list[str] = []
    try:
        previous_cwd = Path.cwd()
        for source in fixture_files(fixture_dir):
            shutil.copy2(source, workspace / source.name)
            copied.append(source.name)
        os.chdir(workspace)
    except OSError as exc:
        shutil.rmtree(workspace, ignore_errors=True)
        raise EnvironmentSetupError(
            f"Cannot prepare workspace {workspace}: {exc}"
        ) from exc

    log.debug("Copied %d fixture file(s) into %s", len(copied), workspace)
    return ExecutionContext(
        workspace=workspace,
        previous_cwd=previous_cwd,
        copied_files=tuple(copied),
    )


def teardown(context: ExecutionContext) -> None:
    """Return to the previous working directory and remove the workspace.

    Raises:
        EnvironmentSetupError: If the previous working directory cannot be
            restored. The workspace is removed either way.

    """
    log.info("Cleaning up ...")
    try:
        os.chdir(context.previous_cwd)
    except OSError as exc:
        raise EnvironmentSetupError(
            f"Cannot return to {context.previous_cwd}: {exc}"
        ) from exc
    finally:
        try:
            shutil.rmtree(context.workspace)
        except OSError as exc:
            log.warning("Could not remove workspace %s: %s", context.workspace, exc)


@contextmanager
def isolated_environment(
    fixture_dir: Path,
    *,
    skip_setup: bool = False,
    temp_root: Path | None = None,
) -> Iterator[ExecutionContext | None]:
    """Run the enclosed block inside a fresh workspace.

    Teardown runs whenever setup succeeded, including when the block raises.
    With ``skip_setup`` the block runs in the current directory and nothing
    is created or removed.
    """
    if skip_setup:
        log.info("Running in place in %s", Path.cwd())
        yield None
        return

    context = setup(fixture_dir, temp_root)
    try:
        yield context
    finally:
        teardown(context)
