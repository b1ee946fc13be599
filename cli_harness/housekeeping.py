"""Housekeeping for fixture directories after local debug runs."""

import logging
import subprocess
from collections.abc import Sequence
from pathlib import Path

from cli_harness.config import HarnessConfig

log = logging.getLogger(__name__)


class HousekeepingError(Exception):
    """Raised when tracked fixture files cannot be restored."""


def matching_files(directory: Path, patterns: Sequence[str]) -> Sequence[Path]:
    """Regular files in ``directory`` matching any of the glob patterns."""
    matches = {
        path
        for pattern in patterns
        for path in directory.glob(pattern)
        if path.is_file()
    }
    return sorted(matches)


def clean(config: HarnessConfig) -> Sequence[Path]:
    """Remove generated files and restore tracked fixtures with git.

    Returns:
        The files that were removed

    Raises:
        HousekeepingError: If ``git checkout`` fails

    """
    removed: list[Path] = []
    for path in matching_files(config.fixture_dir, config.clean_patterns):
        path.unlink()
        log.info("Removed %s", path)
        removed.append(path)

    restore = matching_files(config.fixture_dir, config.restore_patterns)
    if not restore:
        return removed

    try:
        completed = subprocess.run(
            ["git", "checkout", "--", *(path.name for path in restore)],
            cwd=config.fixture_dir,
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as exc:
        raise HousekeepingError(f"Cannot run git: {exc}") from exc

    if completed.returncode != 0:
        raise HousekeepingError(f"git checkout failed: {completed.stderr.strip()}")

    log.info("Restored %d tracked file(s) in %s", len(restore), config.fixture_dir)
    return removed
