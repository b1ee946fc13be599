"""Process-wide run state shared by the runner and the reporter."""

from dataclasses import dataclass


@dataclass(kw_only=True)
class RunState:
    """Flags set from the command line plus the aggregate failure flag."""

    fail_fast: bool = False
    verbose: bool = False
    skip_setup: bool = False
    only_unit: str | None = None
    failed: bool = False

    def mark_failed(self) -> None:
        self.failed = True

    @property
    def exit_code(self) -> int:
        return 1 if self.failed else 0
