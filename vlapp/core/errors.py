"""Error codes and fatal configuration errors.

``ErrorCode`` values are used as process exit codes by the CLI and must
remain stable:
- 0: Success
- 1: User error (unknown task, bad -P syntax)
- 2: Configuration fault (graph wiring, unreadable version record)
- 3: Verification failure (dirty tree, not on CI, stage URL)
- 4: External command failure (git exited non-zero)
- 5: I/O error (file not writable)
"""

from __future__ import annotations

from enum import IntEnum

__all__ = ["ConfigurationFault", "ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands."""

    OK = 0
    USER_ERROR = 1
    CONFIG_ERROR = 2
    VERIFY_ERROR = 3
    COMMAND_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK

    @property
    def is_error(self) -> bool:
        return self != ErrorCode.OK


class ConfigurationFault(Exception):
    """Build-graph configuration cannot proceed.

    Raised for duplicate task names, edges to tasks that are not registered
    yet, and a version record the build description needs but cannot read.
    Never retried: the host must fix its configuration.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint
