"""Error payload shared by the changelog and tagging tasks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from vlapp.core.errors import ErrorCode
from vlapp.git.repository import GitError
from vlapp.graph.task import TaskFailure

__all__ = ["ReleaseError", "ReleaseErrorKind", "from_git_error", "to_task_failure"]

ReleaseErrorKind = Literal[
    "build_file_invalid",
    "command_failed",
    "tag_exists",
    "version_unreadable",
    "write_failed",
]

_EXIT_CODES: dict[ReleaseErrorKind, ErrorCode] = {
    "build_file_invalid": ErrorCode.CONFIG_ERROR,
    "command_failed": ErrorCode.COMMAND_ERROR,
    "tag_exists": ErrorCode.COMMAND_ERROR,
    "version_unreadable": ErrorCode.CONFIG_ERROR,
    "write_failed": ErrorCode.IO_ERROR,
}


@dataclass(frozen=True, slots=True)
class ReleaseError:
    """Why a changelog, tagging or module step failed.

    ``command_failed`` covers any git command that exited non-zero; it is
    never retried because neither tagging nor changelog writing is safely
    repeatable.
    """

    kind: ReleaseErrorKind
    message: str
    hint: str | None = None

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message


def from_git_error(error: GitError) -> ReleaseError:
    return ReleaseError(
        kind="command_failed",
        message=f"git {error.command} failed (exit {error.returncode}): {error.message}",
    )


def to_task_failure(task: str, error: ReleaseError) -> TaskFailure:
    return TaskFailure(task=task, message=error.message, hint=error.hint, code=_EXIT_CODES[error.kind])
