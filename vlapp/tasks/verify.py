# SPDX-License-Identifier: MIT
"""Release verification checks.

Each check is a stateless probe returning ``Ok(None)`` or
``Err(VerificationFailure)``:

- VersionControlCheck: the working tree has no uncommitted changes
- BuildServerCheck: the build runs on the CI server
- NoStageUrlCheck: no build constant points at a staging endpoint
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from vlapp.core.errors import ErrorCode
from vlapp.core.result import Err, Ok, Result
from vlapp.git.repository import Repository
from vlapp.graph.task import TaskAction, TaskFailure

from . import names

if TYPE_CHECKING:
    from vlapp.context import BuildContext

__all__ = [
    "BuildServerCheck",
    "NoStageUrlCheck",
    "Verification",
    "VerificationFailure",
    "VersionControlCheck",
    "verification_action",
    "verifications",
]

_MAX_LISTED_PATHS = 5


@dataclass(frozen=True, slots=True)
class VerificationFailure:
    """A failed check.

    Attributes:
        name: Task name of the check
        message: What is wrong
        hint: How to fix it
    """

    name: str
    message: str
    hint: str | None = None


class Verification(Protocol):
    @property
    def name(self) -> str: ...

    def check(self) -> Result[None, VerificationFailure]: ...


@dataclass(frozen=True, slots=True)
class VersionControlCheck:
    """Fail when git reports staged, unstaged or untracked changes."""

    repository: Repository
    name: str = names.VERIFY_VERSION_CONTROL

    def check(self) -> Result[None, VerificationFailure]:
        status = self.repository.status()
        if isinstance(status, Err):
            return Err(
                VerificationFailure(
                    self.name,
                    f"cannot read git status: {status.error.message}",
                    hint="Run the release build from a git checkout",
                )
            )

        entries = status.value.entries
        if not entries:
            return Ok(None)

        listed = ", ".join(e.path for e in entries[:_MAX_LISTED_PATHS])
        if len(entries) > _MAX_LISTED_PATHS:
            listed += f", ... ({len(entries) - _MAX_LISTED_PATHS} more)"
        return Err(
            VerificationFailure(
                self.name,
                f"working tree has uncommitted changes: {listed}",
                hint="Commit or stash your changes before building a release",
            )
        )


@dataclass(frozen=True, slots=True)
class BuildServerCheck:
    """Fail unless one of ``markers`` is set in ``environ``."""

    environ: Mapping[str, str]
    markers: tuple[str, ...]
    name: str = names.VERIFY_BUILD_SERVER

    def check(self) -> Result[None, VerificationFailure]:
        if any(self.environ.get(marker) for marker in self.markers):
            return Ok(None)
        return Err(
            VerificationFailure(
                self.name,
                "release builds must run on the build server",
                hint=f"None of {', '.join(self.markers)} is set; use -P ignoreChecks for a local build",
            )
        )


@dataclass(frozen=True, slots=True)
class NoStageUrlCheck:
    """Fail when a build constant contains ``marker`` (case-insensitive)."""

    constants: Mapping[str, str]
    marker: str
    name: str = names.VERIFY_NO_STAGE_URL

    def check(self) -> Result[None, VerificationFailure]:
        needle = self.marker.lower()
        offending = sorted(key for key, value in self.constants.items() if needle in value.lower())
        if not offending:
            return Ok(None)
        return Err(
            VerificationFailure(
                self.name,
                f"staging endpoint in build constants: {', '.join(offending)}",
                hint="Point these constants at production before releasing",
            )
        )


def verifications(ctx: BuildContext) -> list[Verification]:
    """The three checks, configured from ``ctx``."""
    return [
        VersionControlCheck(ctx.repository()),
        BuildServerCheck(ctx.environ, ctx.config.verify.build_server_env),
        NoStageUrlCheck(ctx.config.constants, ctx.config.verify.stage_marker),
    ]


def verification_action(ctx: BuildContext, verification: Verification) -> TaskAction:
    """Task action running ``verification``; a failure fails the task."""

    def action() -> Result[str, TaskFailure]:
        result = verification.check()
        if isinstance(result, Err):
            failure = result.error
            return Err(
                TaskFailure(
                    task=failure.name,
                    message=failure.message,
                    hint=failure.hint,
                    code=ErrorCode.VERIFY_ERROR,
                )
            )
        ctx.console.success(f"{verification.name}: ok")
        return Ok("ok")

    return action
