"""Changelog generation from the git history.

- project changelog: commits since the last release tag
- generic changelog: commits since the ``changelogSince`` reference, falling
  back to the last release tag

Both fall back to the whole history when the repository has no tag, and both
overwrite their output file on every run.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from vlapp.core.config import CHANGELOG_SINCE
from vlapp.core.result import Err, Ok, Result
from vlapp.git.repository import Repository
from vlapp.graph.task import TaskAction, TaskFailure

from .errors import ReleaseError, from_git_error, to_task_failure

if TYPE_CHECKING:
    from vlapp.context import BuildContext

PROJECT_CHANGELOG_FILE = "changelog.txt"
GENERIC_CHANGELOG_FILE = "changelog_generic.txt"


@dataclass(frozen=True, slots=True)
class WrittenChangeLog:
    path: Path
    since: str | None
    entries: int


def render_changelog(since: str | None, lines: list[str]) -> str:
    title = f"Changes since {since}" if since else "All changes"
    out = [title, "-" * len(title)]
    out.extend(lines or ["No changes"])
    return "\n".join(out) + "\n"


def write_changelog(
    repo: Repository,
    path: Path,
    since: str | None,
) -> Result[WrittenChangeLog, ReleaseError]:
    """Write the log of ``since..HEAD`` to ``path``."""
    log = repo.log(since)
    if isinstance(log, Err):
        return Err(from_git_error(log.error))

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(render_changelog(since, log.value), encoding="utf-8")
    except OSError as e:
        return Err(
            ReleaseError(kind="write_failed", message=f"failed to write changelog: {e}", hint=str(path))
        )

    return Ok(WrittenChangeLog(path=path, since=since, entries=len(log.value)))


def project_changelog(repo: Repository, path: Path) -> Result[WrittenChangeLog, ReleaseError]:
    """Changelog between the last release tag and HEAD."""
    tag = repo.last_tag()
    if isinstance(tag, Err):
        return Err(from_git_error(tag.error))
    return write_changelog(repo, path, tag.value)


def generic_changelog(
    repo: Repository,
    path: Path,
    since: str | None = None,
) -> Result[WrittenChangeLog, ReleaseError]:
    """Changelog since ``since``, or since the last tag when not given."""
    if since:
        return write_changelog(repo, path, since)
    return project_changelog(repo, path)


def _report(
    ctx: BuildContext,
    task_name: str,
    result: Result[WrittenChangeLog, ReleaseError],
) -> Result[str, TaskFailure]:
    match result:
        case Err(error):
            return Err(to_task_failure(task_name, error))
        case Ok(written):
            ctx.console.success(f"{written.entries} commits -> {written.path}")
            return Ok(str(written.path))


def project_changelog_task(ctx: BuildContext, task_name: str) -> TaskAction:
    def action() -> Result[str, TaskFailure]:
        path = ctx.changelog_dir / PROJECT_CHANGELOG_FILE
        return _report(ctx, task_name, project_changelog(ctx.repository(), path))

    return action


def generic_changelog_task(ctx: BuildContext, task_name: str) -> TaskAction:
    def action() -> Result[str, TaskFailure]:
        path = ctx.changelog_dir / GENERIC_CHANGELOG_FILE
        since = ctx.flags.get(CHANGELOG_SINCE) or None
        return _report(ctx, task_name, generic_changelog(ctx.repository(), path, since))

    return action
