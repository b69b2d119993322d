"""Tag the current commit with the version from the version record."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from vlapp.core.result import Err, Ok, Result
from vlapp.git.repository import Repository
from vlapp.graph.task import TaskAction, TaskFailure

from .errors import ReleaseError, from_git_error, to_task_failure
from .version import read_version_record

if TYPE_CHECKING:
    from vlapp.context import BuildContext


def tag_project(repo: Repository, version_file: Path) -> Result[str, ReleaseError]:
    """Create ``v{major}.{minor}.{build}`` on HEAD and return the tag name.

    An existing tag is an error, not a no-op: the version was not bumped
    since the last release.
    """
    record = read_version_record(version_file)
    if isinstance(record, Err):
        return Err(
            ReleaseError(kind="version_unreadable", message=record.error.message, hint=record.error.hint)
        )

    tag = record.value.tag
    if repo.tag_exists(tag):
        return Err(
            ReleaseError(
                kind="tag_exists",
                message=f"tag already exists: {tag}",
                hint="Bump the version before tagging a new release",
            )
        )

    created = repo.create_tag(tag, f"Release {record.value.version_name}")
    if isinstance(created, Err):
        return Err(from_git_error(created.error))
    return Ok(tag)


def tag_task(ctx: BuildContext, task_name: str) -> TaskAction:
    def action() -> Result[str, TaskFailure]:
        match tag_project(ctx.repository(), ctx.version_file):
            case Err(error):
                return Err(to_task_failure(task_name, error))
            case Ok(tag):
                ctx.console.success(f"tagged {tag}")
                return Ok(tag)

    return action
