"""Git repository abstraction.

``Repository`` wraps the handful of git commands the release tasks need.
All operations return Result types; none of them retries.

Usage:
    repo = Repository(project_root)

    match repo.status():
        case Ok(status) if status.is_clean:
            print("clean")
        case Ok(status):
            print(f"{len(status.entries)} changed files")
        case Err(e):
            print(f"Error: {e.message}")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from vlapp.core.result import Err, Ok, Result
from vlapp.platform.process import ProcessError
from vlapp.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0

# `git describe` messages when the history has no tag to describe from
_NO_TAG_MARKERS = ("No names found", "No tags can describe", "cannot describe anything")

DEFAULT_LOG_FORMAT = "- %s (%h)"

__all__ = [
    "DEFAULT_LOG_FORMAT",
    "GitError",
    "GitStatus",
    "Repository",
    "StatusEntry",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git subcommand that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


@dataclass(frozen=True, slots=True)
class StatusEntry:
    """A single entry of ``git status --porcelain``.

    Attributes:
        xy: Two-character status code (e.g., "M ", " M", "??")
        path: File path
    """

    xy: str
    path: str

    @property
    def is_staged(self) -> bool:
        return self.xy != "??" and self.xy[0] != " "

    @property
    def is_unstaged(self) -> bool:
        return self.xy != "??" and self.xy[1] != " "

    @property
    def is_untracked(self) -> bool:
        return self.xy == "??"


@dataclass(frozen=True, slots=True)
class GitStatus:
    """Parsed working tree status.

    Attributes:
        branch: Current branch name (empty when unknown)
        entries: Staged, unstaged and untracked entries
    """

    branch: str
    entries: tuple[StatusEntry, ...] = field(default_factory=tuple)

    @property
    def is_clean(self) -> bool:
        """True if working tree has no changes."""
        return len(self.entries) == 0

    @property
    def staged(self) -> list[StatusEntry]:
        return [e for e in self.entries if e.is_staged]

    @property
    def unstaged(self) -> list[StatusEntry]:
        return [e for e in self.entries if e.is_unstaged]

    @property
    def untracked(self) -> list[StatusEntry]:
        return [e for e in self.entries if e.is_untracked]


class Repository:
    """Git repository rooted at ``path``."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def exists(self) -> bool:
        """Check if this is a git checkout (``.git`` directory or file)."""
        return (self.path / ".git").exists()

    def status(self) -> Result[GitStatus, GitError]:
        """Run ``git status --porcelain=v1 -b`` and parse it."""
        result = self._run(["status", "--porcelain=v1", "-b"])
        match result:
            case Err(e):
                return Err(self._error("status", e))
            case Ok(stdout):
                return Ok(self._parse_status(stdout))

    def last_tag(self) -> Result[str | None, GitError]:
        """Most recent tag reachable from HEAD, or None when there is none."""
        result = self._run(["describe", "--tags", "--abbrev=0"])
        match result:
            case Err(e):
                if any(marker in e.stderr for marker in _NO_TAG_MARKERS):
                    return Ok(None)
                return Err(self._error("describe", e))
            case Ok(stdout):
                return Ok(stdout.strip() or None)

    def log(
        self,
        since: str | None = None,
        *,
        fmt: str = DEFAULT_LOG_FORMAT,
    ) -> Result[list[str], GitError]:
        """One formatted line per commit in ``since..HEAD`` (all of HEAD if None)."""
        rev = f"{since}..HEAD" if since else "HEAD"
        result = self._run(["log", f"--pretty=format:{fmt}", rev])
        match result:
            case Err(e):
                return Err(self._error("log", e))
            case Ok(stdout):
                return Ok([line for line in stdout.splitlines() if line.strip()])

    def tag_exists(self, name: str) -> bool:
        """Check whether ``refs/tags/<name>`` exists."""
        result = self._run(["rev-parse", "-q", "--verify", f"refs/tags/{name}"])
        return isinstance(result, Ok)

    def create_tag(self, name: str, message: str) -> Result[None, GitError]:
        """Create an annotated tag on HEAD. Fails if the tag already exists."""
        result = self._run(["tag", "-a", name, "-m", message])
        match result:
            case Err(e):
                return Err(self._error("tag", e))
            case Ok(_):
                return Ok(None)

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        """Run a git command in this repository."""
        return run_process(
            ["git", "-C", str(self.path), *args],
            cwd=self.path,
            timeout=_GIT_TIMEOUT_SECONDS,
        )

    def _error(self, command: str, e: ProcessError) -> GitError:
        message = e.stderr.strip() or e.stdout.strip() or f"git {command} failed"
        return GitError(command=command, message=message, returncode=e.returncode)

    def _parse_status(self, output: str) -> GitStatus:
        """Parse ``git status --porcelain=v1 -b`` output."""
        lines = [ln for ln in output.splitlines() if ln.strip()]
        if not lines:
            return GitStatus(branch="")

        branch = ""
        if lines[0].startswith("##"):
            # ## branch...upstream [ahead N]
            branch = lines[0][2:].strip().split(" [", 1)[0].split("...", 1)[0].strip()
            lines = lines[1:]

        entries: list[StatusEntry] = []
        for line in lines:
            entry = self._parse_entry(line)
            if entry:
                entries.append(entry)

        return GitStatus(branch=branch, entries=tuple(entries))

    def _parse_entry(self, line: str) -> StatusEntry | None:
        if len(line) < 4:
            return None
        return StatusEntry(xy=line[:2], path=line[3:])
