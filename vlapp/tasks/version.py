"""The persisted version record and the tasks that bump it.

``version.properties`` holds three keys::

    versionMajor=1
    versionMinor=4
    versionBuild=9

Each bump task reads the whole record, increments one field by one, leaves
the other two untouched, and writes the record back. There is no locking:
running two bump tasks at once is a caller error.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from vlapp.core.errors import ErrorCode
from vlapp.core.properties import load_properties, update_properties_text
from vlapp.core.result import Err, Ok, Result
from vlapp.graph.task import TaskAction, TaskFailure
from vlapp.platform.files import write_text_atomic

if TYPE_CHECKING:
    from vlapp.context import BuildContext

__all__ = [
    "KEY_BUILD",
    "KEY_MAJOR",
    "KEY_MINOR",
    "VersionError",
    "VersionField",
    "VersionRecord",
    "bump_task",
    "bump_version",
    "parse_version_record",
    "read_version_record",
    "write_version_record",
]

VersionField = Literal["major", "minor", "build"]

KEY_MAJOR = "versionMajor"
KEY_MINOR = "versionMinor"
KEY_BUILD = "versionBuild"

_KEYS: tuple[tuple[VersionField, str], ...] = (
    ("major", KEY_MAJOR),
    ("minor", KEY_MINOR),
    ("build", KEY_BUILD),
)

_UINT_RE = re.compile(r"^\d+$")


@dataclass(frozen=True, slots=True, order=True)
class VersionRecord:
    major: int
    minor: int
    build: int

    @property
    def version_name(self) -> str:
        return f"{self.major}.{self.minor}.{self.build}"

    @property
    def tag(self) -> str:
        return f"v{self.version_name}"

    def bump(self, kind: VersionField) -> VersionRecord:
        """Increment one field; the others keep their values."""
        match kind:
            case "major":
                return VersionRecord(self.major + 1, self.minor, self.build)
            case "minor":
                return VersionRecord(self.major, self.minor + 1, self.build)
            case "build":
                return VersionRecord(self.major, self.minor, self.build + 1)
            case _:
                raise AssertionError(f"unexpected version field: {kind}")

    def to_properties(self) -> dict[str, str]:
        return {KEY_MAJOR: str(self.major), KEY_MINOR: str(self.minor), KEY_BUILD: str(self.build)}


@dataclass(frozen=True, slots=True)
class VersionError:
    kind: Literal["read_error", "write_error"]
    message: str
    hint: str | None = None


def parse_version_record(
    values: Mapping[str, str],
    *,
    source: Path | None = None,
) -> Result[VersionRecord, VersionError]:
    """Build a record from parsed properties. Every key must hold a uint."""
    hint = str(source) if source is not None else None
    fields: dict[str, int] = {}
    for attr, key in _KEYS:
        raw = values.get(key)
        if raw is None:
            return Err(VersionError(kind="read_error", message=f"missing {key}", hint=hint))
        value = raw.strip()
        if not _UINT_RE.match(value):
            return Err(
                VersionError(
                    kind="read_error",
                    message=f"{key} is not a non-negative integer: {value!r}",
                    hint=hint,
                )
            )
        fields[attr] = int(value)
    return Ok(VersionRecord(**fields))


def read_version_record(path: Path) -> Result[VersionRecord, VersionError]:
    loaded = load_properties(path)
    if isinstance(loaded, Err):
        return Err(
            VersionError(
                kind="read_error",
                message=f"Could not read {path.name}: {loaded.error.message}",
                hint=str(path),
            )
        )
    return parse_version_record(loaded.value, source=path)


def write_version_record(path: Path, record: VersionRecord) -> Result[None, VersionError]:
    """Write ``record`` into ``path``, keeping comments and unrelated keys."""
    try:
        text = path.read_text(encoding="utf-8") if path.exists() else ""
        write_text_atomic(path, update_properties_text(text, record.to_properties()))
    except (OSError, UnicodeDecodeError) as e:
        return Err(
            VersionError(
                kind="write_error",
                message=f"failed to write {path.name}: {e}",
                hint=str(path),
            )
        )
    return Ok(None)


def bump_version(path: Path, kind: VersionField) -> Result[VersionRecord, VersionError]:
    """Read-modify-write: increment ``kind`` in the record at ``path``."""
    current = read_version_record(path)
    if isinstance(current, Err):
        return current

    bumped = current.value.bump(kind)
    written = write_version_record(path, bumped)
    if isinstance(written, Err):
        return written
    return Ok(bumped)


def bump_task(ctx: BuildContext, task_name: str, kind: VersionField) -> TaskAction:
    """Action for one of the ``increase*VersionName`` tasks."""

    def action() -> Result[str, TaskFailure]:
        result = bump_version(ctx.version_file, kind)
        if isinstance(result, Err):
            error = result.error
            return Err(
                TaskFailure(
                    task=task_name,
                    message=error.message,
                    hint=error.hint,
                    code=ErrorCode.CONFIG_ERROR if error.kind == "read_error" else ErrorCode.IO_ERROR,
                )
            )
        ctx.console.success(f"version is now {result.value.version_name}")
        return Ok(result.value.version_name)

    return action
