"""Tests for tasks/changelog.py."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

from vlapp.context import BuildContext
from vlapp.core.config import BuildFlags, Config
from vlapp.core.errors import ErrorCode
from vlapp.core.result import Err, Ok
from vlapp.git.repository import Repository
from vlapp.output.console import MockConsole
from vlapp.tasks.changelog import (
    GENERIC_CHANGELOG_FILE,
    PROJECT_CHANGELOG_FILE,
    generic_changelog,
    generic_changelog_task,
    project_changelog,
    project_changelog_task,
    render_changelog,
)


def _completed(stdout: str = "", stderr: str = "", returncode: int = 0) -> subprocess.CompletedProcess[str]:
    return subprocess.CompletedProcess(args=["git"], returncode=returncode, stdout=stdout, stderr=stderr)


def _fake_git(*, tag: str | None, log: str = "", log_error: str | None = None):
    """Build a subprocess.run stand-in answering describe and log."""
    calls: list[list[str]] = []

    def fake(cmd: list[str], **_: object) -> subprocess.CompletedProcess[str]:
        calls.append(cmd)
        sub = cmd[3]
        if sub == "describe":
            if tag is None:
                return _completed(returncode=128, stderr="fatal: No names found, cannot describe anything.")
            return _completed(stdout=f"{tag}\n")
        if sub == "log":
            if log_error is not None:
                return _completed(returncode=128, stderr=log_error)
            return _completed(stdout=log)
        raise AssertionError(f"unexpected git call: {cmd}")

    return fake, calls


class TestRender:
    def test_with_since(self) -> None:
        assert render_changelog("v1.0.0", ["- Fix crash (abc123)"]) == (
            "Changes since v1.0.0\n--------------------\n- Fix crash (abc123)\n"
        )

    def test_full_history(self) -> None:
        assert render_changelog(None, ["- Initial (111111)"]).startswith("All changes\n-----------\n")

    def test_no_commits(self) -> None:
        assert render_changelog("v2.0.0", []).endswith("No changes\n")


class TestProjectChangelog:
    def test_since_last_tag(self, tmp_path: Path) -> None:
        fake, calls = _fake_git(tag="v1.4.9", log="- Add search (a1b2c3)\n- Fix login (d4e5f6)\n")
        out = tmp_path / "build" / "changelog.txt"

        with patch("subprocess.run", side_effect=fake):
            result = project_changelog(Repository(tmp_path), out)

        assert isinstance(result, Ok)
        assert result.value.since == "v1.4.9"
        assert result.value.entries == 2
        assert calls[-1][-1] == "v1.4.9..HEAD"
        content = out.read_text(encoding="utf-8")
        assert content.startswith("Changes since v1.4.9")
        assert "- Fix login (d4e5f6)" in content

    def test_no_tag_uses_whole_history(self, tmp_path: Path) -> None:
        fake, calls = _fake_git(tag=None, log="- Initial commit (000001)\n")
        out = tmp_path / "changelog.txt"

        with patch("subprocess.run", side_effect=fake):
            result = project_changelog(Repository(tmp_path), out)

        assert isinstance(result, Ok)
        assert result.value.since is None
        assert calls[-1][-1] == "HEAD"
        assert out.read_text(encoding="utf-8").startswith("All changes")

    def test_overwrites_previous_output(self, tmp_path: Path) -> None:
        out = tmp_path / "changelog.txt"
        out.write_text("stale\n", encoding="utf-8")
        fake, _ = _fake_git(tag="v1.0.0", log="")

        with patch("subprocess.run", side_effect=fake):
            project_changelog(Repository(tmp_path), out)

        assert "stale" not in out.read_text(encoding="utf-8")

    def test_log_failure(self, tmp_path: Path) -> None:
        fake, _ = _fake_git(tag="v1.0.0", log_error="fatal: bad revision")

        with patch("subprocess.run", side_effect=fake):
            result = project_changelog(Repository(tmp_path), tmp_path / "changelog.txt")

        assert isinstance(result, Err)
        assert result.error.kind == "command_failed"
        assert "bad revision" in result.error.message


class TestGenericChangelog:
    def test_explicit_since_skips_describe(self, tmp_path: Path) -> None:
        fake, calls = _fake_git(tag="v9.9.9", log="- One (1)\n")

        with patch("subprocess.run", side_effect=fake):
            result = generic_changelog(Repository(tmp_path), tmp_path / "out.txt", "release-2026")

        assert isinstance(result, Ok)
        assert [c[3] for c in calls] == ["log"]
        assert calls[0][-1] == "release-2026..HEAD"


class TestChangelogTasks:
    def _ctx(self, tmp_path: Path, flags: dict[str, str] | None = None) -> BuildContext:
        return BuildContext(
            project_root=tmp_path,
            config=Config(),
            flags=BuildFlags(flags or {}),
            console=MockConsole(),
        )

    def test_project_task_writes_under_changelog_dir(self, tmp_path: Path) -> None:
        ctx = self._ctx(tmp_path)
        fake, _ = _fake_git(tag="v1.0.0", log="- A (1)\n")

        with patch("subprocess.run", side_effect=fake):
            result = project_changelog_task(ctx, "generateProjectChangeLog")()

        expected = tmp_path / "build" / "changelog" / PROJECT_CHANGELOG_FILE
        assert result == Ok(str(expected))
        assert expected.exists()

    def test_generic_task_reads_since_flag(self, tmp_path: Path) -> None:
        ctx = self._ctx(tmp_path, {"changelogSince": "abc123"})
        fake, calls = _fake_git(tag="v1.0.0", log="")

        with patch("subprocess.run", side_effect=fake):
            result = generic_changelog_task(ctx, "generateGenericChangeLog")()

        assert isinstance(result, Ok)
        assert result.value.endswith(GENERIC_CHANGELOG_FILE)
        assert calls[0][-1] == "abc123..HEAD"

    @patch("subprocess.run")
    def test_git_failure_is_command_error(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = _completed(returncode=128, stderr="fatal: not a git repository")

        result = project_changelog_task(self._ctx(tmp_path), "generateProjectChangeLog")()

        assert isinstance(result, Err)
        assert result.error.task == "generateProjectChangeLog"
        assert result.error.code == ErrorCode.COMMAND_ERROR
