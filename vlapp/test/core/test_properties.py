"""Tests for vlapp.core.properties module."""

from __future__ import annotations

from pathlib import Path

from vlapp.core.properties import load_properties, parse_properties, update_properties_text
from vlapp.core.result import Err, Ok


class TestParse:
    def test_separators_and_comments(self) -> None:
        text = "# comment\n! also comment\n\nversionMajor = 1\nversionMinor:4\nflag\n"
        assert parse_properties(text) == {"versionMajor": "1", "versionMinor": "4", "flag": ""}

    def test_first_separator_wins(self) -> None:
        assert parse_properties("url=https://example.com:8443/x\n") == {"url": "https://example.com:8443/x"}

    def test_later_duplicate_wins(self) -> None:
        assert parse_properties("a=1\na=2\n") == {"a": "2"}


class TestLoad:
    def test_missing_file(self, tmp_path: Path) -> None:
        result = load_properties(tmp_path / "gradle.properties")
        assert isinstance(result, Err)
        assert "file not found" in result.error.message

    def test_reads_file(self, tmp_path: Path) -> None:
        path = tmp_path / "gradle.properties"
        path.write_text("devBuild\n", encoding="utf-8")
        assert load_properties(path) == Ok({"devBuild": ""})


class TestUpdate:
    def test_rewrites_in_place(self) -> None:
        text = "# header\nversionMajor=1\nother = x\nversionBuild=9\n"
        assert update_properties_text(text, {"versionBuild": "10"}) == (
            "# header\nversionMajor=1\nother = x\nversionBuild=10\n"
        )

    def test_appends_missing_keys(self) -> None:
        assert update_properties_text("a=1", {"b": "2", "c": "3"}) == "a=1\nb=2\nc=3\n"

    def test_drops_shadowing_duplicates(self) -> None:
        text = "versionBuild=9\nversionBuild=11\n"
        updated = update_properties_text(text, {"versionBuild": "10"})
        assert updated == "versionBuild=10\n"
        assert parse_properties(updated) == {"versionBuild": "10"}


class TestJavaSyntax:
    def test_whitespace_separator(self) -> None:
        text = "versionMajor 1\nversionMinor\t4\nversionBuild  :  9\n"
        assert parse_properties(text) == {"versionMajor": "1", "versionMinor": "4", "versionBuild": "9"}

    def test_line_continuation(self) -> None:
        text = "org.gradle.jvmargs=-Xmx2g \\\n    -XX:MaxMetaspaceSize=512m\nandroid.useAndroidX=true\n"
        assert parse_properties(text) == {
            "org.gradle.jvmargs": "-Xmx2g -XX:MaxMetaspaceSize=512m",
            "android.useAndroidX": "true",
        }

    def test_even_backslashes_do_not_continue(self) -> None:
        assert parse_properties("sdk.dir=C:\\\\\nnext=1\n") == {"sdk.dir": "C:\\", "next": "1"}

    def test_comment_never_continues(self) -> None:
        assert parse_properties("# note \\\nkey=v\n") == {"key": "v"}

    def test_escaped_separator_in_key(self) -> None:
        assert parse_properties("a\\=b=c\nx\\ y z\n") == {"a=b": "c", "x y": "z"}

    def test_unicode_escape(self) -> None:
        assert parse_properties("name=K\\u00f8benhavn\n") == {"name": "København"}

    def test_update_collapses_continued_entry(self) -> None:
        text = "# jvm\njvm=-Xmx \\\n  -Xss4m\nversionBuild=9\n"
        assert update_properties_text(text, {"jvm": "-Xmx4g"}) == "# jvm\njvm=-Xmx4g\nversionBuild=9\n"

    def test_update_keeps_whitespace_separated_siblings(self) -> None:
        text = "versionMajor 1\nversionMinor 4\nversionBuild 9\n"
        assert update_properties_text(text, {"versionBuild": "10"}) == (
            "versionMajor 1\nversionMinor 4\nversionBuild=10\n"
        )
