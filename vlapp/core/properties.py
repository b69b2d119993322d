"""Flat key-value documents in the ``.properties`` format.

Parsing follows ``java.util.Properties``:

- ``#`` and ``!`` start comment lines; blank lines are skipped.
- The key ends at the first unescaped ``=``, ``:`` or whitespace. Whitespace
  around the separator is skipped, so ``key = v``, ``key:v`` and ``key v``
  are the same entry.
- A line ending in an odd number of backslashes continues on the next line,
  whose leading whitespace is dropped.
- ``\\t``, ``\\n``, ``\\r``, ``\\f`` and ``\\uXXXX`` are decoded; any other
  escaped character stands for itself.

Unlike Java, keys and values are also trimmed on the right.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path

from .result import Err, Ok, Result

__all__ = [
    "PropertiesError",
    "load_properties",
    "parse_properties",
    "update_properties_text",
]

_COMMENT_PREFIXES = ("#", "!")
_SEPARATORS = "=:"
_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}
_HEX4_RE = re.compile(r"[0-9a-fA-F]{4}")


@dataclass(frozen=True, slots=True)
class PropertiesError:
    """A properties file could not be read."""

    message: str
    path: Path | None = None


def _continues(line: str) -> bool:
    return (len(line) - len(line.rstrip("\\"))) % 2 == 1


def _logical_lines(lines: list[str]) -> Iterator[tuple[int, int, str]]:
    """Yield ``(first, last, text)`` for each logical line.

    ``first`` and ``last`` index the physical lines it spans.
    """
    i = 0
    while i < len(lines):
        first = i
        line = lines[i].lstrip()
        if not line or line.startswith(_COMMENT_PREFIXES):
            # comments never continue
            yield first, i, line
            i += 1
            continue

        parts: list[str] = []
        while _continues(line) and i + 1 < len(lines):
            parts.append(line[:-1])
            i += 1
            line = lines[i].lstrip()
        if _continues(line):
            line = line[:-1]
        parts.append(line)
        yield first, i, "".join(parts)
        i += 1


def _unescape(s: str) -> str:
    if "\\" not in s:
        return s
    out: list[str] = []
    i = 0
    while i < len(s):
        c = s[i]
        if c != "\\" or i + 1 == len(s):
            out.append(c)
            i += 1
            continue
        nxt = s[i + 1]
        if nxt == "u" and _HEX4_RE.fullmatch(s[i + 2 : i + 6]):
            out.append(chr(int(s[i + 2 : i + 6], 16)))
            i += 6
            continue
        out.append(_ESCAPES.get(nxt, nxt))
        i += 2
    return "".join(out)


def _split_entry(logical: str) -> tuple[str, str] | None:
    """Key and value of a logical line; None for blanks, comments and empty keys."""
    if not logical or logical.startswith(_COMMENT_PREFIXES):
        return None

    end = 0
    while end < len(logical):
        c = logical[end]
        if c == "\\":
            end += 2
            continue
        if c in _SEPARATORS or c.isspace():
            break
        end += 1

    key = _unescape(logical[:end]).strip()
    rest = logical[end:].lstrip()
    if rest and rest[0] in _SEPARATORS:
        rest = rest[1:].lstrip()
    if not key:
        return None
    return key, _unescape(rest.rstrip())


def parse_properties(text: str) -> dict[str, str]:
    """Parse ``.properties`` text. Later duplicates override earlier ones."""
    out: dict[str, str] = {}
    for _, _, logical in _logical_lines(text.splitlines()):
        pair = _split_entry(logical)
        if pair is not None:
            out[pair[0]] = pair[1]
    return out


def load_properties(path: Path) -> Result[dict[str, str], PropertiesError]:
    """Read and parse a ``.properties`` file."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return Err(PropertiesError(f"file not found: {path}", path=path))
    except (OSError, UnicodeDecodeError) as e:
        return Err(PropertiesError(f"cannot read {path.name}: {e}", path=path))
    return Ok(parse_properties(text))


def update_properties_text(text: str, updates: Mapping[str, str]) -> str:
    """Return ``text`` with ``updates`` applied.

    Existing keys are rewritten in place as ``key=value`` (a continued entry
    collapses to one line), so comments and unrelated entries survive. Keys
    not present yet are appended in ``updates`` order.
    """
    physical = text.splitlines()
    pending = dict(updates)
    written: set[str] = set()
    lines: list[str] = []
    for first, last, logical in _logical_lines(physical):
        pair = _split_entry(logical)
        key = pair[0] if pair is not None else None
        if key is not None and key in pending:
            lines.append(f"{key}={pending.pop(key)}")
            written.add(key)
        elif key is not None and key in written:
            # a later duplicate would shadow the rewritten value
            continue
        else:
            lines.extend(physical[first : last + 1])

    lines.extend(f"{key}={value}" for key, value in pending.items())
    return "\n".join(lines) + "\n"
