"""Line folding and text escaping for iCalendar content lines."""

from __future__ import annotations

import re

from icalendar.parser import escape_char, foldline, unescape_char

from .constants import CRLF, DEFAULTS

_CONTINUATION_RE = re.compile(r"(?:\r\n|\r|\n)[ \t]")
_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


def line_length(line: str, mode: str = DEFAULTS["FOLD_MODE"]) -> int:
    """Length of a physical line as measured for folding (octets or characters)."""
    if mode == "chars":
        return len(line)
    return len(line.encode("utf-8"))


def fold_line(line: str, limit: int = DEFAULTS["FOLD_LIMIT"], mode: str = DEFAULTS["FOLD_MODE"]) -> str:
    """Fold a content line so that no physical line exceeds ``limit``.

    Continuation lines start with a single space, which counts towards the
    limit. In ``bytes`` mode the limit applies to UTF-8 octets and a
    multi-byte character is never split across lines; this is icalendar's
    own folding. ``chars`` mode cuts at the same positions counted in
    characters.
    """
    if mode == "chars":
        step = limit - 1
        return (CRLF + " ").join(line[index:index + step] for index in range(0, len(line), step))
    return foldline(line, limit=limit)


def unfold_lines(text: str) -> str:
    """Merge continuation lines (break followed by one space or tab) back into their logical line."""
    return _CONTINUATION_RE.sub("", text)


def split_logical_lines(text: str) -> list[str]:
    return [line for line in _LINE_BREAK_RE.split(unfold_lines(text)) if line]


def split_physical_lines(text: str) -> list[str]:
    lines = _LINE_BREAK_RE.split(text)
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def escape_text(value: str) -> str:
    return escape_char(value)


def unescape_text(value: str) -> str:
    return unescape_char(value)


def normalize_newlines(value: str) -> str:
    return value.replace("\r\n", "\n").replace("\r", "\n")
