"""Line-ending detection and normalization.

All matching and diffing runs on ``\\n``-only text. A file's own convention is
detected on read and restored on write, so editing a CRLF file keeps it CRLF.
"""
from __future__ import annotations

import os
from typing import Literal, Optional

LineEnding = Literal["\n", "\r\n"]

LF: LineEnding = "\n"
CRLF: LineEnding = "\r\n"


def get_platform_line_ending() -> LineEnding:
    """Return the host platform's native line ending."""
    return CRLF if os.name == "nt" else LF


def detect_line_ending(text: str) -> LineEnding:
    """Return the style of the first line break in ``text``.

    Text without any line break gets the platform default.
    """
    index = text.find("\n")
    if index == -1:
        return get_platform_line_ending()
    if index > 0 and text[index - 1] == "\r":
        return CRLF
    return LF


def normalize_line_endings(text: str) -> str:
    """Convert every ``\\r\\n`` to ``\\n``."""
    return text.replace("\r\n", "\n")


def apply_line_endings(text: str, line_ending: Optional[str] = None) -> str:
    """Normalize ``text`` and re-expand its line breaks to ``line_ending``.

    Args:
        text: Text in any mix of LF/CRLF.
        line_ending: Target ending; the platform default when None.
    """
    ending = line_ending or get_platform_line_ending()
    normalized = normalize_line_endings(text)
    if ending == LF:
        return normalized
    return normalized.replace("\n", ending)


def split_lines(text: str) -> list[str]:
    """Split on ``\\n`` only, keeping the terminator on every line that has one.

    Unlike ``str.splitlines`` this never breaks on form feeds, vertical tabs
    or unicode separators, which would corrupt diffs of files containing them.

    >>> split_lines("a\\nb")
    ['a\\n', 'b']
    >>> split_lines("a\\n")
    ['a\\n']
    >>> split_lines("")
    []
    """
    parts = text.split("\n")
    lines = [part + "\n" for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines
