"""Anchored text edits with whitespace-tolerant fallback.

Each edit names an anchor (``old_text``) and its replacement. Edits apply in
order, each to the output of the previous one. An anchor is located by:

1) exact substring match (first occurrence), else
2) a sliding window of whole lines compared after stripping surrounding
   whitespace on both sides (first matching window).

When the fallback fires, the replacement is re-indented to sit where the
window sits: the first replacement line takes the window's indentation, and
later lines keep their indentation relative to the anchor's.
"""
from __future__ import annotations

import re
from typing import List, Optional, Sequence

from ..logging import get_logger
from .exceptions import EditNotFoundError
from .line_endings import normalize_line_endings
from .types import EditOperation

logger = get_logger(__name__)

_LEADING_WS_RE = re.compile(r"^\s*")


# ---------------------------------------------------------------------------
# Matching utilities
# ---------------------------------------------------------------------------

def _leading_whitespace(line: str) -> str:
    match = _LEADING_WS_RE.match(line)
    return match.group(0) if match else ""


def _find_line_window(content_lines: Sequence[str], anchor_lines: Sequence[str]) -> Optional[int]:
    """Return the first index where ``anchor_lines`` matches ignoring surrounding whitespace."""

    n = len(anchor_lines)
    needle = [line.strip() for line in anchor_lines]
    for i in range(0, len(content_lines) - n + 1):
        for j in range(n):
            if content_lines[i + j].strip() != needle[j]:
                break
        else:
            return i
    return None


def _reindent(replacement_lines: Sequence[str], anchor_lines: Sequence[str], window_indent: str) -> List[str]:
    """Shift ``replacement_lines`` so they sit at ``window_indent``.

    Line ``j`` is shifted only when both it and anchor line ``j`` are
    indented; otherwise it is kept as written.
    """

    result: List[str] = []
    for j, line in enumerate(replacement_lines):
        if j == 0:
            result.append(window_indent + line.lstrip())
            continue
        old_indent = _leading_whitespace(anchor_lines[j]) if j < len(anchor_lines) else ""
        new_indent = _leading_whitespace(line)
        if old_indent and new_indent:
            relative = len(new_indent) - len(old_indent)
            result.append(window_indent + " " * max(0, relative) + line.lstrip())
        else:
            result.append(line)
    return result


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def apply_edit(content: str, edit: EditOperation) -> Optional[str]:
    """Apply one edit to ``\\n``-normalized ``content``.

    Returns the new content, or None if the anchor cannot be located.
    """

    old_text = normalize_line_endings(edit.old_text)
    new_text = normalize_line_endings(edit.new_text)

    if old_text in content:
        logger.debug("Edit matched exactly", anchor_lines=old_text.count("\n") + 1)
        return content.replace(old_text, new_text, 1)

    anchor_lines = old_text.split("\n")
    content_lines = content.split("\n")
    index = _find_line_window(content_lines, anchor_lines)
    if index is None:
        return None

    window_indent = _leading_whitespace(content_lines[index])
    replacement = _reindent(new_text.split("\n"), anchor_lines, window_indent)
    content_lines[index : index + len(anchor_lines)] = replacement
    logger.debug("Edit matched by whitespace-tolerant line window", line=index + 1)
    return "\n".join(content_lines)


def apply_edits(content: str, edits: Sequence[EditOperation]) -> str:
    """Apply ``edits`` in order and return the resulting content.

    Args:
        content: Starting text, normalized to ``\\n``.
        edits: Operations to apply; never reordered.

    Raises:
        EditNotFoundError: An anchor matched neither exactly nor by line
            window. ``partial_content`` holds the result of the edits that
            had applied before it.
    """

    working = content
    for index, edit in enumerate(edits):
        updated = apply_edit(working, edit)
        if updated is None:
            logger.info("Edit anchor not found", edit_index=index, old_text=edit.old_text)
            raise EditNotFoundError(edit.old_text, edit_index=index, partial_content=working)
        working = updated
    return working


def build_modified_content(
    original: str,
    edits: Optional[Sequence[EditOperation]] = None,
    content: Optional[str] = None,
) -> str:
    """Compute the new file text from either a full replacement or edits.

    ``content`` wins when given. With neither, ``original`` is returned.
    """

    if content is not None:
        return normalize_line_endings(content)
    if edits is not None:
        return apply_edits(original, edits)
    return original
