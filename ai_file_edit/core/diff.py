"""Unified diff generation, parsing and application.

### Wire format

Diffs are two-file patches in the layout below. The reverse diff of an edit
uses the same layout with the headers and hunk sides swapped::

    Index: /workspace/app.js
    ===================================================================
    --- /workspace/app.js	original
    +++ /workspace/app.js	modified
    @@ -1,2 +1,2 @@
    -function add(a, b) { return a + b; }
    -console.log(add(1, 2));
    \\ No newline at end of file
    +function multiply(a, b) { return a * b; }
    +console.log(multiply(1, 2));
    \\ No newline at end of file

- Hunk ranges always carry an explicit count. An empty range names the line
  *before* it, so inserting into an empty file reads ``@@ -0,0 +1,1 @@``.
- Hunks carry 4 lines of context.
- ``\\ No newline at end of file`` follows a line that has no terminator.
- Two identical inputs produce the header block and no hunks.
- A reverse diff may carry a ``Line-Ending: CRLF`` (or ``LF``) line after the
  ``Index:`` line. It names the style the restored file is written with, for
  edits that leave the file without any line break to detect it from.

### Application semantics

Hunks apply in order. Each hunk's old side (context and removed lines,
including their end-of-line state) must match the current text exactly.
It is looked for at the position its header names, shifted by the hunks
already applied, and then at the nearest offset searching outward. There
is no whitespace fuzz: a reverse diff either applies cleanly or the file
is left alone.
"""
from __future__ import annotations

import difflib
import re
from dataclasses import dataclass, field
from typing import Iterator, List, Literal, Optional, Sequence

from ..logging import get_logger
from .exceptions import InvalidPatchFormatError, PatchApplyError
from .line_endings import CRLF, LF, normalize_line_endings, split_lines
from .types import DiffResult

logger = get_logger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
CONTEXT_LINES: int = 4
SEPARATOR_LINE: str = "=" * 67
NO_NEWLINE_MARKER: str = "\\ No newline at end of file"
ORIGINAL_HEADER: str = "original"
MODIFIED_HEADER: str = "modified"

RE_INDEX = re.compile(r"^Index:\s*(.*)$")
RE_LINE_ENDING = re.compile(r"^Line-Ending:\s*(CRLF|LF)\s*$")
RE_FILE_HEADER = re.compile(r"^(---|\+\+\+) (.*)$")
RE_HUNK_HEADER = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")

LineOp = Literal[" ", "-", "+"]


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------
@dataclass
class DiffLine:
    """One body line of a hunk, without its terminator."""

    op: LineOp
    text: str
    eol: bool = True

    def raw(self) -> str:
        return self.text + "\n" if self.eol else self.text


@dataclass
class Hunk:
    """A hunk with 1-based starts.

    Starts are stored as the first line of the range even when the range is
    empty; the off-by-one of the wire format is applied only when formatting
    and parsing.
    """

    old_start: int
    old_lines: int
    new_start: int
    new_lines: int
    lines: List[DiffLine] = field(default_factory=list)

    @property
    def header(self) -> str:
        old_start = self.old_start - 1 if self.old_lines == 0 else self.old_start
        new_start = self.new_start - 1 if self.new_lines == 0 else self.new_start
        return f"@@ -{old_start},{self.old_lines} +{new_start},{self.new_lines} @@"

    def old_side(self) -> List[str]:
        return [line.raw() for line in self.lines if line.op != "+"]

    def new_side(self) -> List[str]:
        return [line.raw() for line in self.lines if line.op != "-"]


@dataclass
class FilePatch:
    """All hunks for one file plus its header block.

    ``line_ending`` is set only on reverse diffs that must name the style
    of the file they restore.
    """

    old_file_name: str = ""
    new_file_name: str = ""
    old_header: Optional[str] = None
    new_header: Optional[str] = None
    index: Optional[str] = None
    hunks: List[Hunk] = field(default_factory=list)
    line_ending: Optional[str] = None


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------

def _to_diff_line(op: LineOp, raw_line: str) -> DiffLine:
    if raw_line.endswith("\n"):
        return DiffLine(op, raw_line[:-1], True)
    return DiffLine(op, raw_line, False)


def _build_hunks(old: Sequence[str], new: Sequence[str], context: int) -> Iterator[Hunk]:
    matcher = difflib.SequenceMatcher(None, old, new, autojunk=False)
    for group in matcher.get_grouped_opcodes(context):
        first, last = group[0], group[-1]
        hunk = Hunk(
            old_start=first[1] + 1,
            old_lines=last[2] - first[1],
            new_start=first[3] + 1,
            new_lines=last[4] - first[3],
        )
        for tag, i1, i2, j1, j2 in group:
            if tag == "equal":
                hunk.lines.extend(_to_diff_line(" ", line) for line in old[i1:i2])
                continue
            # Removals are always listed before additions.
            hunk.lines.extend(_to_diff_line("-", line) for line in old[i1:i2])
            hunk.lines.extend(_to_diff_line("+", line) for line in new[j1:j2])
        yield hunk


def structured_patch(
    original: str,
    modified: str,
    label: str = "file",
    *,
    context: int = CONTEXT_LINES,
) -> FilePatch:
    """Diff two texts into a ``FilePatch`` labelled ``label`` on both sides."""

    old_lines = split_lines(normalize_line_endings(original))
    new_lines = split_lines(normalize_line_endings(modified))
    return FilePatch(
        old_file_name=label,
        new_file_name=label,
        old_header=ORIGINAL_HEADER,
        new_header=MODIFIED_HEADER,
        hunks=list(_build_hunks(old_lines, new_lines, context)),
    )


def format_patch(patch: FilePatch) -> str:
    """Serialize a ``FilePatch`` to unified diff text."""

    out: List[str] = []
    if patch.old_file_name == patch.new_file_name:
        out.append(f"Index: {patch.old_file_name}")
    if patch.line_ending is not None:
        out.append(f"Line-Ending: {'CRLF' if patch.line_ending == CRLF else 'LF'}")
    out.append(SEPARATOR_LINE)
    out.append(f"--- {patch.old_file_name}" + ("" if patch.old_header is None else f"\t{patch.old_header}"))
    out.append(f"+++ {patch.new_file_name}" + ("" if patch.new_header is None else f"\t{patch.new_header}"))
    for hunk in patch.hunks:
        out.append(hunk.header)
        for line in hunk.lines:
            out.append(line.op + line.text)
            if not line.eol:
                out.append(NO_NEWLINE_MARKER)
    return "\n".join(out) + "\n"


def create_unified_diff(original: str, modified: str, label: str = "file") -> str:
    """Return the unified diff turning ``original`` into ``modified``."""

    return format_patch(structured_patch(original, modified, label))


def reverse_patch(patch: FilePatch) -> FilePatch:
    """Return the patch that undoes ``patch``.

    Within each run of changed lines the removals are listed first.
    """

    hunks: List[Hunk] = []
    for hunk in patch.hunks:
        lines: List[DiffLine] = []
        removed: List[DiffLine] = []
        added: List[DiffLine] = []
        for line in hunk.lines + [DiffLine(" ", "")]:
            if line.op == "+":
                removed.append(DiffLine("-", line.text, line.eol))
            elif line.op == "-":
                added.append(DiffLine("+", line.text, line.eol))
            else:
                lines.extend(removed)
                lines.extend(added)
                removed, added = [], []
                lines.append(DiffLine(" ", line.text, line.eol))
        lines.pop()
        hunks.append(
            Hunk(
                old_start=hunk.new_start,
                old_lines=hunk.new_lines,
                new_start=hunk.old_start,
                new_lines=hunk.old_lines,
                lines=lines,
            )
        )

    return FilePatch(
        old_file_name=patch.new_file_name,
        new_file_name=patch.old_file_name,
        old_header=patch.new_header,
        new_header=patch.old_header,
        index=patch.index,
        hunks=hunks,
        line_ending=patch.line_ending,
    )


def create_reverse_unified_diff(
    original: str,
    modified: str,
    label: str = "file",
    *,
    line_ending: Optional[str] = None,
) -> str:
    """Return the unified diff turning ``modified`` back into ``original``.

    The forward diff is generated, parsed and reversed so both diffs always
    describe the same hunks. ``line_ending`` is recorded in a
    ``Line-Ending:`` line for the applier to restore.
    """

    forward = create_unified_diff(original, modified, label)
    patches = parse_patch(forward)
    reverse = reverse_patch(patches[0])
    reverse.line_ending = line_ending
    return format_patch(reverse)


def build_diff_result(
    original: str,
    modified: str,
    label: str,
    *,
    original_line_ending: str,
    existed: bool = True,
) -> DiffResult:
    """Diff ``original`` against ``modified`` in both directions.

    When the original had line breaks and the modified text has none, the
    file written from it no longer shows its style, so the reverse diff
    records ``original_line_ending`` explicitly.
    """

    original = normalize_line_endings(original)
    modified = normalize_line_endings(modified)
    restore_ending = None
    if existed and "\n" in original and "\n" not in modified:
        restore_ending = original_line_ending
    return DiffResult(
        raw_diff=create_unified_diff(original, modified, label),
        reverse_diff=create_reverse_unified_diff(original, modified, label, line_ending=restore_ending),
        valid_edits=original != modified,
        new_file_created=not existed,
    )


def format_fenced_diff(diff: str) -> str:
    """Wrap ``diff`` in a markdown code fence that its own backticks cannot close."""

    fence_len = 3
    while "`" * fence_len in diff:
        fence_len += 1
    fence = "`" * fence_len
    return f"{fence}diff\n{diff}{fence}\n\n"


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def _is_next_file(lines: Sequence[str], i: int) -> bool:
    line = lines[i]
    if RE_INDEX.match(line) or line.startswith("diff "):
        return True
    return line.startswith("--- ") and i + 1 < len(lines) and lines[i + 1].startswith("+++ ")


def _parse_file_header(line: str, patch: FilePatch) -> None:
    match = RE_FILE_HEADER.match(line)
    if not match:
        return
    name, sep, header = match.group(2).partition("\t")
    if len(name) >= 2 and name.startswith('"') and name.endswith('"'):
        name = name[1:-1]
    header_value = header.strip() if sep else None
    if match.group(1) == "---":
        patch.old_file_name, patch.old_header = name, header_value
    else:
        patch.new_file_name, patch.new_header = name, header_value


def _parse_hunk(lines: Sequence[str], i: int) -> tuple[Hunk, int]:
    """Parse the hunk whose header is ``lines[i]``; return it and the next index."""

    header_line_no = i + 1
    match = RE_HUNK_HEADER.match(lines[i])
    if not match:
        raise InvalidPatchFormatError(f"Malformed hunk header at line {header_line_no}: {lines[i]}")

    old_start, old_count, new_start, new_count = match.groups()
    hunk = Hunk(
        old_start=int(old_start),
        old_lines=1 if old_count is None else int(old_count),
        new_start=int(new_start),
        new_lines=1 if new_count is None else int(new_count),
    )
    # Empty ranges name the line before them.
    if hunk.old_lines == 0:
        hunk.old_start += 1
    if hunk.new_lines == 0:
        hunk.new_start += 1

    remaining_old, remaining_new = hunk.old_lines, hunk.new_lines
    i += 1
    while i < len(lines) and (remaining_old > 0 or remaining_new > 0 or lines[i].startswith("\\")):
        line = lines[i]
        if line.startswith("\\"):
            if not hunk.lines:
                raise InvalidPatchFormatError(f"Unexpected end-of-file marker at line {i + 1}")
            hunk.lines[-1].eol = False
            i += 1
            continue

        # Some tools drop the space prefix on empty context lines.
        op = " " if line == "" and i != len(lines) - 1 else line[:1]
        if op == " ":
            remaining_old -= 1
            remaining_new -= 1
        elif op == "-":
            remaining_old -= 1
        elif op == "+":
            remaining_new -= 1
        else:
            break
        if remaining_old < 0 or remaining_new < 0:
            break
        hunk.lines.append(DiffLine(op, line[1:]))
        i += 1

    if remaining_old != 0 or remaining_new != 0:
        removed = sum(1 for line in hunk.lines if line.op == "-")
        added = sum(1 for line in hunk.lines if line.op == "+")
        raise InvalidPatchFormatError(
            f"Hunk at line {header_line_no} does not match its header {lines[header_line_no - 1].strip()}: "
            f"found {removed} removed and {added} added lines",
            hint="Line counts in the @@ header must equal the hunk body",
        )
    return hunk, i


def parse_patch(text: str) -> List[FilePatch]:
    """Parse unified diff text into one ``FilePatch`` per file section.

    ``Index:``, ``Line-Ending:``, ``diff`` and ``===`` preamble lines are tolerated. A hunk
    count omitted from the header means 1.

    Raises:
        InvalidPatchFormatError: A hunk is malformed or a body line appears
            outside any hunk.
    """

    lines = normalize_line_endings(text).split("\n")
    patches: List[FilePatch] = []
    i = 0
    while i < len(lines):
        patch = FilePatch()

        # Preamble up to the file headers or first hunk.
        while i < len(lines):
            line = lines[i]
            if line.startswith("--- ") or line.startswith("+++ ") or line.startswith("@@"):
                break
            index_match = RE_INDEX.match(line)
            if index_match:
                if patch.index is not None:
                    break
                patch.index = index_match.group(1)
            ending_match = RE_LINE_ENDING.match(line)
            if ending_match:
                patch.line_ending = CRLF if ending_match.group(1) == "CRLF" else LF
            i += 1

        for prefix in ("--- ", "+++ "):
            if i < len(lines) and lines[i].startswith(prefix):
                _parse_file_header(lines[i], patch)
                i += 1

        while i < len(lines):
            line = lines[i]
            if line.startswith("@@"):
                hunk, i = _parse_hunk(lines, i)
                patch.hunks.append(hunk)
            elif _is_next_file(lines, i):
                break
            elif line[:1] in ("+", "-", " ", "\\") and line.strip():
                raise InvalidPatchFormatError(f"Unexpected line outside of a hunk at line {i + 1}: {line}")
            else:
                i += 1

        if patch.hunks or patch.old_file_name or patch.new_file_name:
            patches.append(patch)

    return patches


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------

def _candidate_positions(expected: int, lower: int, upper: int) -> Iterator[int]:
    """Yield positions in ``[lower, upper]`` ordered by distance from ``expected``."""

    if lower > upper:
        return
    expected = min(max(expected, lower), upper)
    yield expected
    distance = 1
    while expected - distance >= lower or expected + distance <= upper:
        if expected + distance <= upper:
            yield expected + distance
        if expected - distance >= lower:
            yield expected - distance
        distance += 1


def apply_patch(content: str, patch: FilePatch) -> str:
    """Apply ``patch`` to ``\\n``-normalized ``content`` and return the result.

    Raises:
        PatchApplyError: A hunk's old side is not present in ``content``.
    """

    lines = split_lines(content)
    delta = 0
    floor = 0
    for hunk_idx, hunk in enumerate(patch.hunks):
        old_side = hunk.old_side()
        new_side = hunk.new_side()
        expected = hunk.old_start - 1 + delta

        position = None
        for candidate in _candidate_positions(expected, floor, len(lines) - len(old_side)):
            if lines[candidate : candidate + len(old_side)] == old_side:
                position = candidate
                break

        if position is None:
            raise PatchApplyError(
                f"Hunk {hunk_idx + 1} ({hunk.header}) does not match the file content "
                f"near line {max(expected, 0) + 1}",
                path=patch.old_file_name or None,
                hint="The file has changed since this diff was generated",
            )
        if position != expected:
            logger.debug("Hunk applied at offset", hunk=hunk_idx + 1, offset=position - expected)

        lines[position : position + len(old_side)] = new_side
        delta = position - (hunk.old_start - 1) + len(new_side) - len(old_side)
        floor = position + len(new_side)

    return "".join(lines)
