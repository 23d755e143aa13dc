"""Data types shared by the patch engine.

These are plain dataclasses. ``EditRequest`` is the only one built from
untrusted input, so it validates in ``from_args`` and an invalid request is
never constructed.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Mapping, Optional, Sequence

from .exceptions import ErrorKind, InvalidEditRequestError


@dataclass(frozen=True)
class EditOperation:
    """One anchored replacement: find ``old_text``, replace with ``new_text``."""

    old_text: str
    new_text: str

    @classmethod
    def from_dict(cls, data: Any, index: int = 0) -> "EditOperation":
        """Build from the wire form ``{"oldText": ..., "newText": ...}``."""
        if not isinstance(data, Mapping):
            raise InvalidEditRequestError(
                f"Edit {index + 1} must be an object with oldText and newText",
            )
        old_text = data.get("oldText")
        new_text = data.get("newText")
        if not isinstance(old_text, str) or not isinstance(new_text, str):
            raise InvalidEditRequestError(
                f"Edit {index + 1} must have string oldText and newText fields",
                hint="Example: {\"oldText\": \"foo()\", \"newText\": \"bar()\"}",
            )
        return cls(old_text=old_text, new_text=new_text)

    def to_dict(self) -> dict[str, str]:
        return {"oldText": self.old_text, "newText": self.new_text}


@dataclass(frozen=True)
class EditRequest:
    """A request to change one file, by full content or by edits.

    Exactly one of ``content`` and ``edits`` is set.
    """

    path: str
    content: Optional[str] = None
    edits: Optional[tuple[EditOperation, ...]] = None

    def __post_init__(self) -> None:
        if self.content is None and self.edits is None:
            raise InvalidEditRequestError(
                "Either content or edits must be provided",
                path=self.path,
            )
        if self.content is not None and self.edits is not None:
            raise InvalidEditRequestError(
                "Cannot provide both content and edits - use content for complete "
                "file writes and edits for partial changes",
                path=self.path,
            )

    @classmethod
    def from_args(
        cls,
        path: Any,
        content: Any = None,
        edits: Optional[Sequence[Any]] = None,
    ) -> "EditRequest":
        """Validate raw tool arguments and build a request."""
        if not isinstance(path, str) or not path.strip():
            raise InvalidEditRequestError("path must be a non-empty string")
        if content is not None and not isinstance(content, str):
            raise InvalidEditRequestError("content must be a string", path=path)
        parsed_edits: Optional[tuple[EditOperation, ...]] = None
        if edits is not None:
            if isinstance(edits, (str, bytes)) or not isinstance(edits, Sequence):
                raise InvalidEditRequestError("edits must be a list of edit objects", path=path)
            parsed_edits = tuple(
                e if isinstance(e, EditOperation) else EditOperation.from_dict(e, i)
                for i, e in enumerate(edits)
            )
        return cls(path=path, content=content, edits=parsed_edits)


@dataclass(frozen=True)
class FileSnapshot:
    """State of a file at the start of one edit call."""

    original_content: str
    original_line_ending: str
    existed: bool
    bom: bytes = b""


@dataclass(frozen=True)
class DiffResult:
    """Forward/reverse diffs for one edit plus change flags."""

    raw_diff: str
    reverse_diff: str
    valid_edits: bool
    new_file_created: bool = False


@dataclass
class FileEditResult:
    """Outcome of ``apply_file_edits``.

    Attributes:
        response: Human-readable summary (or error text) for the caller.
        raw_diff: Unified diff from the original to the new content.
        reverse_diff: Unified diff that undoes ``raw_diff``.
        file_exists: Whether the file existed before the call.
        new_file_created: Whether this call created the file.
        valid_edits: Whether the content actually changed.
        path: Absolute path that was edited.
        dry_run: Whether writing was skipped on purpose.
        error_kind: Set when the edit failed.
    """

    response: str
    raw_diff: str = ""
    reverse_diff: str = ""
    file_exists: bool = False
    new_file_created: bool = False
    valid_edits: bool = False
    path: str = ""
    dry_run: bool = False
    error_kind: Optional[ErrorKind] = None

    @property
    def success(self) -> bool:
        return self.error_kind is None

    def to_dict(self) -> dict[str, Any]:
        result = asdict(self)
        result["status"] = "ok" if self.success else "error"
        result["error_kind"] = self.error_kind.value if self.error_kind else None
        return result


@dataclass
class ReversePatchResult:
    """Outcome of ``apply_reverse_patch``."""

    success: bool
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    path: str = ""
    hunks_applied: int = 0

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "status": "ok" if self.success else "error",
            "success": self.success,
            "path": self.path,
            "hunks_applied": self.hunks_applied,
        }
        if self.error is not None:
            result["error"] = self.error
        if self.error_kind is not None:
            result["error_kind"] = self.error_kind.value
        return result


@dataclass(frozen=True)
class AllowedDirectorySet:
    """Normalized absolute directories that bound every file access."""

    directories: tuple[str, ...] = field(default_factory=tuple)

    def __iter__(self):
        return iter(self.directories)

    def __len__(self) -> int:
        return len(self.directories)
