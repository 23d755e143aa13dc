"""JSON payloads returned by the file tools."""
from __future__ import annotations

import json
from typing import Any, Optional

from ..core.exceptions import ErrorKind, FileEditError


def make_error_response(
    error: str,
    error_kind: ErrorKind,
    path: Optional[str] = None,
    hint: Optional[str] = None,
) -> str:
    result: dict[str, Any] = {"status": "error", "error_kind": error_kind.value, "error": error}
    if path is not None:
        result["path"] = path
    if hint is not None:
        result["hint"] = hint
    return json.dumps(result)


def error_response_from(exc: FileEditError) -> str:
    return make_error_response(exc.error, exc.kind, exc.path, exc.hint)


def make_result_response(result: Any) -> str:
    """Serialize a result object that provides ``to_dict()``."""
    return json.dumps(result.to_dict())
