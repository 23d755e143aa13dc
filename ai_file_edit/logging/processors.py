"""structlog processors used by the ai_file_edit logging pipeline."""
from typing import Any

from .context import get_context


def inject_context(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Copy values bound with ``bind_context`` into the event.

    Explicit keyword arguments passed to the log call win over bound values.
    """
    for key, value in get_context().items():
        if key not in event_dict:
            event_dict[key] = value
    return event_dict


def add_logger_name(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Add a ``logger`` field naming the module that produced the event."""
    record = event_dict.get("_record")
    if record is not None:
        event_dict["logger"] = record.name
    elif hasattr(logger, "name"):
        event_dict["logger"] = logger.name
    return event_dict


def redact_file_content(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Replace bulky text fields with their length.

    Edit events may carry whole file bodies or diffs; only their size is
    useful in a log line.
    """
    for key in ("content", "old_text", "new_text", "diff", "patch"):
        value = event_dict.get(key)
        if isinstance(value, str) and len(value) > 200:
            event_dict[key] = f"<{len(value)} chars>"
    return event_dict
