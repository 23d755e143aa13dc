"""Structured logging for ai_file_edit.

Provides structlog-based logging with:
- Human-readable console output or JSON lines
- Context propagation across async boundaries (e.g. a tool call id)
- Per-module log level control
- Optional rotating log file
- Configuration from AI_FILE_EDIT_LOG_LEVEL, AI_FILE_EDIT_LOG_FORMAT and
  AI_FILE_EDIT_LOG_FILE when nothing is configured explicitly

Quick Start:
    >>> from ai_file_edit.logging import configure_logging, LogConfig, LogLevel
    >>> configure_logging(LogConfig(level=LogLevel.DEBUG))
"""
import structlog

from .config import (
    LogConfig,
    LogFormat,
    LogLevel,
    configure_logging,
    ensure_configured,
    is_configured,
)
from .context import bind_context, clear_context, get_context, log_context, unbind_context


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger, configuring defaults on first use.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("File written", path="/workspace/app.js", bytes=120)
    """
    ensure_configured()
    return structlog.get_logger(name)


__all__ = [
    "LogConfig",
    "LogFormat",
    "LogLevel",
    "configure_logging",
    "ensure_configured",
    "is_configured",
    "get_logger",
    "bind_context",
    "unbind_context",
    "clear_context",
    "get_context",
    "log_context",
]
