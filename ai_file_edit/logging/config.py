"""Logging configuration for ai_file_edit.

Handlers are attached to the ``ai_file_edit`` logger rather than the root
logger, so embedding the engine in an agent does not replace the host's
logging setup. Events from other libraries are left alone.
"""
import logging
import logging.handlers
import os
import sys
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

import structlog

from .processors import add_logger_name, inject_context, redact_file_content

ROOT_LOGGER_NAME = "ai_file_edit"

ENV_LOG_LEVEL = "AI_FILE_EDIT_LOG_LEVEL"
ENV_LOG_FORMAT = "AI_FILE_EDIT_LOG_FORMAT"
ENV_LOG_FILE = "AI_FILE_EDIT_LOG_FILE"


class LogLevel(str, Enum):
    """Log level enumeration."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    def to_int(self) -> int:
        """Convert to the stdlib integer level."""
        return getattr(logging, self.value)


class LogFormat(str, Enum):
    """Output format for logs."""
    PLAIN = "plain"  # Human-readable for development
    JSON = "json"    # One object per line


@dataclass
class LogConfig:
    """Configuration for the logging framework.

    Attributes:
        level: Level for the ``ai_file_edit`` logger tree.
        format: Output format (PLAIN for console, JSON for log collectors).
        log_file: Optional path to also write logs to, with rotation.
        max_bytes: Maximum size of the log file before rotation (default 10MB).
        backup_count: Number of rotated files to keep (default 5).
        module_levels: Per-module log level overrides, e.g.
            ``{"ai_file_edit.core.paths": LogLevel.DEBUG}``.
        filters: Callables applied to every event dict; returning None drops
            the event.
        redact_content: Collapse large file bodies and diffs to their length.
        console: Also write to stderr.
    """
    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.PLAIN
    log_file: Optional[Path] = None
    max_bytes: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5
    module_levels: dict[str, LogLevel] = field(default_factory=dict)
    filters: list[Callable[[dict], Optional[dict]]] = field(default_factory=list)
    redact_content: bool = True
    console: bool = True

    @classmethod
    def from_env(cls) -> "LogConfig":
        """Read level, format and log file from ``AI_FILE_EDIT_LOG_*`` variables.

        Unset variables keep their defaults. Unknown level or format names
        raise ``ValueError``.
        """
        config = cls()
        level = os.environ.get(ENV_LOG_LEVEL)
        if level:
            config.level = LogLevel(level.strip().upper())
        log_format = os.environ.get(ENV_LOG_FORMAT)
        if log_format:
            config.format = LogFormat(log_format.strip().lower())
        log_file = os.environ.get(ENV_LOG_FILE)
        if log_file:
            config.log_file = Path(log_file).expanduser()
        return config


_configured: bool = False


def _make_filter(func: Callable[[dict], Optional[dict]]) -> Callable:
    def processor(logger, method_name, event_dict):
        result = func(event_dict)
        if result is None:
            raise structlog.DropEvent
        return result
    return processor


def _get_processors(config: LogConfig) -> list:
    """Build the shared processor chain."""
    processors: list = [
        structlog.contextvars.merge_contextvars,
        inject_context,
        add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if config.redact_content:
        processors.append(redact_file_content)

    for filter_func in config.filters:
        processors.append(_make_filter(filter_func))

    return processors


def _get_renderer(config: LogConfig):
    if config.format == LogFormat.JSON:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=sys.stderr.isatty(),
        exception_formatter=structlog.dev.plain_traceback,
    )


def _build_handlers(config: LogConfig) -> list[logging.Handler]:
    handlers: list[logging.Handler] = []
    if config.console:
        handlers.append(logging.StreamHandler(sys.stderr))

    if config.log_file:
        config.log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            logging.handlers.RotatingFileHandler(
                config.log_file,
                maxBytes=config.max_bytes,
                backupCount=config.backup_count,
                encoding="utf-8",
            )
        )
    return handlers


def _setup_stdlib_logging(config: LogConfig, formatter: logging.Formatter) -> None:
    """Attach fresh handlers to the package logger, closing the previous ones."""
    package_logger = logging.getLogger(ROOT_LOGGER_NAME)
    package_logger.setLevel(config.level.to_int())
    package_logger.propagate = False

    for handler in package_logger.handlers[:]:
        package_logger.removeHandler(handler)
        handler.close()

    for handler in _build_handlers(config):
        handler.setLevel(config.level.to_int())
        handler.setFormatter(formatter)
        package_logger.addHandler(handler)

    for module_name, level in config.module_levels.items():
        logging.getLogger(module_name).setLevel(level.to_int())


def configure_logging(config: Optional[LogConfig] = None) -> None:
    """Configure structlog on top of the stdlib logging module.

    Args:
        config: Logging configuration. If None, it is read from the
            environment with ``LogConfig.from_env()``.

    Example:
        >>> from ai_file_edit.logging import configure_logging, LogConfig, LogFormat
        >>> configure_logging(LogConfig(format=LogFormat.JSON, log_file=Path("edits.log")))
    """
    global _configured

    if config is None:
        config = LogConfig.from_env()

    processors = _get_processors(config)

    structlog.configure(
        processors=processors + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            _get_renderer(config),
        ],
    )
    _setup_stdlib_logging(config, formatter)

    _configured = True


def is_configured() -> bool:
    """Check if logging has been configured."""
    return _configured


def ensure_configured() -> None:
    """Configure from the environment unless configure_logging() already ran."""
    if not _configured:
        configure_logging()
