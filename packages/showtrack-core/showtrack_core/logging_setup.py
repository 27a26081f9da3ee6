"""Centralized logging configuration for the CLI and the sync service."""

import logging
import logging.handlers
from pathlib import Path

import structlog

from showtrack_core.config import Settings

LOG_FILE_MAX_BYTES = 10_485_760  # 10MB
LOG_FILE_BACKUP_COUNT = 5

SHARED_PROCESSORS = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.processors.StackInfoRenderer(),
    structlog.dev.set_exc_info,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
]


def configure_logging(settings: Settings, json_output: bool = False) -> None:
    """
    Configure structlog and stdlib logging based on settings.

    Args:
        settings: Application settings containing logging configuration
        json_output: If True, render JSON lines (long-running sync service). If False,
                    use human-readable console output (CLI)

    Note:
        Idempotent - safe to call multiple times. Creates the log directory if needed
        and falls back to console-only logging when the file cannot be opened.
    """
    log_level = _resolve_level(settings.logging.level)
    log_path = Path(settings.logging.file)

    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=LOG_FILE_MAX_BYTES,
            backupCount=LOG_FILE_BACKUP_COUNT,
            encoding="utf-8",
        )
    except (OSError, PermissionError) as e:
        print(f"Warning: Could not create log file {log_path}: {e}")
        print("Falling back to console-only logging")
        _configure_console_only(settings, json_output)
        return

    file_handler.setLevel(log_level)
    file_handler.setFormatter(_build_formatter(json_output, colors=False))

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(_build_formatter(json_output, colors=True))

    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[file_handler, console_handler],
        force=True,
    )
    _configure_structlog()


def _configure_console_only(settings: Settings, json_output: bool) -> None:
    """Fallback configuration for console-only logging when file logging fails."""
    log_level = _resolve_level(settings.logging.level)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(_build_formatter(json_output, colors=True))

    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[console_handler],
        force=True,
    )
    _configure_structlog()


def _resolve_level(level_name: str) -> int:
    """Map a level name to its stdlib constant, defaulting to INFO."""
    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        print(f"Warning: Invalid log level '{level_name}', defaulting to INFO")
        return logging.INFO
    return level


def _build_formatter(json_output: bool, colors: bool) -> structlog.stdlib.ProcessorFormatter:
    """Build a stdlib formatter that renders structlog events."""
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=colors)
    )
    return structlog.stdlib.ProcessorFormatter(
        processors=SHARED_PROCESSORS
        + [
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
        foreign_pre_chain=SHARED_PROCESSORS,
    )


def _configure_structlog() -> None:
    """Route structlog through stdlib logging."""
    structlog.configure(
        processors=SHARED_PROCESSORS
        + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
