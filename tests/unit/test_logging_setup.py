"""Tests for logging configuration."""

import logging
import os
from unittest.mock import patch

import pytest
import structlog
from showtrack_core.config import LoggingConfig, Settings
from showtrack_core.logging_setup import configure_logging


@pytest.fixture
def temp_log_file(tmp_path):
    """Create a temporary log file path."""
    return tmp_path / "test_logs" / "test.log"


@pytest.fixture
def test_settings(temp_log_file):
    """Create test settings with temporary log file."""
    with patch.object(Settings, "model_config", {"env_file": None, "extra": "ignore"}):
        return Settings(
            database={"url": "sqlite+aiosqlite:///test.db"},
            logging=LoggingConfig(level="INFO", file=str(temp_log_file)),
        )


def _flush():
    for handler in logging.root.handlers:
        handler.flush()


def test_configure_logging_creates_log_directory(test_settings, temp_log_file):
    """Verify logs directory is created automatically."""
    assert not temp_log_file.parent.exists()

    configure_logging(test_settings, json_output=False)

    assert temp_log_file.parent.is_dir()


def test_configure_logging_respects_log_level(test_settings, temp_log_file):
    """Verify DEBUG messages are filtered when LOG_LEVEL=INFO."""
    configure_logging(test_settings, json_output=False)

    logger = structlog.get_logger()
    logger.debug("debug message - should not appear")
    logger.info("info message - should appear")
    logger.warning("warning message - should appear")
    _flush()

    log_content = temp_log_file.read_text().lower()
    assert "debug message" not in log_content
    assert "info message" in log_content
    assert "warning message" in log_content


def test_configure_logging_idempotent(test_settings):
    """Verify calling configure_logging multiple times is safe."""
    configure_logging(test_settings, json_output=False)
    configure_logging(test_settings, json_output=False)

    file_handlers = [
        h for h in logging.root.handlers if isinstance(h, logging.handlers.RotatingFileHandler)
    ]
    assert len(file_handlers) == 1


def test_invalid_log_level_defaults_to_info(test_settings, capsys):
    """Verify graceful handling of invalid log level."""
    test_settings.logging.level = "INVALID_LEVEL"

    configure_logging(test_settings, json_output=False)

    captured = capsys.readouterr()
    assert "INVALID_LEVEL" in captured.out
    assert logging.root.level == logging.INFO


def test_json_output_mode(test_settings, temp_log_file):
    """Verify JSON output mode for the long-running sync service."""
    configure_logging(test_settings, json_output=True)

    structlog.get_logger().info("sync_cycle_completed", total_games=2, failed_games=0)
    _flush()

    log_content = temp_log_file.read_text()
    assert '"event": "sync_cycle_completed"' in log_content
    assert '"total_games": 2' in log_content


def test_log_rotation_configuration(test_settings):
    """Verify rotating file handler is configured."""
    configure_logging(test_settings, json_output=False)

    handler = next(
        h for h in logging.root.handlers if isinstance(h, logging.handlers.RotatingFileHandler)
    )
    assert handler.maxBytes == 10_485_760
    assert handler.backupCount == 5


def test_permission_error_fallback_to_console(test_settings, tmp_path, capsys):
    """Verify fallback to console-only logging when file creation fails."""
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("")
    test_settings.logging.file = str(blocker / "log.txt")

    configure_logging(test_settings, json_output=False)

    captured = capsys.readouterr()
    assert "Falling back" in captured.out
    assert not any(
        isinstance(h, logging.handlers.RotatingFileHandler) for h in logging.root.handlers
    )


def test_relative_path_handling(tmp_path):
    """Verify relative log file paths are handled correctly."""
    original_cwd = os.getcwd()
    try:
        os.chdir(tmp_path)

        with patch.object(Settings, "model_config", {"env_file": None, "extra": "ignore"}):
            settings = Settings(
                database={"url": "sqlite+aiosqlite:///test.db"},
                logging=LoggingConfig(level="INFO", file="logs/relative.log"),
            )

        configure_logging(settings, json_output=False)
        structlog.get_logger().info("relative path test")

        assert (tmp_path / "logs" / "relative.log").exists()
    finally:
        os.chdir(original_cwd)
