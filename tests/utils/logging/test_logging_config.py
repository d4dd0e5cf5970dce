# ABOUTME: Tests for logging configuration module
# ABOUTME: Validates dual-mode logging setup and third-party library suppression

import logging
import os
from unittest.mock import patch

from town_scraper.utils.logging.config import (
    QUIET_LOGGERS,
    LoggingMode,
    configure_logging,
    detect_logging_mode,
    get_logging_status,
)


class TestDetectLoggingMode:
    """Test logging mode detection logic."""

    def test_detect_mode_from_env_production(self):
        """Test detection of production mode from environment variable."""
        with patch.dict(os.environ, {"TOWN_SCRAPER_LOG_MODE": "production"}):
            assert detect_logging_mode() == LoggingMode.PRODUCTION

    def test_detect_mode_from_env_is_case_insensitive(self):
        with patch.dict(os.environ, {"TOWN_SCRAPER_LOG_MODE": "Interactive"}):
            assert detect_logging_mode() == LoggingMode.INTERACTIVE

    def test_detect_mode_from_env_invalid(self):
        """Test fallback when environment variable has invalid value."""
        with (
            patch.dict(os.environ, {"TOWN_SCRAPER_LOG_MODE": "verbose"}),
            patch("sys.stdout.isatty", return_value=False),
        ):
            assert detect_logging_mode() == LoggingMode.PRODUCTION

    def test_detect_mode_from_tty_interactive(self):
        """Test detection of interactive mode from TTY."""
        with patch.dict(os.environ, {}, clear=True), patch("sys.stdout.isatty", return_value=True):
            assert detect_logging_mode() == LoggingMode.INTERACTIVE


class TestConfigureLogging:
    """Test logging configuration functionality."""

    def teardown_method(self):
        """Reset the stdlib loggers touched by configure_logging."""
        for logger_name in ["", *QUIET_LOGGERS, "py.warnings"]:
            logging.getLogger(logger_name).setLevel(logging.NOTSET)
        logging.captureWarnings(False)

    def test_configure_interactive_mode(self, monkeypatch, tmp_path):
        """Interactive mode writes to a logs directory and quiets browser libraries."""
        monkeypatch.chdir(tmp_path)

        configure_logging(mode=LoggingMode.INTERACTIVE, log_level="INFO")

        assert (tmp_path / "logs").is_dir()
        assert logging.getLogger("playwright").level == logging.WARNING
        assert logging.getLogger("asyncio").level == logging.WARNING

    def test_configure_production_mode(self, monkeypatch, tmp_path):
        """Production mode logs JSON to stdout and creates no log directory."""
        monkeypatch.chdir(tmp_path)

        configure_logging(mode=LoggingMode.PRODUCTION, log_level="DEBUG")

        assert not (tmp_path / "logs").exists()
        assert logging.getLogger().level == logging.DEBUG


class TestGetLoggingStatus:
    """Test logging status reporting."""

    def test_get_status_interactive_mode(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "logs").mkdir()

        with patch("town_scraper.utils.logging.config.detect_logging_mode", return_value=LoggingMode.INTERACTIVE):
            status = get_logging_status()

        assert status["mode"] == LoggingMode.INTERACTIVE
        assert status["log_directory"] is not None
        assert status["log_files"]["main"].endswith("town-scraper.log")
        assert "playwright" in status["third_party_suppressed"]

    def test_get_status_production_mode(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)

        with patch("town_scraper.utils.logging.config.detect_logging_mode", return_value=LoggingMode.PRODUCTION):
            status = get_logging_status()

        assert status["log_directory"] is None
        assert status["log_files"] == {"main": None, "json": None, "errors": None}
