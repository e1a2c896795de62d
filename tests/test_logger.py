"""Tests for logger module."""

import logging
from unittest.mock import patch

import dynquery.logger as logger_module
from dynquery.logger import LOG_FORMAT, Logger, get_logger, resolve_level, setup_global_logging
from dynquery.settings import settings


class TestSetupGlobalLogging:
    """Tests for setup_global_logging function."""

    def test_configures_once(self):
        """Test that setup_global_logging only configures once."""
        logger_module._configured = False
        with patch("logging.basicConfig") as mock_basicconfig:
            setup_global_logging("DEBUG")
            setup_global_logging("ERROR")
            mock_basicconfig.assert_called_once()
            _, kwargs = mock_basicconfig.call_args
            assert kwargs["level"] == logging.DEBUG
            assert kwargs["format"] == LOG_FORMAT

    def test_unknown_level_falls_back_to_info(self):
        """Test an unknown level name falls back to INFO."""
        logger_module._configured = False
        with patch("logging.basicConfig") as mock_basicconfig:
            setup_global_logging("VERBOSE")
            _, kwargs = mock_basicconfig.call_args
            assert kwargs["level"] == logging.INFO


class TestResolveLevel:
    """Tests for level name resolution."""

    def test_case_insensitive(self):
        """Test level names are case-insensitive."""
        assert resolve_level("warning") == logging.WARNING

    def test_empty(self):
        """Test an empty or missing level resolves to INFO."""
        assert resolve_level("") == logging.INFO
        assert resolve_level(None) == logging.INFO


class TestLogger:
    """Tests for the Logger wrapper."""

    def test_get_logger_name(self):
        """Test get_logger with and without a name."""
        assert get_logger("dynquery.codec").name == "dynquery.codec"
        assert get_logger().name == "dynquery"

    def test_levels_forwarded(self):
        """Test each level method forwards to the standard logger."""
        log = Logger("test.forward")
        with patch.object(log._logger, "warning") as mock_warning, patch.object(
            log._logger, "error"
        ) as mock_error, patch.object(log._logger, "critical") as mock_critical:
            log.warning("w %s", 1)
            log.error("e")
            log.critical("c %s", "boom")
            mock_warning.assert_called_once_with("w %s", 1)
            mock_error.assert_called_once_with("e")
            mock_critical.assert_called_once_with("c %s", "boom")

    def test_message_uses_configured_level(self):
        """Test message logs at the configured LOG_LEVEL."""
        log = Logger("test.message")
        with patch.object(settings, "LOG_LEVEL", "DEBUG"), patch.object(log._logger, "log") as mock_log:
            log.message("hello %s", "there")
            mock_log.assert_called_once_with(logging.DEBUG, "hello %s", "there")

    def test_message_unset_level_is_info(self):
        """Test message logs at INFO when LOG_LEVEL is empty."""
        log = Logger("test.unset")
        with patch.object(settings, "LOG_LEVEL", ""), patch.object(log._logger, "log") as mock_log:
            log.message("x")
            mock_log.assert_called_once_with(logging.INFO, "x")

    def test_is_enabled_for(self):
        """Test is_enabled_for against the logger level."""
        log = Logger("test.enabled")
        log._logger.setLevel(logging.WARNING)
        assert log.is_enabled_for("ERROR")
        assert not log.is_enabled_for("DEBUG")


class TestCodecLogging:
    """Dropped fragments are logged at DEBUG."""

    def test_drop_logged(self, caplog):
        """Test a dropped fragment is logged at DEBUG."""
        from dynquery.codec import decode

        with caplog.at_level(logging.DEBUG, logger="dynquery.codec"):
            decode("operation4=EQUAL")
        assert any("Dropped query fragment" in r.getMessage() for r in caplog.records)
