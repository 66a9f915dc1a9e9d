"""Test logging configuration."""

import json
import logging
import sys
from pathlib import Path

import pytest
import structlog
from structlog.testing import LogCapture

from tiny_tunnel.common.logging import get_logger, setup_logging


class TestLogging:
    """Test logging functionality."""

    def setup_method(self) -> None:
        """Reset logging configuration before each test."""
        structlog.reset_defaults()
        root_logger = logging.getLogger()
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)

    def teardown_method(self) -> None:
        structlog.reset_defaults()
        root_logger = logging.getLogger()
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)
            handler.close()
        root_logger.setLevel(logging.WARNING)

    def test_setup_logging_default(self) -> None:
        setup_logging()
        logger = get_logger("test")
        assert logger is not None
        assert hasattr(logger, "info")
        assert hasattr(logger, "error")

    def test_setup_logging_with_level(self) -> None:
        setup_logging(level="DEBUG")
        assert logging.getLogger().level == logging.DEBUG

    def test_console_handler_writes_to_stderr(self) -> None:
        """Status lines own stdout, logs go to stderr"""
        setup_logging()
        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert handlers[0].stream is sys.stderr

    def test_paramiko_kept_at_warning(self) -> None:
        setup_logging(level="DEBUG")
        assert logging.getLogger("paramiko").level == logging.WARNING

    def test_setup_logging_json_format(self) -> None:
        setup_logging(json_format=True)
        logger = get_logger("test")

        cap = LogCapture()
        structlog.configure(processors=[cap])

        logger.info("test message", profile="web")

        assert len(cap.entries) == 1
        assert cap.entries[0]["event"] == "test message"
        assert cap.entries[0]["profile"] == "web"

    def test_setup_logging_with_file(self, tmp_path: Path) -> None:
        log_file = tmp_path / "test.log"
        setup_logging(log_file=str(log_file))

        python_logger = logging.getLogger("test_file")
        python_logger.info("test message")

        for handler in logging.getLogger().handlers:
            if hasattr(handler, "flush"):
                handler.flush()

        assert log_file.exists()
        assert "test message" in log_file.read_text()

    def test_unknown_level_rejected(self) -> None:
        with pytest.raises(ValueError, match="Unknown log level"):
            setup_logging(level="LOUD")

    def test_log_file_receives_json_lines(self, tmp_path: Path) -> None:
        """structlog events and plain stdlib records both land as JSON"""
        log_file = tmp_path / "tunnels.log"
        setup_logging(level="INFO", log_file=str(log_file))

        get_logger("tiny_tunnel.tests").info("Tunnel established", profile="web")
        logging.getLogger("paramiko.transport").warning("Connection reset")

        for handler in logging.getLogger().handlers:
            handler.flush()

        records = [json.loads(line) for line in log_file.read_text().splitlines()]
        assert records[0]["event"] == "Tunnel established"
        assert records[0]["profile"] == "web"
        assert records[0]["level"] == "info"
        assert records[1]["event"] == "Connection reset"
        assert records[1]["logger"] == "paramiko.transport"
