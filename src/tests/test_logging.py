"""
Tests for the Provisioner Logging System

This module tests the structured logging setup: console status lines, the
JSON file mirror and exception logging.
"""

import json
import logging

import pytest
import structlog

from bind_provisioner.config.schema import LoggingConfig
from bind_provisioner.provision_logging import (
    StructuredLogger,
    bind_run_context,
    clear_run_context,
    get_logger,
    log_exception,
    setup_logging,
)
from bind_provisioner.provision_logging import logger as logger_module


class TestStructuredLogger:
    """Test structured logging framework."""

    def test_structured_logger_creation(self):
        """Test creating a structured logger."""
        config = LoggingConfig(level="INFO")

        logger = StructuredLogger(config)
        assert logger.config == config
        assert not logger._configured

    def test_structured_logger_configuration(self, tmp_path):
        """Test logger configuration with a log file."""
        config = LoggingConfig(level="DEBUG", file=str(tmp_path / "logs" / "run.log"))

        logger = StructuredLogger(config)
        logger.configure()

        assert logger._configured
        assert logger.logger is not None
        assert logger._file_handler is not None
        assert isinstance(
            logger._file_handler.formatter, structlog.stdlib.ProcessorFormatter
        )
        assert (tmp_path / "logs").is_dir()

    def test_chain_hands_off_to_formatters(self):
        """Test rendering is left to the handler formatters."""
        logger = StructuredLogger(LoggingConfig(colors=False))

        processors = logger._get_processors()

        assert processors[-1] is structlog.stdlib.ProcessorFormatter.wrap_for_formatter
        assert not any(
            isinstance(p, (structlog.dev.ConsoleRenderer, structlog.processors.JSONRenderer))
            for p in processors
        )

    def test_no_file_handler_without_file(self):
        """Test the run log is only installed when a file is configured."""
        logger = StructuredLogger(LoggingConfig())
        logger.configure()

        assert logger._file_handler is None
        assert logging.getLogger().handlers == [logger._console_handler]

    def test_root_level(self):
        """Test the root logger level follows the configuration."""
        StructuredLogger(LoggingConfig(level="WARNING")).configure()

        assert logging.getLogger().level == logging.WARNING


class TestLoggingFunctions:
    """Test module-level logging helpers."""

    def test_get_logger_requires_setup(self, monkeypatch):
        """Test get_logger before setup_logging."""
        monkeypatch.setattr(logger_module, "_logger_instance", None)

        with pytest.raises(RuntimeError, match="Logging not configured"):
            get_logger("anything")

    def test_console_output(self, capsys):
        """Test status lines reach stdout with their level."""
        setup_logging(LoggingConfig(level="INFO", colors=False))

        get_logger("provisioner").info("Installing BIND9...", packages=["bind"])
        get_logger("provisioner").debug("hidden detail")

        out = capsys.readouterr().out
        assert "[info]" in out
        assert "Installing BIND9..." in out
        assert "hidden detail" not in out

    def test_console_line_rendered_once(self, capsys):
        """Test each status line carries its level and logger name once."""
        setup_logging(LoggingConfig(level="INFO", colors=False))

        get_logger("provisioner").info("Installing BIND9...")

        lines = capsys.readouterr().out.splitlines()
        assert len(lines) == 1
        assert lines[0].count("info") == 1
        assert lines[0].count("provisioner") == 1
        assert "[INFO]" not in lines[0]

    def test_json_file_output(self, tmp_path):
        """Test events are mirrored into the JSON log file."""
        log_file = tmp_path / "provision.log"
        setup_logging(LoggingConfig(level="INFO", file=str(log_file), colors=False))

        get_logger("zones").warning("Zone file rewritten", serial=2024051701)

        entries = [json.loads(line) for line in log_file.read_text().splitlines()]
        assert entries[-1]["message"] == "Zone file rewritten"
        assert entries[-1]["level"] == "warning"
        assert "timestamp" in entries[-1]
        assert entries[-1]["logger"] == "zones"
        assert entries[-1]["serial"] == 2024051701

    def test_log_exception(self, capsys):
        """Test logging an exception."""
        setup_logging(LoggingConfig(level="INFO", colors=False))
        logger = get_logger("main")

        try:
            raise ValueError("bad serial")
        except ValueError as e:
            log_exception(logger, "Provisioning failed", e)

        out = capsys.readouterr().out
        assert "[error]" in out
        assert "Provisioning failed" in out
        assert "ValueError" in out

    def test_log_exception_current(self, capsys):
        """Test logging the exception currently being handled."""
        setup_logging(LoggingConfig(level="INFO", colors=False))

        try:
            raise KeyError("role")
        except KeyError:
            log_exception(get_logger("main"), "Lookup failed")

        assert "KeyError" in capsys.readouterr().out


class TestRunContext:
    """Test values bound for the rest of the run."""

    def test_bound_values_reach_run_log(self, tmp_path):
        log_file = tmp_path / "provision.log"
        setup_logging(LoggingConfig(level="INFO", file=str(log_file), colors=False))

        get_logger("provisioner").info("Before role")
        bind_run_context(role="secondary")
        get_logger("provisioner").info("After role")

        entries = [json.loads(line) for line in log_file.read_text().splitlines()]
        assert "role" not in entries[0]
        assert entries[1]["role"] == "secondary"

    def test_clear(self, capsys):
        setup_logging(LoggingConfig(level="INFO", colors=False))
        bind_run_context(role="primary")
        clear_run_context()

        get_logger("provisioner").info("Restarting BIND9 service...")

        assert "role" not in capsys.readouterr().out

    def test_setup_starts_clean(self, capsys):
        bind_run_context(role="primary")
        setup_logging(LoggingConfig(level="INFO", colors=False))

        get_logger("provisioner").info("Starting")

        assert "role=" not in capsys.readouterr().out
