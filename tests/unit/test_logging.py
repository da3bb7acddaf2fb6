"""Tests for logging configuration and standardized log helpers."""

import json
import logging
from unittest.mock import Mock, patch

import pytest
import structlog

from nse_converter.cli import main
from nse_converter.logging.config import (
    configure_logging,
    get_conversion_logger,
    get_data_quality_logger,
    get_logger,
    log_file_converted,
)


class TestLoggingConfig:
    """structlog configuration."""

    def test_configure_logging_json(self):
        configure_logging(level="DEBUG", format_json=True)

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_configure_logging_console(self):
        configure_logging(level="INFO", format_json=False, include_caller=True)

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)
        assert any(isinstance(p, structlog.processors.CallsiteParameterAdder) for p in processors)

    def test_get_logger_returns_bound_logger(self):
        logger = get_logger(__name__)

        assert hasattr(logger, "info")
        assert hasattr(get_conversion_logger(__name__), "bind")


class TestLogFileConverted:
    """Per-file progress events."""

    def test_binds_progress_fields(self):
        logger = Mock()
        bound = logger.bind.return_value

        log_file_converted(logger, symbol="NIFTY", source_path="/raw/NIFTY.txt",
                           bar_count=375, processed=2, total=10)

        logger.bind.assert_called_once_with(
            symbol="NIFTY",
            source_path="/raw/NIFTY.txt",
            bar_count=375,
            progress="2/10",
        )
        bound.info.assert_called_once_with("File converted")

    def test_context_bound_when_given(self):
        logger = Mock()
        bound = logger.bind.return_value

        log_file_converted(logger, symbol="NIFTY", source_path="x", bar_count=1,
                           processed=1, total=1, context={"ordering_violations": 2})

        bound.bind.assert_called_once_with(context={"ordering_violations": 2})
        bound.bind.return_value.info.assert_called_once_with("File converted")


@pytest.fixture
def unconfigured_loggers():
    """Fresh module loggers, first used after the CLI configures logging."""
    with patch("nse_converter.converter.logger", get_conversion_logger("nse_converter.converter")), \
            patch("nse_converter.data.collector.quality_logger",
                  get_data_quality_logger("nse_converter.data.collector")):
        yield
    logging.getLogger().handlers.clear()
    structlog.reset_defaults()


class TestCommandLineSwitches:
    """--json-logs and --log-level reach the conversion logs."""

    def _run(self, source_dir, destination_dir, *extra):
        (source_dir / "NIFTY.txt").write_text(
            "NIFTY,20190226,09:16,1,2,0.5,1.5,0\nNIFTY,20190226,09:15,1,2,0.5,1.5,0\n"
        )
        return main([f"--source-dir={source_dir}", f"--destination-dir={destination_dir}", *extra])

    def test_json_logs(self, source_dir, destination_dir, unconfigured_loggers, capsys):
        assert self._run(source_dir, destination_dir, "--json-logs") == 0

        lines = capsys.readouterr().out.splitlines()
        events = [json.loads(line) for line in lines if line.startswith("{")]
        by_name = {e["event"]: e for e in events}

        assert by_name["File converted"]["subsystem"] == "conversion"
        assert by_name["File converted"]["progress"] == "1/1"
        assert by_name["Conversion completed"]["bars_written"] == 2
        assert by_name["Out of order bar"]["subsystem"] == "data_quality"
        assert by_name["Out of order bar"]["level"] == "warning"

    def test_log_level_filters_conversion_events(self, source_dir, destination_dir,
                                                unconfigured_loggers, capsys):
        assert self._run(source_dir, destination_dir, "--log-level=ERROR") == 0

        out = capsys.readouterr().out
        assert "File converted" not in out
        assert "Conversion completed" not in out
        assert "Out of order bar" not in out

    def test_warning_level_keeps_data_quality_warnings(self, source_dir, destination_dir,
                                                      unconfigured_loggers, capsys):
        assert self._run(source_dir, destination_dir, "--log-level=WARNING", "--json-logs") == 0

        events = [json.loads(line) for line in capsys.readouterr().out.splitlines() if line.startswith("{")]
        assert [e["event"] for e in events] == ["Out of order bar"]
