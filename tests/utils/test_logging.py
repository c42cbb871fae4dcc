"""
Unit tests for the logging setup module.

Covers the structured JSON formatter, environment driven handler setup and
the timing decorator wrapped around inventory runs.
"""

import json
import logging
import logging.handlers
import sys

import pytest

from maphub.utils.logging_setup import (
    setup_logging,
    get_logger,
    log_performance,
    JSONFormatter
)


def _record(msg="Fetched page 1", level=logging.INFO, exc_info=None):
    record = logging.LogRecord(
        name="maphub.connection.portal_client",
        level=level,
        pathname="/maphub/connection/portal_client.py",
        lineno=120,
        msg=msg,
        args=(),
        exc_info=exc_info
    )
    record.funcName = "search_page"
    return record


@pytest.fixture(autouse=True)
def reset_root_logger():
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(logging.WARNING)
    yield root
    for handler in root.handlers[:]:
        handler.close()
        root.removeHandler(handler)
    root.setLevel(logging.WARNING)


class TestJSONFormatter:
    """Test suite for JSONFormatter."""

    def test_standard_fields(self):
        parsed = json.loads(JSONFormatter(datefmt='%Y-%m-%d %H:%M:%S').format(_record()))

        assert parsed["level"] == "INFO"
        assert parsed["logger"] == "maphub.connection.portal_client"
        assert parsed["message"] == "Fetched page 1"
        assert parsed["module"] == "portal_client"
        assert parsed["function"] == "search_page"
        assert parsed["line"] == 120
        assert "timestamp" in parsed

    def test_record_attributes_not_duplicated(self):
        """Test that built-in record attributes stay out of the entry."""
        parsed = json.loads(JSONFormatter().format(_record()))

        for attribute in ("msg", "args", "levelno", "pathname", "thread"):
            assert attribute not in parsed

    def test_extra_fields_included(self):
        record = _record()
        record.item_id = "a1b2c3"
        record.page = 3

        parsed = json.loads(JSONFormatter().format(record))

        assert parsed["item_id"] == "a1b2c3"
        assert parsed["page"] == 3

    def test_unserializable_extra_uses_str(self):
        record = _record()
        record.output_dir = object()

        parsed = json.loads(JSONFormatter().format(record))

        assert parsed["output_dir"].startswith("<object object")

    def test_exception_included(self):
        try:
            raise ConnectionError("portal unavailable")
        except ConnectionError:
            record = _record("Request failed", logging.ERROR, sys.exc_info())

        parsed = json.loads(JSONFormatter().format(record))

        assert parsed["level"] == "ERROR"
        assert "ConnectionError: portal unavailable" in parsed["exception"]


class TestSetupLogging:
    """Test suite for setup_logging."""

    def test_development_uses_plain_console_output(self, reset_root_logger):
        setup_logging(environment="development", log_level="DEBUG")

        assert reset_root_logger.level == logging.DEBUG
        assert len(reset_root_logger.handlers) == 1
        handler = reset_root_logger.handlers[0]
        assert handler.stream is sys.stdout
        assert not isinstance(handler.formatter, JSONFormatter)

    def test_production_uses_json(self, reset_root_logger):
        setup_logging(environment="production")

        assert reset_root_logger.level == logging.INFO
        assert isinstance(reset_root_logger.handlers[0].formatter, JSONFormatter)

    @pytest.mark.parametrize("environment,log_format,expect_json", [
        ("development", "json", True),
        ("development", "JSON", True),
        ("production", "standard", False),
    ])
    def test_explicit_format_wins(self, reset_root_logger, environment, log_format, expect_json):
        setup_logging(environment=environment, log_format=log_format)

        assert isinstance(reset_root_logger.handlers[0].formatter, JSONFormatter) is expect_json

    def test_log_dir_adds_rotating_file(self, reset_root_logger, tmp_path):
        """Test that a log directory adds a rotating file handler."""
        log_dir = tmp_path / "logs"

        setup_logging(environment="production", log_dir=str(log_dir))

        file_handlers = [h for h in reset_root_logger.handlers
                         if isinstance(h, logging.handlers.RotatingFileHandler)]
        assert len(file_handlers) == 1
        assert file_handlers[0].maxBytes == 10 * 1024 * 1024
        assert file_handlers[0].backupCount == 5
        assert (log_dir / "maphub_production.log").exists()

    def test_json_file_output_is_parseable(self, reset_root_logger, tmp_path):
        setup_logging(environment="production", log_dir=str(tmp_path))

        get_logger("maphub.test").info("Wrote maps report", extra={"maps": 12})
        for handler in reset_root_logger.handlers:
            handler.flush()

        lines = (tmp_path / "maphub_production.log").read_text().strip().splitlines()
        parsed = json.loads(lines[-1])
        assert parsed["message"] == "Wrote maps report"
        assert parsed["maps"] == 12

    def test_repeated_setup_replaces_handlers(self, reset_root_logger):
        stale = logging.StreamHandler()
        reset_root_logger.addHandler(stale)

        setup_logging()
        setup_logging()

        assert len(reset_root_logger.handlers) == 1
        assert reset_root_logger.handlers[0] is not stale

    def test_http_library_loggers_quietened(self):
        setup_logging(log_level="DEBUG")

        assert logging.getLogger("urllib3").level == logging.WARNING
        assert logging.getLogger("requests").level == logging.WARNING

    def test_invalid_level(self):
        with pytest.raises(AttributeError):
            setup_logging(log_level="VERBOSE")


class TestLogPerformance:
    """Test suite for the log_performance decorator."""

    def test_logs_start_and_completion(self, caplog):
        @log_performance
        def fetch_layers(item_ids, max_workers=8):
            """Fetch layers."""
            return len(item_ids) * max_workers

        with caplog.at_level(logging.INFO):
            result = fetch_layers(["a", "b"], max_workers=2)

        assert result == 4
        assert "Starting fetch_layers" in caplog.text
        assert "Completed fetch_layers in" in caplog.text
        assert fetch_layers.__name__ == "fetch_layers"
        assert fetch_layers.__doc__ == "Fetch layers."

    def test_logs_failure_and_reraises(self, caplog):
        @log_performance
        def search():
            raise RuntimeError("Too many pages! Something probably went wrong.")

        with caplog.at_level(logging.INFO):
            with pytest.raises(RuntimeError):
                search()

        assert "Failed search after" in caplog.text
        assert "Too many pages!" in caplog.text

    def test_uses_module_logger(self, caplog):
        @log_performance
        def run():
            return None

        with caplog.at_level(logging.INFO):
            run()

        assert all(record.name == __name__ for record in caplog.records)


def test_get_logger_returns_named_logger():
    logger = get_logger("maphub.config.config_loader")

    assert logger is logging.getLogger("maphub.config.config_loader")
