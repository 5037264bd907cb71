"""Test suite for console logging configuration."""

import json
import logging

import pytest
from loguru import logger

from qna_cleanup.monitoring.logger import InterceptHandler
from qna_cleanup.monitoring.logger import configure_logger
from qna_cleanup.monitoring.logger import process_log_record
from tests.fixtures.logging_fixtures import CapturedLogs


@pytest.fixture(autouse=True)
def restore_default_logger():
    """Reset logging to the package default after each test."""
    yield
    configure_logger()


class TestProcessLogRecord:
    """Tests for the record filter."""

    def test_serializes_extra_to_json(self):
        """Test extra fields render as a JSON string."""
        record = {"extra": {"state": "COMPLETED", "attempted": 2}}

        assert process_log_record(record) is True
        assert json.loads(record["extra"]) == {"state": "COMPLETED", "attempted": 2}

    def test_empty_extra_renders_blank(self):
        """Test records without extra fields print nothing for them."""
        record = {"extra": {}}

        process_log_record(record)

        assert record["extra"] == ""


class TestConfigureLogger:
    """Tests for configure_logger."""

    def test_default_keeps_azure_sdk_quiet(self):
        """Test Azure SDK loggers are held at WARNING/ERROR without --debug."""
        configure_logger(debug=False)

        assert logging.getLogger("azure").level == logging.WARNING
        assert logging.getLogger("azure.core").level == logging.ERROR
        assert logging.getLogger("azure.identity").level == logging.ERROR

    def test_debug_enables_azure_sdk_logging(self):
        """Test --debug opens the Azure SDK loggers up to DEBUG."""
        configure_logger(debug=True)

        assert logging.getLogger("azure").level == logging.DEBUG
        assert logging.getLogger("azure.core.pipeline.policies").level == logging.DEBUG

    def test_intercept_handler_installed_once(self):
        """Test repeated configuration does not stack handlers."""
        configure_logger(debug=True)
        configure_logger(debug=False)

        handlers = [handler for handler in logging.getLogger("azure").handlers if isinstance(handler, InterceptHandler)]
        assert len(handlers) == 1
        assert logging.getLogger("azure").propagate is False

    def test_azure_records_reach_loguru(self):
        """Test standard logging records from the Azure SDK are forwarded to loguru."""
        configure_logger(debug=True)
        captured_logs = CapturedLogs()
        handler_id = logger.add(captured_logs.sink, level="DEBUG", format="{message}")
        try:
            logging.getLogger("azure.core.pipeline.policies.http_logging_policy").debug("Request URL: 'https://x'")
        finally:
            logger.remove(handler_id)

        assert "Request URL: 'https://x'" in captured_logs.messages("DEBUG")
