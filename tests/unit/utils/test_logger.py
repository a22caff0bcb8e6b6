"""
Unit tests for the logging utilities.

Tests the ContextAwareLogger, CorrelationContextFilter, AzureQueueHandler,
and configuration functions. The Azure queue client is patched out.
"""

import json
import logging
import sys
from io import StringIO
from unittest.mock import Mock, patch

import pytest

from entity_access_core.exceptions import clear_correlation_id, set_correlation_id
from entity_access_core.utils import logger as utils_logger
from entity_access_core.utils.logger import (
    AzureQueueHandler,
    ContextAwareLogger,
    CorrelationContextFilter,
    configure_logging,
    get_logger,
)


@pytest.fixture(autouse=True)
def detach_package_handlers():
    """Drop handlers configure_logging attached so nothing flushes at shutdown."""
    yield
    for name, existing in list(logging.Logger.manager.loggerDict.items()):
        if not name.startswith("entity_access.") or not isinstance(existing, logging.Logger):
            continue
        for handler in existing.handlers[:]:
            if isinstance(handler, AzureQueueHandler):
                handler.log_buffer.clear()
            existing.removeHandler(handler)


def _capture(name, level):
    base_logger = logging.getLogger(name)
    base_logger.setLevel(level)
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter("%(message)s"))
    base_logger.addHandler(handler)
    return base_logger, stream


def _record(msg="Test message", **extra):
    record = logging.LogRecord(
        name="entity_access.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=42,
        msg=msg,
        args=None,
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestContextAwareLogger:
    """Test the ContextAwareLogger wrapper."""

    def test_logger_initialization(self):
        base_logger = logging.getLogger("test.logger")
        context_logger = ContextAwareLogger(base_logger)

        assert context_logger.logger is base_logger

    def test_info_logging_without_extra(self):
        base_logger, stream = _capture("test.info", logging.INFO)

        ContextAwareLogger(base_logger).info("Test message")

        assert stream.getvalue().strip() == "Test message"

    def test_info_logging_with_extra(self):
        base_logger, stream = _capture("test.info.extra", logging.INFO)

        ContextAwareLogger(base_logger).info(
            "Identifier resolved", extra={"entity_type": "Project", "match_count": 1}
        )

        output = stream.getvalue().strip()
        assert output == "Identifier resolved | entity_type=Project | match_count=1"

    def test_extra_stays_on_record(self):
        base_logger, _ = _capture("test.extra.record", logging.INFO)
        records = []
        handler = logging.Handler()
        handler.emit = records.append
        base_logger.addHandler(handler)

        ContextAwareLogger(base_logger).warning("Warning", extra={"blob_length": 57})

        assert records[0].blob_length == 57

    def test_level_filtering(self):
        base_logger, stream = _capture("test.level.filter", logging.WARNING)
        context_logger = ContextAwareLogger(base_logger)

        context_logger.debug("hidden")
        context_logger.info("hidden too")
        context_logger.error("Shown", extra={"error_code": "1001"})

        assert stream.getvalue().strip() == "Shown | error_code=1001"

    def test_exception_logging(self):
        base_logger, stream = _capture("test.exception", logging.ERROR)
        context_logger = ContextAwareLogger(base_logger)

        try:
            raise ValueError("Test exception")
        except ValueError:
            context_logger.exception("Exception occurred", extra={"operation": "test"})

        output = stream.getvalue()
        assert "Exception occurred | operation=test" in output
        assert "ValueError: Test exception" in output

    def test_set_level(self):
        base_logger = logging.getLogger("test.level")
        context_logger = ContextAwareLogger(base_logger)

        context_logger.set_level(logging.DEBUG)
        assert base_logger.level == logging.DEBUG

        context_logger.set_level(logging.WARNING)
        assert base_logger.level == logging.WARNING


class TestCorrelationContextFilter:
    """Test the CorrelationContextFilter."""

    def test_adds_correlation_id(self):
        set_correlation_id("corr-123")
        record = _record()

        assert CorrelationContextFilter().filter(record) is True
        assert record.correlation_id == "corr-123"

    def test_without_correlation_id(self):
        clear_correlation_id()
        record = _record()

        assert CorrelationContextFilter().filter(record) is True
        assert not hasattr(record, "correlation_id")


class TestAzureQueueHandler:
    """Test the AzureQueueHandler."""

    def test_missing_connection_string_warns(self, capsys):
        handler = AzureQueueHandler()

        assert handler.connection_string == ""
        assert "connection string not provided" in capsys.readouterr().err

    def test_build_entry(self):
        handler = AzureQueueHandler(connection_string="UseDevelopmentStorage=true")
        record = _record(correlation_id="corr-1", entity_type="Project", match_count=2)

        entry = handler.build_entry(record)

        assert entry["level"] == "INFO"
        assert entry["logger"] == "entity_access.test"
        assert entry["message"] == "Test message"
        assert entry["line"] == 42
        assert entry["correlation_id"] == "corr-1"
        assert entry["context"] == {"entity_type": "Project", "match_count": 2}

    def test_build_entry_with_exception(self):
        handler = AzureQueueHandler(connection_string="UseDevelopmentStorage=true")
        try:
            raise RuntimeError("broken")
        except RuntimeError:
            record = _record()
            record.exc_info = sys.exc_info()

        entry = handler.build_entry(record)

        assert entry["exception"]["type"] == "RuntimeError"
        assert entry["exception"]["message"] == "broken"
        assert entry["exception"]["traceback"]

    @patch("entity_access_core.utils.logger.QueueClient")
    def test_batches_until_batch_size(self, mock_queue_client):
        client = Mock()
        mock_queue_client.from_connection_string.return_value = client
        handler = AzureQueueHandler(
            queue_name="audit-logs", connection_string="UseDevelopmentStorage=true", batch_size=3
        )

        handler.emit(_record("one"))
        handler.emit(_record("two"))
        client.send_message.assert_not_called()

        handler.emit(_record("three"))

        mock_queue_client.from_connection_string.assert_called_once_with(
            conn_str="UseDevelopmentStorage=true", queue_name="audit-logs"
        )
        assert client.send_message.call_count == 3
        sent = [json.loads(call.args[0])["message"] for call in client.send_message.call_args_list]
        assert sent == ["one", "two", "three"]
        assert handler.log_buffer == []

    @patch("entity_access_core.utils.logger.QueueClient")
    def test_close_flushes(self, mock_queue_client):
        client = Mock()
        mock_queue_client.from_connection_string.return_value = client
        handler = AzureQueueHandler(connection_string="UseDevelopmentStorage=true", batch_size=10)

        handler.emit(_record("pending"))
        handler.close()

        client.send_message.assert_called_once()

    @patch("entity_access_core.utils.logger.QueueClient")
    def test_flush_without_connection_string_keeps_buffer(self, mock_queue_client, capsys):
        handler = AzureQueueHandler(connection_string=None, batch_size=1)

        handler.emit(_record("kept"))

        mock_queue_client.from_connection_string.assert_not_called()
        assert len(handler.log_buffer) == 1

    @patch("entity_access_core.utils.logger.QueueClient")
    def test_send_failure_is_reported_not_raised(self, mock_queue_client, capsys):
        client = Mock()
        client.send_message.side_effect = RuntimeError("queue unavailable")
        mock_queue_client.from_connection_string.return_value = client
        handler = AzureQueueHandler(connection_string="UseDevelopmentStorage=true", batch_size=1)

        handler.emit(_record("lost"))

        assert "queue unavailable" in capsys.readouterr().err


class TestConfigureLogging:
    """Test configure_logging and get_logger."""

    def test_configure_logging_console_only(self):
        logger = configure_logging("resolver", log_level="DEBUG", enable_queue=False)

        base_logger = logging.getLogger("entity_access.resolver")
        assert logger.logger is base_logger
        assert base_logger.level == logging.DEBUG
        assert len(base_logger.handlers) == 1
        assert isinstance(base_logger.handlers[0], logging.StreamHandler)

    def test_reconfigure_replaces_handlers(self):
        configure_logging("cipher", enable_queue=False)
        configure_logging("cipher", enable_queue=False)

        assert len(logging.getLogger("entity_access.cipher").handlers) == 1

    @patch("entity_access_core.utils.logger.QueueClient")
    def test_configure_logging_with_queue(self, mock_queue_client):
        configure_logging(
            "queued",
            enable_queue=True,
            queue_name="entity-logs",
            connection_string="UseDevelopmentStorage=true",
        )

        handlers = logging.getLogger("entity_access.queued").handlers
        queue_handlers = [h for h in handlers if isinstance(h, AzureQueueHandler)]
        assert len(queue_handlers) == 1
        assert queue_handlers[0].queue_name == "entity-logs"

    def test_queue_setting_from_environment(self, monkeypatch):
        monkeypatch.setenv("LOG_QUEUE_ENABLED", "true")
        monkeypatch.setenv("AzureWebJobsStorage", "UseDevelopmentStorage=true")

        configure_logging("from_env")

        handlers = logging.getLogger("entity_access.from_env").handlers
        assert any(isinstance(h, AzureQueueHandler) for h in handlers)

    def test_get_logger_returns_configured_logger(self):
        configured = configure_logging("shared", enable_queue=False)

        assert get_logger() is configured

    def test_get_logger_falls_back_to_root(self):
        utils_logger.reset_logging()

        logger = get_logger()

        assert isinstance(logger, ContextAwareLogger)
        assert logger.logger is logging.getLogger()

    def test_get_logger_level_from_environment(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "warning")

        get_logger()

        assert logging.getLogger().level == logging.WARNING

    def test_invalid_level_in_environment(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "LOUD")

        with pytest.raises(ValueError):
            get_logger()
