"""
Tests for the logging package: config, formatters, filters, handlers, logger.
"""

import json
import sys
import logging
from logging.handlers import RotatingFileHandler

import pytest

from src.http_exchange.core.logging import (
    ColoredFormatter,
    CorrelationIdFilter,
    ExchangeLogger,
    ExtraFieldsFilter,
    JSONFormatter,
    LogFormat,
    LoggingConfig,
    LogLevel,
    TextFormatter,
    clear_correlation_id,
    create_console_handler,
    create_file_handler,
    get_correlation_id,
    get_formatter,
    set_correlation_id,
)


def make_record(msg="Request completed", level=logging.INFO, **extra):
    record = logging.LogRecord("http_exchange", level, __file__, 1, msg, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture(autouse=True)
def reset_correlation_id():
    clear_correlation_id()
    yield
    clear_correlation_id()


class TestLoggingConfig:

    def test_defaults(self):
        config = LoggingConfig()
        assert config.level is LogLevel.INFO
        assert config.format is LogFormat.TEXT
        assert config.enable_console is True
        assert config.enable_file is False

    def test_create_from_strings(self):
        config = LoggingConfig.create(level="debug", format="JSON")
        assert config.level is LogLevel.DEBUG
        assert config.format is LogFormat.JSON

    def test_plain_strings_normalised(self):
        config = LoggingConfig(level="warning", format="colored")
        assert config.level is LogLevel.WARNING
        assert config.format is LogFormat.COLORED

    def test_create_file_path_enables_file(self, tmp_path):
        config = LoggingConfig.create(file_path=str(tmp_path / "exchange.log"))
        assert config.enable_file is True
        assert LoggingConfig.create(file_path=str(tmp_path / "x.log"), enable_file=False).enable_file is False

    def test_file_requires_path(self):
        with pytest.raises(ValueError, match="file_path"):
            LoggingConfig(enable_file=True)

    def test_invalid_level(self):
        with pytest.raises(ValueError):
            LoggingConfig.create(level="LOUD")


class TestFormatters:

    def test_json_formatter(self):
        record = make_record(method="POST", status_code=301, redirects=0)
        data = json.loads(JSONFormatter().format(record))

        assert data["level"] == "INFO"
        assert data["logger"] == "http_exchange"
        assert data["message"] == "Request completed"
        assert data["method"] == "POST"
        assert data["status_code"] == 301
        assert data["timestamp"].endswith("+00:00")

    def test_json_formatter_non_serializable(self):
        data = json.loads(JSONFormatter().format(make_record(payload=object())))
        assert data["payload"].startswith("<object")

    def test_json_formatter_exception(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = logging.LogRecord("x", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())

        data = json.loads(JSONFormatter().format(record))
        assert "RuntimeError: boom" in data["exception"]

    def test_text_formatter_appends_fields(self):
        line = TextFormatter().format(make_record(method="GET", status_code=200))
        assert "[INFO] [http_exchange] Request completed" in line
        assert "method=GET" in line
        assert "status_code=200" in line

    def test_colored_formatter_restores_levelname(self):
        record = make_record(level=logging.ERROR)
        line = ColoredFormatter().format(record)
        assert "\033[31mERROR\033[0m" in line
        assert record.levelname == "ERROR"

    @pytest.mark.parametrize("name,cls", [
        ("json", JSONFormatter), ("TEXT", TextFormatter), ("colored", ColoredFormatter),
    ])
    def test_get_formatter(self, name, cls):
        assert type(get_formatter(name)) is cls

    def test_get_formatter_unknown(self):
        with pytest.raises(ValueError, match="Unknown format"):
            get_formatter("xml")


class TestFilters:

    def test_correlation_id_storage(self):
        assert get_correlation_id() is None
        set_correlation_id("req-1")
        assert get_correlation_id() == "req-1"
        clear_correlation_id()
        assert get_correlation_id() is None

    def test_correlation_filter_adds_id(self):
        set_correlation_id("req-2")
        record = make_record()
        assert CorrelationIdFilter().filter(record) is True
        assert record.correlation_id == "req-2"

    def test_correlation_filter_keeps_explicit_id(self):
        set_correlation_id("req-3")
        record = make_record(correlation_id="explicit")
        CorrelationIdFilter().filter(record)
        assert record.correlation_id == "explicit"

    def test_extra_fields_filter(self):
        record = make_record(service="override")
        ExtraFieldsFilter({"service": "uploader", "env": "test"}).filter(record)
        assert record.service == "override"
        assert record.env == "test"


class TestHandlers:

    def test_console_handler(self):
        handler = create_console_handler(logging.DEBUG, TextFormatter(), [CorrelationIdFilter()])
        assert handler.level == logging.DEBUG
        assert isinstance(handler.formatter, TextFormatter)
        assert len(handler.filters) == 1

    def test_file_handler_creates_directory(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "exchange.log"
        handler = create_file_handler(str(path), logging.INFO, JSONFormatter(), max_bytes=1024, backup_count=2)
        try:
            assert isinstance(handler, RotatingFileHandler)
            assert path.parent.is_dir()
            assert handler.maxBytes == 1024
            assert handler.backupCount == 2
        finally:
            handler.close()


class TestExchangeLogger:

    def test_writes_json_with_masking(self, logging_config_with_file):
        with ExchangeLogger(logging_config_with_file, name="http_exchange.test.json") as log:
            log.info("Request started", url="https://x.com/?token=abc", Authorization="Bearer abc")

        with open(logging_config_with_file.file_path, encoding="utf-8") as f:
            entry = json.loads(f.readline())

        assert entry["message"] == "Request started"
        assert entry["url"] == "https://x.com/?token=***REDACTED***"
        assert entry["Authorization"] == "***REDACTED***"

    def test_level_filtering(self, tmp_path):
        path = tmp_path / "warn.log"
        config = LoggingConfig.create(level="WARNING", enable_console=False, enable_file=True, file_path=str(path))

        with ExchangeLogger(config, name="http_exchange.test.level") as log:
            log.debug("hidden")
            log.info("hidden")
            log.warning("shown")
            log.error("also shown")

        lines = path.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 2
        assert "shown" in lines[0]

    def test_correlation_id_in_output(self, logging_config_with_file):
        set_correlation_id("req-42")
        with ExchangeLogger(logging_config_with_file, name="http_exchange.test.cid") as log:
            log.info("Request completed")

        with open(logging_config_with_file.file_path, encoding="utf-8") as f:
            assert json.loads(f.readline())["correlation_id"] == "req-42"

    def test_reinit_replaces_handlers(self):
        config = LoggingConfig.create(enable_console=True)
        first = ExchangeLogger(config, name="http_exchange.test.reinit")
        second = ExchangeLogger(config, name="http_exchange.test.reinit")
        try:
            assert len(logging.getLogger("http_exchange.test.reinit").handlers) == 1
        finally:
            second.close()
            first.close()

    def test_close_idempotent(self):
        log = ExchangeLogger(LoggingConfig(), name="http_exchange.test.close")
        log.close()
        log.close()
        assert log.closed is True
        assert logging.getLogger("http_exchange.test.close").handlers == []

    def test_does_not_propagate(self):
        log = ExchangeLogger(LoggingConfig(), name="http_exchange.test.propagate")
        try:
            assert logging.getLogger("http_exchange.test.propagate").propagate is False
        finally:
            log.close()
