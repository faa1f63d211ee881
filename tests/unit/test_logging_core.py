"""
Tests for the structured logging package.
"""

import io
import json

import pytest

from utxosettle.logging import (
    ConsoleHandler,
    JSONFormatter,
    LogConfig,
    LogContext,
    LogEntry,
    LogLevel,
    LogManager,
    MemoryHandler,
    TextFormatter,
    get_logger,
    get_manager,
    setup_logging,
    shutdown_logging,
)


@pytest.fixture
def entry():
    return LogEntry(
        timestamp=0.5,
        level=LogLevel.INFO,
        message="Batch settled",
        logger_name="utxosettle.core.settlement",
        context=LogContext(component="settlement", batch_id="b1"),
        extra={"accepted": 2},
    )


class TestLogContext:
    """Test LogContext."""

    def test_merged_with(self):
        base = LogContext(component="settlement", metadata={"a": 1})
        merged = base.merged_with(LogContext(operation="settle", metadata={"b": 2}))

        assert merged.component == "settlement"
        assert merged.operation == "settle"
        assert merged.metadata == {"a": 1, "b": 2}
        assert base.merged_with(None) is base


class TestLogEntry:
    """Test LogEntry."""

    def test_fills_thread_and_process(self, entry):
        assert entry.thread_id is not None
        assert entry.process_id is not None

    def test_to_json(self, entry):
        data = json.loads(entry.to_json())
        assert data["message"] == "Batch settled"
        assert data["context"]["batch_id"] == "b1"


class TestFormatters:
    """Test JSON and text formatters."""

    def test_json_formatter(self, entry):
        data = json.loads(JSONFormatter().format(entry))

        assert data["timestamp"] == "1970-01-01T00:00:00.500000Z"
        assert data["level"] == "info"
        assert data["extra"] == {"accepted": 2}
        assert data["context"]["component"] == "settlement"
        assert "thread_id" not in data

    def test_json_formatter_options(self, entry):
        formatter = JSONFormatter(
            include_context=False, include_extra=False, include_thread=True,
            timestamp_format="unix",
        )
        data = json.loads(formatter.format(entry))

        assert data["timestamp"] == "0.5"
        assert "context" not in data
        assert "extra" not in data
        assert "thread_id" in data

    def test_json_formatter_exception(self, entry):
        try:
            raise ValueError("broken")
        except ValueError as e:
            entry.exception = e

        data = json.loads(JSONFormatter().format(entry))

        assert data["exception"]["type"] == "ValueError"
        assert "broken" in data["exception"]["traceback"]

    def test_text_formatter(self, entry):
        text = TextFormatter().format(entry)
        assert text == (
            "1970-01-01 00:00:00 [INFO] utxosettle.core.settlement: "
            "Batch settled accepted=2"
        )


class TestHandlers:
    """Test console and memory handlers."""

    def test_console_handler(self, entry):
        stream = io.StringIO()
        handler = ConsoleHandler(stream=stream)
        handler.set_formatter(TextFormatter())

        handler.handle(entry)

        assert stream.getvalue().endswith("Batch settled accepted=2\n")

    def test_console_handler_level(self, entry):
        stream = io.StringIO()
        handler = ConsoleHandler(stream=stream)
        handler.set_level(LogLevel.WARNING)

        handler.handle(entry)

        assert stream.getvalue() == ""

    def test_memory_handler_bounded(self, entry):
        handler = MemoryHandler(max_size=2)
        for i in range(3):
            entry.message = f"message {i}"
            handler.handle(entry)

        assert [log["message"] for log in handler.get_logs()] == ["message 1", "message 2"]
        assert len(handler.buffer) == handler.buffer.maxlen == 2
        assert len(handler.get_logs("message 2")) == 1

        handler.clear_logs()
        assert handler.get_logs() == []


class TestLogManager:
    """Test LogManager and the module-level helpers."""

    def test_routes_to_handlers_and_merges_context(self):
        manager = LogManager(LogConfig(level=LogLevel.DEBUG))
        manager.remove_handler("console")
        memory = MemoryHandler()
        manager.add_handler("memory", memory)
        manager.set_context(LogContext(component="engine"))

        manager.get_logger("test").debug("hello", context=LogContext(operation="settle"))

        (record,) = memory.get_logs()
        assert record["context"]["component"] == "engine"
        assert record["context"]["operation"] == "settle"
        manager.shutdown()

    def test_logger_level_filters(self):
        manager = LogManager(LogConfig(level=LogLevel.WARNING))
        manager.remove_handler("console")
        memory = MemoryHandler()
        manager.add_handler("memory", memory)
        logger = manager.get_logger("test")

        logger.info("dropped")
        logger.error("kept")

        assert [log["message"] for log in memory.get_logs()] == ["kept"]
        assert manager.get_logger("test") is logger
        manager.shutdown()

    def test_default_console_handler(self):
        manager = LogManager(LogConfig(format_type="text"))
        assert isinstance(manager.handlers["console"], ConsoleHandler)
        assert isinstance(manager.handlers["console"].formatter, TextFormatter)
        manager.shutdown()

    def test_setup_and_shutdown(self):
        manager = setup_logging(LogConfig(name="test"))
        assert get_manager() is manager
        assert get_logger("x").manager is manager

        shutdown_logging()
        assert get_manager() is not manager
        shutdown_logging()
