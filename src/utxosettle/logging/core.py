"""Core structured logging for UTXO Settle.

This module defines the log entry and context types, the handler and
formatter interfaces and the manager that routes entries to handlers.
Module-level diagnostics still go through the standard ``logging`` module;
this layer carries structured settlement events.
"""

import json
import os
import sys
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class LogLevel(Enum):
    """Log levels."""

    TRACE = "trace"
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


_LEVEL_ORDER = {level: i for i, level in enumerate(LogLevel)}


@dataclass
class LogContext:
    """Log context information."""

    component: Optional[str] = None
    operation: Optional[str] = None
    batch_id: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert context to dictionary."""
        return {
            "component": self.component,
            "operation": self.operation,
            "batch_id": self.batch_id,
            "metadata": self.metadata,
        }

    def merged_with(self, other: Optional["LogContext"]) -> "LogContext":
        """Overlay ``other`` on this context; set fields of ``other`` win."""
        if other is None:
            return self
        return LogContext(
            component=other.component or self.component,
            operation=other.operation or self.operation,
            batch_id=other.batch_id or self.batch_id,
            metadata={**self.metadata, **other.metadata},
        )


@dataclass
class LogEntry:
    """Log entry data structure."""

    timestamp: float
    level: LogLevel
    message: str
    logger_name: str
    context: LogContext
    exception: Optional[BaseException] = None
    extra: Dict[str, Any] = field(default_factory=dict)
    thread_id: Optional[int] = None
    process_id: Optional[int] = None

    def __post_init__(self):
        if self.thread_id is None:
            self.thread_id = threading.get_ident()
        if self.process_id is None:
            self.process_id = os.getpid()

    def to_dict(self) -> Dict[str, Any]:
        """Convert log entry to dictionary."""
        return {
            "timestamp": self.timestamp,
            "level": self.level.value,
            "message": self.message,
            "logger_name": self.logger_name,
            "context": self.context.to_dict(),
            "exception": str(self.exception) if self.exception else None,
            "extra": self.extra,
            "thread_id": self.thread_id,
            "process_id": self.process_id,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)


class LogConfig:
    """Log configuration."""

    def __init__(
        self,
        name: str = "utxosettle",
        level: LogLevel = LogLevel.INFO,
        format_type: str = "json",
        handlers: Optional[List[str]] = None,
    ):
        self.name = name
        self.level = level
        self.format_type = format_type
        self.handlers = handlers or ["console"]


class LogFormatter(ABC):
    """Abstract log formatter."""

    @abstractmethod
    def format(self, entry: LogEntry) -> str:
        """Format log entry."""


class LogHandler(ABC):
    """Abstract log handler."""

    def __init__(self, name: Optional[str] = None):
        self.name = name or self.__class__.__name__
        self.formatter: Optional[LogFormatter] = None
        self.level: LogLevel = LogLevel.DEBUG
        self._lock = threading.RLock()

    def set_formatter(self, formatter: LogFormatter) -> None:
        with self._lock:
            self.formatter = formatter

    def set_level(self, level: LogLevel) -> None:
        with self._lock:
            self.level = level

    def should_handle(self, entry: LogEntry) -> bool:
        with self._lock:
            return _LEVEL_ORDER[entry.level] >= _LEVEL_ORDER[self.level]

    @abstractmethod
    def emit(self, entry: LogEntry) -> None:
        """Emit log entry."""

    def handle(self, entry: LogEntry) -> None:
        if self.should_handle(entry):
            self.emit(entry)

    def close(self) -> None:
        pass


class LogManager:
    """Log manager for orchestrating logging operations."""

    def __init__(self, config: Optional[LogConfig] = None):
        self.config = config or LogConfig()
        self.loggers: Dict[str, "SettleLogger"] = {}
        self.handlers: Dict[str, LogHandler] = {}
        self.formatters: Dict[str, LogFormatter] = {}
        self._lock = threading.RLock()
        self._context = LogContext()

        self._setup_defaults()

    def _setup_defaults(self) -> None:
        """Setup default logging components."""
        from .formatters import JSONFormatter, TextFormatter
        from .handlers import ConsoleHandler

        self.add_formatter("json", JSONFormatter())
        self.add_formatter("text", TextFormatter())

        console = ConsoleHandler(stream=sys.stderr)
        console.set_formatter(self.formatters.get(self.config.format_type, JSONFormatter()))
        self.add_handler("console", console)

    def get_logger(self, name: str) -> "SettleLogger":
        with self._lock:
            if name not in self.loggers:
                self.loggers[name] = SettleLogger(name, self)
                self.loggers[name].set_level(self.config.level)
            return self.loggers[name]

    def add_handler(self, name: str, handler: LogHandler) -> None:
        """Add handler; it receives entries once listed in the config."""
        with self._lock:
            self.handlers[name] = handler
            if name not in self.config.handlers:
                self.config.handlers.append(name)

    def remove_handler(self, name: str) -> None:
        with self._lock:
            handler = self.handlers.pop(name, None)
            if name in self.config.handlers:
                self.config.handlers.remove(name)
            if handler is not None:
                handler.close()

    def add_formatter(self, name: str, formatter: LogFormatter) -> None:
        with self._lock:
            self.formatters[name] = formatter

    def set_context(self, context: LogContext) -> None:
        with self._lock:
            self._context = context

    def get_context(self) -> LogContext:
        with self._lock:
            return self._context

    def log(
        self,
        level: LogLevel,
        message: str,
        logger_name: str = "root",
        context: Optional[LogContext] = None,
        exception: Optional[BaseException] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Log a message."""
        with self._lock:
            entry = LogEntry(
                timestamp=time.time(),
                level=level,
                message=message,
                logger_name=logger_name,
                context=self._context.merged_with(context),
                exception=exception,
                extra=extra or {},
            )

            for handler_name in self.config.handlers:
                handler = self.handlers.get(handler_name)
                if handler is not None:
                    handler.handle(entry)

    def shutdown(self) -> None:
        """Shutdown log manager."""
        with self._lock:
            for handler in self.handlers.values():
                handler.close()

            self.loggers.clear()
            self.handlers.clear()
            self.formatters.clear()


class SettleLogger:
    """Structured logger bound to a manager."""

    def __init__(self, name: str, manager: LogManager):
        self.name = name
        self.manager = manager
        self.level = LogLevel.INFO
        self._lock = threading.RLock()

    def set_level(self, level: LogLevel) -> None:
        with self._lock:
            self.level = level

    def is_enabled_for(self, level: LogLevel) -> bool:
        with self._lock:
            return _LEVEL_ORDER[level] >= _LEVEL_ORDER[self.level]

    def log(
        self,
        level: LogLevel,
        message: str,
        context: Optional[LogContext] = None,
        exception: Optional[BaseException] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        if self.is_enabled_for(level):
            self.manager.log(
                level=level,
                message=message,
                logger_name=self.name,
                context=context,
                exception=exception,
                extra=extra,
            )

    def debug(self, message: str, **kwargs) -> None:
        self.log(LogLevel.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs) -> None:
        self.log(LogLevel.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self.log(LogLevel.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs) -> None:
        self.log(LogLevel.ERROR, message, **kwargs)


# Global log manager instance
_global_manager: Optional[LogManager] = None


def get_logger(name: str = "root") -> SettleLogger:
    """Get logger instance."""
    global _global_manager
    if _global_manager is None:
        _global_manager = LogManager()
    return _global_manager.get_logger(name)


def get_manager() -> LogManager:
    """Get the global log manager, creating it on first use."""
    global _global_manager
    if _global_manager is None:
        _global_manager = LogManager()
    return _global_manager


def setup_logging(config: LogConfig) -> LogManager:
    """Setup logging with configuration."""
    global _global_manager
    if _global_manager is not None:
        _global_manager.shutdown()
    _global_manager = LogManager(config)
    return _global_manager


def shutdown_logging() -> None:
    """Shutdown logging."""
    global _global_manager
    if _global_manager is not None:
        _global_manager.shutdown()
        _global_manager = None
