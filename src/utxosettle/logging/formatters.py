"""Log formatters for UTXO Settle.

JSON and plain-text renderings of structured log entries.
"""

import json
import time
import traceback
from typing import Any, Dict, Optional

from .core import LogEntry, LogFormatter


class JSONFormatter(LogFormatter):
    """JSON log formatter."""

    def __init__(
        self,
        include_context: bool = True,
        include_extra: bool = True,
        include_thread: bool = False,
        timestamp_format: str = "iso",
        indent: Optional[int] = None,
    ):
        self.include_context = include_context
        self.include_extra = include_extra
        self.include_thread = include_thread
        self.timestamp_format = timestamp_format
        self.indent = indent

    def format(self, entry: LogEntry) -> str:
        """Format log entry as JSON."""
        data: Dict[str, Any] = {
            "timestamp": self._format_timestamp(entry.timestamp),
            "level": entry.level.value,
            "logger": entry.logger_name,
        }

        if self.include_context:
            data["context"] = entry.context.to_dict()

        if entry.exception is not None:
            data["exception"] = {
                "type": type(entry.exception).__name__,
                "message": str(entry.exception),
                "traceback": "".join(
                    traceback.format_exception(
                        type(entry.exception),
                        entry.exception,
                        entry.exception.__traceback__,
                    )
                ),
            }

        if self.include_extra and entry.extra:
            data["extra"] = entry.extra

        if self.include_thread:
            data["thread_id"] = entry.thread_id
            data["process_id"] = entry.process_id

        data["message"] = entry.message

        return json.dumps(data, indent=self.indent, default=str)

    def _format_timestamp(self, timestamp: float) -> str:
        if self.timestamp_format == "iso":
            return (
                time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(timestamp))
                + f".{int((timestamp % 1) * 1000000):06d}Z"
            )
        if self.timestamp_format == "unix":
            return str(timestamp)
        return time.strftime(self.timestamp_format, time.gmtime(timestamp))


class TextFormatter(LogFormatter):
    """Text log formatter."""

    def __init__(
        self,
        format_string: Optional[str] = None,
        timestamp_format: str = "%Y-%m-%d %H:%M:%S",
    ):
        self.timestamp_format = timestamp_format
        self.format_string = (
            format_string or "%(timestamp)s [%(level)s] %(logger)s: %(message)s"
        )

    def format(self, entry: LogEntry) -> str:
        """Format log entry."""
        text = self.format_string % {
            "timestamp": time.strftime(self.timestamp_format, time.gmtime(entry.timestamp)),
            "level": entry.level.value.upper(),
            "logger": entry.logger_name,
            "message": entry.message,
        }
        if entry.extra:
            text += " " + " ".join(f"{key}={value}" for key, value in entry.extra.items())
        return text
