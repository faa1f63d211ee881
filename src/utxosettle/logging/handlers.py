"""Log handlers for UTXO Settle."""

import sys
import threading
from collections import deque
from typing import Any, Deque, Dict, List, Optional

from .core import LogEntry, LogHandler


class ConsoleHandler(LogHandler):
    """Console log handler."""

    def __init__(self, stream: Any = None):
        super().__init__()
        self.stream = stream or sys.stdout
        self._lock = threading.RLock()

    def emit(self, entry: LogEntry) -> None:
        """Emit log entry to console."""
        with self._lock:
            if self.stream is None:
                return
            if self.formatter:
                formatted = self.formatter.format(entry)
            else:
                formatted = f"{entry.timestamp} [{entry.level.value.upper()}] {entry.logger_name}: {entry.message}"

            self.stream.write(formatted + "\n")
            self.stream.flush()

    def close(self) -> None:
        """Detach from the stream; standard streams are left open."""
        with self._lock:
            if self.stream is not None and self.stream not in (sys.stdout, sys.stderr):
                self.stream.close()
            self.stream = None


class MemoryHandler(LogHandler):
    """Memory log handler, bounded to the most recent ``max_size`` entries."""

    def __init__(self, max_size: int = 1000):
        super().__init__()
        self.max_size = max_size
        self.buffer: Deque[Dict[str, Any]] = deque(maxlen=max_size)
        self._lock = threading.RLock()

    def emit(self, entry: LogEntry) -> None:
        with self._lock:
            record = entry.to_dict()
            record["formatted"] = self.formatter.format(entry) if self.formatter else None
            self.buffer.append(record)

    def get_logs(self, message: Optional[str] = None) -> List[Dict[str, Any]]:
        """Get buffered logs, optionally only those with a given message."""
        with self._lock:
            if message is None:
                return list(self.buffer)
            return [record for record in self.buffer if record["message"] == message]

    def clear_logs(self) -> None:
        with self._lock:
            self.buffer.clear()

    def close(self) -> None:
        with self._lock:
            self.buffer.clear()
