"""Timestamped append-only log file."""

from __future__ import annotations

import sys
import threading
import time
from typing import Any

_NOT_INITIALIZED = "Logger not initialized."


class Logger:
    """Writes ``[YYYY-mm-dd HH:MM:SS] message`` lines to a file."""

    def __init__(self, filename: str) -> None:
        self._lock = threading.Lock()
        self._file = open(filename, "a", encoding="utf-8")

    @property
    def closed(self) -> bool:
        return self._file is None

    def log(self, message: str, *args: Any) -> None:
        """Write one line; ``args`` are %-formatted into ``message``."""
        text = message % args if args else message
        stamp = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime())
        with self._lock:
            if self._file is None:
                print(_NOT_INITIALIZED, file=sys.stderr)
                return
            self._file.write(f"[{stamp}] {text}\n")
            self._file.flush()

    def close(self) -> None:
        with self._lock:
            if self._file is not None:
                self._file.close()
                self._file = None

    def __enter__(self) -> Logger:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


_default_logger: Logger | None = None


def logger_init(filename: str) -> Logger:
    """Open the process-wide log. Raises OSError when it cannot be opened."""
    global _default_logger
    new_logger = Logger(filename)
    if _default_logger is not None:
        _default_logger.close()
    _default_logger = new_logger
    return new_logger


def log_message(message: str, *args: Any) -> None:
    """Write to the process-wide log, or complain on stderr if there is none."""
    current = _default_logger
    if current is None:
        print(_NOT_INITIALIZED, file=sys.stderr)
        return
    current.log(message, *args)


def logger_close() -> None:
    """Close the process-wide log, if open."""
    global _default_logger
    if _default_logger is not None:
        _default_logger.close()
        _default_logger = None