"""Log levels and a simple line-oriented logger for connection internals."""

from __future__ import annotations

import inspect
import os
import sys
from datetime import datetime
from enum import IntEnum
from typing import Any, Mapping, Protocol, TextIO, runtime_checkable

_TRUNCATE_AT = 64


class LogLevel(IntEnum):
    """Connection logging level; a higher value logs more."""

    TRACE = 6
    DEBUG = 5
    INFO = 4
    WARN = 3
    ERROR = 2
    NONE = 1

    def __str__(self) -> str:
        return self.name.lower()


@runtime_checkable
class Logger(Protocol):
    """Receives log messages from connection internals."""

    def log(self, level: LogLevel, msg: str, data: Mapping[str, Any] | None) -> None:
        """Log a message at the given level with optional key/value data."""
        ...


def log_level_from_string(s: str) -> LogLevel:
    """Convert a level name (trace, debug, info, warn, error, none) to a LogLevel."""
    for level in LogLevel:
        if str(level) == s:
            return level
    raise ValueError("invalid log level")


def log_query_args(args):
    """Return query arguments made safe and short enough for logging."""
    result = []
    for arg in args:
        if isinstance(arg, (bytes, bytearray)):
            raw = bytes(arg)
            if len(raw) < _TRUNCATE_AT:
                arg = raw.hex()
            else:
                arg = f"{raw[:_TRUNCATE_AT].hex()} (truncated {len(raw) - _TRUNCATE_AT} bytes)"
        elif isinstance(arg, str):
            encoded = arg.encode("utf-8")
            if len(encoded) > _TRUNCATE_AT:
                head = encoded[:_TRUNCATE_AT].decode("utf-8", errors="ignore")
                arg = f"{head} (truncated {len(encoded) - _TRUNCATE_AT} bytes)"
        result.append(arg)
    return result


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "<nil>"
    return str(value)


class PrintfLogger:
    """Writes one timestamped line per message to a text stream."""

    def __init__(self, level: LogLevel, stream: TextIO | None = None) -> None:
        self.level = LogLevel(level)
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def log(self, level: LogLevel, msg: str, data: Mapping[str, Any] | None = None) -> None:
        """Write the message if its level is enabled."""
        if self.level < level:
            return
        parts = []
        for key, value in (data or {}).items():
            parts.append(_format_value(key))
            parts.append(_format_value(value))
        tail = "".join(f"{part} " for part in parts)
        line = f"{str(LogLevel(level)):>5} {msg} {tail}"

        caller = inspect.currentframe()
        location = ""
        if caller is not None and caller.f_back is not None:
            frame = caller.f_back
            location = f"{os.path.basename(frame.f_code.co_filename)}:{frame.f_lineno}: "
        del caller

        stamp = datetime.now().strftime("%Y/%m/%d %H:%M:%S.%f")
        self.stream.write(f"{stamp} {location}{line}\n")


DEFAULT_LOGGER: Logger = PrintfLogger(LogLevel.DEBUG)