"""Single-line structured logging with a pluggable sink and clock."""

from __future__ import annotations

import enum
from typing import Callable, Optional

Sink = Callable[[str], None]
Clock = Callable[[], int]

_PAYLOAD_MAX = 255
_LINE_MAX = 511
_NO_CLOCK_STAMP = "[   0.000]"


class LogLevel(enum.IntEnum):
    """Severity of a log line."""

    DEBUG = 0
    INFO = 1
    WARN = 2
    ERROR = 3


def _level_name(level: int) -> str:
    try:
        return LogLevel(level).name
    except ValueError:
        return "?"


def _timestamp(clock: Optional[Clock]) -> str:
    if clock is None:
        return _NO_CLOCK_STAMP
    sec, frac = divmod(clock() & 0xFFFFFFFF, 1000)
    return f"[{sec:4d}.{frac:03d}]"


class Logger:
    """Formats lines as ``[ssss.mmm] LEVEL module event payload`` and hands them to a sink."""

    def __init__(self, sink: Optional[Sink] = None, clock: Optional[Clock] = None) -> None:
        self.sink = sink
        self.clock = clock

    def format_line(self, level: int, module: str, event: str, message: str = "", *args) -> str:
        """Return the formatted line without emitting it."""
        payload = message % args if args else message
        line = (
            f"{_timestamp(self.clock)} {_level_name(level)} "
            f"{module} {event} {payload[:_PAYLOAD_MAX]}"
        )
        return line[:_LINE_MAX]

    def log(self, level: int, module: str, event: str, message: str = "", *args) -> None:
        """Emit one line to the sink; does nothing when no sink is set."""
        if self.sink is None:
            return
        self.sink(self.format_line(level, module, event, message, *args))


_default = Logger()


def set_sink(sink: Optional[Sink]) -> None:
    """Set the sink of the process-wide logger."""
    _default.sink = sink


def set_clock_ms(clock: Optional[Clock]) -> None:
    """Set the millisecond clock of the process-wide logger."""
    _default.clock = clock


def log_line(level: int, module: str, event: str, message: str = "", *args) -> None:
    """Emit a line through the process-wide logger."""
    _default.log(level, module, event, message, *args)