"""
Log output of running generated programs.

Generated code logs through LogOutput/initcmd. Lines below the current
verbosity are dropped; the rest are formatted and put on an unbounded queue
so the script never blocks on the consumer. A consumer thread (or a caller
polling drain()) forwards them to the external sink.
"""

import logging
import queue
import threading
from datetime import datetime
from typing import Any, Callable, Iterable, List, Optional

from ..models import LogLevel
from ..settings import get_setting


LEVEL_NAMES = {
    LogLevel.ERROR: 'ERROR',
    LogLevel.WARN: 'WARN',
    LogLevel.INFO: 'INFO',
    LogLevel.DEBUG: 'DEBUG',
}

_SINK_LEVELS = {
    LogLevel.ERROR: logging.ERROR,
    LogLevel.WARN: logging.WARNING,
    LogLevel.INFO: logging.INFO,
    LogLevel.DEBUG: logging.DEBUG,
}


def format_trace_arg(value: Any) -> str:
    if isinstance(value, str):
        return f'"{value}"'
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)


class LogChannel:
    """Level filter plus queue hand-off for script log lines."""

    def __init__(self, level: Optional[LogLevel] = None,
                 lock: Optional[threading.RLock] = None,
                 time_format: Optional[str] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        self._lock = lock or threading.RLock()
        self._level = LogLevel(level) if level is not None else get_setting('log_level')
        self._time_format = time_format or get_setting('log_time_format')
        self._clock = clock or datetime.now
        self._queue: 'queue.Queue[str]' = queue.Queue()
        self._consumer: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self.logger = logging.getLogger(__name__)

    @property
    def level(self) -> LogLevel:
        with self._lock:
            return self._level

    def set_level(self, level: int) -> LogLevel:
        """Set the current level and return the previous one; out-of-range values are ignored."""
        with self._lock:
            previous = self._level
            if LogLevel.DISABLE <= level < LogLevel.INHERIT:
                self._level = LogLevel(level)
            else:
                self.logger.debug("Ignoring invalid script log level %r", level)
            return previous

    def emit(self, level: int, message: str) -> bool:
        """Queue a formatted line if `level` passes the filter. Returns True if queued."""
        if level < LogLevel.ERROR or level > LogLevel.DEBUG:
            return False
        with self._lock:
            if level > self._level:
                return False
            stamp = self._clock().strftime(self._time_format)
            self._queue.put(f"[{LEVEL_NAMES[LogLevel(level)]}] {stamp} {message}")
        return True

    def trace(self, name: str, args: Iterable[Any] = ()) -> bool:
        """Log a debug-level call record: => name("text", 1, true)."""
        params = ', '.join(format_trace_arg(arg) for arg in args)
        return self.emit(LogLevel.DEBUG, f"=> {name}({params})")

    # ─── Consumers ───────────────────────────────────────────────────────

    def drain(self) -> List[str]:
        """Remove and return every queued line, oldest first."""
        lines = []
        while True:
            try:
                lines.append(self._queue.get_nowait())
            except queue.Empty:
                return lines

    def start_consumer(self, sink: Optional[Callable[[str], None]] = None):
        """Forward queued lines to `sink` from a daemon thread."""
        if self._consumer is not None and self._consumer.is_alive():
            return
        sink = sink or default_sink
        self._stop_event.clear()
        self._consumer = threading.Thread(
            target=self._consume, args=(sink,), name='script-log-consumer', daemon=True,
        )
        self._consumer.start()

    def stop_consumer(self, timeout: float = 2.0):
        """Stop the consumer thread after it has forwarded the queued lines."""
        if self._consumer is None:
            return
        self._stop_event.set()
        self._consumer.join(timeout)
        self._consumer = None

    def _consume(self, sink: Callable[[str], None]):
        while True:
            try:
                line = self._queue.get(timeout=0.1)
            except queue.Empty:
                if self._stop_event.is_set():
                    return
                continue
            try:
                sink(line)
            except Exception as e:
                self.logger.error(f"Script log sink failed: {e}")


_script_logger = logging.getLogger('visual_script_core.script')


def default_sink(line: str):
    """Write a script log line to the Python logging tree."""
    level = logging.INFO
    for log_level, name in LEVEL_NAMES.items():
        if line.startswith(f'[{name}]'):
            level = _SINK_LEVELS[log_level]
            break
    _script_logger.log(level, line)
