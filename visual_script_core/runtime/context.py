"""
Execution context shared by the runtime support functions.

One ScriptContext exists per run of a generated program. It owns the lock,
the scope stack and the log channel; every runtime call receives it through
the RuntimeLibrary bound to it.
"""

import logging
import threading
from typing import Callable, Optional

from ..models import LogLevel
from .log_channel import LogChannel
from .macro import MacroEngine
from .scope import ScopeStack


class ScriptContext:
    """Process-wide runtime state for one generated-program execution."""

    def __init__(self, log_level: Optional[LogLevel] = None,
                 time_format: Optional[str] = None,
                 sink: Optional[Callable[[str], None]] = None):
        self.lock = threading.RLock()
        self.scopes = ScopeStack(self.lock)
        self.log = LogChannel(log_level, lock=self.lock, time_format=time_format)
        self.macro = MacroEngine(self.scopes)
        self._sink = sink
        self.logger = logging.getLogger(__name__)

    def start(self):
        """Start forwarding script log lines to the sink."""
        self.log.start_consumer(self._sink)

    def close(self):
        """Stop log forwarding; report scopes the program left open."""
        self.log.stop_consumer()
        depth = self.scopes.depth
        if depth:
            self.logger.warning(f"Script finished with {depth} open scope(s)")

    def __enter__(self) -> 'ScriptContext':
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
