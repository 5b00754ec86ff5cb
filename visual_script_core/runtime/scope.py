"""
Nested variable scopes of a running generated program.

Every compiled function that owns an internal tree, and the top-level run
block, brackets its body with init()/deinit(). Those calls push and pop a
name→value map here, so the stack depth follows the call depth of the
generated program.
"""

import logging
import threading
from typing import Dict, List, Mapping, Optional

from ..exceptions import ScopeError


class ScopeStack:
    """
    Stack of variable scopes guarded by one lock.

    The lock may be shared with other runtime components (see ScriptContext);
    it is re-entrant so a holder can call back into the stack.
    """

    def __init__(self, lock: Optional[threading.RLock] = None):
        self.lock = lock or threading.RLock()
        self._scopes: List[Dict[str, str]] = []
        self.logger = logging.getLogger(__name__)

    @property
    def depth(self) -> int:
        with self.lock:
            return len(self._scopes)

    def enter(self, variables: Optional[Mapping[str, str]] = None):
        """Open a new innermost scope, optionally pre-filled."""
        with self.lock:
            self._scopes.append(dict(variables or {}))

    def exit(self):
        """Close the innermost scope."""
        with self.lock:
            if not self._scopes:
                raise ScopeError("deinit() called with no open scope")
            self._scopes.pop()

    def set_variable(self, name: str, value: str):
        """Write a variable into the innermost scope only."""
        with self.lock:
            if not self._scopes:
                raise ScopeError(f"Cannot set variable '{name}': no open scope")
            self._scopes[-1][name] = value

    def set_variables(self, variables: Mapping[str, str]):
        with self.lock:
            if not self._scopes:
                raise ScopeError("Cannot set variables: no open scope")
            self._scopes[-1].update(variables)

    def current(self) -> Optional[Dict[str, str]]:
        """The live innermost scope, or None. Caller must hold `lock`."""
        return self._scopes[-1] if self._scopes else None

    def snapshot(self) -> Dict[str, str]:
        """Copy of the innermost scope ({} when none is open)."""
        with self.lock:
            return dict(self._scopes[-1]) if self._scopes else {}
