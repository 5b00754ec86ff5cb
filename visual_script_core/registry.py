"""
Definition Registry: in-memory resolver of script definitions by name.

The compiler only needs `get(name)`; the registry is the default resolver the
editor backend fills from its definition store before compiling.
"""

import logging
import threading
from typing import Any, Dict, Iterable, List, Optional

from .models import ScriptDefinition


class DefinitionRegistry:
    """Thread-safe name → ScriptDefinition map."""

    def __init__(self, definitions: Optional[Iterable[ScriptDefinition]] = None):
        self._lock = threading.RLock()
        self._definitions: Dict[str, ScriptDefinition] = {}
        self.logger = logging.getLogger(__name__)
        for definition in definitions or []:
            self.register(definition)

    def __contains__(self, name: str) -> bool:
        with self._lock:
            return name in self._definitions

    def __len__(self) -> int:
        with self._lock:
            return len(self._definitions)

    def register(self, definition: ScriptDefinition) -> ScriptDefinition:
        """Add or replace a definition."""
        with self._lock:
            if definition.name in self._definitions:
                self.logger.debug(f"Replacing script definition '{definition.name}'")
            self._definitions[definition.name] = definition
            return definition

    def unregister(self, name: str) -> bool:
        with self._lock:
            return self._definitions.pop(name, None) is not None

    def get(self, name: str) -> Optional[ScriptDefinition]:
        with self._lock:
            return self._definitions.get(name)

    def names(self) -> List[str]:
        with self._lock:
            return sorted(self._definitions)

    @classmethod
    def from_dicts(cls, items: Iterable[Dict[str, Any]]) -> 'DefinitionRegistry':
        return cls(ScriptDefinition.from_dict(item) for item in items)
