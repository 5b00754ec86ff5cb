"""
Runtime support library called by generated programs.
"""

from .context import ScriptContext
from .library import RuntimeLibrary
from .log_channel import LogChannel
from .macro import MacroEngine, expand_text, VAR_CHAR, VAR_LENGTH, VAR_DEEP
from .scope import ScopeStack

__all__ = [
    'ScriptContext',
    'RuntimeLibrary',
    'LogChannel',
    'MacroEngine',
    'ScopeStack',
    'expand_text',
    'VAR_CHAR',
    'VAR_LENGTH',
    'VAR_DEEP',
]
