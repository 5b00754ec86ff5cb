"""
Functions exposed to the generated program.

The scripting engine registers these under the names the compiler emits
(init, deinit, initcmd, LogOutput, macro, SetLogLevel, SetVariable,
SetYamlVars). Each call is a plain synchronous function bound to one
ScriptContext.
"""

from typing import Any, Callable, Dict

import yaml

from ..exceptions import ScopeError, ScriptCoreError
from ..models import LogLevel
from .context import ScriptContext


def to_text(value: Any) -> str:
    """Scope variables are strings; render engine values the way it prints them."""
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if value is None:
        return ''
    return str(value)


class RuntimeLibrary:
    """The runtime call surface, bound to a ScriptContext."""

    # Generated name → engine prototype
    PROTOTYPES: Dict[str, str] = {
        'init': 'init(...)',
        'deinit': 'deinit()',
        'initcmd': 'initcmd(str, ...) bool',
        'LogOutput': 'LogOutput(int,str)',
        'macro': 'macro(str) str',
        'SetLogLevel': 'SetLogLevel(int) int',
        'SetVariable': 'SetVariable(str,str)',
        'SetYamlVars': 'SetYamlVars(str)',
    }

    def __init__(self, context: ScriptContext):
        self.context = context

    def functions(self) -> Dict[str, Callable[..., Any]]:
        """Name → callable table to register with the scripting engine."""
        return {
            'init': self.init,
            'deinit': self.deinit,
            'initcmd': self.initcmd,
            'LogOutput': self.log_output,
            'macro': self.macro,
            'SetLogLevel': self.set_log_level,
            'SetVariable': self.set_variable,
            'SetYamlVars': self.set_yaml_vars,
        }

    def prototypes(self) -> Dict[str, str]:
        return dict(self.PROTOTYPES)

    # ─── scopes ──────────────────────────────────────────────────────────

    def init(self, *pairs: Any):
        """Enter a scope. `pairs` is name, value, name, value, ... of the caller's parameters."""
        if len(pairs) % 2:
            raise ScopeError(f"init() expects name/value pairs, got {len(pairs)} arguments")
        variables = {str(pairs[i]): to_text(pairs[i + 1]) for i in range(0, len(pairs), 2)}
        self.context.scopes.enter(variables)

    def deinit(self):
        self.context.scopes.exit()

    def set_variable(self, name: str, value: Any):
        self.context.scopes.set_variable(name, to_text(value))

    def set_yaml_vars(self, text: str):
        """Load a YAML mapping of predefined variables into the current scope."""
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as e:
            raise ScriptCoreError(f"Invalid predefined variables: {e}") from e
        if not isinstance(data, dict):
            raise ScriptCoreError("Predefined variables must be a mapping")
        self.context.scopes.set_variables({str(k): to_text(v) for k, v in data.items()})

    # ─── macros ──────────────────────────────────────────────────────────

    def macro(self, text: str) -> str:
        return self.context.macro.expand(text)

    # ─── logging ─────────────────────────────────────────────────────────

    def initcmd(self, name: str, *args: Any) -> bool:
        """Trace a script call; always True so it can guard an expression."""
        self.context.log.trace(name, args)
        return True

    def log_output(self, level: int, message: str):
        self.context.log.emit(level, message)

    def set_log_level(self, level: int) -> int:
        return int(self.context.log.set_level(level))

    @property
    def log_level(self) -> LogLevel:
        return self.context.log.level
