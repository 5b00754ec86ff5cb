"""
Exceptions raised by the script compiler and its runtime support library.
"""

from typing import Optional, Any, Dict


class ScriptCoreError(Exception):
    """Base exception for all compiler and runtime errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


# =============================================================================
# COMPILATION ERRORS (abort the whole compilation)
# =============================================================================

class CompileError(ScriptCoreError):
    """Base exception for errors that abort a compilation."""
    pass


class ScriptNotFoundError(CompileError):
    """Raised when a node references a definition the resolver doesn't know."""

    def __init__(self, message: str, name: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.name = name


class FieldRequiredError(CompileError):
    """Raised when a required parameter has neither a value nor a default."""

    def __init__(self, message: str, field: str, script: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.field = field
        self.script = script


class SerializationError(CompileError):
    """Raised when list values or predefined variables fail to serialize."""

    def __init__(self, message: str, cause: Exception, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.cause = cause


# =============================================================================
# RUNTIME ERRORS
# =============================================================================

class MacroError(ScriptCoreError):
    """Base exception for a failed placeholder expansion."""
    pass


class VarLoopError(MacroError):
    """Raised when a variable's expansion refers back to itself."""

    def __init__(self, name: str):
        super().__init__(f"{name} variable refers to itself", {'name': name})
        self.name = name


class VarTooDeepError(MacroError):
    """Raised when nested expansion exceeds the depth limit."""

    def __init__(self, depth: int):
        super().__init__("maximum depth reached", {'depth': depth})
        self.depth = depth


class ScopeError(ScriptCoreError):
    """Raised on unbalanced scope use; indicates a code generation bug."""
    pass
