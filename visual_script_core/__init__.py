"""
Visual Script Core - code generation and runtime support for visual automation scripts.

This package compiles a tree of script nodes, built in the visual editor, into
source for the embedded scripting engine, and provides the runtime functions
(scopes, macros, logging) the generated program calls while it runs.
"""

__version__ = "0.1.0"
__author__ = "VPyD Development Team"

from .models import (
    ScriptNode, ScriptDefinition, ParamSpec, ParamOptions, ParamKind, LogLevel, Header,
    BODY_PLACEHOLDER, LANG_DEFAULT_CODE, SOURCE_CODE,
)
from .exceptions import (
    ScriptCoreError, CompileError, ScriptNotFoundError, FieldRequiredError,
    SerializationError, MacroError, VarLoopError, VarTooDeepError, ScopeError,
)
from .string_pool import StringPool, format_literal, crc64
from .values import ValueCoercer, CoercedParam
from .predefined import build_predefined, merge_predefined
from .registry import DefinitionRegistry
from .compiler import ScriptCompiler, compile_script, id_name
from .runtime import (
    ScriptContext, RuntimeLibrary, LogChannel, MacroEngine, ScopeStack, expand_text,
)

__all__ = [
    "ScriptNode",
    "ScriptDefinition",
    "ParamSpec",
    "ParamOptions",
    "ParamKind",
    "LogLevel",
    "Header",
    "BODY_PLACEHOLDER",
    "LANG_DEFAULT_CODE",
    "SOURCE_CODE",
    "ScriptCoreError",
    "CompileError",
    "ScriptNotFoundError",
    "FieldRequiredError",
    "SerializationError",
    "MacroError",
    "VarLoopError",
    "VarTooDeepError",
    "ScopeError",
    "StringPool",
    "format_literal",
    "crc64",
    "ValueCoercer",
    "CoercedParam",
    "build_predefined",
    "merge_predefined",
    "DefinitionRegistry",
    "ScriptCompiler",
    "compile_script",
    "id_name",
    # Runtime
    "ScriptContext",
    "RuntimeLibrary",
    "LogChannel",
    "MacroEngine",
    "ScopeStack",
    "expand_text",
]
