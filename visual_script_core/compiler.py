"""
Script Compiler: turns a tree of script nodes into one program for the
embedded scripting engine.

The generated program has three parts:

    const { STR0 = `...` ... }          interned string constants
    const IOTA { LOG_DISABLE ... }      log severities
    func sendEmail(str to, ...) {...}   one function per script definition
    run { ... deinit() }                root parameters, log level, calls

Every definition referenced in the tree becomes a function the first time it
is met; later references only emit call sites. The raw-source definition is
the exception: it is inlined at each occurrence, either as a numbered
function or, when flagged global, as top-level code in the function block.
"""

import logging
import re
from typing import Callable, Dict, List, Optional, Set, Union

from .exceptions import CompileError, ScriptNotFoundError
from .models import (
    BODY_PLACEHOLDER, Header, LogLevel, ScriptDefinition, ScriptNode,
)
from .predefined import build_predefined
from .registry import DefinitionRegistry
from .settings import get_setting
from .string_pool import StringPool
from .values import CoercedParam, ValueCoercer


NL = '\r\n'

LOG_LEVELS_BLOCK = 'const IOTA { LOG_DISABLE LOG_ERROR LOG_WARN LOG_INFO LOG_DEBUG }' + NL

# Positions of the raw-source definition's parameters
SOURCE_GLOBAL_PARAM = 0
SOURCE_CODE_PARAM = 1

Resolver = Union[DefinitionRegistry, Callable[[str], Optional[ScriptDefinition]]]

_ID_SEPARATORS = re.compile(r'[-_ .]+')
_ID_INVALID = re.compile(r'[^A-Za-z0-9_]')


def id_name(name: str) -> str:
    """Function identifier for a definition name: 'send-email' → 'sendEmail'."""
    parts = [p for p in _ID_SEPARATORS.split(name) if p]
    if not parts:
        return '_'
    ident = parts[0] + ''.join(p[:1].upper() + p[1:] for p in parts[1:])
    ident = _ID_INVALID.sub('', ident) or '_'
    if ident[0].isdigit():
        ident = '_' + ident
    return ident


def default_header() -> Header:
    return Header(lang=get_setting('default_lang'), log_level=get_setting('log_level'))


class ScriptCompiler:
    """
    Compiles script trees against a definition resolver.

    `resolver` is a DefinitionRegistry (or anything with `get(name)`, such as
    a dict) or a plain callable returning the definition or None. Compiler
    state (string pool, emitted functions) is reset by every `compile` call.
    """

    def __init__(self, resolver: Resolver, header: Optional[Header] = None):
        self._resolve = resolver.get if hasattr(resolver, 'get') else resolver
        self.header = header or default_header()
        self.logger = logging.getLogger(__name__)
        self._reset()

    def _reset(self):
        self.pool = StringPool()
        self.coercer = ValueCoercer(self.pool, self.header)
        self._linked: Dict[str, str] = {}  # definition name -> function id
        self._ids: Set[str] = set()
        self._counter = 0
        self._funcs: List[str] = []

    @property
    def functions(self) -> str:
        """The accumulated function block."""
        return ''.join(self._funcs)

    # =========================================================================
    # TREE
    # =========================================================================

    def compile_children(self, nodes: List[ScriptNode]) -> str:
        """Call statements for `nodes`, skipping disabled subtrees."""
        return ''.join(self.compile_node(node) for node in nodes if not node.disabled)

    def compile_node(self, node: ScriptNode) -> str:
        """Emit the node's function if needed and return its call statement."""
        if node.disabled:
            return ''
        definition = self._resolve(node.name)
        if definition is None:
            raise ScriptNotFoundError(
                self.header.format_message('erropen', name=node.name), name=node.name,
            )
        values = self.coercer.coerce_all(definition, node.values)

        if definition.is_source_code:
            if len(values) <= SOURCE_CODE_PARAM:
                raise CompileError(
                    f"'{definition.name}' must declare a global flag and a code parameter",
                    details={'definition': definition.name},
                )
            if values[SOURCE_GLOBAL_PARAM].value == 'true':
                self._compile_global_source(node, values)
                return ''
            return self._compile_inline_source(definition, node, values)

        idname = self._linked.get(definition.name)
        if idname is None:
            idname = self._unique_id(id_name(definition.name))
            self._linked[definition.name] = idname
            self._emit_function(definition, node, idname, values)
        return self._call(idname, [param.value for param in values])

    def _unique_id(self, base: str) -> str:
        """Reserve `base`, or `base2`, `base3`... when another name maps to it."""
        idname, suffix = base, 2
        while idname in self._ids:
            idname = f'{base}{suffix}'
            suffix += 1
        self._ids.add(idname)
        return idname

    # =========================================================================
    # FUNCTIONS
    # =========================================================================

    def _emit_function(self, definition: ScriptDefinition, node: ScriptNode,
                       idname: str, values: List[CoercedParam]):
        body = self.compile_children(node.children)
        code = definition.code.replace(BODY_PLACEHOLDER, body).rstrip(NL)

        if definition.tree:
            pairs = ','.join(f'"{param.name}", {param.name}' for param in values)
            code += f'{NL}init({pairs}){NL}'
            predef = build_predefined(definition, self.header.lang, self.pool)
            if predef:
                code += predef + NL
            code += NL + self.compile_children(definition.tree)
            code += f'{NL}deinit()'

        params = [f'{param.type} {param.name}' for param in values]
        self._add_function(definition, idname, params, [param.name for param in values], code)

    def _compile_global_source(self, node: ScriptNode, values: List[CoercedParam]):
        """Fold global raw source into the function block; it has no call site."""
        body = self.compile_children(node.children)
        code = values[SOURCE_CODE_PARAM].value.replace(BODY_PLACEHOLDER, body)
        self._funcs.append(code + NL)

    def _compile_inline_source(self, definition: ScriptDefinition, node: ScriptNode,
                               values: List[CoercedParam]) -> str:
        """Wrap raw source in its own numbered function and call it."""
        body = self.compile_children(node.children)
        code = values[SOURCE_CODE_PARAM].value.replace(BODY_PLACEHOLDER, body).rstrip(NL)
        idname = f'{id_name(definition.name)}{self._counter}'
        while idname in self._ids:
            self._counter += 1
            idname = f'{id_name(definition.name)}{self._counter}'
        self._counter += 1
        self._ids.add(idname)
        self._add_function(definition, idname, [], [], code)
        return self._call(idname, [])

    def _add_function(self, definition: ScriptDefinition, idname: str,
                      params: List[str], param_names: List[str], code: str):
        if definition.log_level != LogLevel.INHERIT:
            code = (f'int prevLog = SetLogLevel({int(definition.log_level)}){NL}'
                    f'{code}{NL}SetLogLevel(prevLog)')
        trace_args = ''.join(f',{name}' for name in param_names)
        code = f'initcmd(`{definition.name}`{trace_args}){NL}{code}'
        self._funcs.append(f'func {idname}({",".join(params)}) {{{NL}{code}{NL}}}{NL}')
        self.logger.debug(f"Emitted function {idname} for '{definition.name}'")

    @staticmethod
    def _call(idname: str, args: List[str]) -> str:
        return f'   {idname}({",".join(args)}){NL}'

    # =========================================================================
    # PROGRAM
    # =========================================================================

    def compile(self, root: ScriptDefinition, values: Optional[dict] = None) -> str:
        """
        Compile the root definition and its tree into a complete program.

        `values` optionally supplies the root's own parameter values; missing
        ones fall back to the declared defaults.
        """
        self._reset()

        declarations = ''
        for param in self.coercer.coerce_all(root, values, intern_strings=False):
            declarations += f'{param.type} {param.name} = {param.value}{NL}'

        level = root.log_level
        if level == LogLevel.INHERIT:
            level = self.header.log_level
        declarations += f'SetLogLevel({int(level)}){NL}init(){NL}'

        code = root.code.replace(BODY_PLACEHOLDER, '').strip()
        if code:
            code += NL
        predef = build_predefined(root, self.header.lang, self.pool)
        if predef:
            code = predef + NL + code

        body = self.compile_children(root.tree)

        constants = self.pool.render(NL) + LOG_LEVELS_BLOCK
        self.logger.info(
            f"Compiled '{root.name}': {len(self._funcs)} function block(s), "
            f"{len(self.pool)} constant(s)"
        )
        return f'{constants}{self.functions}{NL}run {{{NL}{declarations}{code}{body}{NL}deinit()}}'


def compile_script(root: ScriptDefinition, resolver: Resolver,
                   header: Optional[Header] = None, values: Optional[dict] = None) -> str:
    """Compile `root` with a fresh compiler."""
    return ScriptCompiler(resolver, header).compile(root, values)
