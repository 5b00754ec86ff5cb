"""
Parameter value coercion.

The editor stores parameter values loosely typed (strings, numbers, booleans,
lists). Before code generation each raw value is turned into a typed literal
or a reference into the string pool, according to the parameter's kind.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from .exceptions import FieldRequiredError, MacroError, SerializationError
from .models import Header, LANG_DEFAULT_CODE, ParamKind, ParamSpec, ScriptDefinition
from .runtime.macro import VAR_CHAR, expand_text
from .string_pool import StringPool, format_literal


@dataclass
class CoercedParam:
    """A parameter value ready to be written into generated code."""
    name: str
    type: str  # target language type: bool, str, int or a Select passthrough
    value: str  # literal text or constant reference


def normalize_raw(value: Any) -> str:
    """Render a raw editor value as trimmed text ('' for missing values)."""
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def localize_title(title: str, definition: ScriptDefinition, lang: str) -> str:
    """Resolve `#key#` references in a title against the definition's strings."""
    strings = dict(definition.langs.get(LANG_DEFAULT_CODE, {}))
    strings.update(definition.langs.get(lang, {}))
    try:
        return expand_text(strings, title)
    except MacroError:
        return title


class ValueCoercer:
    """
    Converts raw parameter values of one definition into CoercedParams.

    With `intern_strings=False` string values are emitted as inline literals
    instead of pool references; the top-level `run` block declares the root
    script's parameters that way.
    """

    def __init__(self, pool: StringPool, header: Header):
        self.pool = pool
        self.header = header
        self.logger = logging.getLogger(__name__)
        self._handlers: Dict[ParamKind, Callable[..., CoercedParam]] = {
            ParamKind.CHECKBOX: self._coerce_checkbox,
            ParamKind.TEXTAREA: self._coerce_text,
            ParamKind.SINGLE_TEXT: self._coerce_text,
            ParamKind.SELECT: self._coerce_select,
            ParamKind.NUMBER: self._coerce_number,
            ParamKind.LIST: self._coerce_list,
        }

    def coerce_all(self, definition: ScriptDefinition, values: Optional[Dict[str, Any]],
                   intern_strings: bool = True) -> List[CoercedParam]:
        """Coerce every declared parameter, in declaration order."""
        values = values or {}
        return [
            self.coerce(definition, param, values.get(param.name), intern_strings)
            for param in definition.params
        ]

    def coerce(self, definition: ScriptDefinition, param: ParamSpec, raw: Any,
               intern_strings: bool = True) -> CoercedParam:
        handler = self._handlers[param.kind]
        return handler(definition, param, raw, intern_strings)

    # ─── helpers ─────────────────────────────────────────────────────────

    def _string_ref(self, text: str, intern_strings: bool) -> str:
        return self.pool.intern(text) if intern_strings else format_literal(text)

    def _required_error(self, definition: ScriptDefinition, param: ParamSpec) -> FieldRequiredError:
        field = localize_title(param.display_title, definition, self.header.lang)
        script = localize_title(definition.display_title, definition, self.header.lang)
        message = self.header.format_message('errfield', field=field, script=script)
        return FieldRequiredError(message, field=field, script=script,
                                  details={'param': param.name, 'definition': definition.name})

    def _with_default(self, definition: ScriptDefinition, param: ParamSpec, value: str) -> str:
        if value:
            return value
        if param.options.default:
            return param.options.default
        if param.options.required:
            raise self._required_error(definition, param)
        return ''

    # ─── per-kind handlers ───────────────────────────────────────────────

    def _coerce_checkbox(self, definition, param, raw, intern_strings) -> CoercedParam:
        value = normalize_raw(raw)
        flag = 'false' if value in ('', '0', 'false') else 'true'
        return CoercedParam(name=param.name, type='bool', value=flag)

    def _coerce_text(self, definition, param, raw, intern_strings) -> CoercedParam:
        value = self._with_default(definition, param, normalize_raw(raw))
        if definition.is_source_code:
            return CoercedParam(name=param.name, type='str', value=value)
        ref = self._string_ref(value, intern_strings)
        # Inline declarations run before any scope exists; keep their text as-is
        if intern_strings and VAR_CHAR in value:
            ref = f'macro({ref})'
        return CoercedParam(name=param.name, type='str', value=ref)

    def _coerce_select(self, definition, param, raw, intern_strings) -> CoercedParam:
        value = normalize_raw(raw)
        if param.options.type:
            return CoercedParam(name=param.name, type=param.options.type, value=value)
        return CoercedParam(name=param.name, type='str',
                            value=self._string_ref(value, intern_strings))

    def _coerce_number(self, definition, param, raw, intern_strings) -> CoercedParam:
        value = self._with_default(definition, param, normalize_raw(raw))
        return CoercedParam(name=param.name, type='int', value=value or '0')

    def _coerce_list(self, definition, param, raw, intern_strings) -> CoercedParam:
        if isinstance(raw, (list, tuple)) and len(raw) > 0:
            try:
                text = json.dumps(list(raw), separators=(',', ':'), ensure_ascii=False)
            except (TypeError, ValueError) as e:
                raise SerializationError(
                    f"Cannot serialize list parameter '{param.name}': {e}", cause=e,
                    details={'param': param.name, 'definition': definition.name},
                ) from e
        else:
            if param.options.required:
                raise self._required_error(definition, param)
            text = '[]'
        return CoercedParam(name=param.name, type='str',
                            value=self._string_ref(text, intern_strings))
