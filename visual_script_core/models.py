"""
Core data models for the script compiler.

This module defines the structures the visual editor hands to the compiler:
script nodes (one invocation each), script definitions (parameterized code
templates with localization and logging metadata) and their parameters.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Any, Optional, Union
from enum import Enum, IntEnum


# Placeholder substituted with the compiled child calls
BODY_PLACEHOLDER = '%body%'

# Reserved language code holding definition-default predefined variables
LANG_DEFAULT_CODE = 'def'

# Name of the raw-source definition kind
SOURCE_CODE = 'source-code'


class LogLevel(IntEnum):
    """Log severities, ascending verbosity. INHERIT uses the caller's level."""
    DISABLE = 0
    ERROR = 1
    WARN = 2
    INFO = 3
    DEBUG = 4
    INHERIT = 5

    @classmethod
    def parse(cls, value: Union[int, str, 'LogLevel', None],
              default: 'LogLevel' = None) -> 'LogLevel':
        """Accept an int code, a name ('warn', 'LOG_WARN') or a LogLevel."""
        if value is None or value == '':
            return cls.INHERIT if default is None else default
        if isinstance(value, str) and not value.strip().lstrip('-').isdigit():
            name = value.strip().upper()
            if name.startswith('LOG_'):
                name = name[4:]
            return cls[name]
        return cls(int(value))


class ParamKind(Enum):
    """Editor widget kinds a script parameter can have."""
    CHECKBOX = 'checkbox'
    TEXTAREA = 'textarea'
    SINGLE_TEXT = 'singletext'
    SELECT = 'select'
    NUMBER = 'number'
    LIST = 'list'

    @classmethod
    def parse(cls, value: Union[int, str, 'ParamKind']) -> 'ParamKind':
        """Accept the editor's integer code, a value or a member name."""
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        if text.isdigit():
            kinds = list(cls)
            if int(text) >= len(kinds):
                raise ValueError(f"Unknown parameter kind code: {text}")
            return kinds[int(text)]
        lowered = text.lower().replace('_', '')
        for kind in cls:
            if kind.value == lowered:
                return kind
        return cls[text.upper()]


@dataclass
class ParamOptions:
    """Per-parameter options set in the definition editor."""
    required: bool = False
    default: str = ''
    type: str = ''  # Select only: raw passthrough type

    @classmethod
    def from_dict(cls, d: Optional[Dict[str, Any]]) -> 'ParamOptions':
        d = d or {}
        return cls(
            required=bool(d.get('required', False)),
            default=str(d.get('default', '') or ''),
            type=str(d.get('type', '') or ''),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {'required': self.required, 'default': self.default, 'type': self.type}


@dataclass
class ParamSpec:
    """A declared parameter of a script definition."""
    name: str
    kind: ParamKind = ParamKind.SINGLE_TEXT
    title: str = ''
    options: ParamOptions = field(default_factory=ParamOptions)

    @property
    def display_title(self) -> str:
        return self.title or self.name

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'ParamSpec':
        return cls(
            name=d['name'],
            kind=ParamKind.parse(d.get('kind', d.get('type', ParamKind.SINGLE_TEXT))),
            title=d.get('title', ''),
            options=ParamOptions.from_dict(d.get('options')),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'kind': self.kind.value,
            'title': self.title,
            'options': self.options.to_dict(),
        }


@dataclass
class ScriptNode:
    """One invocation of a script definition inside the user-authored tree."""
    name: str
    disabled: bool = False
    values: Dict[str, Any] = field(default_factory=dict)
    children: List['ScriptNode'] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'ScriptNode':
        return cls(
            name=d['name'],
            disabled=bool(d.get('disabled', d.get('disable', False))),
            values=dict(d.get('values') or {}),
            children=[cls.from_dict(child) for child in d.get('children') or []],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'disabled': self.disabled,
            'values': dict(self.values),
            'children': [child.to_dict() for child in self.children],
        }


@dataclass
class ScriptDefinition:
    """
    A named, parameterized code template.

    `code` contains the body placeholder that receives the compiled calls of
    a node's children. `tree` is the definition's own internal tree, compiled
    once into the definition's function. `langs` maps a language code to
    localized strings; the LANG_DEFAULT_CODE table holds the defaults.
    """
    name: str
    title: str = ''
    log_level: LogLevel = LogLevel.INHERIT
    code: str = ''
    params: List[ParamSpec] = field(default_factory=list)
    tree: List[ScriptNode] = field(default_factory=list)
    langs: Dict[str, Dict[str, str]] = field(default_factory=dict)

    @property
    def is_source_code(self) -> bool:
        return self.name == SOURCE_CODE

    @property
    def display_title(self) -> str:
        return self.title or self.name

    def get_param(self, name: str) -> Optional[ParamSpec]:
        """Get a declared parameter by name."""
        for param in self.params:
            if param.name == name:
                return param
        return None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'ScriptDefinition':
        return cls(
            name=d['name'],
            title=d.get('title', ''),
            log_level=LogLevel.parse(d.get('log_level', d.get('logLevel'))),
            code=d.get('code', ''),
            params=[ParamSpec.from_dict(p) for p in d.get('params') or []],
            tree=[ScriptNode.from_dict(n) for n in d.get('tree') or []],
            langs={lang: dict(values or {}) for lang, values in (d.get('langs') or {}).items()},
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'title': self.title,
            'log_level': int(self.log_level),
            'code': self.code,
            'params': [p.to_dict() for p in self.params],
            'tree': [n.to_dict() for n in self.tree],
            'langs': {lang: dict(values) for lang, values in self.langs.items()},
        }


DEFAULT_MESSAGES: Dict[str, str] = {
    'errfield': "Field '{field}' in '{script}' is required",
    'erropen': "Script '{name}' has not been found",
}


@dataclass
class Header:
    """Per-compilation context supplied by the caller."""
    lang: str = 'en'
    log_level: LogLevel = LogLevel.INFO
    messages: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_MESSAGES))

    def message(self, key: str) -> str:
        return self.messages.get(key) or DEFAULT_MESSAGES[key]

    def format_message(self, key: str, **fields: str) -> str:
        """
        Render a localized message template with named fields.

        Templates come from the caller, so one that references unknown or
        positional fields falls back to the built-in English template.
        """
        try:
            return str(self.message(key)).format_map(fields)
        except (AttributeError, IndexError, KeyError, TypeError, ValueError):
            return DEFAULT_MESSAGES[key].format_map(fields)

    @classmethod
    def from_dict(cls, d: Optional[Dict[str, Any]], defaults: Optional['Header'] = None) -> 'Header':
        d = d or {}
        base = defaults or cls()
        messages = dict(base.messages)
        messages.update(d.get('messages') or {})
        log_level = LogLevel.parse(d.get('log_level'), default=base.log_level)
        if log_level == LogLevel.INHERIT:
            raise ValueError('Header log level must be one of DISABLE..DEBUG, not INHERIT')
        return cls(
            lang=d.get('lang') or base.lang,
            log_level=log_level,
            messages=messages,
        )
