"""
Predefined variables of a script definition.

A definition's default-language string table, overlaid with the table of
the current UI language, is injected into the definition's scope before its
body runs. Keys starting with an underscore are internal (titles, help
texts) and never become variables.
"""

from typing import Dict, Optional

import yaml

from .exceptions import SerializationError
from .models import LANG_DEFAULT_CODE, ScriptDefinition
from .string_pool import StringPool


INTERNAL_PREFIX = '_'


def merge_predefined(definition: ScriptDefinition, lang: str) -> Dict[str, str]:
    """Default table overridden by the `lang` table, internal keys removed."""
    tables = [definition.langs.get(LANG_DEFAULT_CODE, {})]
    if lang != LANG_DEFAULT_CODE:
        tables.append(definition.langs.get(lang, {}))
    merged: Dict[str, str] = {}
    for table in tables:
        for name, value in table.items():
            if not name.startswith(INTERNAL_PREFIX):
                merged[name] = value
    return merged


def build_predefined(definition: ScriptDefinition, lang: str, pool: StringPool) -> Optional[str]:
    """
    Return the statement loading the definition's predefined variables,
    or None when it has none.
    """
    merged = merge_predefined(definition, lang)
    if not merged:
        return None
    try:
        data = yaml.safe_dump(merged, default_flow_style=False, allow_unicode=True, sort_keys=True)
    except yaml.YAMLError as e:
        raise SerializationError(
            f"Cannot serialize predefined variables of '{definition.name}': {e}",
            cause=e, details={'definition': definition.name},
        ) from e
    return f'SetYamlVars({pool.intern(data)})'
