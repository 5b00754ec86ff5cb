"""
Settings: environment-driven configuration for the script compiler.

Every configurable value is listed in SETTINGS_MANIFEST with the environment
variable that overrides it and its default. Values are resolved on each call
so tests and embedding applications can change the environment at runtime.
"""

import os
from typing import Any, Dict

from .models import LogLevel


SETTINGS_MANIFEST: Dict[str, Dict[str, Any]] = {
    'default_lang': {
        'env': 'VSC_DEFAULT_LANG',
        'default': 'en',
        'label': 'Language used when the header does not name one',
        'type': 'str',
    },
    'log_level': {
        'env': 'VSC_LOG_LEVEL',
        'default': 'INFO',
        'label': 'Ambient script log level (used by INHERIT roots)',
        'type': 'loglevel',
    },
    'log_time_format': {
        'env': 'VSC_LOG_TIME_FORMAT',
        'default': '%Y/%m/%d %H:%M:%S',
        'label': 'Timestamp format of script log lines',
        'type': 'str',
    },
}


def _convert(value: str, kind: str) -> Any:
    if kind == 'loglevel':
        level = LogLevel.parse(value, default=LogLevel.INFO)
        if level == LogLevel.INHERIT:
            raise ValueError('INHERIT is not a valid ambient log level')
        return level
    return value


def get_setting(key: str) -> Any:
    """Resolve one setting: environment first, then the manifest default."""
    meta = SETTINGS_MANIFEST[key]
    env_val = os.environ.get(meta['env'], '').strip() or None
    if env_val is not None:
        return _convert(env_val, meta['type'])
    return _convert(meta['default'], meta['type'])


def get_all_settings() -> Dict[str, Any]:
    return {key: get_setting(key) for key in SETTINGS_MANIFEST}
