"""
String constant pool for generated programs.

Literal strings used as parameter values are baked into one constant block
(STR0, STR1, ...) at the top of the generated program. The pool keys them by
a CRC-64 of their text so repeated values share a single constant.
"""

import logging
from typing import Callable, Dict, List, Optional


# CRC-64/ISO, reflected polynomial (x^64 + x^4 + x^3 + x + 1)
CRC64_ISO_POLY = 0xD800000000000000
_MASK64 = 0xFFFFFFFFFFFFFFFF


def _make_crc64_table(poly: int) -> List[int]:
    table = []
    for i in range(256):
        crc = i
        for _ in range(8):
            crc = (crc >> 1) ^ poly if crc & 1 else crc >> 1
        table.append(crc)
    return table


_CRC64_ISO_TABLE = _make_crc64_table(CRC64_ISO_POLY)


def crc64(data: bytes) -> int:
    """CRC-64/ISO checksum of `data` (same parameters as Go's crc64.ISO)."""
    crc = _MASK64
    for byte in data:
        crc = _CRC64_ISO_TABLE[(crc ^ byte) & 0xFF] ^ (crc >> 8)
    return crc ^ _MASK64


def string_hash(value: str) -> int:
    return crc64(value.encode('utf-8'))


# Characters that force a double-quoted literal
_UNSAFE_RAW_CHARS = '`%$'


def format_literal(value: str) -> str:
    """
    Render `value` as a string literal of the target language.

    Backtick literals are raw, so they are used whenever the text holds no
    backtick, `%` or `$`. Anything else is double quoted with backslashes and
    quotes escaped.
    """
    if any(ch in value for ch in _UNSAFE_RAW_CHARS):
        escaped = value.replace('\\', '\\\\').replace('"', '\\"')
        return f'"{escaped}"'
    return f'`{value}`'


class StringPool:
    """Deduplicating, insertion-ordered table of string constants."""

    PREFIX = 'STR'

    def __init__(self, hash_func: Optional[Callable[[str], int]] = None):
        self._hash = hash_func or string_hash
        self._strings: List[str] = []
        # hash → indices of every string with that hash
        self._index: Dict[int, List[int]] = {}
        self.logger = logging.getLogger(__name__)

    def __len__(self) -> int:
        return len(self._strings)

    @property
    def strings(self) -> List[str]:
        """Interned strings in first-seen order."""
        return list(self._strings)

    def reference(self, index: int) -> str:
        return f'{self.PREFIX}{index}'

    def intern(self, value: str) -> str:
        """Return the constant reference for `value`, adding it if unseen."""
        digest = self._hash(value)
        bucket = self._index.setdefault(digest, [])
        for index in bucket:
            if self._strings[index] == value:
                return self.reference(index)
        if bucket:
            self.logger.debug("Hash collision %016x: adding distinct constant", digest)
        index = len(self._strings)
        self._strings.append(value)
        bucket.append(index)
        return self.reference(index)

    def render(self, newline: str = '\r\n') -> str:
        """Render the `const { ... }` block, or '' when the pool is empty."""
        if not self._strings:
            return ''
        lines = ['const {']
        for index, value in enumerate(self._strings):
            lines.append(f'{self.reference(index)} = {format_literal(value)}')
        lines.append('}')
        return newline.join(lines) + newline
