"""
Placeholder ("macro") expansion for generated programs.

Text may reference scope variables as `#name#`. Expansion is recursive: a
variable's value is itself expanded before it is spliced in. An explicit
stack of in-progress names detects self references and bounds the nesting
depth, independently of Python's own recursion limit.
"""

from typing import Dict, List, Optional

from ..exceptions import VarLoopError, VarTooDeepError


VAR_CHAR = '#'
VAR_LENGTH = 32  # longest accepted variable name
VAR_DEEP = 16    # maximum number of nested expansions


def expand_text(values: Dict[str, str], text: str, stack: Optional[List[str]] = None) -> str:
    """
    Expand every `#name#` in `text` whose name is a key of `values`.

    Unknown names are left as they are, and their closing sigil may open the
    next placeholder (`#a#b#` with only `b` known gives `#a` + value of b).
    Names longer than VAR_LENGTH and an unterminated trailing name are
    copied literally.

    Raises:
        VarLoopError: a variable's expansion reaches itself again.
        VarTooDeepError: more than VAR_DEEP expansions are nested.
    """
    if stack is None:
        stack = []
    if not text or VAR_CHAR not in text:
        return text

    result: List[str] = []
    name: List[str] = []
    is_name = False

    for ch in text:
        if ch != VAR_CHAR:
            if not is_name:
                result.append(ch)
                continue
            name.append(ch)
            if len(name) > VAR_LENGTH:
                result.append(VAR_CHAR)
                result.extend(name)
                name = []
                is_name = False
            continue

        if not is_name:
            is_name = True
            continue

        key = ''.join(name)
        name = []
        if key not in values:
            # The closing sigil starts a new candidate name
            result.append(VAR_CHAR)
            result.append(key)
            continue

        if key in stack:
            raise VarLoopError(key)
        if len(stack) >= VAR_DEEP:
            raise VarTooDeepError(VAR_DEEP)
        stack.append(key)
        result.append(expand_text(values, values[key], stack))
        stack.pop()
        is_name = False

    if is_name:
        result.append(VAR_CHAR)
        result.extend(name)
    return ''.join(result)


class MacroEngine:
    """Expands placeholders against the top scope of a ScopeStack."""

    def __init__(self, scopes):
        self._scopes = scopes

    def expand(self, text: str) -> str:
        """
        Expand `text` against the current scope.

        The scope lock is held once for the whole expansion; with no open
        scope the text is returned unchanged.
        """
        with self._scopes.lock:
            values = self._scopes.current()
            if values is None:
                return text
            return expand_text(values, text)
