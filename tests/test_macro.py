"""
Tests for placeholder expansion, with property-based testing.
"""

import pytest
from hypothesis import given, strategies as st
from visual_script_core.exceptions import VarLoopError, VarTooDeepError
from visual_script_core.runtime.macro import expand_text, VAR_DEEP, VAR_LENGTH, MacroEngine
from visual_script_core.runtime.scope import ScopeStack


class TestExpandText:
    """Test cases for expand_text."""

    def test_nested_expansion(self):
        """Test that a value's own placeholders are expanded."""
        assert expand_text({'A': 'x#B#y', 'B': 'mid'}, '#A#') == 'xmidy'

    def test_surrounding_text(self):
        assert expand_text({'name': 'World'}, 'Hello, #name#!') == 'Hello, World!'

    def test_unresolved_passthrough(self):
        assert expand_text({}, '#missing#') == '#missing#'

    def test_closing_sigil_starts_next_name(self):
        """Test that an unknown name's closing sigil can open the next placeholder."""
        assert expand_text({'b': 'B'}, '#a#b#') == '#aB'

    def test_unterminated_name(self):
        assert expand_text({'a': 'A'}, 'x #a# #a') == 'x A #a'

    def test_empty_name(self):
        assert expand_text({'a': 'A'}, '###a#') == '##A'

    def test_overlong_name_is_literal(self):
        """Test that names past the length limit are copied as text."""
        long_name = 'x' * (VAR_LENGTH + 1)
        text = f'#{long_name}#'
        assert expand_text({long_name: 'value'}, text) == text

    def test_longest_name(self):
        name = 'n' * VAR_LENGTH
        assert expand_text({name: 'ok'}, f'<#{name}#>') == '<ok>'

    def test_self_reference(self):
        with pytest.raises(VarLoopError) as exc_info:
            expand_text({'A': '#A#'}, '#A#')
        assert exc_info.value.name == 'A'

    def test_indirect_loop(self):
        """Test that a cycle through another variable is detected."""
        with pytest.raises(VarLoopError) as exc_info:
            expand_text({'A': 'a#B#', 'B': 'b#A#'}, 'start #A#')
        assert exc_info.value.name == 'A'
        assert 'refers to itself' in str(exc_info.value)

    def test_repeated_reference_is_not_a_loop(self):
        assert expand_text({'A': '#B##B#', 'B': 'b'}, '#A#') == 'bb'

    def test_depth_limit(self):
        """Test that a chain of VAR_DEEP variables expands but one more fails."""
        chain = {f'V{i}': f'#V{i + 1}#' for i in range(VAR_DEEP - 1)}
        chain[f'V{VAR_DEEP - 1}'] = 'end'
        assert expand_text(chain, '#V0#') == 'end'

        deeper = {f'V{i}': f'#V{i + 1}#' for i in range(VAR_DEEP)}
        deeper[f'V{VAR_DEEP}'] = 'end'
        with pytest.raises(VarTooDeepError):
            expand_text(deeper, '#V0#')

    @given(st.text(alphabet='ab#\n ', max_size=80))
    def test_no_variables_is_identity(self, text):
        """Property: with an empty scope every text comes back unchanged."""
        assert expand_text({}, text) == text

    @given(st.text(max_size=60).filter(lambda t: '#' not in t))
    def test_text_without_sigil_unchanged(self, text):
        assert expand_text({'a': 'b'}, text) == text


class TestMacroEngine:
    """Test cases for MacroEngine over a scope stack."""

    def test_expands_against_top_scope(self):
        scopes = ScopeStack()
        engine = MacroEngine(scopes)
        scopes.enter({'who': 'outer'})
        scopes.enter({'who': 'inner'})
        assert engine.expand('#who#') == 'inner'
        scopes.exit()
        assert engine.expand('#who#') == 'outer'

    def test_no_scope_returns_text(self):
        assert MacroEngine(ScopeStack()).expand('#k#') == '#k#'

    def test_does_not_mutate_scope(self):
        scopes = ScopeStack()
        scopes.enter({'A': 'x#B#', 'B': 'y'})
        MacroEngine(scopes).expand('#A#')
        assert scopes.snapshot() == {'A': 'x#B#', 'B': 'y'}

    def test_error_leaves_engine_usable(self):
        """Test that a failed expansion doesn't poison later calls."""
        scopes = ScopeStack()
        scopes.enter({'loop': '#loop#', 'ok': 'fine'})
        engine = MacroEngine(scopes)
        with pytest.raises(VarLoopError):
            engine.expand('#loop#')
        assert engine.expand('#ok#') == 'fine'
