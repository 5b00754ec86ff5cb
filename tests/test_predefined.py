"""
Tests for predefined variable merging and serialization.
"""

import yaml
from visual_script_core.models import ScriptDefinition
from visual_script_core.predefined import build_predefined, merge_predefined
from visual_script_core.string_pool import StringPool


def make_definition(langs):
    return ScriptDefinition(name='greet', langs=langs)


class TestMergePredefined:
    """Test cases for merge_predefined."""

    def test_default_table(self):
        definition = make_definition({'def': {'greeting': 'Hello'}})
        assert merge_predefined(definition, 'en') == {'greeting': 'Hello'}

    def test_language_overrides_default(self):
        """Test that the current language overrides default values."""
        definition = make_definition({
            'def': {'greeting': 'Hello', 'bye': 'Bye'},
            'ru': {'greeting': 'Привет'},
        })
        assert merge_predefined(definition, 'ru') == {'greeting': 'Привет', 'bye': 'Bye'}

    def test_internal_keys_excluded(self):
        """Test that underscore keys are dropped from both tables."""
        definition = make_definition({
            'def': {'_title': 'Greet', 'greeting': 'Hello'},
            'fr': {'_desc': 'Saluer'},
        })
        assert merge_predefined(definition, 'fr') == {'greeting': 'Hello'}

    def test_language_only_table(self):
        definition = make_definition({'de': {'greeting': 'Hallo'}})
        assert merge_predefined(definition, 'de') == {'greeting': 'Hallo'}

    def test_no_tables(self):
        assert merge_predefined(make_definition({}), 'en') == {}


class TestBuildPredefined:
    """Test cases for build_predefined."""

    def test_empty_returns_none(self):
        pool = StringPool()
        assert build_predefined(make_definition({'def': {'_title': 'x'}}), 'en', pool) is None
        assert len(pool) == 0

    def test_statement_and_yaml(self):
        """Test the load statement and that its constant parses back."""
        pool = StringPool()
        definition = make_definition({'def': {'greeting': 'Hello', 'count': '3'}})
        statement = build_predefined(definition, 'en', pool)
        assert statement == 'SetYamlVars(STR0)'
        assert yaml.safe_load(pool.strings[0]) == {'greeting': 'Hello', 'count': '3'}

    def test_same_table_shares_constant(self):
        pool = StringPool()
        definition = make_definition({'def': {'greeting': 'Hello'}})
        assert build_predefined(definition, 'en', pool) == build_predefined(definition, 'en', pool)
        assert len(pool) == 1
