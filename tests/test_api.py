"""
Tests for the compile HTTP endpoint.
"""

import pytest
from flask import Flask
from visual_script_core.api import compile_bp, init_compile_api
from visual_script_core.models import ScriptDefinition
from visual_script_core.registry import DefinitionRegistry


@pytest.fixture
def client():
    app = Flask(__name__)
    app.register_blueprint(compile_bp)
    init_compile_api(DefinitionRegistry([
        ScriptDefinition(name='registered', code='Noop()'),
    ]))
    with app.test_client() as client:
        yield client
    init_compile_api(DefinitionRegistry())


HELLO = {
    'name': 'hello',
    'code': 'LogOutput(LOG_INFO, text)',
    'params': [{'name': 'text', 'kind': 'textarea', 'title': 'Text',
                'options': {'required': True}}],
}


class TestCompileEndpoint:
    """Test cases for POST /api/compile."""

    def test_compile(self, client):
        response = client.post('/api/compile', json={
            'script': {'name': 'main', 'code': '%body%',
                       'tree': [{'name': 'hello', 'values': {'text': 'Hi'}}]},
            'definitions': [HELLO],
            'header': {'lang': 'en', 'log_level': 4},
        })
        assert response.status_code == 200
        data = response.get_json()
        assert data['success'] is True
        assert 'func hello(str text)' in data['source']
        assert 'SetLogLevel(4)' in data['source']

    def test_uses_registered_definitions(self, client):
        response = client.post('/api/compile', json={
            'script': {'name': 'main', 'tree': [{'name': 'registered'}]},
        })
        assert response.status_code == 200
        assert 'func registered()' in response.get_json()['source']

    def test_missing_script(self, client):
        response = client.post('/api/compile', json={'definitions': []})
        assert response.status_code == 400
        assert response.get_json()['success'] is False

    def test_script_not_found(self, client):
        response = client.post('/api/compile', json={
            'script': {'name': 'main', 'tree': [{'name': 'ghost'}]},
        })
        assert response.status_code == 404
        assert response.get_json()['name'] == 'ghost'

    def test_field_required(self, client):
        response = client.post('/api/compile', json={
            'script': {'name': 'main', 'tree': [{'name': 'hello'}]},
            'definitions': [HELLO],
        })
        assert response.status_code == 422
        assert response.get_json()['field'] == 'Text'

    def test_field_required_with_broken_template(self, client):
        response = client.post('/api/compile', json={
            'script': {'name': 'main', 'tree': [{'name': 'hello'}]},
            'definitions': [HELLO],
            'header': {'messages': {'errfield': 'Field {0} is required in %s'}},
        })
        assert response.status_code == 422
        assert response.get_json()['error'] == "Field 'Text' in 'hello' is required"

    def test_inherit_header_level(self, client):
        response = client.post('/api/compile', json={
            'script': {'name': 'main'},
            'header': {'log_level': 5},
        })
        assert response.status_code == 400

    def test_malformed_definition(self, client):
        response = client.post('/api/compile', json={
            'script': {'name': 'main'},
            'definitions': [{'title': 'no name'}],
        })
        assert response.status_code == 400
