"""
HTTP interface of the compiler.

The editor's web server mounts `compile_bp`; it receives the root script and
the definitions it references as JSON and answers with the generated source.

    POST /api/compile
        {"script": {...}, "definitions": [{...}, ...],
         "header": {"lang": "en", "log_level": 3}, "values": {...}}
"""

import logging

from flask import Blueprint, jsonify, request

from .compiler import ScriptCompiler, default_header
from .exceptions import CompileError, FieldRequiredError, ScriptNotFoundError
from .models import Header, ScriptDefinition
from .registry import DefinitionRegistry

compile_bp = Blueprint('compile', __name__)
logger = logging.getLogger('visual_script_core.api')

# Definitions registered by the host application, used when a request
# doesn't carry its own
_registry = DefinitionRegistry()


def init_compile_api(registry: DefinitionRegistry):
    """Set the registry that resolves definitions missing from a request."""
    global _registry
    _registry = registry


def _error(message: str, status: int, **extra):
    body = {"success": False, "error": message}
    body.update(extra)
    return jsonify(body), status


@compile_bp.route('/api/compile', methods=['POST'])
def compile_source():
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or 'script' not in data:
        return _error("Request must contain a 'script' object", 400)

    try:
        root = ScriptDefinition.from_dict(data['script'])
        registry = DefinitionRegistry(
            [_registry.get(name) for name in _registry.names()]
        )
        for item in data.get('definitions') or []:
            registry.register(ScriptDefinition.from_dict(item))
        header = Header.from_dict(data.get('header'), defaults=default_header())
    except (KeyError, ValueError, TypeError) as e:
        return _error(f"Malformed request: {e}", 400)

    try:
        source = ScriptCompiler(registry, header).compile(root, data.get('values'))
    except ScriptNotFoundError as e:
        return _error(str(e), 404, name=e.name)
    except FieldRequiredError as e:
        return _error(str(e), 422, field=e.field, script=e.script)
    except CompileError as e:
        logger.error(f"Compilation of '{root.name}' failed: {e}")
        return _error(str(e), 400)

    return jsonify({"success": True, "source": source})
