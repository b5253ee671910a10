"""Flask app for previewing generated statements and their bindings."""

import logging
from typing import Any, Dict, List

from flask import Flask, Response, jsonify, request

from .config import load_config
from .json_handler import build_from_chain, json_delete, json_insert, json_select, json_update
from .pool import BuilderPool

app = Flask(__name__)
logger = logging.getLogger(__name__)


def configure(**overrides: Any) -> Dict[str, Any]:
    """(Re)load builder settings into the app and start a fresh builder pool."""
    settings = load_config(**overrides)
    app.config['BUILDER'] = settings
    app.extensions['stmt_pool'] = BuilderPool(settings['dialect'], settings['strict'], settings['token_length'])
    return settings


configure()


def get_pool() -> BuilderPool:
    """Builder pool owned by the app."""
    return app.extensions['stmt_pool']


def settings() -> Dict[str, Any]:
    return app.config['BUILDER']


def validate_payload(payload: Any, required: List[str]) -> Dict[str, Any]:
    """Validate the JSON body and check required keys; the app's dialect always wins."""
    if not isinstance(payload, dict):
        raise ValueError('Request body must be a JSON object')
    missing = [k for k in required if k not in payload]
    if missing:
        raise ValueError(f'Missing required fields: {missing}')
    dialect = payload.get('dialect')
    if dialect is not None:
        if not isinstance(dialect, str):
            raise ValueError(f'dialect must be a string, got {type(dialect).__name__}')
        if dialect.lower() != settings()['dialect']:
            logger.warning(f"Overriding dialect from {dialect} to {settings()['dialect']}")
    return payload


@app.errorhandler(ValueError)
def handle_value_error(e: ValueError) -> Response:
    """Handle ValueError with 400 response."""
    return jsonify({'error': str(e)}), 400


@app.errorhandler(TypeError)
def handle_type_error(e: TypeError) -> Response:
    """Handle TypeError with 400 response."""
    return jsonify({'error': str(e)}), 400


@app.errorhandler(Exception)
def handle_general_error(e: Exception) -> Response:
    """Handle unexpected errors with 500 response; HTTP errors keep their code."""
    code = getattr(e, 'code', None)
    if isinstance(code, int) and code < 500:
        return jsonify({'error': str(e)}), code
    logger.error(f'Server error: {e}')
    return jsonify({'error': 'Internal server error'}), 500


@app.route('/query/select', methods=['POST'])
def select_query():
    """Generate SELECT query from JSON payload."""
    payload = validate_payload(request.get_json(silent=True), ['table'])
    sql, params = json_select(payload, settings()['dialect'], settings()['strict'])
    return jsonify({'sql': sql, 'params': params})


@app.route('/query/insert', methods=['POST'])
def insert_query():
    """Generate INSERT queries from JSON payload."""
    payload = validate_payload(request.get_json(silent=True), ['rows'])
    queries = json_insert(payload['rows'], settings()['dialect'], payload.get('multi_row', True),
                          settings()['strict'])
    return jsonify([{'sql': sql, 'params': params, 'types': types} for sql, params, types in queries])


@app.route('/query/update', methods=['POST'])
def update_query():
    """Generate UPDATE query from JSON payload."""
    payload = validate_payload(request.get_json(silent=True), ['table', 'updateValues'])
    sql, params = json_update(payload, settings()['dialect'], settings()['strict'])
    return jsonify({'sql': sql, 'params': params})


@app.route('/query/delete', methods=['POST'])
def delete_query():
    """Generate DELETE query from JSON payload."""
    payload = validate_payload(request.get_json(silent=True), ['table'])
    sql, params = json_delete(payload, settings()['dialect'], settings()['strict'])
    return jsonify({'sql': sql, 'params': params})


@app.route('/query/chain', methods=['POST'])
def chain_query():
    """Replay a fluent chain on a pooled builder, reset first."""
    payload = validate_payload(request.get_json(silent=True), ['chain'])
    pool = get_pool()
    query_id = payload.get('query_id')
    builder = pool.get(str(query_id) if query_id is not None else None).reset()
    try:
        sql, params = build_from_chain(payload['chain'], builder)
    finally:
        if query_id is None:
            pool.release(builder.query_id)
    return jsonify({'query_id': builder.query_id, 'sql': sql, 'params': params})


if __name__ == '__main__':
    logging.basicConfig(level=logging.DEBUG if settings()['debug'] else logging.INFO)
    app.run(debug=settings()['debug'])
