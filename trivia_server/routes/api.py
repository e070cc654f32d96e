"""
REST API endpoints for the Trivia World session coordinator.
"""

import logging

from flask import Blueprint, jsonify

from trivia_server.core.errors import ValidationError

logger = logging.getLogger(__name__)


def create_api_blueprint(container):
    """Create and configure the API Blueprint with service dependencies."""
    registry = container.get('SessionRegistry')
    validation_service = container.get('ValidationService')

    api = Blueprint('api', __name__)

    @api.route('/')
    def index():
        """Liveness check."""
        return 'Trivia World server is running'

    @api.route('/api/sessions/<code>')
    def session_summary(code):
        """Lobby summary used by clients before joining."""
        try:
            code = validation_service.validate_session_code(code)
        except ValidationError as e:
            return jsonify({'error': e.message, 'code': e.code.value}), 400

        session = registry.get(code)
        if session is None:
            return jsonify({'code': code, 'exists': False}), 404

        with registry.session_operation(code):
            summary = {
                'code': code,
                'exists': True,
                'playerCount': len(session.players),
                'capacity': registry.capacity,
                'active': session.active
            }
        logger.debug(f'Session summary for {code}: {summary}')
        return jsonify(summary)

    return api
