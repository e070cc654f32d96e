"""
Session Connection Handler

This module handles Socket.IO events related to session membership,
including creating, joining and leaving sessions and resync requests.
"""

import logging

from flask_socketio import emit

from trivia_server.services.error_response_factory import with_error_handling
from .base_handler import BaseHandler

logger = logging.getLogger(__name__)


class SessionConnectionHandler(BaseHandler):
    """Handler for create, join, leave and state retrieval."""

    @with_error_handling('error')
    def handle_create_session(self, data):
        """
        Handle a player creating a new session.

        Expected data format:
        {
            'player': {'name': 'display name', 'avatar': '...', 'userId': '...'}
        }
        """
        self.log_handler_start('handle_create_session', data)

        data = self.validate_data_dict(data)
        name, avatar, account_id = self.validation_service.validate_player(data.get('player'))

        session = self.connection_lifecycle.create_session(self.connection_id, name, avatar, account_id)

        self.log_handler_success('handle_create_session', f'Player {name} created session {session.code}')

    @with_error_handling('join-error')
    def handle_join_session(self, data):
        """
        Handle a player joining an existing session.

        Expected data format:
        {
            'code': 'ABC12',
            'player': {'name': 'display name', 'avatar': '...', 'userId': '...'}
        }
        """
        self.log_handler_start('handle_join_session', data)

        data = self.validate_data_dict(data)
        code = self.validate_session_code(data)
        name, avatar, account_id = self.validation_service.validate_player(data.get('player'))

        self.connection_lifecycle.join_session(self.connection_id, code, name, avatar, account_id)

        self.log_handler_success('handle_join_session', f'Player {name} joined session {code}')

    @with_error_handling('join-error')
    def handle_get_players(self, data):
        self.log_handler_start('handle_get_players', data)
        code = self.validate_session_code(self.validate_data_dict(data))
        self.connection_lifecycle.send_players(self.connection_id, code)

    @with_error_handling('join-error')
    def handle_get_state(self, data):
        """Handle a resync request from a (re)connecting client."""
        self.log_handler_start('handle_get_state', data)
        code = self.validate_session_code(self.validate_data_dict(data))
        self.connection_lifecycle.send_state(self.connection_id, code)

    @with_error_handling('error')
    def handle_leave_session(self, data):
        self.log_handler_start('handle_leave_session', data)

        code = self.validate_session_code(self.validate_data_dict(data))
        self.connection_lifecycle.leave_session(self.connection_id, code)
        emit('left-session', {'code': code})

        self.log_handler_success('handle_leave_session', f'Left session {code}')
