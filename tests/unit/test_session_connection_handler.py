"""
Session Connection Handler Unit Tests

Tests for create, join, leave and resync handling with the connection
lifecycle service mocked out.
"""

from unittest.mock import Mock, patch

from flask import Flask

from trivia_server.core.errors import ErrorCode, ValidationError
from trivia_server.handlers.session_connection_handler import SessionConnectionHandler
from trivia_server.services.validation_service import ValidationService


class TestSessionConnectionHandler:

    def setup_method(self):
        self.mock_lifecycle = Mock()
        self.mock_container = Mock()
        self.mock_container.get.side_effect = lambda name: {
            'ValidationService': ValidationService(),
            'ConnectionLifecycleService': self.mock_lifecycle
        }[name]
        self.handler = SessionConnectionHandler(self.mock_container)

        self.app = Flask(__name__)
        self.request_context = self.app.test_request_context()
        self.request_context.push()
        self.request_patcher = patch('trivia_server.handlers.base_handler.request')
        self.mock_request = self.request_patcher.start()
        self.mock_request.sid = 'c1'
        self.error_emit_patcher = patch('trivia_server.services.error_response_factory.emit')
        self.mock_error_emit = self.error_emit_patcher.start()
        self.emit_patcher = patch('trivia_server.handlers.session_connection_handler.emit')
        self.mock_emit = self.emit_patcher.start()

    def teardown_method(self):
        self.request_patcher.stop()
        self.error_emit_patcher.stop()
        self.emit_patcher.stop()
        self.request_context.pop()

    def test_create_session(self):
        self.mock_lifecycle.create_session.return_value = Mock(code='ABCDE')

        self.handler.handle_create_session({'player': {'name': ' Alice ', 'avatar': 'owl', 'userId': 'u-9'}})

        self.mock_lifecycle.create_session.assert_called_once_with('c1', 'Alice', 'owl', 'u-9')
        self.mock_error_emit.assert_not_called()

    def test_join_session(self):
        self.handler.handle_join_session({'code': 'abcde', 'player': {'name': 'Bob'}})

        self.mock_lifecycle.join_session.assert_called_once_with('c1', 'ABCDE', 'Bob', None, None)

    def test_join_errors_use_join_error_event(self):
        self.mock_lifecycle.join_session.side_effect = ValidationError(
            ErrorCode.SESSION_FULL, 'Session is full', {'capacity': 8}
        )

        self.handler.handle_join_session({'code': 'ABCDE', 'player': {'name': 'Bob'}})

        self.mock_error_emit.assert_called_once_with('join-error', {
            'message': 'Session is full',
            'code': 'SESSION_FULL',
            'details': {'capacity': 8}
        })

    def test_join_without_code(self):
        self.handler.handle_join_session({'player': {'name': 'Bob'}})

        self.mock_lifecycle.join_session.assert_not_called()
        assert self.mock_error_emit.call_args[0][1]['code'] == 'MISSING_SESSION_CODE'

    def test_get_players_and_state(self):
        self.handler.handle_get_players({'code': 'ABCDE'})
        self.handler.handle_get_state({'code': 'ABCDE'})

        self.mock_lifecycle.send_players.assert_called_once_with('c1', 'ABCDE')
        self.mock_lifecycle.send_state.assert_called_once_with('c1', 'ABCDE')

    def test_resync_errors_use_join_error_event(self):
        self.mock_lifecycle.send_state.side_effect = ValidationError(
            ErrorCode.SESSION_NOT_FOUND, 'Session not found. Please check the code.', {'code': 'ZZZZZ'}
        )

        self.handler.handle_get_state({'code': 'ZZZZZ'})

        self.mock_error_emit.assert_called_once_with('join-error', {
            'message': 'Session not found. Please check the code.',
            'code': 'SESSION_NOT_FOUND',
            'details': {'code': 'ZZZZZ'}
        })

    def test_leave_session_confirms(self):
        self.handler.handle_leave_session({'code': 'ABCDE'})

        self.mock_lifecycle.leave_session.assert_called_once_with('c1', 'ABCDE')
        self.mock_emit.assert_called_once_with('left-session', {'code': 'ABCDE'})

    def test_malformed_payload(self):
        self.handler.handle_create_session(None)

        self.mock_lifecycle.create_session.assert_not_called()
        self.mock_error_emit.assert_called_once()
        assert self.mock_error_emit.call_args[0] == ('error', {
            'message': 'Invalid data format - expected dictionary',
            'code': 'INVALID_DATA'
        })
