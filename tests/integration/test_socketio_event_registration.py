"""
Test that Socket.IO events are properly registered.
"""

from unittest.mock import Mock

from config_factory import AppConfig
from container import configure_container
from trivia_server.handlers.socket_handlers import register_socket_handlers


class TestSocketIOEventRegistration:
    """Test Socket.IO event registration."""

    def setup_method(self):
        self.socketio = Mock()
        self.config = AppConfig()
        self.container = configure_container(self.socketio, self.config)

    def test_required_events_registered(self):
        router = register_socket_handlers(self.socketio, self.container, self.config)

        assert sorted(router.get_registered_events()) == sorted([
            'create-session',
            'join-session',
            'get-players',
            'get-state',
            'leave-session',
            'start',
            'submit-answer'
        ])

    def test_every_event_bound_on_socketio(self):
        register_socket_handlers(self.socketio, self.container, self.config)

        bound = [call[0][0] for call in self.socketio.on_event.call_args_list]
        assert 'connect' in bound
        assert 'disconnect' in bound
        assert 'submit-answer' in bound
        assert len(bound) == len(set(bound))


class TestConnectOriginCheck:

    def test_production_origin_enforcement(self, question_supplier, fake_timers):
        from app import create_app
        from config_factory import Environment

        config = AppConfig(
            environment=Environment.PRODUCTION,
            secret_key='a-real-secret',
            cors_allowed_origins='https://trivia.example'
        )
        app, socketio, _ = create_app(config, question_supplier=question_supplier, timer_factory=fake_timers,
                                      async_mode='threading', start_background_tasks=False)

        allowed = socketio.test_client(app, headers={'Origin': 'https://trivia.example'})
        rejected = socketio.test_client(app, headers={'Origin': 'https://evil.example'})

        assert allowed.is_connected()
        assert not rejected.is_connected()
        allowed.disconnect()
