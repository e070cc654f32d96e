"""
Global pytest configuration and fixtures.
Provides service fixtures for proper dependency injection in tests.
"""

import os

import pytest

from config_factory import AppConfig, Environment
from tests.helpers.fakes import FakeTimerFactory, StubQuestionSupplier, make_questions

# Ensure testing environment
os.environ['TESTING'] = '1'


@pytest.fixture
def test_config():
    """Configuration used by the application under test."""
    return AppConfig(
        flask_env='testing',
        environment=Environment.TESTING,
        cors_allowed_origins='*',
        log_level='debug'
    )


@pytest.fixture
def fake_timers():
    return FakeTimerFactory()


@pytest.fixture
def question_supplier():
    return StubQuestionSupplier(make_questions(3))


@pytest.fixture
def app_bundle(test_config, fake_timers, question_supplier):
    """Create the app, socketio and container wired with test doubles."""
    from app import create_app
    return create_app(
        test_config,
        question_supplier=question_supplier,
        timer_factory=fake_timers,
        async_mode='threading',
        start_background_tasks=False
    )


@pytest.fixture
def app(app_bundle):
    flask_app = app_bundle[0]
    flask_app.config['TESTING'] = True
    return flask_app


@pytest.fixture
def socketio(app_bundle):
    return app_bundle[1]


@pytest.fixture
def container(app_bundle):
    return app_bundle[2]


@pytest.fixture
def registry(container):
    """Provide the SessionRegistry through dependency injection."""
    return container.get('SessionRegistry')


@pytest.fixture
def make_client(app, socketio):
    """Factory for connected Socket.IO test clients, disconnected on teardown."""
    clients = []

    def _make_client():
        client = socketio.test_client(app)
        clients.append(client)
        return client

    yield _make_client

    for client in clients:
        if client.is_connected():
            client.disconnect()
