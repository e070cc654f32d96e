"""
Trivia World - live multiplayer trivia session coordinator.
Main Flask application entry point focusing on app creation, dependency injection, and service wiring.
"""

import atexit
import logging

from flask import Flask
from flask_socketio import SocketIO

from config_factory import AppConfig, load_config
from container import configure_container
from trivia_server.handlers.socket_handlers import register_socket_handlers
from trivia_server.routes.api import create_api_blueprint

logger = logging.getLogger(__name__)


def configure_logging(app_config: AppConfig) -> None:
    level = getattr(logging, app_config.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level)


def create_app(app_config: AppConfig = None, question_supplier=None, stats_recorder=None,
               timer_factory=None, async_mode: str = 'eventlet', start_background_tasks: bool = True):
    """
    Build the Flask application and its Socket.IO server.

    Args:
        app_config: Configuration to use; loaded from the environment when omitted
        question_supplier: Optional replacement for the configured question source
        stats_recorder: Optional replacement for the configured statistics recorder
        timer_factory: Optional replacement for threading.Timer
        async_mode: Flask-SocketIO async mode
        start_background_tasks: Whether to start the inactive-session cleanup thread

    Returns:
        Tuple of (app, socketio, container)
    """
    if app_config is None:
        app_config = load_config()
    configure_logging(app_config)

    app = Flask(__name__)
    app.config.update(app_config.flask_config())

    # Production restricts cross-origin connections to the configured allowlist
    socketio = SocketIO(app, cors_allowed_origins=app_config.allowed_origins, async_mode=async_mode)

    container = configure_container(
        socketio=socketio,
        config=app_config,
        question_supplier=question_supplier,
        stats_recorder=stats_recorder,
        timer_factory=timer_factory
    )
    issues = container.validate_dependencies()
    if issues:
        raise RuntimeError(f"Unresolved service dependencies: {issues}")

    app.register_blueprint(create_api_blueprint(container))
    register_socket_handlers(socketio, container, app_config)

    if start_background_tasks:
        cleanup_service = container.get('SessionCleanupService')
        cleanup_service.start()
        atexit.register(cleanup_service.stop)

    logger.info(f"Trivia World app created for environment: {app_config.environment.value}")
    return app, socketio, container


if __name__ == '__main__':
    config = load_config()
    app, socketio, _ = create_app(config)
    logger.info(f"Starting Trivia World server on {config.host}:{config.port}")
    try:
        socketio.run(app, host=config.host, port=config.port, debug=config.debug)
    except KeyboardInterrupt:
        logger.info("Received interrupt signal")
