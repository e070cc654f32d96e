"""
Socket.IO event handlers for the Trivia World session coordinator.

This module provides the main registration function and the
connection/disconnection handlers.
"""

import logging

from flask import request
from flask_socketio import emit

from .game_action_handler import GameActionHandler
from .session_connection_handler import SessionConnectionHandler
from .socket_event_router import SocketEventRouter, request_logging_middleware

logger = logging.getLogger(__name__)


def register_socket_handlers(socketio_instance, container, app_config) -> SocketEventRouter:
    """Register all socket handlers with the SocketIO instance."""
    router = SocketEventRouter()
    router.add_middleware(request_logging_middleware)

    session_handler = SessionConnectionHandler(container)
    game_handler = GameActionHandler(container)

    router.register_route('create-session', session_handler.handle_create_session)
    router.register_route('join-session', session_handler.handle_join_session)
    router.register_route('get-players', session_handler.handle_get_players)
    router.register_route('get-state', session_handler.handle_get_state)
    router.register_route('leave-session', session_handler.handle_leave_session)

    router.register_route('start', game_handler.handle_start)
    router.register_route('submit-answer', game_handler.handle_submit_answer)

    router.register_with_socketio(socketio_instance)

    connection_lifecycle = container.get('ConnectionLifecycleService')

    def handle_connect(auth=None):
        """Handle client connection with Origin enforcement in production."""
        origin = request.headers.get('Origin')
        allowed = app_config.allowed_origins
        if app_config.is_production and allowed != '*':
            if origin and origin not in allowed:
                logger.warning(f'Rejecting connection from disallowed Origin: {origin}')
                return False
        logger.info(f'Client connected: {request.sid} from Origin: {origin}')  # type: ignore[attr-defined]
        emit('connected', {'status': 'Connected to Trivia World server'})

    def handle_disconnect(reason=None):
        """Remove the dropped connection from whatever session it was in."""
        connection_id = request.sid  # type: ignore[attr-defined]
        logger.info(f'Client disconnected: {connection_id}')
        try:
            code = connection_lifecycle.handle_disconnect(connection_id)
        except Exception:
            logger.exception(f'Error cleaning up after disconnect of {connection_id}')
            return
        if code is not None:
            logger.info(f'Connection {connection_id} removed from session {code} on disconnect')

    socketio_instance.on_event('connect', handle_connect)
    socketio_instance.on_event('disconnect', handle_disconnect)

    logger.info(f"Registered {len(router.get_registered_events())} socket event handlers")
    return router
