"""
Broadcast Service - Centralized Socket.IO message broadcasting.

This service handles all Socket.IO emissions in a centralized way:
- Session-wide broadcasts to the explicit subscriber set
- Direct replies to a single connection
- Round lifecycle notifications
"""

import logging
from typing import Any, Dict, List

from trivia_server.models import Player, Session
from trivia_server.services.session_state_presenter import SessionStatePresenter

logger = logging.getLogger(__name__)


class BroadcastService:
    """Centralized service for all Socket.IO broadcasting operations."""

    def __init__(self, socketio, subscription_service, presenter: SessionStatePresenter = None):
        """Initialize the broadcast service.

        Args:
            socketio: Flask-SocketIO instance for emitting messages
            subscription_service: Tracks the subscribers of each session
            presenter: Session state presenter for payload shapes
        """
        self.socketio = socketio
        self.subscription_service = subscription_service
        self.presenter = presenter or SessionStatePresenter()

    # Core emission methods

    def emit_to_session(self, event: str, data: Dict[str, Any], code: str):
        """Emit an event to every connection subscribed to a session."""
        subscribers = self.subscription_service.get_subscribers(code)
        for connection_id in subscribers:
            self.emit_to_connection(event, data, connection_id)
        logger.debug(f'Emitted {event} to {len(subscribers)} subscribers of session {code}')

    def emit_to_connection(self, event: str, data: Any, connection_id: str):
        """Emit an event to a specific connection."""
        try:
            self.socketio.emit(event, data, to=connection_id)
        except Exception as e:
            logger.error(f'Error emitting {event} to connection {connection_id}: {e}')

    def emit_error_to_connection(self, event: str, error_response: Dict[str, Any], connection_id: str):
        """Emit an error reply to a specific connection."""
        self.emit_to_connection(event, error_response, connection_id)
        logger.debug(f'Emitted {event} to connection {connection_id}: {error_response.get("code", "unknown")}')

    # High-level broadcast methods

    def broadcast_player_list_update(self, session: Session):
        """Broadcast the roster with answered flags to the session."""
        self.emit_to_session('update-players', self.presenter.create_player_list_update(session), session.code)

    def send_player_list_to_connection(self, session: Session, connection_id: str):
        self.emit_to_connection('update-players', self.presenter.create_player_list_update(session), connection_id)

    def send_state_to_connection(self, session: Session, connection_id: str):
        """Send the resync snapshot to a single connection."""
        self.emit_to_connection('state', self.presenter.create_state_snapshot(session, connection_id), connection_id)

    def broadcast_game_started(self, session: Session):
        settings = session.settings.to_dict() if session.settings else {}
        self.emit_to_session('game-started', {'settings': settings}, session.code)

    def broadcast_question(self, session: Session):
        question_data = self.presenter.create_question_data(session)
        if question_data is None:
            logger.warning(f'No open question to broadcast in session {session.code}')
            return
        self.emit_to_session('question', question_data, session.code)

    def broadcast_all_answered(self, session: Session):
        self.emit_to_session('all-answered', {'players': self.presenter.create_player_list(session)}, session.code)

    def broadcast_question_ended(self, session: Session, correct_answer: str, transition_end: float):
        payload = self.presenter.create_question_ended_data(session, correct_answer, transition_end)
        self.emit_to_session('question-ended', payload, session.code)

    def broadcast_game_over(self, session: Session, winners: List[Player]):
        self.emit_to_session('game-over', self.presenter.create_game_over_data(session, winners), session.code)
