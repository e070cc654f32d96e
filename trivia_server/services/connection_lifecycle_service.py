"""
Connection Lifecycle Service - Binds connection events to roster changes.

This service handles:
- Session creation and joining, including leaving a previous session first
- Leaving and disconnecting, with host reassignment and empty-session teardown
- Keeping broadcast subscriptions consistent with rosters
- Direct roster and resync replies
"""

import logging
from typing import Optional

from trivia_server.models import Session

logger = logging.getLogger(__name__)


class ConnectionLifecycleService:
    """Service for session membership driven by client connections."""

    def __init__(self, registry, subscription_service, broadcast_service, round_scheduler):
        """Initialize the connection lifecycle service.

        Args:
            registry: SessionRegistry holding every live session
            subscription_service: Tracks broadcast subscribers per session
            broadcast_service: Gateway for session broadcasts and direct replies
            round_scheduler: Notified when a departure may complete a question
        """
        self.registry = registry
        self.subscription_service = subscription_service
        self.broadcast_service = broadcast_service
        self.round_scheduler = round_scheduler

    def create_session(self, connection_id: str, name: str, avatar: Optional[str] = None,
                       account_id: Optional[str] = None) -> Session:
        """
        Create a session with the connection as its sole member and host.

        Replies ``session-created`` and broadcasts the roster.
        """
        self._leave_current_session(connection_id)

        session = self.registry.create()
        with self.registry.session_operation(session.code):
            self.registry.players.add_player(session, connection_id, name, avatar, account_id)
            self.subscription_service.subscribe(session.code, connection_id)
            self.broadcast_service.emit_to_connection('session-created', {'code': session.code}, connection_id)
            self.broadcast_service.broadcast_player_list_update(session)
        return session

    def join_session(self, connection_id: str, code: str, name: str, avatar: Optional[str] = None,
                     account_id: Optional[str] = None) -> Session:
        """
        Add the connection to an existing session.

        Joining a session the connection already belongs to is a no-op
        apart from the replies.

        Raises:
            ValidationError: SESSION_NOT_FOUND or SESSION_FULL
        """
        self.registry.require(code)
        # Refuse before touching the current session; the lock is not held
        # across the leave to keep a single session lock per thread.
        with self.registry.session_operation(code):
            self.registry.players.ensure_can_join(self.registry.require(code), connection_id)
        self._leave_current_session(connection_id, keep=code)

        with self.registry.session_operation(code):
            session = self.registry.require(code)
            self.registry.players.add_player(session, connection_id, name, avatar, account_id)
            self.subscription_service.subscribe(code, connection_id)
            self.broadcast_service.broadcast_player_list_update(session)
            self.broadcast_service.emit_to_connection('join-success', {'code': code}, connection_id)
        return session

    def leave_session(self, connection_id: str, code: str) -> bool:
        """
        Remove the connection from a session.

        Returns:
            True if the connection was on the roster
        """
        if not self.registry.exists(code):
            self.subscription_service.unsubscribe(code, connection_id)
            return False

        with self.registry.session_operation(code):
            session = self.registry.get(code)
            self.subscription_service.unsubscribe(code, connection_id)
            if session is None:
                return False

            departure = self.registry.players.remove_player(session, connection_id)
            if departure is None:
                return False

            if departure.session_empty:
                self._destroy_session(code)
                return True

            self.broadcast_service.broadcast_player_list_update(session)
            self.round_scheduler.handle_player_departure(session)
            return True

    def handle_disconnect(self, connection_id: str) -> Optional[str]:
        """
        Clean up after a dropped connection.

        Returns:
            Code of the session the connection was removed from, if any
        """
        session = self.registry.find_session_for_connection(connection_id)
        if session is not None:
            self.leave_session(connection_id, session.code)
            return session.code

        code = self.subscription_service.get_session_code(connection_id)
        if code is not None:
            self.subscription_service.unsubscribe(code, connection_id)
        return None

    def send_players(self, connection_id: str, code: str) -> None:
        self.registry.require(code)
        with self.registry.session_operation(code):
            session = self.registry.require(code)
            self.broadcast_service.send_player_list_to_connection(session, connection_id)

    def send_state(self, connection_id: str, code: str) -> None:
        """Reply with the resync snapshot for the requesting connection."""
        self.registry.require(code)
        with self.registry.session_operation(code):
            session = self.registry.require(code)
            self.broadcast_service.send_state_to_connection(session, connection_id)

    def cleanup_inactive_sessions(self, max_inactive_minutes: int) -> int:
        """Remove abandoned sessions together with their subscriptions."""
        removed = self.registry.cleanup_inactive_sessions(max_inactive_minutes)
        for code in removed:
            self.subscription_service.drop_session(code)
        return len(removed)

    def _leave_current_session(self, connection_id: str, keep: Optional[str] = None):
        current = self.registry.find_session_for_connection(connection_id)
        if current is not None and current.code != keep:
            logger.info(f"Connection {connection_id} leaving session {current.code} to switch sessions")
            self.leave_session(connection_id, current.code)

    def _destroy_session(self, code: str):
        self.registry.remove(code)
        self.subscription_service.drop_session(code)
        logger.info(f"Session {code} destroyed after its last player left")
