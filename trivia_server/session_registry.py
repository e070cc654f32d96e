"""
Session Registry for the Trivia World session coordinator

Coordinates specialized services behind one facade: the process-wide map of
join code to Session and the per-session serialization around it.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional

from trivia_server.core.errors import ErrorCode, ValidationError
from trivia_server.models import Session
from trivia_server.services.concurrency_control_service import ConcurrencyControlService
from trivia_server.services.player_management_service import PlayerManagementService
from trivia_server.services.session_lifecycle_service import SessionLifecycleService

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Owns every live Session and serializes access to each one."""

    def __init__(self, max_players_per_session: int = 8, code_length: int = 5, rng=None):
        self.concurrency_control = ConcurrencyControlService()
        self.lifecycle = SessionLifecycleService(code_length=code_length, rng=rng)
        self.players = PlayerManagementService(max_players_per_session)

    @classmethod
    def from_config(cls, config) -> 'SessionRegistry':
        return cls(
            max_players_per_session=config.max_players_per_session,
            code_length=config.session_code_length
        )

    @property
    def capacity(self) -> int:
        return self.players.max_players_per_session

    def create(self) -> Session:
        """
        Create an empty session under a freshly allocated code.

        The caller adds the creator while holding session_operation(code).
        """
        return self.lifecycle.create_session()

    def get(self, code: str) -> Optional[Session]:
        return self.lifecycle.get_session(code)

    def require(self, code: str) -> Session:
        """
        Get a session or fail.

        Raises:
            ValidationError: If no session exists under the code
        """
        session = self.lifecycle.get_session(code)
        if session is None:
            raise ValidationError(
                ErrorCode.SESSION_NOT_FOUND,
                'Session not found. Please check the code.',
                {'code': code}
            )
        return session

    def remove(self, code: str) -> bool:
        """
        Destroy a session, cancelling any timer it still owns.

        Returns:
            True if the session existed
        """
        with self.concurrency_control.session_operation(code):
            session = self.lifecycle.delete_session(code)
            if session is None:
                return False
            session.epoch += 1
            if session.timer is not None:
                session.timer.cancel()
                session.timer = None
        self.concurrency_control.cleanup_session_lock(code)
        return True

    def exists(self, code: str) -> bool:
        return self.lifecycle.session_exists(code)

    def codes(self) -> List[str]:
        return self.lifecycle.get_all_codes()

    def find_session_for_connection(self, connection_id: str) -> Optional[Session]:
        """Scan every session for a roster entry owned by the connection."""
        for code in self.lifecycle.get_all_codes():
            session = self.lifecycle.get_session(code)
            if session is not None and session.find_player(connection_id) is not None:
                return session
        return None

    @contextmanager
    def session_operation(self, code: str) -> Iterator[None]:
        """
        Serialize a block of work against one session.

        A lock entry left behind for a code with no session (removed while the
        caller waited, or never created) is dropped on exit.
        """
        try:
            with self.concurrency_control.session_operation(code):
                yield
        finally:
            if not self.lifecycle.session_exists(code):
                self.concurrency_control.cleanup_session_lock(code)

    def cleanup_inactive_sessions(self, max_inactive_minutes: int = 120) -> List[str]:
        """
        Remove sessions that have been inactive for too long.

        Returns:
            Codes of the sessions removed
        """
        removed = []
        for code in self.lifecycle.find_inactive_codes(max_inactive_minutes):
            if self.remove(code):
                removed.append(code)
                logger.info(f"Cleaned up inactive session {code}")
        return removed

    def __len__(self) -> int:
        return len(self.lifecycle.get_all_codes())
