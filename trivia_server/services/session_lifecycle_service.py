"""
Session Lifecycle Service for the Trivia World session coordinator

Handles session creation with join-code allocation, deletion, lookup and
inactivity cleanup.
"""

import logging
import random
import string
import threading
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from trivia_server.models import Session

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits


class SessionCodeExhaustedError(Exception):
    """Raised when no unused join code could be generated."""
    pass


class SessionLifecycleService:
    """Manages session creation, deletion, and lifecycle operations."""

    MAX_CODE_ATTEMPTS = 20

    def __init__(self, code_length: int = 5, rng: Optional[random.Random] = None):
        self._sessions: Dict[str, Session] = {}
        self._sessions_lock = threading.RLock()
        self.code_length = code_length
        self._rng = rng or random.SystemRandom()

    def _generate_code(self) -> str:
        return ''.join(self._rng.choice(CODE_ALPHABET) for _ in range(self.code_length))

    def create_session(self) -> Session:
        """
        Create a new empty session under a fresh join code.

        Returns:
            The stored Session

        Raises:
            SessionCodeExhaustedError: If every generated code collided
        """
        with self._sessions_lock:
            for _ in range(self.MAX_CODE_ATTEMPTS):
                code = self._generate_code()
                if code in self._sessions:
                    logger.debug(f"Session code collision on {code}, retrying")
                    continue
                session = Session(code=code)
                self._sessions[code] = session
                logger.info(f"Created session {code}")
                return session
        raise SessionCodeExhaustedError(
            f"Could not allocate a unique session code after {self.MAX_CODE_ATTEMPTS} attempts"
        )

    def delete_session(self, code: str) -> Optional[Session]:
        """
        Delete a session.

        Returns:
            The removed Session, or None if it didn't exist
        """
        with self._sessions_lock:
            session = self._sessions.pop(code, None)
        if session is not None:
            logger.info(f"Deleted session {code}")
        return session

    def get_session(self, code: str) -> Optional[Session]:
        return self._sessions.get(code)

    def session_exists(self, code: str) -> bool:
        return code in self._sessions

    def get_all_codes(self) -> List[str]:
        with self._sessions_lock:
            return list(self._sessions.keys())

    def find_inactive_codes(self, max_inactive_minutes: int) -> List[str]:
        """List sessions whose last activity is older than the cutoff."""
        cutoff_time = datetime.now() - timedelta(minutes=max_inactive_minutes)
        with self._sessions_lock:
            return [code for code, session in self._sessions.items()
                    if session.last_activity < cutoff_time]
