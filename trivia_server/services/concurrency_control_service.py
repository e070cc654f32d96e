"""
Concurrency Control Service for the Trivia World session coordinator

Hands out one re-entrant lock per session code so that every mutation of a
given session is serialized while different sessions proceed independently.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Dict

logger = logging.getLogger(__name__)


class ConcurrencyControlService:
    """Manages per-session locking."""

    def __init__(self):
        # Per-session locks for fine-grained control
        self._session_locks: Dict[str, threading.RLock] = {}
        # Lock for managing session locks themselves
        self._locks_lock = threading.Lock()

    def get_session_lock(self, code: str) -> threading.RLock:
        """Get or create a lock for a specific session."""
        with self._locks_lock:
            if code not in self._session_locks:
                self._session_locks[code] = threading.RLock()
            return self._session_locks[code]

    def has_session_lock(self, code: str) -> bool:
        with self._locks_lock:
            return code in self._session_locks

    def cleanup_session_lock(self, code: str):
        """Clean up lock for a deleted session."""
        with self._locks_lock:
            self._session_locks.pop(code, None)

    @contextmanager
    def session_operation(self, code: str):
        """Context manager for serialized session operations."""
        session_lock = self.get_session_lock(code)
        with session_lock:
            yield
