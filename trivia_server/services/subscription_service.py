"""
Subscription Service - Tracks which connections receive a session's broadcasts.

This service handles:
- Subscribing a connection to a session code
- Unsubscribing on leave or disconnect
- Reverse lookup from connection to its session
"""

import logging
import threading
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


class SubscriptionService:
    """Maintains the subscriber set of every session code."""

    def __init__(self):
        """Initialize the subscription service."""
        # session code -> ordered connection ids
        self._subscribers: Dict[str, List[str]] = {}
        # connection id -> session code
        self._connection_sessions: Dict[str, str] = {}
        self._lock = threading.Lock()
        logger.info("SubscriptionService initialized")

    def subscribe(self, code: str, connection_id: str) -> None:
        """Subscribe a connection to a session, dropping any previous subscription.

        Args:
            code: Session join code
            connection_id: Socket.IO connection ID
        """
        with self._lock:
            previous = self._connection_sessions.get(connection_id)
            if previous is not None and previous != code:
                self._remove(previous, connection_id)

            subscribers = self._subscribers.setdefault(code, [])
            if connection_id not in subscribers:
                subscribers.append(connection_id)
            self._connection_sessions[connection_id] = code
        logger.debug(f"Connection {connection_id} subscribed to session {code}")

    def unsubscribe(self, code: str, connection_id: str) -> bool:
        """Remove a connection from a session's subscribers.

        Returns:
            True if the connection was subscribed
        """
        with self._lock:
            removed = self._remove(code, connection_id)
        if removed:
            logger.debug(f"Connection {connection_id} unsubscribed from session {code}")
        return removed

    def _remove(self, code: str, connection_id: str) -> bool:
        subscribers = self._subscribers.get(code)
        if not subscribers or connection_id not in subscribers:
            return False
        subscribers.remove(connection_id)
        if not subscribers:
            del self._subscribers[code]
        if self._connection_sessions.get(connection_id) == code:
            del self._connection_sessions[connection_id]
        return True

    def drop_session(self, code: str) -> None:
        """Forget every subscriber of a destroyed session."""
        with self._lock:
            for connection_id in self._subscribers.pop(code, []):
                if self._connection_sessions.get(connection_id) == code:
                    del self._connection_sessions[connection_id]

    def get_subscribers(self, code: str) -> List[str]:
        with self._lock:
            return list(self._subscribers.get(code, []))

    def get_session_code(self, connection_id: str) -> Optional[str]:
        return self._connection_sessions.get(connection_id)

    def is_subscribed(self, code: str, connection_id: str) -> bool:
        return self._connection_sessions.get(connection_id) == code
