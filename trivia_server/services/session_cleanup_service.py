"""
Session Cleanup Service - Periodically removes abandoned sessions.

Sessions normally disappear when their last player leaves; this catches the
ones left behind by clients that never disconnected cleanly.
"""

import logging
import threading

logger = logging.getLogger(__name__)


class SessionCleanupService:
    """Runs inactive-session cleanup on a background thread."""

    def __init__(self, connection_lifecycle, max_inactive_minutes: int = 120, check_interval: float = 60.0):
        """Initialize the session cleanup service.

        Args:
            connection_lifecycle: Service that removes sessions with their subscriptions
            max_inactive_minutes: Idle time after which a session is removed
            check_interval: Seconds between cleanup passes
        """
        self.connection_lifecycle = connection_lifecycle
        self.max_inactive_minutes = max_inactive_minutes
        self.check_interval = check_interval
        self._stop_event = threading.Event()
        self._thread = None

    @classmethod
    def from_config(cls, connection_lifecycle, config) -> 'SessionCleanupService':
        return cls(connection_lifecycle, config.session_cleanup_inactive_minutes)

    def start(self):
        """Start the background cleanup thread."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._cleanup_loop, daemon=True)
        self._thread.start()
        logger.info("SessionCleanupService started")

    def stop(self):
        """Stop the background cleanup thread."""
        self._stop_event.set()
        if self._thread is not None and self._thread.is_alive():
            self._thread.join(timeout=2)
        logger.info("SessionCleanupService stopped")

    def run_once(self) -> int:
        """Run a single cleanup pass.

        Returns:
            Number of sessions removed
        """
        removed = self.connection_lifecycle.cleanup_inactive_sessions(self.max_inactive_minutes)
        if removed:
            logger.info(f"Cleaned up {removed} inactive sessions")
        return removed

    def _cleanup_loop(self):
        while not self._stop_event.wait(self.check_interval):
            try:
                self.run_once()
            except Exception as e:
                logger.error(f"Error in session cleanup loop: {e}")
