"""
Stats Recorder - Opportunistic hand-off of match results to the account service.

Recording never blocks or fails a session: every call returns immediately and
errors are only logged.
"""

import json
import logging
import threading
import urllib.error
import urllib.request
from typing import Any, Dict

from trivia_server.models import Player

logger = logging.getLogger(__name__)


class StatsRecorder:
    """Interface for per-player statistics. The base implementation records nothing."""

    def record_question(self, player: Player, difficulty: str, correct: bool) -> None:
        pass

    def record_game(self, player: Player, won: bool) -> None:
        pass


class NullStatsRecorder(StatsRecorder):
    """Used when no statistics service is configured."""
    pass


class HttpStatsRecorder(StatsRecorder):
    """Posts statistics to the account service on background threads."""

    def __init__(self, base_url: str, timeout: float = 5.0):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

    def record_question(self, player: Player, difficulty: str, correct: bool) -> None:
        if not player.account_id:
            return
        self._dispatch('question-stats', {
            'userId': player.account_id,
            'difficulty': difficulty,
            'correct': correct
        })

    def record_game(self, player: Player, won: bool) -> None:
        if not player.account_id:
            return
        self._dispatch('game-stats', {
            'userId': player.account_id,
            'won': won
        })

    def _dispatch(self, path: str, payload: Dict[str, Any]) -> None:
        thread = threading.Thread(target=self._post, args=(path, payload), daemon=True)
        thread.start()

    def _post(self, path: str, payload: Dict[str, Any]) -> None:
        url = f"{self.base_url}/{path}"
        request = urllib.request.Request(
            url,
            data=json.dumps(payload).encode('utf-8'),
            headers={'Content-Type': 'application/json'},
            method='POST'
        )
        try:
            urllib.request.urlopen(request, timeout=self.timeout).close()
            logger.debug(f"Recorded {path} for user {payload.get('userId')}")
        except (urllib.error.URLError, OSError) as e:
            logger.warning(f"Failed to record {path} for user {payload.get('userId')}: {e}")


def create_stats_recorder(config) -> StatsRecorder:
    if config.stats_service_url:
        return HttpStatsRecorder(config.stats_service_url, config.stats_service_timeout)
    return NullStatsRecorder()
