"""
Session State Presenter - Centralized session state transformation for broadcasts.

This service provides canonical transformations for session state data that
needs to be sent to clients, ensuring consistent payload shapes and that no
answer content leaks while a question is open.
"""

import logging
import time
from typing import Any, Callable, Dict, List, Optional

from trivia_server.models import Player, Session

logger = logging.getLogger(__name__)


def to_millis(timestamp: Optional[float]) -> Optional[int]:
    """Convert epoch seconds to the epoch milliseconds used on the wire."""
    if timestamp is None:
        return None
    return int(timestamp * 1000)


class SessionStatePresenter:
    """Transforms Session objects into client payloads."""

    def __init__(self, clock: Callable[[], float] = time.time):
        """Initialize the session state presenter.

        Args:
            clock: Source of the current epoch time in seconds
        """
        self.clock = clock

    def create_player_entry(self, player: Player, include_answered: bool = True) -> Dict[str, Any]:
        entry = {
            'id': player.connection_id,
            'name': player.name,
            'avatar': player.avatar,
            'score': player.score
        }
        if include_answered:
            entry['answered'] = player.has_answered
        return entry

    def create_player_list(self, session: Session, include_answered: bool = True) -> List[Dict[str, Any]]:
        """Create the roster for client consumption.

        Args:
            session: Session to render
            include_answered: Whether to annotate each entry with its answered flag

        Returns:
            Player entries in join order, never carrying answer text
        """
        return [self.create_player_entry(p, include_answered) for p in session.players]

    def create_player_list_update(self, session: Session) -> Dict[str, Any]:
        return {
            'players': self.create_player_list(session),
            'hostId': session.host_connection_id
        }

    def create_question_data(self, session: Session) -> Optional[Dict[str, Any]]:
        """Create the public view of the open question, without the correct answer."""
        question = session.current_question
        if question is None or session.current_answer_order is None:
            return None

        time_limit = session.settings.time_limit if session.settings else None
        return {
            'index': session.current_question_index,
            'category': question.category,
            'difficulty': question.difficulty,
            'prompt': question.prompt,
            'answers': list(session.current_answer_order),
            'timeLimit': time_limit,
            'deadline': to_millis(session.question_deadline)
        }

    def create_question_ended_data(self, session: Session, correct_answer: str, transition_end: float) -> Dict[str, Any]:
        return {
            'correctAnswer': correct_answer,
            'players': self.create_player_list(session, include_answered=False),
            'transitionEnd': to_millis(transition_end)
        }

    def create_game_over_data(self, session: Session, winners: List[Player]) -> Dict[str, Any]:
        return {
            'players': self.create_player_list(session, include_answered=False),
            'winners': [p.connection_id for p in winners]
        }

    def create_state_snapshot(self, session: Session, connection_id: str) -> Dict[str, Any]:
        """Create the resync snapshot for one connection.

        The question is omitted while evaluation or the reveal pause is in
        progress so a reconnecting client never sees a stale open question.
        """
        snapshot: Dict[str, Any] = {
            'players': self.create_player_list(session),
            'hostId': session.host_connection_id,
            'phase': session.phase.value
        }

        if not session.active or session.is_evaluating:
            return snapshot

        question_data = self.create_question_data(session)
        if question_data is None:
            return snapshot

        snapshot['question'] = question_data
        snapshot['timeLeft'] = session.time_left(self.clock())
        player = session.find_player(connection_id)
        if player is not None and player.has_answered:
            snapshot['myAnswer'] = player.answer
        return snapshot
