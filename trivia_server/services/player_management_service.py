"""
Player Management Service for the Trivia World session coordinator

Handles roster additions, removals and host reassignment. Callers hold the
session lock for the duration of each call.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from trivia_server.core.errors import ErrorCode, ValidationError
from trivia_server.models import Player, Session

logger = logging.getLogger(__name__)


@dataclass
class Departure:
    """Outcome of removing a player from a roster."""
    player: Player
    was_host: bool
    new_host_id: Optional[str]
    session_empty: bool


class PlayerManagementService:
    """Manages player operations within sessions."""

    def __init__(self, max_players_per_session: int = 8):
        self.max_players_per_session = max_players_per_session

    def add_player(self, session: Session, connection_id: str, name: str,
                   avatar: Optional[str] = None, account_id: Optional[str] = None) -> Tuple[Player, bool]:
        """
        Add a player to a session roster.

        Re-joining from a connection already on the roster is a no-op.

        Returns:
            Tuple of (player, added) where added is False for a re-join

        Raises:
            ValidationError: If the roster is already at capacity
        """
        existing = session.find_player(connection_id)
        if existing is not None:
            logger.debug(f"Connection {connection_id} already in session {session.code}")
            return existing, False

        self.ensure_can_join(session, connection_id)

        player = Player(connection_id=connection_id, name=name, avatar=avatar, account_id=account_id)
        session.players.append(player)
        if session.host_connection_id is None:
            session.host_connection_id = connection_id
        session.touch()
        logger.info(f"Player {name} ({connection_id}) joined session {session.code}")
        return player, True

    def ensure_can_join(self, session: Session, connection_id: str) -> None:
        """
        Check that the connection may be added to the roster without changing it.

        Raises:
            ValidationError: If the roster is at capacity and the connection isn't on it
        """
        if session.find_player(connection_id) is not None:
            return
        if len(session.players) >= self.max_players_per_session:
            raise ValidationError(
                ErrorCode.SESSION_FULL,
                f"Session {session.code} is full",
                {'capacity': self.max_players_per_session}
            )

    def remove_player(self, session: Session, connection_id: str) -> Optional[Departure]:
        """
        Remove a player and hand host privilege to the oldest survivor if needed.

        Returns:
            Departure describing the change, or None if the connection wasn't on the roster
        """
        player = session.find_player(connection_id)
        if player is None:
            return None

        session.players.remove(player)
        session.touch()
        was_host = session.host_connection_id == connection_id

        if not session.players:
            session.host_connection_id = None
        elif was_host:
            session.host_connection_id = session.players[0].connection_id
            logger.info(f"Host of session {session.code} reassigned to {session.host_connection_id}")

        logger.info(f"Player {player.name} ({connection_id}) left session {session.code}")
        return Departure(
            player=player,
            was_host=was_host,
            new_host_id=session.host_connection_id if was_host else None,
            session_empty=not session.players
        )

    def is_host(self, session: Session, connection_id: str) -> bool:
        return session.host_connection_id is not None and session.host_connection_id == connection_id

    def reset_scores(self, session: Session) -> None:
        for player in session.players:
            player.score = 0
            player.clear_answer()

    def get_winners(self, session: Session) -> List[Player]:
        """All players sharing the top score; ties are not broken."""
        if not session.players:
            return []
        top_score = max(p.score for p in session.players)
        return [p for p in session.players if p.score == top_score]
