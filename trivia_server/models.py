"""
Data structures for a live trivia session.

A Session is owned by the SessionRegistry and is only mutated while the
registry's per-session lock is held.
"""

import math
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from trivia_server.core.game_phases import RoundPhase


@dataclass(frozen=True)
class Question:
    """A single trivia question as fetched from the question source."""
    category: str
    difficulty: str
    prompt: str
    correct_answer: str
    incorrect_answers: tuple

    def all_answers(self) -> List[str]:
        return [self.correct_answer, *self.incorrect_answers]


@dataclass
class GameSettings:
    """Host-selected match settings. A time limit of None means untimed."""
    question_count: int
    category: Optional[str] = None
    difficulty: Optional[str] = None
    time_limit: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'category': self.category,
            'difficulty': self.difficulty,
            'count': self.question_count,
            'timeLimit': self.time_limit
        }


@dataclass
class Player:
    """A roster entry bound to one transport connection."""
    connection_id: str
    name: str
    avatar: Optional[str] = None
    account_id: Optional[str] = None
    score: int = 0
    answer: Optional[str] = None
    answered_at: Optional[float] = None

    @property
    def has_answered(self) -> bool:
        return self.answer is not None

    def clear_answer(self) -> None:
        self.answer = None
        self.answered_at = None


@dataclass
class Session:
    """State of one multiplayer match, keyed by its join code."""
    code: str
    players: List[Player] = field(default_factory=list)
    host_connection_id: Optional[str] = None
    settings: Optional[GameSettings] = None
    questions: List[Question] = field(default_factory=list)
    current_question_index: Optional[int] = None
    current_answer_order: Optional[List[str]] = None
    question_deadline: Optional[float] = None
    is_evaluating: bool = False
    active: bool = False
    starting: bool = False
    # Bumped whenever a timer is armed or cancelled; callbacks carrying an
    # older value are discarded.
    epoch: int = 0
    timer: Any = None
    created_at: datetime = field(default_factory=datetime.now)
    last_activity: datetime = field(default_factory=datetime.now)

    @property
    def phase(self) -> RoundPhase:
        if not self.active:
            if self.current_question_index is None:
                return RoundPhase.LOBBY
            return RoundPhase.COMPLETE
        if self.is_evaluating:
            # The answer order is dropped once scoring has been published.
            if self.current_answer_order is not None:
                return RoundPhase.EVALUATING
            return RoundPhase.REVEAL
        return RoundPhase.QUESTION_OPEN

    @property
    def current_question(self) -> Optional[Question]:
        if self.current_question_index is None:
            return None
        if 0 <= self.current_question_index < len(self.questions):
            return self.questions[self.current_question_index]
        return None

    def find_player(self, connection_id: str) -> Optional[Player]:
        for player in self.players:
            if player.connection_id == connection_id:
                return player
        return None

    def all_answered(self) -> bool:
        return bool(self.players) and all(p.has_answered for p in self.players)

    def time_left(self, now: Optional[float] = None) -> Optional[int]:
        """Whole seconds until the deadline, or None for untimed questions."""
        if self.question_deadline is None:
            return None
        now = time.time() if now is None else now
        remaining = self.question_deadline - now
        if remaining <= 0:
            return 0
        return math.ceil(remaining)

    def touch(self) -> None:
        self.last_activity = datetime.now()
