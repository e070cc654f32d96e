"""
Round Scheduler - Drives the question / evaluate / reveal cycle of each session.

This service handles:
- Starting a match once the question batch is fetched
- Answer custody and first-submission-wins recording
- Deadline, all-answered grace and reveal timers (one armed timer per session)
- Flat scoring, match completion and statistics hand-off

Every timer callback captures the session epoch when it is armed. Arming or
cancelling a timer bumps the epoch, so a callback that fires after being
superseded finds a newer epoch and discards itself.
"""

import logging
import random
import threading
import time
from enum import Enum
from typing import Callable, Optional

from config_factory import AppConfig
from trivia_server.core.errors import ErrorCode, ValidationError
from trivia_server.models import GameSettings, Session
from trivia_server.question_supplier import QuestionFetchError, QuestionSupplier
from trivia_server.services.stats_recorder import NullStatsRecorder, StatsRecorder

logger = logging.getLogger(__name__)


class AnswerOutcome(Enum):
    """How a submitted answer was handled. Only ACCEPTED changes state."""
    ACCEPTED = "accepted"
    STALE = "stale"
    DUPLICATE = "duplicate"
    IGNORED = "ignored"


class RoundScheduler:
    """Owns the per-session round state machine and its single active timer."""

    def __init__(self, registry, broadcast_service, question_supplier: QuestionSupplier,
                 stats_recorder: Optional[StatsRecorder] = None, config: Optional[AppConfig] = None,
                 timer_factory: Callable = threading.Timer, clock: Callable[[], float] = time.time,
                 rng: Optional[random.Random] = None):
        """Initialize the round scheduler.

        Args:
            registry: SessionRegistry holding every live session
            broadcast_service: Gateway for session broadcasts
            question_supplier: Source of question batches
            stats_recorder: Receives per-player results after questions and matches
            config: Application configuration (timing values)
            timer_factory: Callable(interval, function, args=...) returning a startable,
                cancellable timer
            clock: Source of the current epoch time in seconds
            rng: Random source for answer ordering
        """
        self.registry = registry
        self.broadcast_service = broadcast_service
        self.question_supplier = question_supplier
        self.stats_recorder = stats_recorder or NullStatsRecorder()
        self.config = config or AppConfig()
        self.timer_factory = timer_factory
        self.clock = clock
        self._rng = rng or random.Random()

        self.reveal_duration = self.config.reveal_duration_seconds
        self.all_answered_grace = self.config.all_answered_grace_seconds

    # Match start

    def start_game(self, code: str, requester_id: str, settings: GameSettings) -> Optional[Session]:
        """
        Fetch questions and open the first one.

        The session lock is released while the question source is consulted.

        Returns:
            The started Session, or None if it was destroyed during the fetch

        Raises:
            ValidationError: SESSION_NOT_FOUND, NOT_HOST, GAME_IN_PROGRESS or FETCH_FAILED
        """
        self.registry.require(code)
        with self.registry.session_operation(code):
            session = self.registry.require(code)
            if not self.registry.players.is_host(session, requester_id):
                raise ValidationError(ErrorCode.NOT_HOST, 'Only the host can start the game')
            if session.active or session.starting:
                raise ValidationError(ErrorCode.GAME_IN_PROGRESS, 'A game is already in progress')
            session.starting = True

        questions = []
        failure = None
        try:
            questions = self.question_supplier.fetch(settings.category, settings.difficulty,
                                                     settings.question_count)
        except QuestionFetchError as e:
            failure = str(e)
        except Exception as e:
            logger.exception(f"Unexpected error fetching questions for session {code}")
            failure = str(e)
        if failure is None and not questions:
            failure = 'No questions returned'

        with self.registry.session_operation(code):
            session = self.registry.get(code)
            if session is None:
                logger.info(f"Session {code} was closed while its questions were being fetched")
                return None
            session.starting = False

            if failure is not None:
                logger.warning(f"Failed to fetch questions for session {code}: {failure}")
                raise ValidationError(ErrorCode.FETCH_FAILED, 'Failed to fetch questions',
                                      {'reason': failure})

            session.settings = settings
            session.questions = list(questions)
            session.current_question_index = 0
            session.active = True
            session.is_evaluating = False
            self.registry.players.reset_scores(session)
            session.touch()
            logger.info(f"Started game in session {code} with {len(session.questions)} questions")

            self.broadcast_service.broadcast_game_started(session)
            self._open_question(session)
            return session

    # Answer submission

    def submit_answer(self, code: str, connection_id: str, answer: str, question_index) -> AnswerOutcome:
        """
        Record a player's answer for the open question.

        Late, stale and repeated submissions are dropped without a reply.
        """
        if not self.registry.exists(code):
            return AnswerOutcome.IGNORED
        with self.registry.session_operation(code):
            session = self.registry.get(code)
            if session is None or not session.active:
                return AnswerOutcome.IGNORED
            if session.is_evaluating or question_index != session.current_question_index:
                logger.debug(f"Dropped stale answer from {connection_id} in session {code}")
                return AnswerOutcome.STALE

            player = session.find_player(connection_id)
            if player is None:
                return AnswerOutcome.IGNORED
            if player.has_answered:
                logger.debug(f"Dropped duplicate answer from {connection_id} in session {code}")
                return AnswerOutcome.DUPLICATE

            player.answer = answer
            player.answered_at = self.clock()
            session.touch()
            self.broadcast_service.broadcast_player_list_update(session)

            if session.all_answered():
                self._close_question_early(session)
            return AnswerOutcome.ACCEPTED

    def handle_player_departure(self, session: Session):
        """Re-check the open question after a roster removal.

        Callers hold the session lock. A departing player forfeits the
        question; if everyone left has answered, evaluation starts now.
        """
        if not session.players or not session.active or session.is_evaluating:
            return
        if session.all_answered():
            logger.info(f"All remaining players answered in session {session.code} after a departure")
            self._close_question_early(session)

    # State transitions

    def _open_question(self, session: Session):
        question = session.current_question
        if question is None:
            self._complete(session)
            return

        answers = question.all_answers()
        self._rng.shuffle(answers)
        session.current_answer_order = answers
        for player in session.players:
            player.clear_answer()

        time_limit = session.settings.time_limit if session.settings else None
        session.question_deadline = self.clock() + time_limit if time_limit else None
        self.broadcast_service.broadcast_question(session)

        if time_limit:
            self._arm_timer(session, time_limit, self._on_deadline)
        else:
            self._cancel_timer(session)
        logger.info(f"Opened question {session.current_question_index} in session {session.code}")

    def _close_question_early(self, session: Session):
        session.is_evaluating = True
        self.broadcast_service.broadcast_all_answered(session)
        self._arm_timer(session, self.all_answered_grace, self._evaluate)

    def _on_deadline(self, session: Session):
        if not session.active or session.is_evaluating:
            return
        logger.info(f"Question {session.current_question_index} timed out in session {session.code}")
        session.is_evaluating = True
        self._evaluate(session)

    def _evaluate(self, session: Session):
        question = session.current_question
        if question is None:
            self._complete(session)
            return

        correct_answer = question.correct_answer
        for player in session.players:
            if not player.has_answered:
                continue
            is_correct = player.answer == correct_answer
            if is_correct:
                player.score += 1
            self._record_stats(self.stats_recorder.record_question, player, question.difficulty, is_correct)

        for player in session.players:
            player.clear_answer()
        session.current_answer_order = None
        session.question_deadline = None

        transition_end = self.clock() + self.reveal_duration
        self.broadcast_service.broadcast_question_ended(session, correct_answer, transition_end)
        self._arm_timer(session, self.reveal_duration, self._advance)

    def _advance(self, session: Session):
        session.is_evaluating = False
        session.current_question_index += 1
        self._open_question(session)

    def _complete(self, session: Session):
        self._cancel_timer(session)
        session.active = False
        session.is_evaluating = False
        session.current_answer_order = None
        session.question_deadline = None

        winners = self.registry.players.get_winners(session)
        self.broadcast_service.broadcast_game_over(session, winners)
        for player in session.players:
            self._record_stats(self.stats_recorder.record_game, player, player in winners)
        logger.info(f"Game over in session {session.code}")

    # Timers

    def _arm_timer(self, session: Session, delay: float, callback: Callable[[Session], None]):
        self._cancel_timer(session)
        epoch = session.epoch
        timer = self.timer_factory(delay, self._fire, args=(session.code, epoch, callback))
        timer.daemon = True
        session.timer = timer
        timer.start()

    def _cancel_timer(self, session: Session):
        session.epoch += 1
        if session.timer is not None:
            session.timer.cancel()
            session.timer = None

    def _fire(self, code: str, epoch: int, callback: Callable[[Session], None]):
        if not self.registry.exists(code):
            return
        with self.registry.session_operation(code):
            session = self.registry.get(code)
            if session is None or session.epoch != epoch:
                logger.debug(f"Discarded stale timer for session {code}")
                return
            session.timer = None
            try:
                callback(session)
            except Exception:
                logger.exception(f"Error in round timer for session {code}")

    def _record_stats(self, record: Callable, *args):
        try:
            record(*args)
        except Exception as e:
            logger.warning(f"Statistics recording failed: {e}")
