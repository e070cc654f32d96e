"""
Game Action Handler

This module handles Socket.IO events related to game actions,
including starting a match and submitting answers.
"""

import logging

from trivia_server.services.error_response_factory import with_error_handling
from .base_handler import BaseHandler

logger = logging.getLogger(__name__)


class GameActionHandler(BaseHandler):
    """Handler for starting matches and submitting answers."""

    @with_error_handling('start-error')
    def handle_start(self, data):
        """
        Handle the host's request to start a match.

        Expected data format:
        {
            'code': 'ABC12',
            'settings': {'category': ..., 'difficulty': ..., 'count': 10, 'timeLimit': 15}
        }
        """
        self.log_handler_start('handle_start', data)

        data = self.validate_data_dict(data)
        code = self.validate_session_code(data)
        settings = self.validation_service.validate_game_settings(data.get('settings'))

        session = self.round_scheduler.start_game(code, self.connection_id, settings)
        if session is not None:
            self.log_handler_success('handle_start', f'Started game in session {code}')

    @with_error_handling('error')
    def handle_submit_answer(self, data):
        """
        Handle an answer submission for the open question.

        Expected data format:
        {
            'code': 'ABC12',
            'answer': 'answer text',
            'questionIndex': 0
        }
        """
        self.log_handler_start('handle_submit_answer', data)

        data = self.validate_data_dict(data)
        code = self.validate_session_code(data)
        answer, question_index = self.validation_service.validate_answer_submission(data)

        outcome = self.round_scheduler.submit_answer(code, self.connection_id, answer, question_index)
        logger.debug(f'Answer from {self.connection_id} in session {code}: {outcome.value}')
