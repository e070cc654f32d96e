"""
Validation Service for the Trivia World session coordinator

Provides input validation and normalization of client payloads, separated from
error response handling.
"""

import logging
import re
from typing import Any, Dict, Optional, Tuple

from trivia_server.core.errors import ErrorCode, ValidationError
from trivia_server.models import GameSettings

logger = logging.getLogger(__name__)


class ValidationService:
    """Service responsible for input validation and normalization."""

    MAX_SESSION_CODE_LENGTH = 16
    MAX_AVATAR_LENGTH = 200
    MAX_ACCOUNT_ID_LENGTH = 128
    MAX_ANSWER_LENGTH = 500
    MAX_SETTING_LENGTH = 100

    SESSION_CODE_PATTERN = re.compile(r'^[A-Z0-9]+$')

    def __init__(self, max_player_name_length: int = 20,
                 default_question_count: int = 10, max_question_count: int = 50,
                 max_time_limit: int = 300):
        self.max_player_name_length = max_player_name_length
        self.default_question_count = default_question_count
        self.max_question_count = max_question_count
        self.max_time_limit = max_time_limit

    @classmethod
    def from_config(cls, config) -> 'ValidationService':
        return cls(
            max_player_name_length=config.max_player_name_length,
            default_question_count=config.default_question_count,
            max_question_count=config.max_question_count,
            max_time_limit=config.max_time_limit
        )

    def validate_data_dict(self, data: Any) -> Dict[str, Any]:
        if not isinstance(data, dict):
            raise ValidationError(
                ErrorCode.INVALID_DATA,
                "Invalid data format - expected dictionary"
            )
        return data

    def validate_session_code(self, code: Any) -> str:
        """
        Validate and normalize a session code.

        Returns:
            The code in upper case

        Raises:
            ValidationError: If the code is missing or malformed
        """
        if not code or not isinstance(code, str):
            raise ValidationError(
                ErrorCode.MISSING_SESSION_CODE,
                "Session code is required"
            )

        code = code.strip().upper()

        if not code:
            raise ValidationError(
                ErrorCode.MISSING_SESSION_CODE,
                "Session code cannot be empty"
            )

        if len(code) > self.MAX_SESSION_CODE_LENGTH or not self.SESSION_CODE_PATTERN.match(code):
            raise ValidationError(
                ErrorCode.INVALID_SESSION_CODE,
                "Session code can only contain letters and digits",
                {"max_length": self.MAX_SESSION_CODE_LENGTH}
            )

        return code

    def validate_player_name(self, player_name: Any) -> str:
        if not player_name or not isinstance(player_name, str):
            raise ValidationError(
                ErrorCode.MISSING_PLAYER_NAME,
                "Player name is required"
            )

        player_name = player_name.strip()

        if not player_name:
            raise ValidationError(
                ErrorCode.MISSING_PLAYER_NAME,
                "Player name cannot be empty"
            )

        if len(player_name) > self.max_player_name_length:
            raise ValidationError(
                ErrorCode.PLAYER_NAME_TOO_LONG,
                f"Player name must be {self.max_player_name_length} characters or less",
                {"max_length": self.max_player_name_length, "actual_length": len(player_name)}
            )

        return player_name

    def _optional_text(self, value: Any, field_name: str, max_length: int) -> Optional[str]:
        if value is None:
            return None
        if not isinstance(value, str) or len(value) > max_length:
            raise ValidationError(
                ErrorCode.INVALID_DATA,
                f"{field_name} must be a string of at most {max_length} characters"
            )
        return value.strip() or None

    def validate_player(self, player: Any) -> Tuple[str, Optional[str], Optional[str]]:
        """
        Validate the player descriptor sent with create-session and join-session.

        Returns:
            Tuple of (name, avatar, account_id)
        """
        if not isinstance(player, dict):
            raise ValidationError(
                ErrorCode.MISSING_PLAYER_NAME,
                "Player details are required"
            )
        name = self.validate_player_name(player.get('name'))
        avatar = self._optional_text(player.get('avatar'), 'Avatar', self.MAX_AVATAR_LENGTH)
        account_id = self._optional_text(player.get('userId'), 'User id', self.MAX_ACCOUNT_ID_LENGTH)
        return name, avatar, account_id

    def validate_game_settings(self, settings: Any) -> GameSettings:
        """
        Validate match settings.

        A missing count uses the configured default. A missing, null or zero
        time limit makes the match untimed.

        Raises:
            ValidationError: INVALID_SETTINGS on malformed values
        """
        if settings is None:
            settings = {}
        if not isinstance(settings, dict):
            raise ValidationError(ErrorCode.INVALID_SETTINGS, "Settings must be an object")

        count = settings.get('count')
        if count is None:
            count = self.default_question_count
        if isinstance(count, bool) or not isinstance(count, int) or not 1 <= count <= self.max_question_count:
            raise ValidationError(
                ErrorCode.INVALID_SETTINGS,
                f"Question count must be between 1 and {self.max_question_count}",
                {"max_count": self.max_question_count}
            )

        time_limit = settings.get('timeLimit')
        if time_limit is not None:
            if isinstance(time_limit, bool) or not isinstance(time_limit, int) or not 0 <= time_limit <= self.max_time_limit:
                raise ValidationError(
                    ErrorCode.INVALID_SETTINGS,
                    f"Time limit must be between 0 and {self.max_time_limit} seconds",
                    {"max_time_limit": self.max_time_limit}
                )
            time_limit = time_limit or None

        category = self._setting_text(settings.get('category'), 'Category')
        difficulty = self._setting_text(settings.get('difficulty'), 'Difficulty')

        return GameSettings(
            question_count=count,
            category=category,
            difficulty=difficulty,
            time_limit=time_limit
        )

    def _setting_text(self, value: Any, field_name: str) -> Optional[str]:
        if value is None:
            return None
        if not isinstance(value, str) or len(value) > self.MAX_SETTING_LENGTH:
            raise ValidationError(ErrorCode.INVALID_SETTINGS, f"{field_name} must be a short string")
        return value.strip() or None

    def validate_answer_submission(self, data: Dict[str, Any]) -> Tuple[str, int]:
        """
        Validate an answer submission payload.

        Returns:
            Tuple of (answer, question_index)
        """
        answer = data.get('answer')
        if not isinstance(answer, str) or len(answer) > self.MAX_ANSWER_LENGTH:
            raise ValidationError(ErrorCode.INVALID_DATA, "Answer must be a string")

        question_index = data.get('questionIndex')
        if isinstance(question_index, bool) or not isinstance(question_index, int) or question_index < 0:
            raise ValidationError(ErrorCode.INVALID_DATA, "Question index must be a non-negative integer")

        return answer, question_index
