"""
Core error definitions for the Trivia World session coordinator

Provides error codes and the request error exception that don't depend on other services.
"""

from enum import Enum
from typing import Dict, Optional


class ErrorCode(Enum):
    """Standardized error codes for the application."""

    # Payload Errors
    INVALID_DATA = "INVALID_DATA"
    MISSING_SESSION_CODE = "MISSING_SESSION_CODE"
    INVALID_SESSION_CODE = "INVALID_SESSION_CODE"
    MISSING_PLAYER_NAME = "MISSING_PLAYER_NAME"
    PLAYER_NAME_TOO_LONG = "PLAYER_NAME_TOO_LONG"
    INVALID_SETTINGS = "INVALID_SETTINGS"

    # Session Errors
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    SESSION_FULL = "SESSION_FULL"

    # Game Flow Errors
    NOT_HOST = "NOT_HOST"
    GAME_IN_PROGRESS = "GAME_IN_PROGRESS"
    FETCH_FAILED = "FETCH_FAILED"

    # System Errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ValidationError(Exception):
    """Raised when a client request cannot be honoured."""

    def __init__(self, code: ErrorCode, message: str, details: Optional[Dict] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)
