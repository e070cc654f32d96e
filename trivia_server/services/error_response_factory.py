"""
Error Response Factory for the Trivia World session coordinator

Turns ValidationError and unexpected exceptions into replies addressed only to
the originating connection.
"""

import logging
from functools import wraps
from typing import Dict, Optional

from flask_socketio import emit

from trivia_server.core.errors import ErrorCode, ValidationError

logger = logging.getLogger(__name__)


class ErrorResponseFactory:
    """Factory responsible for creating standardized error replies."""

    def create_error_response(self, code: ErrorCode, message: str, details: Optional[Dict] = None) -> Dict:
        """
        Create standardized error response.

        Args:
            code: Error code enum
            message: Human-readable error message
            details: Optional additional error details

        Returns:
            Error payload with ``message`` and ``code`` keys
        """
        response = {
            'message': message,
            'code': code.value
        }
        if details:
            response['details'] = details
        return response

    def emit_error(self, event: str, code: ErrorCode, message: str, details: Optional[Dict] = None):
        """Emit an error reply to the requesting connection."""
        error_response = self.create_error_response(code, message, details)
        logger.warning(f"Emitting {event}: {code.value} - {message}")
        emit(event, error_response)

    def emit_validation_error(self, event: str, error: ValidationError):
        self.emit_error(event, error.code, error.message, error.details)

    def handle_exception(self, e: Exception, context: str = "Unknown") -> tuple:
        """
        Map an exception to an error code and message.

        Returns:
            Tuple of (error_code, error_message)
        """
        if isinstance(e, ValidationError):
            return e.code, e.message

        logger.exception(f"Unexpected exception in {context}: {e}")
        return ErrorCode.INTERNAL_ERROR, "An internal error occurred"


def with_error_handling(event: str = 'error'):
    """
    Decorator for Socket.IO event handlers to provide consistent error handling.

    Args:
        event: Name of the reply event carrying the error

    Returns:
        Decorator function
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except ValidationError as e:
                factory = ErrorResponseFactory()
                factory.emit_validation_error(event, e)
            except Exception as e:
                factory = ErrorResponseFactory()
                error_code, error_message = factory.handle_exception(e, func.__name__)
                factory.emit_error(event, error_code, error_message)
        return wrapper
    return decorator
