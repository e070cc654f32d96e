"""
Base Handler Classes

This module provides the base class for Socket.IO handlers with common patterns
for service access, payload validation and logging.
"""

import logging
from typing import Any, Dict

from flask import request

logger = logging.getLogger(__name__)


class BaseHandler:
    """
    Base class for all Socket.IO handlers.

    Services are resolved from the container handed in at construction.
    """

    def __init__(self, container):
        self._container = container

    @property
    def validation_service(self):
        return self._container.get('ValidationService')

    @property
    def connection_lifecycle(self):
        return self._container.get('ConnectionLifecycleService')

    @property
    def round_scheduler(self):
        return self._container.get('RoundScheduler')

    @property
    def connection_id(self) -> str:
        return request.sid  # type: ignore[attr-defined]

    def validate_data_dict(self, data: Any) -> Dict[str, Any]:
        return self.validation_service.validate_data_dict(data)

    def validate_session_code(self, data: Dict[str, Any]) -> str:
        return self.validation_service.validate_session_code(data.get('code'))

    def log_handler_start(self, handler_name: str, data: Any = None) -> None:
        """Log the start of handler execution."""
        logger.info(f'{handler_name} called by client: {self.connection_id}')
        if data:
            logger.debug(f'{handler_name} data: {data}')

    def log_handler_success(self, handler_name: str, message: str = None) -> None:
        """Log successful handler completion."""
        log_msg = f'{handler_name} completed successfully for client: {self.connection_id}'
        if message:
            log_msg += f' - {message}'
        logger.info(log_msg)
