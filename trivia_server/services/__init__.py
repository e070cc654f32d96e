"""
Services package for the Trivia World session coordinator

Contains decomposed service classes that follow Single Responsibility Principle.
"""

from .session_lifecycle_service import SessionLifecycleService
from .player_management_service import PlayerManagementService
from .concurrency_control_service import ConcurrencyControlService
from .subscription_service import SubscriptionService
from .session_state_presenter import SessionStatePresenter
from .broadcast_service import BroadcastService
from .round_scheduler import RoundScheduler
from .connection_lifecycle_service import ConnectionLifecycleService
from .session_cleanup_service import SessionCleanupService

__all__ = [
    'SessionLifecycleService',
    'PlayerManagementService',
    'ConcurrencyControlService',
    'SubscriptionService',
    'SessionStatePresenter',
    'BroadcastService',
    'RoundScheduler',
    'ConnectionLifecycleService',
    'SessionCleanupService'
]
