"""
Service Container - Dependency Injection Container for Trivia World
Manages service creation, dependencies, and lifecycle.
"""

import threading
from enum import Enum
from typing import Any, Callable, Dict, List


class ServiceLifecycle(Enum):
    """Service lifecycle management options"""
    SINGLETON = "singleton"  # One instance per container
    TRANSIENT = "transient"  # New instance every time


class ServiceDefinition:
    """Definition of how a service should be created"""

    def __init__(
        self,
        name: str,
        factory: Callable,
        dependencies: List[str] = None,
        lifecycle: ServiceLifecycle = ServiceLifecycle.SINGLETON
    ):
        self.name = name
        self.factory = factory
        self.dependencies = dependencies or []
        self.lifecycle = lifecycle


class CircularDependencyError(Exception):
    """Raised when circular dependency is detected"""
    pass


class ServiceNotFoundError(Exception):
    """Raised when requested service is not registered"""
    pass


class ServiceContainer:
    """
    Dependency Injection Container for managing services and their dependencies.

    Features:
    - Explicit dependency resolution by service name
    - Circular dependency detection
    - Singleton and transient lifecycle management
    - External instances (Flask-SocketIO, configuration, test doubles)
    """

    def __init__(self):
        self._services: Dict[str, ServiceDefinition] = {}
        self._instances: Dict[str, Any] = {}
        self._creating: set = set()  # Track services being created (circular detection)

    def register(
        self,
        name: str,
        factory: Callable,
        dependencies: List[str] = None,
        lifecycle: ServiceLifecycle = ServiceLifecycle.SINGLETON
    ) -> 'ServiceContainer':
        """
        Register a service with the container.

        Args:
            name: Service name for retrieval
            factory: Class or function to create the service
            dependencies: Service names passed positionally to the factory
            lifecycle: How the service instance should be managed

        Returns:
            Self for method chaining
        """
        if name in self._services:
            raise ValueError(f"Service '{name}' is already registered")

        if not callable(factory):
            raise ValueError(f"Factory for '{name}' must be callable")

        self._services[name] = ServiceDefinition(
            name=name,
            factory=factory,
            dependencies=dependencies,
            lifecycle=lifecycle
        )
        return self

    def configure_services(self) -> 'ServiceContainer':
        """
        Register all Trivia World services with their dependencies.

        Expects 'config' and 'socketio' to be set as external dependencies.
        'QuestionSupplier', 'StatsRecorder' and 'TimerFactory' may be set
        externally to replace the configured defaults.
        """
        from trivia_server.question_supplier import create_question_supplier
        from trivia_server.session_registry import SessionRegistry
        from trivia_server.services.broadcast_service import BroadcastService
        from trivia_server.services.connection_lifecycle_service import ConnectionLifecycleService
        from trivia_server.services.session_cleanup_service import SessionCleanupService
        from trivia_server.services.session_state_presenter import SessionStatePresenter
        from trivia_server.services.stats_recorder import create_stats_recorder
        from trivia_server.services.subscription_service import SubscriptionService
        from trivia_server.services.validation_service import ValidationService

        # Payload validation
        self.register('ValidationService', ValidationService.from_config, dependencies=['config'])

        # Session state
        self.register('SessionRegistry', SessionRegistry.from_config, dependencies=['config'])
        self.register('SubscriptionService', SubscriptionService)
        self.register('SessionStatePresenter', SessionStatePresenter)

        # External collaborators
        if 'QuestionSupplier' not in self._instances:
            self.register('QuestionSupplier', create_question_supplier, dependencies=['config'])
        if 'StatsRecorder' not in self._instances:
            self.register('StatsRecorder', create_stats_recorder, dependencies=['config'])
        if 'TimerFactory' not in self._instances:
            self.set_external_dependency('TimerFactory', threading.Timer)

        # Broadcast service - depends on socketio and the subscriber sets
        self.register('BroadcastService', BroadcastService,
                      dependencies=['socketio', 'SubscriptionService', 'SessionStatePresenter'])

        # Round scheduler - owns the per-session timers
        self.register('RoundScheduler', _create_round_scheduler,
                      dependencies=['SessionRegistry', 'BroadcastService', 'QuestionSupplier',
                                    'StatsRecorder', 'config', 'TimerFactory'])

        # Connection lifecycle - roster changes driven by connections
        self.register('ConnectionLifecycleService', ConnectionLifecycleService,
                      dependencies=['SessionRegistry', 'SubscriptionService', 'BroadcastService', 'RoundScheduler'])

        # Housekeeping
        self.register('SessionCleanupService', SessionCleanupService.from_config,
                      dependencies=['ConnectionLifecycleService', 'config'])

        return self

    def set_external_dependency(self, name: str, instance: Any) -> 'ServiceContainer':
        """
        Set an external dependency that's created outside the container.
        Useful for Flask-SocketIO and similar framework objects.
        """
        self._instances[name] = instance
        return self

    def get(self, name: str) -> Any:
        """
        Get a service instance, creating it if necessary.

        Raises:
            ServiceNotFoundError: If service is not registered
            CircularDependencyError: If circular dependency detected
        """
        if name in self._instances:
            return self._instances[name]

        if name not in self._services:
            raise ServiceNotFoundError(f"Service '{name}' is not registered")

        return self._create_service(name)

    def _create_service(self, name: str) -> Any:
        """
        Create a service instance with dependency injection.
        """
        if name in self._creating:
            cycle = ' -> '.join(list(self._creating) + [name])
            raise CircularDependencyError(f"Circular dependency detected: {cycle}")

        self._creating.add(name)

        try:
            service_def = self._services[name]

            dependencies = [self.get(dep_name) for dep_name in service_def.dependencies]

            instance = service_def.factory(*dependencies)

            if service_def.lifecycle == ServiceLifecycle.SINGLETON:
                self._instances[name] = instance

            return instance

        finally:
            self._creating.discard(name)

    def has_service(self, name: str) -> bool:
        """Check if a service is registered"""
        return name in self._services

    def get_service_names(self) -> List[str]:
        """Get list of all registered service names"""
        return list(self._services.keys())

    def validate_dependencies(self) -> Dict[str, List[str]]:
        """
        Validate all service dependencies can be resolved.

        Returns:
            Dictionary mapping service names to lists of missing dependencies
        """
        issues = {}

        for name, service_def in self._services.items():
            missing_deps = [dep for dep in service_def.dependencies
                            if not self.has_service(dep) and dep not in self._instances]
            if missing_deps:
                issues[name] = missing_deps

        return issues

    def __repr__(self) -> str:
        return f"ServiceContainer(services={len(self._services)}, instances={len(self._instances)})"


def _create_round_scheduler(registry, broadcast_service, question_supplier, stats_recorder, config, timer_factory):
    from trivia_server.services.round_scheduler import RoundScheduler
    return RoundScheduler(
        registry,
        broadcast_service,
        question_supplier,
        stats_recorder=stats_recorder,
        config=config,
        timer_factory=timer_factory
    )


def configure_container(socketio, config, question_supplier=None, stats_recorder=None,
                        timer_factory=None) -> ServiceContainer:
    """
    Build a service container for one application instance.

    Args:
        socketio: Flask-SocketIO instance
        config: AppConfig instance
        question_supplier: Optional replacement for the configured question source
        stats_recorder: Optional replacement for the configured statistics recorder
        timer_factory: Optional replacement for threading.Timer

    Returns:
        Configured service container
    """
    container = ServiceContainer()
    container.set_external_dependency('socketio', socketio)
    container.set_external_dependency('config', config)

    if question_supplier is not None:
        container.set_external_dependency('QuestionSupplier', question_supplier)
    if stats_recorder is not None:
        container.set_external_dependency('StatsRecorder', stats_recorder)
    if timer_factory is not None:
        container.set_external_dependency('TimerFactory', timer_factory)

    container.configure_services()
    return container
