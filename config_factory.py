"""
Configuration Factory - Centralized configuration management for Trivia World
Provides type-safe configuration with validation and environment-specific settings.
"""

import os
import logging
from typing import Any, Dict, Optional, Type
from enum import Enum
from dataclasses import dataclass, field


class Environment(Enum):
    """Environment types for configuration"""
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class ConfigError(Exception):
    """Configuration-related errors"""
    pass


DEFAULT_SECRET_KEY = 'dev-secret-key-change-in-production'


@dataclass
class AppConfig:
    """Application configuration with type safety and validation"""

    # Core Flask settings
    secret_key: str = field(default_factory=lambda: DEFAULT_SECRET_KEY)
    debug: bool = False
    flask_env: str = 'development'  # Default to development for safety

    # Server settings
    host: str = '0.0.0.0'
    port: int = 3001
    cors_allowed_origins: str = 'http://localhost:3000'

    # Session settings
    max_players_per_session: int = 8
    session_code_length: int = 5
    max_player_name_length: int = 20
    session_cleanup_inactive_minutes: int = 120

    # Round settings
    default_question_count: int = 10
    max_question_count: int = 50
    max_time_limit: int = 300  # seconds
    reveal_duration_seconds: float = 3.0
    all_answered_grace_seconds: float = 0.2

    # Question source settings
    question_source: str = 'api'  # 'api' or 'file'
    trivia_api_url: str = 'https://the-trivia-api.com/v2/questions'
    trivia_api_timeout: float = 10.0
    questions_file: str = 'questions.yaml'

    # Statistics service (optional)
    stats_service_url: str = ''
    stats_service_timeout: float = 5.0

    # Gunicorn settings (for production deployment)
    worker_connections: int = 1000
    timeout: int = 30
    keepalive: int = 2
    log_level: str = 'info'

    # Environment
    environment: Environment = Environment.DEVELOPMENT

    def __post_init__(self):
        """Validate configuration after initialization"""
        self._validate()

    def _validate(self):
        """Validate configuration values"""
        if self.port < 1 or self.port > 65535:
            raise ConfigError(f"Invalid port number: {self.port}")

        if self.max_players_per_session < 1 or self.max_players_per_session > 50:
            raise ConfigError(f"Invalid max_players_per_session: {self.max_players_per_session}")

        if self.session_code_length < 4 or self.session_code_length > 12:
            raise ConfigError(f"Invalid session_code_length: {self.session_code_length}")

        if self.max_player_name_length < 1 or self.max_player_name_length > 100:
            raise ConfigError(f"Invalid max_player_name_length: {self.max_player_name_length}")

        if self.max_question_count < 1 or self.max_question_count > 50:
            raise ConfigError(f"Invalid max_question_count: {self.max_question_count}")

        if self.default_question_count < 1 or self.default_question_count > self.max_question_count:
            raise ConfigError(f"Invalid default_question_count: {self.default_question_count}")

        if self.max_time_limit < 1 or self.max_time_limit > 3600:
            raise ConfigError(f"Invalid max_time_limit: {self.max_time_limit}")

        if self.reveal_duration_seconds < 0 or self.reveal_duration_seconds > 60:
            raise ConfigError(f"Invalid reveal_duration_seconds: {self.reveal_duration_seconds}")

        if self.all_answered_grace_seconds < 0 or self.all_answered_grace_seconds > 10:
            raise ConfigError(f"Invalid all_answered_grace_seconds: {self.all_answered_grace_seconds}")

        if self.question_source not in ('api', 'file'):
            raise ConfigError(f"Invalid question_source: {self.question_source}")

        if self.trivia_api_timeout <= 0:
            raise ConfigError(f"Invalid trivia_api_timeout: {self.trivia_api_timeout}")

        if self.stats_service_timeout <= 0:
            raise ConfigError(f"Invalid stats_service_timeout: {self.stats_service_timeout}")

        if self.environment == Environment.PRODUCTION and self.secret_key == DEFAULT_SECRET_KEY:
            raise ConfigError("Production environment requires a secure SECRET_KEY")

    @property
    def is_development(self) -> bool:
        """Check if running in development mode"""
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        """Check if running in production mode"""
        return self.environment == Environment.PRODUCTION

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode"""
        return self.environment == Environment.TESTING

    @property
    def allowed_origins(self):
        """CORS allowlist as a list, or '*' when any origin is accepted."""
        if self.cors_allowed_origins.strip() == '*':
            return '*'
        return [o.strip() for o in self.cors_allowed_origins.split(',') if o.strip()]

    def flask_config(self) -> Dict[str, Any]:
        """Subset of settings exposed through Flask's app.config"""
        return {
            'SECRET_KEY': self.secret_key,
            'DEBUG': self.debug,
            'ENV': self.flask_env,
            'MAX_PLAYERS_PER_SESSION': self.max_players_per_session,
            'QUESTION_SOURCE': self.question_source,
        }


class ConfigurationFactory:
    """
    Factory for creating and managing application configuration.

    Features:
    - Environment variable loading with type conversion
    - Configuration validation through AppConfig
    - Environment-specific defaults
    """

    _instance: Optional['ConfigurationFactory'] = None

    def __new__(cls) -> 'ConfigurationFactory':
        """Singleton pattern implementation"""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        """Initialize the configuration factory"""
        if not hasattr(self, '_initialized'):
            self._logger = logging.getLogger(__name__)
            self._initialized = True

    def load_from_environment(self, env_prefix: str = '') -> AppConfig:
        """
        Load configuration from environment variables.

        Args:
            env_prefix: Optional prefix for environment variables (e.g., 'TRIVIA_')

        Returns:
            Configured AppConfig instance
        """
        def get_env_var(key: str, default: Any = None, var_type: Type = str) -> Any:
            """Get environment variable with type conversion"""
            env_key = f"{env_prefix}{key}" if env_prefix else key
            value = os.environ.get(env_key)

            if value is None:
                return default

            # Type conversion
            if var_type == bool:
                return value.lower() in ('true', '1', 'yes', 'on')
            elif var_type == int:
                try:
                    return int(value)
                except ValueError:
                    self._logger.warning(f"Invalid integer value for {env_key}: {value}, using default: {default}")
                    return default
            elif var_type == float:
                try:
                    return float(value)
                except ValueError:
                    self._logger.warning(f"Invalid float value for {env_key}: {value}, using default: {default}")
                    return default
            else:
                return value

        # Determine environment
        flask_env = get_env_var('FLASK_ENV', 'development')
        if flask_env == 'development':
            environment = Environment.DEVELOPMENT
            debug = True
        elif flask_env == 'testing':
            environment = Environment.TESTING
            debug = True
        else:
            environment = Environment.PRODUCTION
            debug = False

        config = AppConfig(
            # Core Flask settings
            secret_key=get_env_var('SECRET_KEY', DEFAULT_SECRET_KEY),
            debug=get_env_var('DEBUG', debug, bool),
            flask_env=flask_env,

            # Server settings
            host=get_env_var('HOST', '0.0.0.0'),
            port=get_env_var('PORT', 3001, int),
            cors_allowed_origins=get_env_var('SOCKETIO_CORS_ALLOWED_ORIGINS', 'http://localhost:3000'),

            # Session settings
            max_players_per_session=get_env_var('MAX_PLAYERS_PER_SESSION', 8, int),
            session_code_length=get_env_var('SESSION_CODE_LENGTH', 5, int),
            max_player_name_length=get_env_var('MAX_PLAYER_NAME_LENGTH', 20, int),
            session_cleanup_inactive_minutes=get_env_var('SESSION_CLEANUP_INACTIVE_MINUTES', 120, int),

            # Round settings
            default_question_count=get_env_var('DEFAULT_QUESTION_COUNT', 10, int),
            max_question_count=get_env_var('MAX_QUESTION_COUNT', 50, int),
            max_time_limit=get_env_var('MAX_TIME_LIMIT', 300, int),
            reveal_duration_seconds=get_env_var('REVEAL_DURATION_SECONDS', 3.0, float),
            all_answered_grace_seconds=get_env_var('ALL_ANSWERED_GRACE_SECONDS', 0.2, float),

            # Question source settings
            question_source=get_env_var('QUESTION_SOURCE', 'api'),
            trivia_api_url=get_env_var('TRIVIA_API_URL', 'https://the-trivia-api.com/v2/questions'),
            trivia_api_timeout=get_env_var('TRIVIA_API_TIMEOUT', 10.0, float),
            questions_file=get_env_var('QUESTIONS_FILE', 'questions.yaml'),

            # Statistics service
            stats_service_url=get_env_var('STATS_SERVICE_URL', ''),
            stats_service_timeout=get_env_var('STATS_SERVICE_TIMEOUT', 5.0, float),

            # Gunicorn settings
            worker_connections=get_env_var('WORKER_CONNECTIONS', 1000, int),
            timeout=get_env_var('TIMEOUT', 30, int),
            keepalive=get_env_var('KEEPALIVE', 2, int),
            log_level=get_env_var('LOG_LEVEL', 'info'),

            # Environment
            environment=environment
        )

        self._logger.info(f"Configuration loaded for environment: {environment.value}")
        return config


# Global factory instance
_config_factory = ConfigurationFactory()


def load_config(env_prefix: str = '') -> AppConfig:
    """Load configuration from environment variables"""
    return _config_factory.load_from_environment(env_prefix)
