"""
Gunicorn configuration for the Trivia World server.
Optimized for Socket.IO with eventlet workers.
"""

import logging
import sys

import yaml

from config_factory import ConfigError, load_config
from trivia_server.question_supplier import ContentValidationError, YamlQuestionSupplier


def on_starting(server):
    """
    Server hook that runs when the master process is starting.
    We use this to validate configuration, and the question bank when serving
    from a file, before workers are forked.
    """
    logger = logging.getLogger(__name__)
    try:
        config = load_config()
    except ConfigError as e:
        logger.critical(f"FATAL: Invalid configuration. Server shutting down. Error: {e}")
        sys.exit(1)

    if config.question_source != 'file':
        return

    logger.info(f"Validating {config.questions_file} before starting workers...")
    try:
        supplier = YamlQuestionSupplier(config.questions_file)
        supplier.load_questions_from_yaml()
        logger.info(f"Successfully validated and loaded {supplier.get_question_count()} questions.")
    except (FileNotFoundError, yaml.YAMLError, ContentValidationError) as e:
        logger.critical(f"FATAL: Question file validation failed. Server shutting down. Error: {e}")
        sys.exit(1)


# Load configuration (renamed to avoid conflicts with gunicorn's internal 'config')
app_config = load_config()

# Server socket
bind = f"{app_config.host}:{app_config.port}"
backlog = 2048

# Worker processes
workers = 1  # Sessions live in process memory; Socket.IO needs a single eventlet worker
worker_class = "eventlet"
worker_connections = app_config.worker_connections
timeout = app_config.timeout
keepalive = app_config.keepalive

# Logging
accesslog = "-"
errorlog = "-"
loglevel = app_config.log_level
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s"'

# Process naming
proc_name = "trivia-world"

# Server mechanics
preload_app = False  # Don't preload for Socket.IO
daemon = False
