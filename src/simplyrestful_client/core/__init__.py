"""Ambient helpers for simplyrestful_client (configuration, logging)."""

from .config import (
    create_client_from_env,
    load_env_config,
    load_timeout_seconds,
)
from .logging import LOG_EXTRA_FIELDS, LogfmtFormatter, setup_logging
from .observability import log_event

__all__ = [
    # Config helpers
    "create_client_from_env",
    "load_env_config",
    "load_timeout_seconds",
    # Logging
    "setup_logging",
    "LogfmtFormatter",
    "LOG_EXTRA_FIELDS",
    "log_event",
]
