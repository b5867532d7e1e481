"""Common utilities - logging, config, exceptions."""

from linktrace.common.logging.logger import get_logger
from linktrace.common.config import Config, get_config, reset_config
from linktrace.common.exceptions import (
    LinkTraceException,
    ConfigurationError,
    SessionNotFoundError,
    EnrichmentError,
)

__all__ = [
    # Logging
    "get_logger",
    # Config
    "Config",
    "get_config",
    "reset_config",
    # Exceptions
    "LinkTraceException",
    "ConfigurationError",
    "SessionNotFoundError",
    "EnrichmentError",
]
