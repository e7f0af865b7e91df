"""Utility modules for the Global Connection Core."""

from .encryption_utils import (
    decrypt_connection_value,
    decrypt_value,
    encrypt_connection_value,
    encrypt_value,
)
from .logger import (
    AzureQueueHandler,
    ContextAwareLogger,
    ProjectContextFilter,
    configure_logging,
    get_logger,
    redact,
)

__all__ = [
    # Encryption utilities
    "encrypt_value",
    "decrypt_value",
    "encrypt_connection_value",
    "decrypt_connection_value",
    # Logging utilities
    "ContextAwareLogger",
    "AzureQueueHandler",
    "ProjectContextFilter",
    "configure_logging",
    "get_logger",
    "redact",
]
