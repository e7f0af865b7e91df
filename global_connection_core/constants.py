"""
Constants and enums for the Global Connection Core.

This module centralizes the magic strings and limits shared between
provisioning, resolution and the administrative surface.
"""

from enum import Enum


class AuthType(str, Enum):
    """Closed set of authentication kinds a connection value can carry."""

    PLATFORM_OAUTH2 = "PLATFORM_OAUTH2"
    SECRET_TEXT = "SECRET_TEXT"
    BASIC_AUTH = "BASIC_AUTH"
    CUSTOM_AUTH = "CUSTOM_AUTH"


class ConnectionScope(str, Enum):
    """Visibility of a connection record."""

    PLATFORM = "PLATFORM"
    PROJECT = "PROJECT"


class QueueName(str, Enum):
    """Standard queue names used by the framework."""

    LOGS = "logs-queue"


class LogLevel(str, Enum):
    """Standard logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class EnvironmentVariable(str, Enum):
    """Standard environment variable names."""

    AZURE_STORAGE_CONNECTION = "AzureWebJobsStorage"
    DATABASE_URL = "DATABASE_URL"
    APP_ENV = "APP_ENV"
    LOG_LEVEL = "LOG_LEVEL"
    PLATFORM_ID = "PLATFORM_ID"
    ENCRYPTION_KEY = "CONNECTION_ENCRYPTION_KEY"
    ADMIN_API_KEYS = "ADMIN_API_KEYS"
    PIECE_CONNECTION_PREFIXES = "PIECE_CONNECTION_PREFIXES"
    STATEMENT_TIMEOUT = "DB_STATEMENT_TIMEOUT"
    DEBUG = "DEBUG"


# Keys whose values must never reach a log line or an external payload
SENSITIVE_KEYS = frozenset(
    {
        "value",
        "props",
        "password",
        "secret_text",
        "access_token",
        "refresh_token",
        "api_key",
        "apiKey",
        "client_secret",
        "token",
        "authorization",
    }
)

REDACTED = "***"

# Separator between a piece prefix and a project external id
CONNECTION_ID_SEPARATOR = "_"

DEFAULT_PLATFORM_ID = "default"


class Limits:
    """System limits and thresholds."""

    MAX_EXTERNAL_ID_LENGTH = 255
    MAX_DISPLAY_NAME_LENGTH = 200
    MAX_PIECE_NAME_LENGTH = 200
    DEFAULT_PAGE_SIZE = 100
    MAX_PAGE_SIZE = 500


class Timeouts:
    """Timeout values in seconds."""

    DATABASE_QUERY = 30
    POOL_CHECKOUT = 30
