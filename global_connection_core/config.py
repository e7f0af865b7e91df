"""
Centralized configuration management for the Global Connection Core.

This module provides a unified configuration system with support for:
- Environment variables (and .env files)
- Feature flags
- The shared piece naming convention
- Validation using Pydantic
"""

import os
from typing import Dict, List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from .constants import DEFAULT_PLATFORM_ID, EnvironmentVariable, LogLevel, QueueName, Timeouts


def _split_csv(raw: str) -> List[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


def parse_piece_prefixes(raw: str) -> Dict[str, str]:
    """
    Parse ``piece=prefix`` pairs separated by commas.

    Example: ``@activepieces/piece-gelato=gelato,@acme/piece-crm=crm``
    """
    prefixes: Dict[str, str] = {}
    for pair in _split_csv(raw):
        piece_name, sep, prefix = pair.rpartition("=")
        if not sep or not piece_name.strip() or not prefix.strip():
            raise ValueError(f"Invalid piece prefix mapping: {pair!r}")
        prefixes[piece_name.strip()] = prefix.strip()
    return prefixes


class DatabaseConfig(BaseModel):
    """Database connection configuration."""

    connection_string: str = Field(
        default_factory=lambda: os.getenv(
            EnvironmentVariable.DATABASE_URL.value, "sqlite:///./global_connections.db"
        ),
        description="Database connection string",
    )
    pool_size: int = Field(default=5, description="Connection pool size")
    max_overflow: int = Field(default=10, description="Maximum overflow connections")
    pool_timeout: int = Field(default=Timeouts.POOL_CHECKOUT, description="Pool timeout in seconds")
    statement_timeout: Optional[float] = Field(
        default_factory=lambda: (
            float(os.environ[EnvironmentVariable.STATEMENT_TIMEOUT.value])
            if os.getenv(EnvironmentVariable.STATEMENT_TIMEOUT.value)
            else float(Timeouts.DATABASE_QUERY)
        ),
        description="Default per-call timeout in seconds for backing store calls",
    )
    echo: bool = Field(default=False, description="Echo SQL statements")


class QueueConfig(BaseModel):
    """Queue configuration for shipping logs to Azure Storage Queues."""

    connection_string: str = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.AZURE_STORAGE_CONNECTION.value, ""),
        description="Azure Storage connection string",
    )
    logs_queue_name: str = Field(default=QueueName.LOGS.value, description="Logs queue name")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.LOG_LEVEL.value, LogLevel.INFO.value),
        description="Logging level",
        validate_default=True,
    )
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string",
    )

    @field_validator("level")
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = {level.value for level in LogLevel}
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()


class FeatureFlags(BaseModel):
    """Feature flags for controlling framework behavior."""

    enable_logs_queue: bool = Field(default=False, description="Ship logs to an Azure queue")
    enable_project_scope_check: bool = Field(
        default=True,
        description="Only resolve connections attached to the requesting project",
    )
    enable_audit_logging: bool = Field(
        default=True, description="Log credential provisioning and access events"
    )


class SecurityConfig(BaseModel):
    """Security-related configuration."""

    encryption_key: Optional[str] = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.ENCRYPTION_KEY.value) or None,
        description="Key for at-rest encryption of connection values",
    )
    admin_api_keys: List[str] = Field(
        default_factory=lambda: _split_csv(
            os.getenv(EnvironmentVariable.ADMIN_API_KEYS.value, "")
        ),
        description="Bearer keys accepted by the administrative surface",
    )


class PlatformConfig(BaseModel):
    """Platform scope that owns projects and connections."""

    platform_id: str = Field(
        default_factory=lambda: os.getenv(
            EnvironmentVariable.PLATFORM_ID.value, DEFAULT_PLATFORM_ID
        ),
        min_length=1,
        max_length=100,
        validate_default=True,
    )


class NamingConfig(BaseModel):
    """Piece name -> connection external id prefix."""

    piece_prefixes: Dict[str, str] = Field(
        default_factory=lambda: parse_piece_prefixes(
            os.getenv(EnvironmentVariable.PIECE_CONNECTION_PREFIXES.value, "")
        ),
        description="Prefix used to build each piece's connection external id",
        validate_default=True,
    )

    @field_validator("piece_prefixes")
    def validate_prefixes(cls, v: Dict[str, str]) -> Dict[str, str]:
        """Reject empty prefixes."""
        for piece_name, prefix in v.items():
            if not prefix or not prefix.strip():
                raise ValueError(f"Empty connection prefix for piece {piece_name}")
        return v


class AppConfig(BaseModel):
    """Main application configuration."""

    environment: str = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.APP_ENV.value, "development"),
        description="Application environment",
    )
    debug: bool = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.DEBUG.value, "false").lower()
        == "true",
        description="Debug mode",
    )

    # Sub-configurations
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    queue: QueueConfig = Field(default_factory=QueueConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    features: FeatureFlags = Field(default_factory=FeatureFlags)
    security: SecurityConfig = Field(default_factory=SecurityConfig)
    platform: PlatformConfig = Field(default_factory=PlatformConfig)
    naming: NamingConfig = Field(default_factory=NamingConfig)

    @property
    def is_development(self) -> bool:
        return self.environment.lower() in {"development", "dev", "test", "testing"}

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "AppConfig":
        """Create configuration from environment variables (after loading .env)."""
        load_dotenv(dotenv_path=dotenv_path, override=False)
        return cls()


# Global configuration instance
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = AppConfig.from_env()
    return _config


def set_config(config: AppConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset the global configuration instance."""
    global _config
    _config = None
