"""
SQLAlchemy models and database setup.

This module provides a common entry point for all models.
"""

from .db_base import (
    JSON,
    EncryptedBinary,
    TimestampMixin,
    UUIDMixin,
    utc_now,
)
from .db_config import (
    Base,
    DatabaseConfig,
    DatabaseManager,
    close_db,
    get_db_manager,
    get_app_database_config,
    get_development_config,
    get_production_config,
    import_all_models,
    initialize_db,
    set_db_manager,
)
from .db_connection_models import GlobalConnection, global_connection_project
from .db_project_models import Project

__all__ = [
    # Base definitions
    "Base",
    "JSON",
    "EncryptedBinary",
    "TimestampMixin",
    "UUIDMixin",
    "utc_now",
    # Configuration
    "DatabaseConfig",
    "DatabaseManager",
    "import_all_models",
    "initialize_db",
    "get_db_manager",
    "set_db_manager",
    "close_db",
    "get_production_config",
    "get_development_config",
    "get_app_database_config",
    # Models
    "GlobalConnection",
    "Project",
    "global_connection_project",
]
