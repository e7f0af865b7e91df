"""
Test fixtures for Global Connection Core.

This module provides shared test fixtures including database setup,
configuration isolation and common test data.
"""

import pytest
from sqlalchemy.orm import Session

from global_connection_core.config import AppConfig, reset_config, set_config
from global_connection_core.context.project_context import ProjectContext
from global_connection_core.db import DatabaseConfig, DatabaseManager, import_all_models
from global_connection_core.db.db_config import Base, initialize_db, set_db_manager
from global_connection_core.exceptions import clear_correlation_id
from global_connection_core.utils.logger import reset_logging


@pytest.fixture(scope="session")
def db_config() -> DatabaseConfig:
    """Create SQLite in-memory database configuration for testing."""
    return DatabaseConfig(
        db_type="sqlite",
        database=":memory:",
        echo=False,
        development_mode=True,
    )


@pytest.fixture(scope="session")
def db_manager(db_config: DatabaseConfig) -> DatabaseManager:
    """Create and initialize database manager with all models."""
    import_all_models()
    manager = initialize_db(db_config)
    yield manager
    manager.close()


@pytest.fixture(autouse=True)
def app_config(monkeypatch) -> AppConfig:
    """
    Isolated configuration for each test.

    Environment variables that would leak host settings into tests are cleared.
    """
    for name in (
        "APP_ENV",
        "PLATFORM_ID",
        "CONNECTION_ENCRYPTION_KEY",
        "ADMIN_API_KEYS",
        "PIECE_CONNECTION_PREFIXES",
        "DB_STATEMENT_TIMEOUT",
        "AzureWebJobsStorage",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("APP_ENV", "test")

    config = AppConfig()
    set_config(config)
    yield config
    ProjectContext.clear_current_project()
    clear_correlation_id()
    reset_config()
    reset_logging()


@pytest.fixture(scope="function")
def db_session(db_manager: DatabaseManager) -> Session:
    """
    Create a database session for each test.

    Tables are created before and dropped after every test so each test
    starts from an empty schema.
    """
    set_db_manager(db_manager)
    Base.metadata.create_all(db_manager.engine)

    session = db_manager.new_session()

    yield session

    session.rollback()
    session.close()

    Base.metadata.drop_all(db_manager.engine)


@pytest.fixture
def sample_project_external_id() -> str:
    """Standard host project id for testing."""
    return "org_1234"


@pytest.fixture
def gelato_piece() -> str:
    return "@activepieces/piece-gelato"


@pytest.fixture(scope="function")
def factories(db_session):
    """Factory Boy factories bound to the test session."""
    from tests.fixtures import factories as factory_module

    factory_module.bind_factories(db_session)
    return factory_module
