"""
Integration test configuration.

Integration tests run against a file-backed SQLite database so that several
sessions (and threads) see each other's committed writes. Services are used
without injected sessions, the way the host uses them.
"""

import pytest

from global_connection_core.db import DatabaseManager
from global_connection_core.db.db_config import get_development_config, init_db, set_db_manager


def pytest_collection_modifyitems(config, items):
    for item in items:
        if "tests/integration" in str(item.fspath).replace("\\", "/"):
            item.add_marker(pytest.mark.integration)


@pytest.fixture(scope="function")
def file_db_manager(tmp_path, monkeypatch) -> DatabaseManager:
    """Global database manager backed by a fresh SQLite file."""
    monkeypatch.setenv("DEV_DB_PATH", str(tmp_path / "global_connections.db"))
    manager = DatabaseManager(get_development_config())
    init_db(manager)
    set_db_manager(manager)

    yield manager

    set_db_manager(None)
    manager.close()
