"""
Tests for the SQLAlchemy models and engine setup.

Real SQLite database; constraints are exercised directly through the session.
"""

import pytest
from sqlalchemy import inspect, text
from sqlalchemy.exc import IntegrityError

from global_connection_core.constants import AuthType, ConnectionScope
from global_connection_core.db import DatabaseConfig, DatabaseManager, GlobalConnection, Project
from global_connection_core.db.db_config import (
    close_db,
    get_db_manager,
    initialize_db,
    set_db_manager,
)
from global_connection_core.exceptions import ServiceError


class TestProjectModel:
    def test_defaults(self, factories, db_session):
        project = factories.ProjectFactory(external_id="org_1234", project_metadata={"plan": "pro"})
        db_session.expire_all()

        stored = db_session.get(Project, project.id)
        assert stored.external_id == "org_1234"
        assert stored.project_metadata == {"plan": "pro"}
        assert stored.created_at is not None
        assert stored.updated_at is not None

    def test_external_id_unique_per_platform(self, factories, db_session):
        factories.ProjectFactory(external_id="org_1234")

        with pytest.raises(IntegrityError):
            factories.ProjectFactory(external_id="org_1234")
        db_session.rollback()

    def test_same_external_id_on_another_platform(self, factories, db_session):
        factories.ProjectFactory(external_id="org_1234")
        factories.ProjectFactory(external_id="org_1234", platform_id="other")

        assert db_session.query(Project).count() == 2


class TestGlobalConnectionModel:
    def test_projects_association(self, factories, db_session):
        first = factories.ProjectFactory()
        second = factories.ProjectFactory()

        connection = factories.GlobalConnectionFactory(projects=[first, second])
        db_session.expire_all()

        stored = db_session.get(GlobalConnection, connection.id)
        assert sorted(stored.project_ids) == sorted([first.id, second.id])
        assert stored.auth_type == AuthType.CUSTOM_AUTH
        assert stored.scope == ConnectionScope.PLATFORM

    def test_external_id_unique_per_platform(self, factories, db_session):
        factories.GlobalConnectionFactory(external_id="gelato_org_1234")

        with pytest.raises(IntegrityError) as exc_info:
            factories.SecretTextConnectionFactory(external_id="gelato_org_1234")
        db_session.rollback()

        # Bound values (the serialized credential) stay out of driver error text
        assert "sk_test_123" not in str(exc_info.value)

    def test_repr_hides_value(self, factories):
        connection = factories.SecretTextConnectionFactory()

        assert "sk_test_123" not in repr(connection)
        assert "***" in repr(connection)

    def test_deleting_connection_removes_associations(self, factories, db_session):
        project = factories.ProjectFactory()
        connection = factories.GlobalConnectionFactory(projects=[project])

        db_session.delete(connection)
        db_session.flush()

        remaining = db_session.execute(
            text("SELECT COUNT(*) FROM global_connection_project")
        ).scalar()
        assert remaining == 0
        assert db_session.get(Project, project.id) is not None


class TestDatabaseManager:
    def test_tables_are_created(self, db_session, db_manager):
        tables = set(inspect(db_manager.engine).get_table_names())

        assert {"project", "global_connection", "global_connection_project"} <= tables

    def test_savepoints_work_on_sqlite(self, db_session, factories):
        factories.ProjectFactory(external_id="org_keep")

        with pytest.raises(IntegrityError):
            with db_session.begin_nested():
                db_session.add(Project(platform_id="default", external_id="org_keep", display_name="x"))
                db_session.flush()

        # Outer transaction survives the rolled-back savepoint
        assert db_session.query(Project).filter_by(external_id="org_keep").count() == 1

    def test_drop_tables_refused_outside_development(self, tmp_path):
        manager = DatabaseManager(
            DatabaseConfig(db_type="sqlite", database=str(tmp_path / "prod.db"))
        )
        try:
            with pytest.raises(ServiceError):
                manager.drop_tables()
        finally:
            manager.close()

    def test_get_db_manager_requires_initialization(self, db_manager):
        set_db_manager(None)
        try:
            with pytest.raises(ServiceError):
                get_db_manager()
        finally:
            set_db_manager(db_manager)

    def test_close_db_forgets_the_manager(self, db_manager, tmp_path):
        initialize_db(
            DatabaseConfig(
                db_type="sqlite", database=str(tmp_path / "closing.db"), development_mode=True
            )
        )
        try:
            close_db()
            with pytest.raises(ServiceError):
                get_db_manager()
        finally:
            set_db_manager(db_manager)
