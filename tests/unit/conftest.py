"""
Unit test conftest.py - Component-specific fixtures.

Services share the per-test session so nothing is committed.
"""

import pytest

from global_connection_core.services.connection_service import ConnectionService
from global_connection_core.services.project_service import ProjectService
from global_connection_core.services.provisioning_service import ProvisioningService
from global_connection_core.runtime.naming import NamingConvention

# ==================== SERVICE FIXTURES ====================


@pytest.fixture(scope="function")
def project_service(db_session):
    """Project service with test session."""
    return ProjectService(session=db_session)


@pytest.fixture(scope="function")
def connection_service(db_session):
    """Connection service with test session."""
    return ConnectionService(session=db_session)


@pytest.fixture(scope="function")
def naming(gelato_piece):
    return NamingConvention({gelato_piece: "gelato", "@activepieces/piece-slack": "slack"})


@pytest.fixture(scope="function")
def provisioning_service(db_session, naming):
    """Provisioning service with test session and fixed prefixes."""
    return ProvisioningService(session=db_session, naming=naming)


@pytest.fixture(scope="function")
def project(project_service, sample_project_external_id):
    """The standard project, registered through the service."""
    return project_service.get_or_create(sample_project_external_id)
