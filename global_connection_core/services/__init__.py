"""Service layer for business logic."""

from .base_service import SessionManagedService
from .connection_service import ConnectionService
from .project_service import ProjectService
from .provisioning_service import ProvisioningService

__all__ = [
    "SessionManagedService",
    "ConnectionService",
    "ProjectService",
    "ProvisioningService",
]
