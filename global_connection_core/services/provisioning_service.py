"""
Host-side provisioning of a tenant's predefined connection.
"""

from typing import Any, Dict, Optional, Union

from sqlalchemy.orm import Session

from ..constants import AuthType, ConnectionScope
from ..context.operation_context import operation
from ..runtime.naming import NamingConvention
from ..schemas.connection_schemas import BaseCredentialValue, ConnectionPublic
from .base_service import SessionManagedService
from .connection_service import ConnectionService
from .project_service import ProjectService


class ProvisioningService(SessionManagedService):
    """
    Ensure the tenant's project exists, then create its connection under the
    shared naming convention.

    Project creation is idempotent; connection creation is not, so
    provisioning the same piece twice for one tenant raises ConflictError.
    """

    def __init__(
        self,
        session: Optional[Session] = None,
        naming: Optional[NamingConvention] = None,
        timeout: Optional[float] = None,
    ):
        super().__init__(session=session, timeout=timeout)
        self.naming = naming or NamingConvention()
        # Both services share this service's session and so one transaction
        self.projects = ProjectService(session=self.session, timeout=timeout)
        self.connections = ConnectionService(session=self.session, timeout=timeout)

    @operation()
    def provision(
        self,
        piece_name: str,
        external_project_id: str,
        auth_type: AuthType,
        value: Union[BaseCredentialValue, Dict[str, Any]],
        display_name: Optional[str] = None,
        scope: ConnectionScope = ConnectionScope.PLATFORM,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> ConnectionPublic:
        project = self.projects.get_or_create(external_project_id)
        external_id = self.naming.external_id_for(piece_name, project.external_id)
        connection = self.connections.create_for_project(
            project.id,
            external_id,
            piece_name,
            auth_type,
            value,
            scope=scope,
            display_name=display_name,
            metadata=metadata,
        )
        self.logger.info(
            "Provisioned predefined connection",
            extra={
                "piece_name": piece_name,
                "project_id": project.id,
                "external_id": external_id,
            },
        )
        return connection
