"""
Plugin-side resolution of a tenant's predefined connection.

Nothing is cached: every call goes to the accessor, so a connection
provisioned between two invocations is visible to the second one.
"""

from typing import Optional

from ..context.operation_context import operation
from ..exceptions import ConnectionNotFoundError, MissingTenantIdentityError
from ..schemas.connection_schemas import BaseCredentialValue, PieceAuth
from ..utils.logger import get_logger
from .connections import ConnectionsAccessor, ProjectIdentity
from .naming import NamingConvention, build_connection_external_id


class ResolutionClient:
    """
    Resolve ``<prefix>_<project external id>`` to a connection value.

    Args:
        connections: Accessor supplied by the host for this invocation
        project: Identity of the invoking tenant; defaults to the current project context
        naming: Piece prefixes for ``resolve_for_piece``
    """

    def __init__(
        self,
        connections: ConnectionsAccessor,
        project: Optional[ProjectIdentity] = None,
        naming: Optional[NamingConvention] = None,
    ):
        self.connections = connections
        self.project = project
        self.naming = naming
        self.logger = get_logger()

    @operation()
    def resolve(
        self,
        naming_prefix: str,
        external_project_id: Optional[str],
        expected_auth: Optional[PieceAuth] = None,
    ) -> BaseCredentialValue:
        """
        Fetch the tenant's connection value.

        Raises:
            MissingTenantIdentityError: No project external id supplied
            ConnectionNotFoundError: Connection was never provisioned for this tenant
            ValidationError: Value does not match ``expected_auth``
            TransportError: From the accessor, unchanged
        """
        if external_project_id is None or not str(external_project_id).strip():
            raise MissingTenantIdentityError(naming_prefix=naming_prefix)

        external_id = build_connection_external_id(naming_prefix, external_project_id)
        value = self.connections.get(external_id)
        if value is None:
            raise ConnectionNotFoundError(
                external_id=external_id, project_external_id=external_project_id
            )

        if expected_auth is not None:
            expected_auth.check(value)

        self.logger.debug(
            "Resolved connection",
            extra={"external_id": external_id, "auth_type": value.type},
        )
        return value

    def resolve_current(
        self, naming_prefix: str, expected_auth: Optional[PieceAuth] = None
    ) -> BaseCredentialValue:
        """Resolve for the project bound to this invocation."""
        project = self.project or ProjectIdentity.from_context()
        return self.resolve(naming_prefix, project.external_id(), expected_auth=expected_auth)

    def resolve_for_piece(
        self,
        piece_name: str,
        external_project_id: Optional[str],
        expected_auth: Optional[PieceAuth] = None,
    ) -> BaseCredentialValue:
        naming = self.naming or NamingConvention()
        return self.resolve(
            naming.prefix_for(piece_name), external_project_id, expected_auth=expected_auth
        )
