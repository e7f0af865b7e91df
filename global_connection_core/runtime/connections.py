"""
Capabilities handed to a plugin invocation by the host.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..context.project_context import ProjectContext
from ..exceptions import NotFoundError
from ..schemas.connection_schemas import BaseCredentialValue
from ..services.connection_service import ConnectionService


class ConnectionsAccessor(ABC):
    """Read-only access to connection values by external id."""

    @abstractmethod
    def get(self, external_connection_id: str) -> Optional[BaseCredentialValue]:
        """Return the connection value, or None if no such connection exists."""


class StoreConnectionsAccessor(ConnectionsAccessor):
    """
    Accessor backed by the connection store.

    ``project_id`` (internal id) restricts visibility to connections attached
    to that project. TransportError and ValidationError propagate.
    """

    def __init__(self, connection_service: ConnectionService, project_id: Optional[str] = None):
        self.connection_service = connection_service
        self.project_id = project_id

    def get(self, external_connection_id: str) -> Optional[BaseCredentialValue]:
        try:
            connection = self.connection_service.lookup(
                external_connection_id, project_id=self.project_id
            )
        except NotFoundError:
            return None
        return connection.value


class ProjectIdentity:
    """The project external id the host bound to this invocation, if any."""

    def __init__(self, external_id: Optional[str] = None):
        self._external_id = external_id

    @classmethod
    def from_context(cls) -> "ProjectIdentity":
        return cls(ProjectContext.get_current_project_external_id())

    def external_id(self) -> Optional[str]:
        return self._external_id
