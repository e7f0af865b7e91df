"""Plugin runtime: connection accessors, project identity and resolution."""

from .connections import ConnectionsAccessor, ProjectIdentity, StoreConnectionsAccessor
from .naming import NamingConvention, build_connection_external_id
from .resolution_client import ResolutionClient

__all__ = [
    "ConnectionsAccessor",
    "ProjectIdentity",
    "StoreConnectionsAccessor",
    "NamingConvention",
    "build_connection_external_id",
    "ResolutionClient",
]
