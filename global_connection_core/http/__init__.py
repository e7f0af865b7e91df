"""Administrative HTTP surface."""

from .admin_api import AdminApi, authenticate, connection_value_from_body

__all__ = ["AdminApi", "authenticate", "connection_value_from_body"]
