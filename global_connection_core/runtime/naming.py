"""
Connection naming convention.

A predefined connection's external id is ``<prefix>_<project external id>``.
Provisioning and resolution must agree on the prefix, so both read it from
``AppConfig.naming``.
"""

from typing import Dict, Optional

from ..config import get_config
from ..constants import CONNECTION_ID_SEPARATOR
from ..exceptions import ErrorCode, ValidationError


def build_connection_external_id(prefix: str, project_external_id: str) -> str:
    """
    Join a naming prefix and a project external id.

    Raises:
        ValidationError: If either part is empty
    """
    if not prefix or not prefix.strip():
        raise ValidationError(
            "Connection naming prefix must be a non-empty string",
            field="prefix",
            error_code=ErrorCode.MISSING_REQUIRED,
        )
    if not project_external_id or not project_external_id.strip():
        raise ValidationError(
            "Project external id must be a non-empty string",
            field="project_external_id",
            error_code=ErrorCode.MISSING_REQUIRED,
        )
    return f"{prefix.strip()}{CONNECTION_ID_SEPARATOR}{project_external_id.strip()}"


class NamingConvention:
    """Piece name -> connection prefix, shared by the host and plugins."""

    def __init__(self, piece_prefixes: Optional[Dict[str, str]] = None):
        if piece_prefixes is None:
            piece_prefixes = get_config().naming.piece_prefixes
        self.piece_prefixes = dict(piece_prefixes)

    def prefix_for(self, piece_name: str) -> str:
        """
        Raises:
            ValidationError: If the piece has no configured prefix
        """
        prefix = self.piece_prefixes.get(piece_name)
        if not prefix:
            raise ValidationError(
                f"No connection prefix configured for piece '{piece_name}'",
                field="piece_name",
                error_code=ErrorCode.CONFIGURATION_ERROR,
                piece_name=piece_name,
            )
        return prefix

    def external_id_for(self, piece_name: str, project_external_id: str) -> str:
        return build_connection_external_id(self.prefix_for(piece_name), project_external_id)
