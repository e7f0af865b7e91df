"""
Connection store: global connections keyed by external id.

Creation never overwrites: a taken external id is a ConflictError, whether it
is caught by the pre-check or by the unique constraint at flush time. Values
are serialized, encrypted at rest and revalidated against their auth type on
every lookup.
"""

import uuid
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..constants import AuthType, ConnectionScope, Limits
from ..context.operation_context import operation
from ..db.db_connection_models import GlobalConnection, global_connection_project
from ..db.db_project_models import Project
from ..exceptions import ErrorCode, ServiceError, ValidationError, duplicate, not_found
from ..schemas.connection_schemas import (
    BaseCredentialValue,
    ConnectionCreate,
    ConnectionPublic,
    ConnectionRead,
    deserialize_value,
    parse_credential_value,
    serialize_value,
)
from ..utils.encryption_utils import decrypt_connection_value, encrypt_connection_value
from .base_service import SessionManagedService


def connection_to_public(connection: GlobalConnection) -> ConnectionPublic:
    return ConnectionPublic(
        id=connection.id,
        platform_id=connection.platform_id,
        external_id=connection.external_id,
        display_name=connection.display_name,
        piece_name=connection.piece_name,
        auth_type=connection.auth_type,
        scope=connection.scope,
        project_ids=connection.project_ids,
        metadata=connection.connection_metadata,
        created_at=connection.created_at,
        updated_at=connection.updated_at,
    )


def validate_connection_create(data: Dict[str, Any]) -> ConnectionCreate:
    """
    Build a ConnectionCreate from raw data, raising our ValidationError on bad input.
    """
    try:
        return ConnectionCreate.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(
            "Invalid connection data",
            error_code=ErrorCode.INVALID_FORMAT,
            validation_errors=[
                {"loc": list(err["loc"]), "type": err["type"], "msg": err["msg"]}
                for err in e.errors()
            ],
        ) from e


class ConnectionService(SessionManagedService):
    """Global connection store backed directly by SQLAlchemy."""

    def __init__(self, session: Optional[Session] = None, timeout: Optional[float] = None):
        super().__init__(session=session, timeout=timeout)

    def _find(self, external_id: str) -> Optional[GlobalConnection]:
        return (
            self.session.query(GlobalConnection)
            .filter(
                GlobalConnection.platform_id == self.platform_id,
                GlobalConnection.external_id == external_id,
            )
            .first()
        )

    def _load_projects(self, project_ids: List[str]) -> List[Project]:
        projects = (
            self.session.query(Project)
            .filter(Project.id.in_(project_ids), Project.platform_id == self.platform_id)
            .all()
        )
        found = {project.id for project in projects}
        missing = [project_id for project_id in project_ids if project_id not in found]
        if missing:
            raise not_found("Project", project_ids=missing)
        by_id = {project.id: project for project in projects}
        return [by_id[project_id] for project_id in project_ids]

    @operation()
    def create(
        self,
        connection_data: Union[ConnectionCreate, Dict[str, Any]],
        timeout: Optional[float] = None,
    ) -> ConnectionPublic:
        """
        Persist a new global connection.

        Returns:
            The redacted connection record

        Raises:
            ValidationError: Malformed payload or value/auth type mismatch
            ConflictError: External id already taken in this platform
            NotFoundError: A referenced project does not exist
            TransportError: Backing store unreachable or timed out
        """
        if not isinstance(connection_data, ConnectionCreate):
            connection_data = validate_connection_create(connection_data)

        with self.store_call("create_connection", timeout):
            if self._find(connection_data.external_id) is not None:
                raise duplicate("Connection", external_id=connection_data.external_id)

            projects = self._load_projects(connection_data.project_ids)

            encrypted = encrypt_connection_value(
                self.session, serialize_value(connection_data.value), self.platform_id
            )
            connection = GlobalConnection(
                id=str(uuid.uuid4()),
                platform_id=self.platform_id,
                external_id=connection_data.external_id,
                display_name=connection_data.display_name,
                piece_name=connection_data.piece_name,
                auth_type=connection_data.auth_type,
                scope=connection_data.scope,
                value=encrypted,
                connection_metadata=connection_data.metadata,
                projects=projects,
            )
            try:
                with self.session.begin_nested():
                    self.session.add(connection)
            except IntegrityError as e:
                raise duplicate("Connection", cause=e, external_id=connection_data.external_id)

            if self.config.features.enable_audit_logging:
                self.logger.info(
                    "Created global connection",
                    extra={
                        "connection_id": connection.id,
                        "external_id": connection.external_id,
                        "piece_name": connection.piece_name,
                        "auth_type": connection.auth_type.value,
                        "scope": connection.scope.value,
                        "project_ids": connection.project_ids,
                    },
                )
            return connection_to_public(connection)

    def create_for_project(
        self,
        project_internal_id: str,
        external_connection_id: str,
        piece_name: str,
        auth_type: AuthType,
        value: Union[BaseCredentialValue, Dict[str, Any]],
        scope: ConnectionScope = ConnectionScope.PLATFORM,
        display_name: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> ConnectionPublic:
        """Create a connection attached to a single project."""
        if not isinstance(value, BaseCredentialValue):
            value = parse_credential_value(value, auth_type)
        connection_data = validate_connection_create(
            {
                "display_name": display_name or external_connection_id,
                "piece_name": piece_name,
                "auth_type": auth_type,
                "value": value,
                "scope": scope,
                "project_ids": [project_internal_id],
                "external_id": external_connection_id,
                "metadata": metadata,
            }
        )
        return self.create(connection_data, timeout=timeout)

    @operation()
    def lookup(
        self,
        external_connection_id: str,
        project_id: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> ConnectionRead:
        """
        Fetch a connection with its decrypted value.

        When ``project_id`` is given, a connection not attached to that
        project is reported exactly like a missing one.

        Raises:
            NotFoundError: No such connection (or not visible to ``project_id``)
            ValidationError: Stored value no longer matches its auth type
            TransportError: Backing store unreachable or timed out
        """
        with self.store_call("lookup_connection", timeout):
            connection = self._find(external_connection_id)
            if connection is None:
                raise not_found("Connection", external_id=external_connection_id)

            if (
                project_id is not None
                and self.config.features.enable_project_scope_check
                and project_id not in connection.project_ids
            ):
                self.logger.warning(
                    "Connection requested by a project it is not attached to",
                    extra={"external_id": external_connection_id, "project_id": project_id},
                )
                raise not_found("Connection", external_id=external_connection_id)

            raw = decrypt_connection_value(self.session, connection.value, self.platform_id)
            if raw is None:
                raise ServiceError(
                    "Failed to decrypt connection value",
                    error_code=ErrorCode.INTERNAL_ERROR,
                    operation="lookup_connection",
                    connection_id=connection.id,
                )
            value = deserialize_value(raw, connection.auth_type)

            public = connection_to_public(connection)
            return ConnectionRead(**public.model_dump(), value=value)

    @operation()
    def get_public(
        self, external_connection_id: str, timeout: Optional[float] = None
    ) -> ConnectionPublic:
        """Redacted connection record; NotFoundError if absent."""
        with self.store_call("get_connection", timeout):
            connection = self._find(external_connection_id)
            if connection is None:
                raise not_found("Connection", external_id=external_connection_id)
            return connection_to_public(connection)

    @operation()
    def find_by_external_id(
        self, external_connection_id: str, timeout: Optional[float] = None
    ) -> Optional[ConnectionPublic]:
        with self.store_call("find_connection_by_external_id", timeout):
            connection = self._find(external_connection_id)
            return connection_to_public(connection) if connection else None

    @operation()
    def list_connections(
        self,
        project_id: Optional[str] = None,
        piece_name: Optional[str] = None,
        limit: int = Limits.DEFAULT_PAGE_SIZE,
        offset: int = 0,
        timeout: Optional[float] = None,
    ) -> List[ConnectionPublic]:
        """List redacted connections, optionally filtered by project or piece."""
        limit = max(1, min(limit, Limits.MAX_PAGE_SIZE))
        with self.store_call("list_connections", timeout):
            query = self.session.query(GlobalConnection).filter(
                GlobalConnection.platform_id == self.platform_id
            )
            if project_id is not None:
                query = query.join(
                    global_connection_project,
                    global_connection_project.c.connection_id == GlobalConnection.id,
                ).filter(global_connection_project.c.project_id == project_id)
            if piece_name is not None:
                query = query.filter(GlobalConnection.piece_name == piece_name)
            connections = (
                query.order_by(GlobalConnection.created_at.asc(), GlobalConnection.id.asc())
                .offset(offset)
                .limit(limit)
                .all()
            )
            return [connection_to_public(connection) for connection in connections]

    @operation()
    def delete(self, external_connection_id: str, timeout: Optional[float] = None) -> bool:
        """
        Remove a connection and its project attachments.

        Returns:
            False if no connection had that external id
        """
        with self.store_call("delete_connection", timeout):
            connection = self._find(external_connection_id)
            if connection is None:
                return False
            connection_id = connection.id
            self.session.delete(connection)
            self.session.flush()
            if self.config.features.enable_audit_logging:
                self.logger.info(
                    "Deleted global connection",
                    extra={"connection_id": connection_id, "external_id": external_connection_id},
                )
            return True
