"""
Project registry: maps host-owned external ids to internal projects.

Creation is idempotent per external id. Concurrent callers are serialized by
the ``(platform_id, external_id)`` unique constraint: the insert runs in a
SAVEPOINT and a uniqueness violation re-fetches the winner's row.
"""

import uuid
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..constants import Limits
from ..context.operation_context import operation
from ..db.db_project_models import Project
from ..exceptions import ErrorCode, ServiceError, ValidationError, not_found
from ..schemas.project_schemas import ProjectCreate, ProjectRead
from .base_service import SessionManagedService


def project_to_read(project: Project) -> ProjectRead:
    return ProjectRead(
        id=project.id,
        platform_id=project.platform_id,
        external_id=project.external_id,
        display_name=project.display_name,
        metadata=project.project_metadata,
        created_at=project.created_at,
        updated_at=project.updated_at,
    )


class ProjectService(SessionManagedService):
    """Project registry backed directly by SQLAlchemy."""

    def __init__(self, session: Optional[Session] = None, timeout: Optional[float] = None):
        super().__init__(session=session, timeout=timeout)

    def _validate(
        self,
        external_project_id: Any,
        display_name: Optional[str],
        metadata: Optional[Dict[str, Any]],
    ) -> ProjectCreate:
        try:
            return ProjectCreate(
                external_id=external_project_id, display_name=display_name, metadata=metadata
            )
        except PydanticValidationError as e:
            raise ValidationError(
                "Invalid project data: external id must be a non-empty string",
                field="external_id",
                error_code=ErrorCode.MISSING_REQUIRED,
                value=str(external_project_id),
                validation_errors=[
                    {"loc": list(err["loc"]), "type": err["type"]} for err in e.errors()
                ],
            ) from e

    def _find(self, external_id: str) -> Optional[Project]:
        return (
            self.session.query(Project)
            .filter(Project.platform_id == self.platform_id, Project.external_id == external_id)
            .first()
        )

    @operation()
    def get_or_create_with_status(
        self,
        external_project_id: str,
        display_name: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> Tuple[ProjectRead, bool]:
        """
        Return the project for ``external_project_id``, creating it if needed.

        Returns:
            (project, created) where ``created`` is False when the record existed

        Raises:
            ValidationError: Empty external id
            TransportError: Backing store unreachable or timed out
        """
        project_data = self._validate(external_project_id, display_name, metadata)

        with self.store_call("get_or_create_project", timeout):
            existing = self._find(project_data.external_id)
            if existing is not None:
                return project_to_read(existing), False

            project = Project(
                id=str(uuid.uuid4()),
                platform_id=self.platform_id,
                external_id=project_data.external_id,
                display_name=project_data.display_name or project_data.external_id,
                project_metadata=project_data.metadata,
            )
            try:
                with self.session.begin_nested():
                    self.session.add(project)
            except IntegrityError:
                # Lost the race: another caller inserted the same external id
                self.logger.info(
                    "Project created concurrently, returning existing record",
                    extra={"external_id": project_data.external_id, "platform_id": self.platform_id},
                )
                winner = self._find(project_data.external_id)
                if winner is None:
                    raise ServiceError(
                        "Project insert conflicted but no existing record was found",
                        error_code=ErrorCode.CONFLICT,
                        operation="get_or_create_project",
                        external_id=project_data.external_id,
                    )
                return project_to_read(winner), False

            self.logger.info(
                "Created project",
                extra={
                    "project_id": project.id,
                    "external_id": project.external_id,
                    "platform_id": self.platform_id,
                },
            )
            return project_to_read(project), True

    def get_or_create(
        self,
        external_project_id: str,
        display_name: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> ProjectRead:
        """
        Idempotent project lookup-or-create by external id.

        Repeated calls with the same external id return the same internal id
        and never mutate the stored record.
        """
        project, _ = self.get_or_create_with_status(
            external_project_id, display_name=display_name, metadata=metadata, timeout=timeout
        )
        return project

    @operation()
    def find_by_external_id(
        self, external_id: str, timeout: Optional[float] = None
    ) -> Optional[ProjectRead]:
        """Return the project with this external id, or None."""
        if not external_id or not external_id.strip():
            return None
        with self.store_call("find_project_by_external_id", timeout):
            project = self._find(external_id.strip())
            return project_to_read(project) if project else None

    @operation()
    def get_project(self, project_id: str, timeout: Optional[float] = None) -> ProjectRead:
        """
        Get a project by internal id.

        Raises:
            NotFoundError: If no project has that id in this platform
        """
        with self.store_call("get_project", timeout):
            project = (
                self.session.query(Project)
                .filter(Project.id == project_id, Project.platform_id == self.platform_id)
                .first()
            )
            if project is None:
                raise not_found("Project", project_id=project_id)
            return project_to_read(project)

    @operation()
    def list_projects(
        self,
        external_id: Optional[str] = None,
        limit: int = Limits.DEFAULT_PAGE_SIZE,
        offset: int = 0,
        timeout: Optional[float] = None,
    ) -> List[ProjectRead]:
        """List projects in this platform, optionally filtered by external id."""
        limit = max(1, min(limit, Limits.MAX_PAGE_SIZE))
        with self.store_call("list_projects", timeout):
            query = self.session.query(Project).filter(Project.platform_id == self.platform_id)
            if external_id is not None:
                query = query.filter(Project.external_id == external_id.strip())
            projects = (
                query.order_by(Project.created_at.asc(), Project.id.asc())
                .offset(offset)
                .limit(limit)
                .all()
            )
            return [project_to_read(project) for project in projects]
