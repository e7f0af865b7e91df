"""
Global connection model and its project association table.

Just the data structure - no business logic or class methods.
"""

from sqlalchemy import Column, Enum, ForeignKey, String, Table, UniqueConstraint
from sqlalchemy.orm import relationship

from ..constants import AuthType, ConnectionScope
from .db_base import JSON, EncryptedBinary, TimestampMixin, UUIDMixin
from .db_config import Base

global_connection_project = Table(
    "global_connection_project",
    Base.metadata,
    Column(
        "connection_id",
        String(36),
        ForeignKey("global_connection.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "project_id",
        String(36),
        ForeignKey("project.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    ),
)


class GlobalConnection(Base, UUIDMixin, TimestampMixin):
    """Platform-scoped credential record."""

    __tablename__ = "global_connection"

    platform_id = Column(String(100), nullable=False, index=True)
    external_id = Column(String(255), nullable=False)
    display_name = Column(String(200), nullable=False)
    piece_name = Column(String(200), nullable=False, index=True)
    auth_type = Column(Enum(AuthType, native_enum=False, length=32), nullable=False)
    scope = Column(
        Enum(ConnectionScope, native_enum=False, length=16),
        nullable=False,
        default=ConnectionScope.PLATFORM,
    )

    # Serialized credential value, encrypted at rest
    value = Column(EncryptedBinary, nullable=False)

    connection_metadata = Column("metadata", JSON, nullable=True)

    projects = relationship("Project", secondary=global_connection_project, lazy="selectin")

    __table_args__ = (
        UniqueConstraint(
            "platform_id", "external_id", name="uq_global_connection_platform_external_id"
        ),
    )

    @property
    def project_ids(self):
        return [project.id for project in self.projects]

    def __repr__(self) -> str:
        return (
            f"GlobalConnection(id='{self.id}', external_id='{self.external_id}', "
            f"piece_name='{self.piece_name}', auth_type='{self.auth_type}', value='***')"
        )
