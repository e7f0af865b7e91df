"""
Project model.

Just the data structure - no business logic or class methods.
"""

from sqlalchemy import Column, String, UniqueConstraint

from .db_base import JSON, TimestampMixin, UUIDMixin
from .db_config import Base


class Project(Base, UUIDMixin, TimestampMixin):
    """Internal project record keyed by a host-supplied external id."""

    __tablename__ = "project"

    platform_id = Column(String(100), nullable=False, index=True)
    external_id = Column(String(255), nullable=False)
    display_name = Column(String(200), nullable=False)

    # "metadata" is reserved on declarative classes
    project_metadata = Column("metadata", JSON, nullable=True)

    # One project per external id within a platform; get_or_create relies on it
    __table_args__ = (
        UniqueConstraint("platform_id", "external_id", name="uq_project_platform_external_id"),
    )
