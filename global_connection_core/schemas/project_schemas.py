"""
Pydantic schemas for projects.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import AliasGenerator, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..constants import Limits

# Python names in code, camelCase on the wire
WIRE_CONFIG = ConfigDict(
    alias_generator=AliasGenerator(serialization_alias=to_camel),
    from_attributes=True,
)


class ProjectCreate(BaseModel):
    """Schema for creating (or fetching) a project."""

    external_id: str = Field(min_length=1, max_length=Limits.MAX_EXTERNAL_ID_LENGTH)
    display_name: Optional[str] = Field(default=None, max_length=Limits.MAX_DISPLAY_NAME_LENGTH)
    metadata: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    @field_validator("display_name")
    @classmethod
    def blank_display_name_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None


class ProjectRead(BaseModel):
    """Schema for reading a project."""

    id: str
    platform_id: str
    external_id: str
    display_name: str
    metadata: Optional[Dict[str, Any]] = None
    created_at: datetime
    updated_at: datetime

    model_config = WIRE_CONFIG
