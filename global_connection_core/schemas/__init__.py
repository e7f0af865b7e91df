"""Pydantic schemas for projects and global connections."""

from .connection_schemas import (
    BaseCredentialValue,
    BasicAuthValue,
    ConnectionCreate,
    ConnectionPublic,
    ConnectionRead,
    CredentialValue,
    CustomAuthValue,
    PieceAuth,
    PlatformOAuth2Value,
    SecretTextValue,
    deserialize_value,
    parse_credential_value,
    serialize_value,
)
from .project_schemas import ProjectCreate, ProjectRead

__all__ = [
    "BaseCredentialValue",
    "BasicAuthValue",
    "ConnectionCreate",
    "ConnectionPublic",
    "ConnectionRead",
    "CredentialValue",
    "CustomAuthValue",
    "PieceAuth",
    "PlatformOAuth2Value",
    "SecretTextValue",
    "deserialize_value",
    "parse_credential_value",
    "serialize_value",
    "ProjectCreate",
    "ProjectRead",
]
