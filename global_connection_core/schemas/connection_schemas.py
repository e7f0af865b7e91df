"""
Pydantic schemas for global connections.

Credential values are a closed tagged variant: one model per ``AuthType``,
discriminated on ``type``. Each model carries the validation for its tag.
Secret fields are excluded from ``repr``.
"""

from datetime import datetime
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    field_validator,
    model_validator,
)
from pydantic import ValidationError as PydanticValidationError

from ..constants import AuthType, ConnectionScope, Limits
from ..exceptions import ErrorCode, ValidationError
from .project_schemas import WIRE_CONFIG


class BaseCredentialValue(BaseModel):
    """Base schema for all credential values."""

    model_config = ConfigDict(
        validate_assignment=True,
        extra="forbid",
    )


class PlatformOAuth2Value(BaseCredentialValue):
    """OAuth 2.0 tokens obtained by the platform on behalf of the tenant."""

    type: Literal["PLATFORM_OAUTH2"] = "PLATFORM_OAUTH2"
    access_token: str = Field(..., min_length=1, repr=False)
    refresh_token: Optional[str] = Field(default=None, repr=False)
    token_type: str = "Bearer"
    expires_in: Optional[int] = Field(default=None, gt=0)
    scope: Optional[str] = None
    client_id: str = Field(..., min_length=1)
    token_url: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict, repr=False)

    @field_validator("token_type")
    @classmethod
    def validate_token_type(cls, v):
        """Validate token type is a known value."""
        allowed_types = {"Bearer", "bearer"}
        if v not in allowed_types:
            raise ValueError(f"Token type must be one of: {allowed_types}")
        return v


class SecretTextValue(BaseCredentialValue):
    """Opaque secret such as an API key."""

    type: Literal["SECRET_TEXT"] = "SECRET_TEXT"
    secret_text: str = Field(..., min_length=1, repr=False)

    @field_validator("secret_text")
    @classmethod
    def validate_no_whitespace(cls, v):
        if v != v.strip():
            raise ValueError("Secret text cannot have leading or trailing whitespace")
        return v


class BasicAuthValue(BaseCredentialValue):
    """Username/password pair."""

    type: Literal["BASIC_AUTH"] = "BASIC_AUTH"
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1, repr=False)

    @field_validator("username")
    @classmethod
    def validate_username(cls, v):
        if v.isspace():
            raise ValueError("Username cannot be empty or whitespace")
        return v


class CustomAuthValue(BaseCredentialValue):
    """Structured credential whose shape is declared by the piece."""

    type: Literal["CUSTOM_AUTH"] = "CUSTOM_AUTH"
    props: Dict[str, Any] = Field(..., repr=False)

    @field_validator("props")
    @classmethod
    def validate_not_empty(cls, v):
        if not v:
            raise ValueError("Custom auth props cannot be empty")
        return v


CredentialValue = Annotated[
    Union[PlatformOAuth2Value, SecretTextValue, BasicAuthValue, CustomAuthValue],
    Field(discriminator="type"),
]

_credential_value_adapter: TypeAdapter = TypeAdapter(CredentialValue)


def _check_value_matches(value: BaseCredentialValue, auth_type: AuthType) -> None:
    if value.type != AuthType(auth_type).value:
        raise ValidationError(
            f"Connection value of type '{value.type}' does not match auth type '{AuthType(auth_type).value}'",
            field="value",
            error_code=ErrorCode.TYPE_MISMATCH,
            expected=AuthType(auth_type).value,
            actual=value.type,
        )


def parse_credential_value(data: Any, auth_type: Optional[AuthType] = None) -> BaseCredentialValue:
    """
    Validate raw data into the tagged credential model.

    Raises:
        ValidationError: If the data matches no tag, or a tag other than ``auth_type``
    """
    if isinstance(data, dict) and "type" not in data and auth_type is not None:
        data = {**data, "type": AuthType(auth_type).value}
    try:
        value = _credential_value_adapter.validate_python(data)
    except PydanticValidationError as e:
        raise ValidationError(
            "Connection value does not match its auth type schema",
            field="value",
            error_code=ErrorCode.INVALID_FORMAT,
            validation_errors=[
                {"loc": list(err["loc"]), "type": err["type"], "msg": err["msg"]}
                for err in e.errors()
            ],
        ) from e
    if auth_type is not None:
        _check_value_matches(value, auth_type)
    return value


def serialize_value(value: BaseCredentialValue) -> str:
    """Serialize a credential value to JSON for (encrypted) storage."""
    return value.model_dump_json()


def deserialize_value(data: str, auth_type: AuthType) -> BaseCredentialValue:
    """
    Deserialize a stored credential value and check it against the record's auth type.

    A stored value that no longer fits its schema is rejected rather than migrated.
    """
    try:
        value = _credential_value_adapter.validate_json(data)
    except PydanticValidationError as e:
        raise ValidationError(
            "Stored connection value no longer matches its auth type schema",
            field="value",
            error_code=ErrorCode.TYPE_MISMATCH,
            auth_type=AuthType(auth_type).value,
        ) from e
    _check_value_matches(value, auth_type)
    return value


class PieceAuth(BaseModel):
    """
    Authentication schema a piece declares for its predefined connection.

    ``required_props`` names props (CUSTOM_AUTH) or fields (other tags)
    that must be present and non-empty.
    """

    auth_type: AuthType
    required_props: List[str] = Field(default_factory=list)

    def check(self, value: BaseCredentialValue) -> BaseCredentialValue:
        """
        Assert a resolved value has this piece's shape.

        Raises:
            ValidationError: On tag or shape mismatch
        """
        _check_value_matches(value, self.auth_type)

        if isinstance(value, CustomAuthValue):
            present = value.props
        else:
            present = value.model_dump()
        missing = [name for name in self.required_props if present.get(name) in (None, "")]
        if missing:
            raise ValidationError(
                "Resolved connection value is missing required props",
                field="value",
                error_code=ErrorCode.TYPE_MISMATCH,
                auth_type=self.auth_type.value,
                missing_props=missing,
            )
        return value


class ConnectionCreate(BaseModel):
    """Schema for creating a global connection."""

    display_name: str = Field(min_length=1, max_length=Limits.MAX_DISPLAY_NAME_LENGTH)
    piece_name: str = Field(min_length=1, max_length=Limits.MAX_PIECE_NAME_LENGTH)
    auth_type: AuthType
    value: CredentialValue = Field(repr=False)
    scope: ConnectionScope = ConnectionScope.PLATFORM
    project_ids: List[str] = Field(min_length=1)
    external_id: str = Field(min_length=1, max_length=Limits.MAX_EXTERNAL_ID_LENGTH)
    metadata: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("display_name", "piece_name", "external_id")
    @classmethod
    def strip_identifiers(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("project_ids")
    @classmethod
    def dedupe_project_ids(cls, v: List[str]) -> List[str]:
        cleaned = [project_id.strip() for project_id in v if project_id and project_id.strip()]
        if not cleaned:
            raise ValueError("at least one project id is required")
        return list(dict.fromkeys(cleaned))

    @model_validator(mode="after")
    def validate_value_and_scope(self) -> "ConnectionCreate":
        _check_value_matches(self.value, self.auth_type)
        if self.scope == ConnectionScope.PROJECT and len(self.project_ids) != 1:
            raise ValidationError(
                "PROJECT scoped connections must be attached to exactly one project",
                field="project_ids",
                error_code=ErrorCode.CONSTRAINT_VIOLATION,
                project_count=len(self.project_ids),
            )
        return self


class ConnectionPublic(BaseModel):
    """Redacted connection record, safe for any external representation."""

    id: str
    platform_id: str
    external_id: str
    display_name: str
    piece_name: str
    auth_type: AuthType
    scope: ConnectionScope
    project_ids: List[str]
    metadata: Optional[Dict[str, Any]] = None
    created_at: datetime
    updated_at: datetime

    model_config = WIRE_CONFIG


class ConnectionRead(ConnectionPublic):
    """Full connection record including the decrypted value. Runtime use only."""

    value: CredentialValue = Field(repr=False, exclude=True)

    def to_public(self) -> ConnectionPublic:
        return ConnectionPublic(**self.model_dump())
