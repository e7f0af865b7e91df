"""
At-rest encryption for connection values.

PostgreSQL uses pgcrypto (``pgp_sym_encrypt``/``pgp_sym_decrypt``) inside the
database. Other dialects use Fernet with ``SecurityConfig.encryption_key``;
without a key, development databases store plaintext.
"""

from typing import Optional, Union

from cryptography.fernet import Fernet, InvalidToken
from sqlalchemy import text
from sqlalchemy.orm import Session

from ..config import get_config
from ..exceptions import ErrorCode, ServiceError
from .logger import get_logger

FERNET_PREFIX = "fernet:"


def _pg_key(platform_id: str, key_suffix: str) -> str:
    secret = get_config().security.encryption_key
    base = f"{secret}_{platform_id}" if secret else platform_id
    return f"{base}_{key_suffix}" if key_suffix else base


def _fernet() -> Optional[Fernet]:
    secret = get_config().security.encryption_key
    if not secret:
        return None
    try:
        return Fernet(secret.encode("utf-8"))
    except ValueError as e:
        raise ServiceError(
            "Configured encryption key is not a valid Fernet key",
            error_code=ErrorCode.CONFIGURATION_ERROR,
            operation="encryption",
            cause=e,
        ) from e


def encrypt_value(
    session: Session, value: str, platform_id: str, key_suffix: str = ""
) -> Union[bytes, str]:
    """
    Encrypt a value using database-specific encryption.

    Args:
        session: Database session
        value: Plaintext to encrypt
        platform_id: Platform scope for key isolation
        key_suffix: Additional key suffix for different data types

    Returns:
        Ciphertext (bytes on PostgreSQL, text elsewhere)
    """
    if session.bind.dialect.name == "postgresql":
        return session.execute(
            text("SELECT pgp_sym_encrypt(:data, :key)"),
            {"data": value, "key": _pg_key(platform_id, key_suffix)},
        ).scalar()

    fernet = _fernet()
    if fernet is not None:
        return FERNET_PREFIX + fernet.encrypt(value.encode("utf-8")).decode("utf-8")

    config = get_config()
    if not config.is_development:
        raise ServiceError(
            "An encryption key is required to store credentials outside development",
            error_code=ErrorCode.CONFIGURATION_ERROR,
            operation="encryption",
            environment=config.environment,
        )
    get_logger().warning(
        "Storing connection value without encryption (development mode, no key configured)",
        extra={"platform_id": platform_id},
    )
    return value


def decrypt_value(
    session: Session,
    encrypted_value: Union[bytes, str, None],
    platform_id: str,
    key_suffix: str = "",
) -> Optional[str]:
    """
    Decrypt a value using database-specific decryption.

    Args:
        session: Database session
        encrypted_value: Stored ciphertext
        platform_id: Platform scope for key isolation
        key_suffix: Additional key suffix for different data types

    Returns:
        Decrypted string or None
    """
    if not encrypted_value:
        return None

    if session.bind.dialect.name == "postgresql":
        return session.execute(
            text("SELECT pgp_sym_decrypt(:data, :key)"),
            {"data": encrypted_value, "key": _pg_key(platform_id, key_suffix)},
        ).scalar()

    if isinstance(encrypted_value, bytes):
        encrypted_value = encrypted_value.decode("utf-8")

    if not encrypted_value.startswith(FERNET_PREFIX):
        return encrypted_value

    fernet = _fernet()
    if fernet is None:
        raise ServiceError(
            "Stored value is encrypted but no encryption key is configured",
            error_code=ErrorCode.CONFIGURATION_ERROR,
            operation="decryption",
        )
    try:
        token = encrypted_value[len(FERNET_PREFIX):].encode("utf-8")
        return fernet.decrypt(token).decode("utf-8")
    except InvalidToken as e:
        raise ServiceError(
            "Unable to decrypt stored value (invalid token or key mismatch)",
            error_code=ErrorCode.CONFIGURATION_ERROR,
            operation="decryption",
            cause=e,
        ) from e


def encrypt_connection_value(session: Session, value: str, platform_id: str) -> Union[bytes, str]:
    """Encrypt a serialized connection value with platform isolation."""
    return encrypt_value(session, value, platform_id, "connection")


def decrypt_connection_value(
    session: Session, encrypted: Union[bytes, str, None], platform_id: str
) -> Optional[str]:
    """Decrypt a serialized connection value."""
    return decrypt_value(session, encrypted, platform_id, "connection")
