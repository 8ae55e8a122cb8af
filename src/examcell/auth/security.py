"""Password hashing and access tokens."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
from jose import JWTError, jwt

from examcell.auth.exceptions import InvalidTokenError
from examcell.auth.models import Role
from examcell.config import Settings, get_settings

TOKEN_TYPE_ACCESS = "access"

# bcrypt only looks at the first 72 bytes
BCRYPT_MAX_BYTES = 72


def hash_password(password: str, rounds: int | None = None) -> str:
    """Hash a password with bcrypt."""
    if rounds is None:
        rounds = get_settings().bcrypt_rounds
    password_bytes = password.encode("utf-8")[:BCRYPT_MAX_BYTES]
    return bcrypt.hashpw(password_bytes, bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a password against its bcrypt hash."""
    password_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
    try:
        return bcrypt.checkpw(password_bytes, hashed_password.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


@dataclass(frozen=True)
class TokenClaims:
    """Decoded access token claims."""

    user_id: str
    role: Role
    jti: str
    expires_at: datetime


def create_access_token(
    user_id: str,
    role: Role,
    settings: Settings | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed JWT access token.

    Args:
        user_id: Subject of the token.
        role: Role of the user.
        settings: Settings providing key, algorithm and default lifetime.
        expires_delta: Override for the token lifetime.

    Returns:
        The encoded token.
    """
    settings = settings or get_settings()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)

    claims: dict[str, Any] = {
        "sub": user_id,
        "role": role.value,
        "jti": uuid.uuid4().hex,
        "type": TOKEN_TYPE_ACCESS,
        "exp": datetime.now(UTC) + expires_delta,
    }
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings: Settings | None = None) -> TokenClaims:
    """Decode and validate an access token.

    Raises:
        InvalidTokenError: If the token cannot be trusted.
    """
    settings = settings or get_settings()
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        raise InvalidTokenError("Could not validate credentials") from e

    if payload.get("type") != TOKEN_TYPE_ACCESS:
        raise InvalidTokenError("Invalid token type")

    user_id = payload.get("sub")
    jti = payload.get("jti")
    if not user_id or not jti:
        raise InvalidTokenError("Invalid token payload")

    try:
        role = Role.parse(payload.get("role", ""))
    except ValueError as e:
        raise InvalidTokenError("Invalid token role") from e

    return TokenClaims(
        user_id=str(user_id),
        role=role,
        jti=str(jti),
        expires_at=datetime.fromtimestamp(payload["exp"], tz=UTC),
    )
