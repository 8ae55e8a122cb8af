"""FastAPI dependencies for dependency injection."""

from __future__ import annotations

import logging
from collections.abc import Callable, Generator  # noqa: TC003
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from examcell.auth import (
    AccessDeniedError,
    AuthError,
    GateDecision,
    InvalidTokenError,
    Role,
    Session,
    decide,
)
from examcell.auth.security import decode_access_token
from examcell.config import Settings, get_settings
from examcell.state_store import StateStore, UserNotFoundError

logger = logging.getLogger("examcell.api")

# Global StateStore instance (initialized on app startup)
_state_store: StateStore | None = None


def init_state_store(db_path: str = "examcell.db") -> StateStore:
    """Initialize the global StateStore instance."""
    global _state_store  # noqa: PLW0603
    _state_store = StateStore(db_path)
    return _state_store


def close_state_store() -> None:
    """Close the global StateStore instance."""
    global _state_store  # noqa: PLW0603
    if _state_store is not None:
        _state_store.close()
        _state_store = None


def get_state_store() -> Generator[StateStore, None, None]:
    """Dependency that provides the StateStore instance."""
    if _state_store is None:
        raise RuntimeError("StateStore not initialized. Call init_state_store() first.")
    yield _state_store


# Type alias for dependency injection
StateStoreDep = Annotated[StateStore, Depends(get_state_store)]

# Global Settings instance (falls back to the environment when not set)
_settings: Settings | None = None


def init_settings(settings: Settings) -> None:
    """Initialize the global Settings instance."""
    global _settings  # noqa: PLW0603
    _settings = settings


def close_settings() -> None:
    global _settings  # noqa: PLW0603
    _settings = None


def get_app_settings() -> Settings:
    """Dependency that provides the Settings instance."""
    return _settings if _settings is not None else get_settings()


SettingsDep = Annotated[Settings, Depends(get_app_settings)]

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_session(
    store: StateStoreDep,
    settings: SettingsDep,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> Session | None:
    """Resolve the bearer token to a Session.

    Missing, invalid, expired or revoked tokens, tokens of deleted or
    deactivated accounts, and accounts whose profile is gone all resolve to None.
    """
    if credentials is None:
        return None

    token = credentials.credentials
    try:
        claims = decode_access_token(token, settings)
    except InvalidTokenError as e:
        logger.debug("Rejected access token: %s", e)
        return None

    if store.is_token_revoked(claims.jti):
        logger.debug("Rejected revoked token %s", claims.jti)
        return None

    try:
        user = store.get_user(claims.user_id)
    except UserNotFoundError:
        return None
    if not user.active:
        return None

    try:
        return Session(
            user_id=user.id,
            role=Role.parse(user.role),
            token=token,
            display_name=user.full_name,
            email=user.email,
            student_id=user.student_id,
            teacher_id=user.teacher_id,
        )
    except AuthError as e:
        logger.warning("Account %s has no usable session: %s", user.id, e)
        return None


OptionalSessionDep = Annotated[Session | None, Depends(get_current_session)]


def require_roles(*roles: Role) -> Callable[[Session | None], Session]:
    """Build a dependency that lets through only sessions with one of ``roles``.

    No roles means any authenticated session.

    Raises (from the dependency):
        AccessDeniedError: With the gate decision that refused the request.
    """

    def dependency(session: OptionalSessionDep) -> Session:
        decision = decide(session, roles)
        if decision is not GateDecision.RENDER:
            raise AccessDeniedError(decision)
        if session is None:
            raise AccessDeniedError(GateDecision.REDIRECT_LOGIN)
        return session

    return dependency


AnySessionDep = Annotated[Session, Depends(require_roles())]
AdminSessionDep = Annotated[Session, Depends(require_roles(Role.ADMIN))]
StaffSessionDep = Annotated[Session, Depends(require_roles(Role.TEACHER, Role.ADMIN))]
StudentSessionDep = Annotated[Session, Depends(require_roles(Role.STUDENT, Role.ADMIN))]
TeacherSessionDep = Annotated[Session, Depends(require_roles(Role.TEACHER, Role.ADMIN))]


def ensure_student_access(session: Session, student_id: str) -> None:
    """Students may only reach their own records; admins reach all."""
    if session.role is Role.ADMIN or session.student_id == student_id:
        return
    logger.warning("User %s denied access to student %s", session.user_id, student_id)
    raise AccessDeniedError(GateDecision.REDIRECT_HOME)


def ensure_teacher_access(session: Session, teacher_id: str) -> None:
    """Teachers may only reach their own records; admins reach all."""
    if session.role is Role.ADMIN or session.teacher_id == teacher_id:
        return
    logger.warning("User %s denied access to teacher %s", session.user_id, teacher_id)
    raise AccessDeniedError(GateDecision.REDIRECT_HOME)
