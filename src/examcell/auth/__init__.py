"""Auth - roles, sessions, the session gate, and credential helpers."""

from examcell.auth.exceptions import (
    AccessDeniedError,
    AuthError,
    InvalidCredentialsError,
    InvalidSessionError,
    InvalidTokenError,
    SessionProviderStateError,
    UnknownRoleError,
)
from examcell.auth.gate import SessionGate, decide, redirect_target
from examcell.auth.models import (
    HOME_PATH,
    LOGIN_PATH,
    GateDecision,
    Role,
    Session,
)
from examcell.auth.provider import (
    JsonFileSessionStorage,
    MemorySessionStorage,
    ProviderState,
    SessionProvider,
    SessionStorage,
)

__all__ = [
    "HOME_PATH",
    "LOGIN_PATH",
    "AccessDeniedError",
    "AuthError",
    "GateDecision",
    "InvalidCredentialsError",
    "InvalidSessionError",
    "InvalidTokenError",
    "JsonFileSessionStorage",
    "MemorySessionStorage",
    "ProviderState",
    "Role",
    "Session",
    "SessionGate",
    "SessionProvider",
    "SessionProviderStateError",
    "SessionStorage",
    "UnknownRoleError",
    "decide",
    "redirect_target",
]
