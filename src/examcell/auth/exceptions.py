"""Custom exceptions for authentication and session handling."""


class AuthError(Exception):
    """Base exception for auth errors."""


class UnknownRoleError(AuthError, ValueError):
    """Role tag is not one of the known roles."""


class InvalidSessionError(AuthError, ValueError):
    """Session fields violate the role/profile-id invariant."""


class SessionProviderStateError(AuthError):
    """Session provider used outside its initialised lifetime."""


class InvalidTokenError(AuthError):
    """Access token is malformed, expired, revoked or of the wrong type."""


class InvalidCredentialsError(AuthError):
    """Email/password combination is not valid."""


class AccessDeniedError(AuthError):
    """Gate refused a request.

    ``decision`` is the GateDecision that caused the refusal.
    """

    def __init__(self, decision: object, message: str = "Access denied") -> None:
        super().__init__(message)
        self.decision = decision
