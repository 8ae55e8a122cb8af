"""SessionProvider - explicit holder for the current session."""

from __future__ import annotations

import json
import logging
from enum import StrEnum
from pathlib import Path
from typing import Any, Protocol

from examcell.auth.exceptions import AuthError, SessionProviderStateError
from examcell.auth.models import Session

logger = logging.getLogger("examcell.auth.provider")

TOKEN_KEY = "authToken"
USER_KEY = "user"


class SessionStorage(Protocol):
    """Persisted key-value slot for session data."""

    def get(self, key: str) -> str | None:
        """Return the stored value or None."""
        ...

    def set(self, key: str, value: str) -> None:
        """Store a value."""
        ...

    def remove(self, key: str) -> None:
        """Remove a key if present."""
        ...


class MemorySessionStorage:
    """Storage kept in process memory."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileSessionStorage:
    """Storage backed by a single JSON object on disk."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        data = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"Session file {self.path} does not hold a JSON object")
        return data

    def _dump(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data), encoding="utf-8")

    def get(self, key: str) -> str | None:
        value = self._load().get(key)
        return None if value is None else str(value)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._dump(data)

    def remove(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._dump(data)


class ProviderState(StrEnum):
    """Lifecycle state of a SessionProvider."""

    CREATED = "created"
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"
    TORN_DOWN = "torn_down"


class SessionProvider:
    """Holds the current session for one application instance.

    Lifecycle: ``init()`` once, then any number of ``set_session`` /
    ``clear_session`` calls, then ``teardown()``.
    """

    def __init__(self, storage: SessionStorage) -> None:
        self._storage = storage
        self._session: Session | None = None
        self._state = ProviderState.CREATED

    @property
    def state(self) -> ProviderState:
        return self._state

    @property
    def resolved(self) -> bool:
        """True once the persisted session has been read."""
        return self._state in (ProviderState.AUTHENTICATED, ProviderState.ANONYMOUS)

    def init(self) -> Session | None:
        """Read the persisted session, once.

        Unreadable or inconsistent data leaves the provider anonymous.

        Returns:
            The restored session, or None.
        """
        if self.resolved:
            return self._session

        self._session = None
        try:
            token = self._storage.get(TOKEN_KEY)
            raw_user = self._storage.get(USER_KEY)
            if token and raw_user:
                payload: dict[str, Any] = json.loads(raw_user)
                payload["token"] = token
                self._session = Session.from_auth_payload(payload)
        except (ValueError, TypeError, AuthError) as e:
            # json.JSONDecodeError is a ValueError
            logger.error("Failed to restore persisted session: %s", e)
            self._session = None

        self._state = (
            ProviderState.AUTHENTICATED if self._session is not None else ProviderState.ANONYMOUS
        )
        logger.debug("Session provider initialised (%s)", self._state.value)
        return self._session

    def _require_resolved(self) -> None:
        if not self.resolved:
            raise SessionProviderStateError(
                f"Session provider is {self._state.value}; call init() first"
            )

    def get_current_session(self) -> Session | None:
        self._require_resolved()
        return self._session

    def set_session(self, session: Session) -> None:
        """Make ``session`` current and persist it."""
        self._require_resolved()
        payload = session.to_payload()
        token = payload.pop("token")
        self._storage.set(TOKEN_KEY, token)
        self._storage.set(USER_KEY, json.dumps(payload))
        self._session = session
        self._state = ProviderState.AUTHENTICATED
        logger.info("Session started for user %s (%s)", session.user_id, session.role.value)

    def login(self, auth_payload: dict[str, Any]) -> Session:
        """Build a session from a login/signup response and make it current."""
        session = Session.from_auth_payload(auth_payload)
        self.set_session(session)
        return session

    def clear_session(self) -> None:
        """Log out: forget the session and its persisted copy."""
        self._require_resolved()
        if self._session is not None:
            logger.info("Session ended for user %s", self._session.user_id)
        self._storage.remove(TOKEN_KEY)
        self._storage.remove(USER_KEY)
        self._session = None
        self._state = ProviderState.ANONYMOUS

    def teardown(self) -> None:
        """Drop the in-memory session. Persisted data is kept."""
        self._session = None
        self._state = ProviderState.TORN_DOWN
