"""Roles, sessions and gate outcomes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from examcell.auth.exceptions import InvalidSessionError, UnknownRoleError

LOGIN_PATH = "/auth/login"
HOME_PATH = "/"

# Tags accepted on input that name an existing role
LEGACY_ROLE_TAGS = {"PROFESSOR": "TEACHER"}


class Role(StrEnum):
    """Closed set of portal roles."""

    STUDENT = "STUDENT"
    TEACHER = "TEACHER"
    ADMIN = "ADMIN"

    @classmethod
    def parse(cls, value: str | Role) -> Role:
        """Parse a role tag, case-insensitively, accepting legacy tags.

        Raises:
            UnknownRoleError: If the tag does not name a role.
        """
        if isinstance(value, Role):
            return value
        tag = str(value).strip().upper()
        tag = LEGACY_ROLE_TAGS.get(tag, tag)
        try:
            return cls(tag)
        except ValueError as e:
            raise UnknownRoleError(f"Unknown role '{value}'") from e


class GateDecision(StrEnum):
    """Outcome of evaluating a protected view."""

    PENDING = "pending"
    REDIRECT_LOGIN = "redirect_login"
    REDIRECT_HOME = "redirect_home"
    RENDER = "render"

    @property
    def is_redirect(self) -> bool:
        return self in (GateDecision.REDIRECT_LOGIN, GateDecision.REDIRECT_HOME)


@dataclass(frozen=True)
class Session:
    """An authenticated principal.

    ``student_id`` is present only for students and ``teacher_id`` only for
    teachers; admins carry neither.
    """

    user_id: str
    role: Role
    token: str
    display_name: str = ""
    email: str = ""
    student_id: str | None = None
    teacher_id: str | None = None

    def __post_init__(self) -> None:
        role = Role.parse(self.role)
        object.__setattr__(self, "role", role)

        if (self.student_id is not None) != (role is Role.STUDENT):
            raise InvalidSessionError(
                f"student_id must be set exactly when role is STUDENT (role={role})"
            )
        if (self.teacher_id is not None) != (role is Role.TEACHER):
            raise InvalidSessionError(
                f"teacher_id must be set exactly when role is TEACHER (role={role})"
            )

    @classmethod
    def from_auth_payload(cls, payload: dict[str, Any]) -> Session:
        """Build a session from an auth (login/signup) response payload.

        A profile id that does not belong to the payload's role is dropped.

        Raises:
            InvalidSessionError: If required fields are missing.
            UnknownRoleError: If the role tag is unknown.
        """
        missing = [key for key in ("userId", "role", "token") if not payload.get(key)]
        if missing:
            raise InvalidSessionError(f"Missing session fields: {', '.join(missing)}")

        role = Role.parse(payload["role"])
        student_id = payload.get("studentId")
        teacher_id = payload.get("teacherId")
        return cls(
            user_id=str(payload["userId"]),
            role=role,
            token=str(payload["token"]),
            display_name=payload.get("fullName") or "",
            email=payload.get("email") or "",
            student_id=str(student_id) if role is Role.STUDENT and student_id else None,
            teacher_id=str(teacher_id) if role is Role.TEACHER and teacher_id else None,
        )

    def to_payload(self) -> dict[str, Any]:
        """Inverse of ``from_auth_payload``."""
        payload: dict[str, Any] = {
            "userId": self.user_id,
            "role": self.role.value,
            "token": self.token,
            "fullName": self.display_name,
            "email": self.email,
        }
        if self.student_id is not None:
            payload["studentId"] = self.student_id
        if self.teacher_id is not None:
            payload["teacherId"] = self.teacher_id
        return payload

    def __repr__(self) -> str:
        return f"<Session(user_id={self.user_id!r}, role={self.role.value!r})>"
