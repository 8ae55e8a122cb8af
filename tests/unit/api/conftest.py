"""Fixtures for API route tests."""

from collections.abc import Callable

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from examcell.api.app import include_routers, register_exception_handlers
from examcell.api.dependencies import get_app_settings, get_state_store
from examcell.auth import Role
from examcell.auth.security import create_access_token, hash_password
from examcell.config import Settings
from examcell.state_store import StateStore, Subject, User

PASSWORD = "secret123"

Headers = dict[str, str]


@pytest.fixture
def app(store: StateStore, settings: Settings) -> FastAPI:
    """Create a test FastAPI app with all routers and overridden dependencies."""
    app = FastAPI()

    def override_get_state_store():
        yield store

    app.dependency_overrides[get_state_store] = override_get_state_store
    app.dependency_overrides[get_app_settings] = lambda: settings

    register_exception_handlers(app)
    include_routers(app)
    return app


@pytest.fixture
def client(app: FastAPI):
    """Create a test client."""
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client


@pytest.fixture
def make_user(store: StateStore) -> Callable[..., User]:
    """Factory creating accounts with PASSWORD."""
    counter = iter(range(1, 1000))

    def make(role: Role, full_name: str | None = None, **profile) -> User:
        n = next(counter)
        if role is Role.STUDENT:
            profile.setdefault("roll_no", f"CS20210{n:02d}")
            profile.setdefault("semester", 3)
        return store.create_user(
            email=f"{role.value.lower()}{n}@college.edu",
            username=f"{role.value.lower()}{n}",
            password_hash=hash_password(PASSWORD, rounds=4),
            full_name=full_name or f"{role.value.title()} {n}",
            role=role,
            **profile,
        )

    return make


@pytest.fixture
def headers_for(settings: Settings) -> Callable[[User], Headers]:
    def headers(user: User) -> Headers:
        token = create_access_token(user.id, Role.parse(user.role), settings)
        return {"Authorization": f"Bearer {token}"}

    return headers


@pytest.fixture
def admin(make_user) -> User:
    return make_user(Role.ADMIN, "Exam Cell Admin")


@pytest.fixture
def teacher_user(make_user) -> User:
    return make_user(Role.TEACHER, "Dr. Meera Iyer")


@pytest.fixture
def student_user(make_user) -> User:
    return make_user(Role.STUDENT, "Asha Rao", roll_no="CS2021001")


@pytest.fixture
def admin_headers(admin: User, headers_for) -> Headers:
    return headers_for(admin)


@pytest.fixture
def teacher_headers(teacher_user: User, headers_for) -> Headers:
    return headers_for(teacher_user)


@pytest.fixture
def student_headers(student_user: User, headers_for) -> Headers:
    return headers_for(student_user)


@pytest.fixture
def subject(store: StateStore, teacher_user: User) -> Subject:
    """Semester 3 subject taught by ``teacher_user``."""
    return store.create_subject(
        code="CS301",
        name="Operating Systems",
        semester=3,
        credits=4,
        teacher_id=teacher_user.teacher_id,
    )


@pytest.fixture
def password() -> str:
    return PASSWORD
