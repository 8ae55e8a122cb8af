"""Unit tests for StateStore account operations."""

import pytest

from examcell.auth import Role
from examcell.state_store import (
    StateStore,
    StudentExistsError,
    StudentNotFoundError,
    TeacherNotFoundError,
    UserExistsError,
    UserNotFoundError,
    ValidationError,
)


@pytest.mark.unit
class TestCreateUser:
    """Tests for create_user."""

    def test_student_account_gets_profile(self, store: StateStore) -> None:
        user = store.create_user(
            email="Asha@College.edu",
            username="asha",
            password_hash="hash",
            full_name="Asha Rao",
            role=Role.STUDENT,
            roll_no="CS2021001",
            semester=3,
            department="CSE",
        )

        assert user.email == "asha@college.edu"
        assert user.role == "STUDENT"
        assert user.active is True
        assert user.student_id is not None
        assert user.teacher_id is None
        assert user.created_at is not None

        student = store.get_student(user.student_id)
        assert student.name == "Asha Rao"
        assert student.user_id == user.id
        assert student.semester == 3

    def test_teacher_account_gets_profile(self, store: StateStore) -> None:
        user = store.create_user(
            email="meera@college.edu",
            username="meera",
            password_hash="hash",
            full_name="Dr. Meera Iyer",
            role=Role.TEACHER,
            designation="Professor",
        )

        assert user.teacher_id is not None
        assert user.student_id is None
        assert store.get_teacher(user.teacher_id).designation == "Professor"

    def test_admin_account_has_no_profile(self, store: StateStore) -> None:
        user = store.create_user(
            email="admin@college.edu",
            username="admin",
            password_hash="hash",
            full_name="Exam Cell",
            role=Role.ADMIN,
        )

        assert user.student_id is None
        assert user.teacher_id is None

    def test_student_without_roll_no_raises(self, store: StateStore) -> None:
        with pytest.raises(ValidationError):
            store.create_user(
                email="x@college.edu",
                username="x",
                password_hash="hash",
                full_name="X",
                role=Role.STUDENT,
                semester=1,
            )

    def test_duplicate_email_raises(self, store: StateStore) -> None:
        store.create_user("a@college.edu", "a", "hash", "A", Role.ADMIN)

        with pytest.raises(UserExistsError) as exc_info:
            store.create_user("A@college.edu", "a2", "hash", "A2", Role.ADMIN)

        assert "a@college.edu" in str(exc_info.value)

    def test_duplicate_roll_no_raises_and_keeps_no_account(self, store: StateStore) -> None:
        store.create_student(roll_no="CS1", name="First", email="f@college.edu", semester=1)

        with pytest.raises(StudentExistsError):
            store.create_user(
                "second@college.edu", "s", "hash", "Second", Role.STUDENT, roll_no="CS1", semester=1
            )

        with pytest.raises(UserNotFoundError):
            store.get_user_by_email("second@college.edu")


@pytest.mark.unit
class TestGetUser:
    def test_get_by_id_and_email(self, store: StateStore) -> None:
        created = store.create_user("a@college.edu", "a", "hash", "A", Role.ADMIN)

        assert store.get_user(created.id).email == "a@college.edu"
        assert store.get_user_by_email(" A@COLLEGE.EDU ").id == created.id

    def test_missing_user(self, store: StateStore) -> None:
        with pytest.raises(UserNotFoundError):
            store.get_user("nope")
        with pytest.raises(UserNotFoundError):
            store.get_user_by_email("nope@college.edu")

    def test_profile_by_user(self, store: StateStore) -> None:
        student = store.create_user(
            "asha@college.edu", "asha", "hash", "Asha Rao", Role.STUDENT, roll_no="CS1", semester=1
        )
        teacher = store.create_user("meera@college.edu", "meera", "hash", "Meera", Role.TEACHER)

        assert store.get_student_by_user(student.id).id == student.student_id
        assert store.get_teacher_by_user(teacher.id).id == teacher.teacher_id

    def test_profile_by_user_missing(self, store: StateStore) -> None:
        admin = store.create_user("a@college.edu", "a", "hash", "A", Role.ADMIN)

        with pytest.raises(StudentNotFoundError):
            store.get_student_by_user(admin.id)
        with pytest.raises(TeacherNotFoundError):
            store.get_teacher_by_user(admin.id)


@pytest.mark.unit
class TestRevokedTokens:
    def test_revoke(self, store: StateStore) -> None:
        assert not store.is_token_revoked("jti-1")

        store.revoke_token("jti-1", "user-1")
        store.revoke_token("jti-1", "user-1")

        assert store.is_token_revoked("jti-1")
        assert not store.is_token_revoked("jti-2")
