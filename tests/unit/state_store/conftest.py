"""Fixtures shared by the StateStore operation tests."""

import pytest

from examcell.state_store import StateStore, Student, Subject, Teacher


@pytest.fixture
def teacher(store: StateStore) -> Teacher:
    return store.create_teacher(name="Dr. Meera Iyer", email="meera@college.edu")


@pytest.fixture
def subject(store: StateStore, teacher: Teacher) -> Subject:
    return store.create_subject(
        code="cs301", name="Operating Systems", semester=3, credits=4, teacher_id=teacher.id
    )


@pytest.fixture
def student(store: StateStore) -> Student:
    return store.create_student(
        roll_no="CS2021001",
        name="Asha Rao",
        email="asha@college.edu",
        semester=3,
        department="CSE",
    )
