"""Unit tests for student and subject routes."""

import pytest
from fastapi.testclient import TestClient

from examcell.state_store import StateStore


def _create(client: TestClient, headers, **overrides) -> dict:
    payload = {
        "rollNo": "CS2021101",
        "name": "Ravi Kumar",
        "email": "ravi@college.edu",
        "semester": 5,
        "department": "CSE",
    }
    payload.update(overrides)
    response = client.post("/api/v1/students", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest.mark.unit
class TestStudentRoutes:
    """Tests for /api/v1/students."""

    def test_create_and_get(self, client: TestClient, admin_headers) -> None:
        created = _create(client, admin_headers)

        assert created["rollNo"] == "CS2021101"
        assert created["active"] is True
        assert created["userId"] is None

        response = client.get(f"/api/v1/students/{created['id']}", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Ravi Kumar"

    def test_duplicate_roll_no(self, client: TestClient, admin_headers) -> None:
        _create(client, admin_headers)

        response = client.post(
            "/api/v1/students",
            json={"rollNo": "CS2021101", "name": "X", "email": "x@college.edu", "semester": 1},
            headers=admin_headers,
        )
        assert response.status_code == 409

    def test_list_with_filters_and_paging(self, client: TestClient, admin_headers) -> None:
        _create(client, admin_headers)
        _create(client, admin_headers, rollNo="EC2021001", name="Divya", email="d@college.edu")
        _create(
            client, admin_headers, rollNo="CS2021102", name="Karan", email="k@c.edu", semester=3
        )

        response = client.get(
            "/api/v1/students", params={"semester": 5, "size": 1}, headers=admin_headers
        )

        assert response.status_code == 200
        page = response.json()["data"]
        assert page["totalElements"] == 2
        assert page["totalPages"] == 2
        assert page["first"] is True
        assert page["last"] is False
        assert [s["rollNo"] for s in page["content"]] == ["CS2021101"]

        search = client.get("/api/v1/students", params={"search": "divya"}, headers=admin_headers)
        assert [s["name"] for s in search.json()["data"]["content"]] == ["Divya"]

    def test_update(self, client: TestClient, admin_headers) -> None:
        created = _create(client, admin_headers)

        response = client.put(
            f"/api/v1/students/{created['id']}",
            json={"semester": 6, "phoneNumber": "9876543210"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["semester"] == 6
        assert data["phoneNumber"] == "9876543210"
        assert data["name"] == "Ravi Kumar"

    def test_delete(self, client: TestClient, admin_headers) -> None:
        created = _create(client, admin_headers)

        response = client.delete(f"/api/v1/students/{created['id']}", headers=admin_headers)
        assert response.status_code == 204

        response = client.get(f"/api/v1/students/{created['id']}", headers=admin_headers)
        assert response.status_code == 404
        assert response.json()["data"] is None

    def test_validation(self, client: TestClient, admin_headers) -> None:
        response = client.post(
            "/api/v1/students",
            json={"rollNo": "X", "name": "X", "email": "x@college.edu", "semester": 0},
            headers=admin_headers,
        )
        assert response.status_code == 422


@pytest.mark.unit
class TestSubjectRoutes:
    """Tests for /api/v1/subjects."""

    def test_create_subject(self, client: TestClient, admin_headers, teacher_user) -> None:
        response = client.post(
            "/api/v1/subjects",
            json={
                "code": "cs302",
                "name": "Computer Networks",
                "semester": 3,
                "credits": 3,
                "teacherId": teacher_user.teacher_id,
            },
            headers=admin_headers,
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["code"] == "CS302"
        assert data["faculty"] == "Dr. Meera Iyer"

    def test_only_admin_creates(self, client: TestClient, teacher_headers) -> None:
        response = client.post(
            "/api/v1/subjects",
            json={"code": "X1", "name": "X", "semester": 1, "credits": 3},
            headers=teacher_headers,
        )
        assert response.status_code == 403

    def test_unknown_teacher(self, client: TestClient, admin_headers) -> None:
        response = client.post(
            "/api/v1/subjects",
            json={"code": "X1", "name": "X", "semester": 1, "credits": 3, "teacherId": "nope"},
            headers=admin_headers,
        )
        assert response.status_code == 404

    def test_any_role_lists(
        self, client: TestClient, store: StateStore, subject, student_headers
    ) -> None:
        store.create_subject(code="MA101", name="Calculus", semester=1, credits=4)

        all_subjects = client.get("/api/v1/subjects", headers=student_headers)
        third = client.get("/api/v1/subjects/semester/3", headers=student_headers)

        assert [s["code"] for s in all_subjects.json()["data"]] == ["MA101", "CS301"]
        assert [s["code"] for s in third.json()["data"]] == ["CS301"]

    def test_anonymous_cannot_list(self, client: TestClient) -> None:
        assert client.get("/api/v1/subjects").status_code == 401
