"""Unit tests for admin query, bonafide and dashboard routes."""

import pytest
from fastapi.testclient import TestClient

from examcell.state_store import StateStore


@pytest.fixture
def query(store: StateStore, student_user):
    return store.create_query(
        student_user.student_id,
        subject="Operating Systems",
        faculty="Dr. Meera Iyer",
        title="Revaluation request",
        description="Please re-check my external paper.",
    )


@pytest.fixture
def bonafide(store: StateStore, student_user):
    return store.create_bonafide_request(student_user.student_id, "Scholarship")


@pytest.mark.unit
class TestQueryRoutes:
    """Tests for /api/v1/queries."""

    def test_list_and_get(self, client: TestClient, query, admin_headers) -> None:
        listed = client.get(
            "/api/v1/queries", params={"search": "revaluation"}, headers=admin_headers
        )
        fetched = client.get(f"/api/v1/queries/{query.id}", headers=admin_headers)

        assert listed.json()["data"]["totalElements"] == 1
        assert fetched.status_code == 200
        assert fetched.json()["data"]["studentName"] == "Asha Rao"

    def test_status_update_and_closed_is_final(
        self, client: TestClient, query, admin_headers
    ) -> None:
        closed = client.put(
            f"/api/v1/queries/{query.id}/status", json={"status": "CLOSED"}, headers=admin_headers
        )
        reopened = client.put(
            f"/api/v1/queries/{query.id}/status", json={"status": "OPEN"}, headers=admin_headers
        )

        assert closed.status_code == 200
        assert closed.json()["data"]["status"] == "CLOSED"
        assert reopened.status_code == 409

    def test_invalid_status(self, client: TestClient, query, admin_headers) -> None:
        response = client.put(
            f"/api/v1/queries/{query.id}/status", json={"status": "DONE"}, headers=admin_headers
        )
        assert response.status_code == 422

    def test_respond(self, client: TestClient, query, admin_headers) -> None:
        response = client.post(
            f"/api/v1/queries/{query.id}/respond",
            json={"response": "Re-checked, no change."},
            headers=admin_headers,
        )

        data = response.json()["data"]
        assert data["status"] == "RESOLVED"
        assert data["respondedBy"] == "Exam Cell Admin"
        assert data["respondedAt"] is not None

    def test_missing(self, client: TestClient, admin_headers) -> None:
        response = client.get("/api/v1/queries/missing", headers=admin_headers)

        assert response.status_code == 404
        assert "missing" in response.json()["error"]


@pytest.mark.unit
class TestBonafideRoutes:
    """Tests for /api/v1/bonafide-requests."""

    def test_approve(self, client: TestClient, bonafide, admin_headers) -> None:
        response = client.post(
            f"/api/v1/bonafide-requests/{bonafide.id}/approve", headers=admin_headers
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "APPROVED"
        assert data["approvedBy"] == "Exam Cell Admin"
        assert data["certificateNumber"].startswith("BON-")

    def test_reject(self, client: TestClient, bonafide, admin_headers) -> None:
        response = client.post(
            f"/api/v1/bonafide-requests/{bonafide.id}/reject",
            json={"reason": "Fee dues pending"},
            headers=admin_headers,
        )

        data = response.json()["data"]
        assert data["status"] == "REJECTED"
        assert data["rejectionReason"] == "Fee dues pending"
        assert data["rejectedBy"] == "Exam Cell Admin"

    def test_second_decision_conflicts(self, client: TestClient, bonafide, admin_headers) -> None:
        client.post(f"/api/v1/bonafide-requests/{bonafide.id}/approve", headers=admin_headers)

        response = client.post(
            f"/api/v1/bonafide-requests/{bonafide.id}/reject",
            json={"reason": "Too late"},
            headers=admin_headers,
        )
        assert response.status_code == 409

    def test_list_by_status(self, client: TestClient, bonafide, admin_headers) -> None:
        pending = client.get(
            "/api/v1/bonafide-requests", params={"status": "PENDING"}, headers=admin_headers
        )
        approved = client.get(
            "/api/v1/bonafide-requests", params={"status": "APPROVED"}, headers=admin_headers
        )

        assert pending.json()["data"]["totalElements"] == 1
        assert approved.json()["data"]["totalElements"] == 0

    def test_get(self, client: TestClient, bonafide, admin_headers) -> None:
        response = client.get(f"/api/v1/bonafide-requests/{bonafide.id}", headers=admin_headers)
        assert response.json()["data"]["studentRollNo"] == "CS2021001"


@pytest.mark.unit
def test_dashboard_stats(
    client: TestClient, store: StateStore, query, bonafide, admin_headers
) -> None:
    store.approve_bonafide_request(bonafide.id, "Exam Cell")

    response = client.get("/api/v1/dashboard/stats", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["data"] == {
        "totalStudents": 1,
        "activeStudents": 1,
        "pendingQueries": 1,
        "resolvedQueries": 0,
        "bonafideRequests": 0,
        "approvedBonafides": 1,
        "rejectedBonafides": 0,
        "resultsPublished": 0,
    }
