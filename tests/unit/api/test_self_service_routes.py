"""Unit tests for student and teacher self-service routes."""

import pytest
from fastapi.testclient import TestClient

from examcell.auth import Role
from examcell.state_store import StateStore


@pytest.mark.unit
class TestStudentSelfService:
    """Tests for /api/v1/student."""

    def test_dashboard(
        self, client: TestClient, store: StateStore, subject, student_user, student_headers
    ) -> None:
        store.upsert_mark(student_user.student_id, subject.id, 90, 90, 90)

        response = client.get(
            f"/api/v1/student/dashboard/{student_user.student_id}", headers=student_headers
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["student"]["rollNo"] == "CS2021001"
        assert data["cgpa"] == 10.0
        assert data["completedSemesters"] == 1
        assert data["totalSemesters"] == 8
        assert len(data["recentResults"]) == 1

    def test_results(
        self, client: TestClient, store: StateStore, subject, student_user, student_headers
    ) -> None:
        first_sem = store.create_subject(code="MA101", name="Calculus", semester=1, credits=3)
        store.upsert_mark(student_user.student_id, subject.id, 90, 90, 90)
        store.upsert_mark(student_user.student_id, first_sem.id, 60, 60, 60)

        response = client.get(
            f"/api/v1/student/{student_user.student_id}/results", headers=student_headers
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert [r["subjectCode"] for r in data["records"]] == ["MA101", "CS301"]
        assert data["records"][0]["gradePoint"] == 7
        summary = data["summary"]
        assert [s["semesterNumber"] for s in summary["perSemester"]] == [1, 3]
        assert [s["sgpa"] for s in summary["perSemester"]] == [7.0, 10.0]
        # (7*3 + 10*4) / 7 = 8.714... -> 8.7
        assert summary["cgpa"] == pytest.approx(8.7)
        assert summary["totalCreditsOverall"] == 7

    def test_other_students_records_are_refused(
        self, client: TestClient, make_user, student_headers
    ) -> None:
        other = make_user(Role.STUDENT, "Ravi", roll_no="CS2021002")

        for path in (
            f"/api/v1/student/dashboard/{other.student_id}",
            f"/api/v1/student/{other.student_id}/results",
            f"/api/v1/student/{other.student_id}/queries",
        ):
            response = client.get(path, headers=student_headers)
            assert response.status_code == 403
            assert response.headers["location"] == "/"

    def test_admin_reaches_any_student(
        self, client: TestClient, student_user, admin_headers
    ) -> None:
        response = client.get(
            f"/api/v1/student/{student_user.student_id}/results", headers=admin_headers
        )
        assert response.status_code == 200

    def test_teacher_is_refused(self, client: TestClient, student_user, teacher_headers) -> None:
        response = client.get(
            f"/api/v1/student/{student_user.student_id}/results", headers=teacher_headers
        )
        assert response.status_code == 403

    def test_queries(self, client: TestClient, student_user, student_headers) -> None:
        base = f"/api/v1/student/{student_user.student_id}/queries"

        created = client.post(
            base,
            json={
                "subject": "Operating Systems",
                "faculty": "Dr. Meera Iyer",
                "title": "Internal marks",
                "description": "Internal 2 marks are missing.",
                "priority": "HIGH",
            },
            headers=student_headers,
        )
        listed = client.get(base, headers=student_headers)

        assert created.status_code == 201
        assert created.json()["data"]["status"] == "OPEN"
        assert created.json()["data"]["priority"] == "HIGH"
        assert listed.json()["data"]["totalElements"] == 1

    def test_bonafide_requests(self, client: TestClient, student_user, student_headers) -> None:
        base = f"/api/v1/student/{student_user.student_id}/bonafide-requests"

        created = client.post(
            base,
            json={"purpose": "Other", "customPurpose": "Passport application"},
            headers=student_headers,
        )
        invalid = client.post(base, json={"purpose": "Other"}, headers=student_headers)
        listed = client.get(base, headers=student_headers)

        assert created.status_code == 201
        data = created.json()["data"]
        assert data["status"] == "PENDING"
        assert data["displayPurpose"] == "Passport application"
        assert data["studentSemester"] == 3
        assert invalid.status_code == 400
        assert listed.json()["data"]["totalElements"] == 1


@pytest.mark.unit
class TestTeacherSelfService:
    """Tests for /api/v1/teacher."""

    @pytest.fixture
    def query(self, store: StateStore, student_user):
        return store.create_query(
            student_user.student_id,
            subject="Operating Systems",
            faculty="Dr. Meera Iyer",
            title="Internal marks",
            description="Internal 2 marks are missing.",
        )

    def test_dashboard(
        self, client: TestClient, subject, student_user, teacher_user, teacher_headers, query
    ) -> None:
        response = client.get(
            f"/api/v1/teacher/dashboard/{teacher_user.teacher_id}", headers=teacher_headers
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["teacher"]["name"] == "Dr. Meera Iyer"
        assert data["subjectsTeaching"] == 1
        assert data["totalStudents"] == 1
        assert data["pendingQueries"] == 1
        assert [s["code"] for s in data["assignedSubjects"]] == ["CS301"]

    def test_other_teacher_refused(
        self, client: TestClient, make_user, teacher_headers
    ) -> None:
        other = make_user(Role.TEACHER, "Prof. Sen")

        response = client.get(
            f"/api/v1/teacher/dashboard/{other.teacher_id}", headers=teacher_headers
        )
        assert response.status_code == 403

    def test_queries_with_status_filter(
        self, client: TestClient, teacher_user, teacher_headers, query
    ) -> None:
        base = f"/api/v1/teacher/{teacher_user.teacher_id}/queries"

        open_queries = client.get(base, params={"status": "OPEN"}, headers=teacher_headers)
        resolved = client.get(base, params={"status": "RESOLVED"}, headers=teacher_headers)

        assert open_queries.json()["data"]["totalElements"] == 1
        assert resolved.json()["data"]["totalElements"] == 0

    def test_respond(self, client: TestClient, teacher_user, teacher_headers, query) -> None:
        response = client.post(
            f"/api/v1/teacher/{teacher_user.teacher_id}/queries/{query.id}/respond",
            json={"response": "Uploaded today."},
            headers=teacher_headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "RESOLVED"
        assert data["respondedBy"] == "Dr. Meera Iyer"

    def test_respond_to_query_for_someone_else(
        self, client: TestClient, store: StateStore, student_user, teacher_user, teacher_headers
    ) -> None:
        foreign = store.create_query(student_user.student_id, "Maths", "Prof. Sen", "T", "D")

        response = client.post(
            f"/api/v1/teacher/{teacher_user.teacher_id}/queries/{foreign.id}/respond",
            json={"response": "Not mine"},
            headers=teacher_headers,
        )

        assert response.status_code == 403
        assert store.get_query(foreign.id).status == "OPEN"
