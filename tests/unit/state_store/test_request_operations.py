"""Unit tests for StateStore query and bonafide operations."""

import re

import pytest

from examcell.state_store import (
    BonafideNotFoundError,
    BonafideStatus,
    InvalidStateTransitionError,
    QueryNotFoundError,
    QueryPriority,
    QueryStatus,
    StateStore,
    Student,
    StudentNotFoundError,
    ValidationError,
)


@pytest.fixture
def query(store: StateStore, student: Student):
    return store.create_query(
        student.id,
        subject="Operating Systems",
        faculty="Dr. Meera Iyer",
        title="Internal 2 marks missing",
        description="My internal 2 marks are not shown.",
        priority=QueryPriority.HIGH,
    )


@pytest.mark.unit
class TestQueries:
    """Tests for query operations."""

    def test_create(self, query, student: Student) -> None:
        assert query.query_status is QueryStatus.OPEN
        assert query.priority == "HIGH"
        assert query.student_name == "Asha Rao"
        assert query.student_roll_no == student.roll_no
        assert query.response is None

    def test_create_for_missing_student(self, store: StateStore) -> None:
        with pytest.raises(StudentNotFoundError):
            store.create_query("missing", "OS", "X", "T", "D")

    def test_get_missing(self, store: StateStore) -> None:
        with pytest.raises(QueryNotFoundError):
            store.get_query("missing")

    def test_respond_resolves(self, store: StateStore, query) -> None:
        answered = store.respond_to_query(query.id, "  Updated now. ", "Dr. Meera Iyer")

        assert answered.query_status is QueryStatus.RESOLVED
        assert answered.response == "Updated now."
        assert answered.responded_by == "Dr. Meera Iyer"
        assert answered.responded_at is not None

    def test_blank_response(self, store: StateStore, query) -> None:
        with pytest.raises(ValidationError):
            store.respond_to_query(query.id, "   ", "Exam Cell")

    def test_status_transitions(self, store: StateStore, query) -> None:
        assert store.update_query_status(query.id, QueryStatus.IN_PROGRESS).status == "IN_PROGRESS"
        assert store.update_query_status(query.id, QueryStatus.CLOSED).status == "CLOSED"
        # Closing again is allowed
        store.update_query_status(query.id, QueryStatus.CLOSED)

    def test_closed_query_cannot_reopen_or_be_answered(self, store: StateStore, query) -> None:
        store.update_query_status(query.id, QueryStatus.CLOSED)

        with pytest.raises(InvalidStateTransitionError):
            store.update_query_status(query.id, QueryStatus.OPEN)
        with pytest.raises(InvalidStateTransitionError):
            store.respond_to_query(query.id, "Too late", "Exam Cell")

    def test_list_filters(self, store: StateStore, student: Student, query) -> None:
        other = store.create_student("CS2021002", "Ravi", "ravi@college.edu", 3)
        store.create_query(other.id, "Maths", "Prof. Sen", "Revaluation", "Please recheck")

        assert store.list_queries().total_elements == 2
        assert store.list_queries(student_id=student.id).total_elements == 1
        assert store.list_queries(faculty="dr. meera iyer").total_elements == 1
        assert store.list_queries(search="ravi").total_elements == 1
        assert store.list_queries(search="internal").total_elements == 1
        assert store.list_queries(status=QueryStatus.OPEN).total_elements == 2
        assert store.list_queries(status=QueryStatus.RESOLVED).total_elements == 0


@pytest.mark.unit
class TestBonafide:
    """Tests for bonafide request operations."""

    def test_create(self, store: StateStore, student: Student) -> None:
        request = store.create_bonafide_request(student.id, "Scholarship")

        assert request.bonafide_status is BonafideStatus.PENDING
        assert request.display_purpose == "Scholarship"
        assert request.student_semester == 3
        assert request.certificate_number is None

    def test_other_purpose_needs_custom(self, store: StateStore, student: Student) -> None:
        with pytest.raises(ValidationError):
            store.create_bonafide_request(student.id, "Other")

        request = store.create_bonafide_request(student.id, "Other", custom_purpose=" Visa ")
        assert request.display_purpose == "Visa"

    def test_blank_purpose(self, store: StateStore, student: Student) -> None:
        with pytest.raises(ValidationError):
            store.create_bonafide_request(student.id, "  ")

    def test_approve_issues_certificate_numbers(
        self, store: StateStore, student: Student
    ) -> None:
        first = store.create_bonafide_request(student.id, "Scholarship")
        second = store.create_bonafide_request(student.id, "Bank account")

        approved = store.approve_bonafide_request(first.id, "Exam Cell")
        again = store.approve_bonafide_request(second.id, "Exam Cell")

        assert approved.bonafide_status is BonafideStatus.APPROVED
        assert approved.approved_by == "Exam Cell"
        assert approved.approved_at is not None
        assert re.fullmatch(r"BON-\d{4}-00001", approved.certificate_number or "")
        assert (again.certificate_number or "").endswith("-00002")

    def test_certificate_numbers_survive_deleted_students(
        self, store: StateStore, student: Student
    ) -> None:
        other = store.create_student("CS2021002", "Ravi", "ravi@college.edu", 3)
        store.approve_bonafide_request(
            store.create_bonafide_request(student.id, "Scholarship").id, "Exam Cell"
        )
        store.approve_bonafide_request(
            store.create_bonafide_request(other.id, "Scholarship").id, "Exam Cell"
        )

        store.delete_student(student.id)
        later = store.approve_bonafide_request(
            store.create_bonafide_request(other.id, "Bank account").id, "Exam Cell"
        )

        assert (later.certificate_number or "").endswith("-00003")

    def test_reject(self, store: StateStore, student: Student) -> None:
        request = store.create_bonafide_request(student.id, "Scholarship")

        rejected = store.reject_bonafide_request(request.id, " Fees pending ", "Exam Cell")

        assert rejected.bonafide_status is BonafideStatus.REJECTED
        assert rejected.rejection_reason == "Fees pending"
        assert rejected.rejected_by == "Exam Cell"
        assert rejected.certificate_number is None

    def test_reject_needs_reason(self, store: StateStore, student: Student) -> None:
        request = store.create_bonafide_request(student.id, "Scholarship")
        with pytest.raises(ValidationError):
            store.reject_bonafide_request(request.id, "", "Exam Cell")

    def test_decision_is_final(self, store: StateStore, student: Student) -> None:
        request = store.create_bonafide_request(student.id, "Scholarship")
        store.approve_bonafide_request(request.id, "Exam Cell")

        with pytest.raises(InvalidStateTransitionError):
            store.approve_bonafide_request(request.id, "Exam Cell")
        with pytest.raises(InvalidStateTransitionError):
            store.reject_bonafide_request(request.id, "Changed mind", "Exam Cell")

    def test_missing(self, store: StateStore) -> None:
        with pytest.raises(BonafideNotFoundError):
            store.get_bonafide_request("missing")
        with pytest.raises(BonafideNotFoundError):
            store.approve_bonafide_request("missing", "Exam Cell")

    def test_list_filters(self, store: StateStore, student: Student) -> None:
        request = store.create_bonafide_request(student.id, "Scholarship")
        store.create_bonafide_request(student.id, "Passport")
        store.approve_bonafide_request(request.id, "Exam Cell")

        assert store.list_bonafide_requests().total_elements == 2
        assert store.list_bonafide_requests(status=BonafideStatus.PENDING).total_elements == 1
        assert store.list_bonafide_requests(search="pass").total_elements == 1
        assert store.list_bonafide_requests(search="CS2021001").total_elements == 2
        assert store.list_bonafide_requests(student_id="nobody").total_elements == 0
