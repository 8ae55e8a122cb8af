"""Pydantic models for REST API."""

from collections.abc import Callable
from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from examcell.auth.models import Role
from examcell.grading import GradeSummary, ResultRecord, SemesterAggregate
from examcell.state_store import (
    DEFAULT_EXAM_TYPE,
    DashboardStats,
    Page,
    QueryPriority,
    QueryStatus,
    StudentDashboard,
    TeacherDashboard,
    User,
)

T = TypeVar("T")
S = TypeVar("S")


class APIResponse(BaseModel, Generic[T]):
    """Standard API response wrapper."""

    data: T | None = None
    error: str | None = None


class CamelModel(BaseModel):
    """Base for payloads exchanged with the portal (camelCase on the wire)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class PageResponse(CamelModel, Generic[T]):
    """One page of a paginated listing."""

    content: list[T]
    total_elements: int
    total_pages: int
    size: int
    number: int
    first: bool
    last: bool


def page_to_response(page: Page[Any], convert: Callable[[Any], S]) -> PageResponse[S]:
    """Convert a store Page, converting each item with ``convert``."""
    return PageResponse(
        content=[convert(item) for item in page.content],
        total_elements=page.total_elements,
        total_pages=page.total_pages,
        size=page.size,
        number=page.number,
        first=page.first,
        last=page.last,
    )


# Auth models


class SignupRequest(CamelModel):
    """Request model for creating an account."""

    username: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
    password: str = Field(..., min_length=6, max_length=128)
    full_name: str = Field(..., min_length=1, max_length=255)
    role: Role = Role.STUDENT

    # Student profile
    roll_no: str | None = Field(default=None, max_length=50)
    semester: int | None = Field(default=None, ge=1, le=12)
    department: str | None = Field(default=None, max_length=100)
    phone_number: str | None = Field(default=None, max_length=30)
    address: str | None = None

    # Teacher profile
    employee_id: str | None = Field(default=None, max_length=50)
    designation: str | None = Field(default=None, max_length=100)
    specialization: str | None = Field(default=None, max_length=255)

    @field_validator("role", mode="before")
    @classmethod
    def parse_role(cls, value: Any) -> Role:
        return Role.parse(value)


class LoginRequest(CamelModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class AuthResponse(CamelModel):
    """Response model for signup and login."""

    token: str
    user_id: str
    role: str
    full_name: str
    email: str
    student_id: str | None = None
    teacher_id: str | None = None


class MeResponse(CamelModel):
    """The authenticated principal."""

    user_id: str
    username: str
    role: str
    full_name: str
    email: str
    student_id: str | None = None
    teacher_id: str | None = None


def user_to_auth_response(user: User, token: str) -> AuthResponse:
    return AuthResponse(
        token=token,
        user_id=user.id,
        role=user.role,
        full_name=user.full_name,
        email=user.email,
        student_id=user.student_id,
        teacher_id=user.teacher_id,
    )


def user_to_me_response(user: User) -> MeResponse:
    return MeResponse(
        user_id=user.id,
        username=user.username,
        role=user.role,
        full_name=user.full_name,
        email=user.email,
        student_id=user.student_id,
        teacher_id=user.teacher_id,
    )


# Student models


class StudentCreate(CamelModel):
    """Request model for creating a student profile."""

    roll_no: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=255)
    semester: int = Field(..., ge=1, le=12)
    department: str | None = Field(default=None, max_length=100)
    phone_number: str | None = Field(default=None, max_length=30)
    address: str | None = None


class StudentUpdate(CamelModel):
    """Request model for updating a student (partial update)."""

    roll_no: str | None = Field(default=None, min_length=1, max_length=50)
    name: str | None = Field(default=None, min_length=1, max_length=255)
    email: str | None = Field(default=None, min_length=3, max_length=255)
    semester: int | None = Field(default=None, ge=1, le=12)
    department: str | None = Field(default=None, max_length=100)
    phone_number: str | None = Field(default=None, max_length=30)
    address: str | None = None
    active: bool | None = None


class StudentResponse(CamelModel):
    """Response model for a student."""

    id: str
    user_id: str | None
    roll_no: str
    name: str
    email: str
    semester: int
    department: str | None
    phone_number: str | None
    address: str | None
    active: bool
    created_at: datetime
    updated_at: datetime


def student_to_response(student: Any) -> StudentResponse:
    """Convert a Student model to StudentResponse."""
    return StudentResponse.model_validate(student)


class TeacherResponse(CamelModel):
    id: str
    user_id: str | None
    employee_id: str | None
    name: str
    email: str
    department: str | None
    designation: str | None
    specialization: str | None


def teacher_to_response(teacher: Any) -> TeacherResponse:
    return TeacherResponse.model_validate(teacher)


# Subject models


class SubjectCreate(CamelModel):
    """Request model for creating a subject."""

    code: str = Field(..., min_length=1, max_length=20)
    name: str = Field(..., min_length=1, max_length=255)
    semester: int = Field(..., ge=1, le=12)
    credits: int = Field(..., ge=1, le=10)
    department: str | None = Field(default=None, max_length=100)
    teacher_id: str | None = None


class SubjectResponse(CamelModel):
    """Response model for a subject."""

    id: str
    code: str
    name: str
    semester: int
    credits: int
    department: str | None
    teacher_id: str | None
    faculty: str | None


def subject_to_response(subject: Any) -> SubjectResponse:
    """Convert a Subject model to SubjectResponse."""
    return SubjectResponse.model_validate(subject)


# Mark models


class MarkCreate(CamelModel):
    """Request model for recording one student's marks in one subject."""

    student_id: str
    subject_id: str
    internal1: float = Field(..., ge=0, le=100)
    internal2: float = Field(..., ge=0, le=100)
    external: float = Field(..., ge=0, le=100)
    exam_type: str = Field(default=DEFAULT_EXAM_TYPE, min_length=1, max_length=30)
    academic_year: str | None = Field(default=None, max_length=20)


class MarkUpdate(CamelModel):
    """Request model for replacing a mark's components."""

    internal1: float = Field(..., ge=0, le=100)
    internal2: float = Field(..., ge=0, le=100)
    external: float = Field(..., ge=0, le=100)
    exam_type: str | None = Field(default=None, min_length=1, max_length=30)
    academic_year: str | None = Field(default=None, max_length=20)


class MarkResponse(CamelModel):
    """Response model for a mark."""

    id: str
    student_id: str
    student_name: str
    student_roll_no: str
    subject_id: str
    subject_code: str
    subject_name: str
    semester: int
    credits: int
    internal1: float
    internal2: float
    external: float
    marks: float
    max_marks: float
    grade: str
    exam_type: str
    academic_year: str | None
    uploaded_by: str | None
    updated_at: datetime


def mark_to_response(mark: Any) -> MarkResponse:
    """Convert a Mark model to MarkResponse."""
    return MarkResponse.model_validate(mark)


class MarkUploadResponse(CamelModel):
    """Result of a CSV marks upload."""

    subject_id: str
    uploaded: int
    marks: list[MarkResponse]


# Query models


class QueryCreate(CamelModel):
    """Request model for a student submitting a query."""

    subject: str = Field(..., min_length=1, max_length=255)
    faculty: str = Field(..., min_length=1, max_length=255)
    title: str = Field(..., min_length=1, max_length=500)
    description: str = Field(..., min_length=1)
    priority: QueryPriority = QueryPriority.MEDIUM


class QueryStatusUpdate(CamelModel):
    status: QueryStatus


class QueryRespond(CamelModel):
    response: str = Field(..., min_length=1)


class QueryResponse(CamelModel):
    """Response model for a query."""

    id: str
    student_id: str
    student_name: str
    student_roll_no: str
    subject: str
    faculty: str
    title: str
    description: str
    status: str
    priority: str
    response: str | None
    responded_by: str | None
    responded_at: datetime | None
    created_at: datetime
    updated_at: datetime


def query_to_response(query: Any) -> QueryResponse:
    """Convert a Query model to QueryResponse."""
    return QueryResponse.model_validate(query)


# Bonafide models


class BonafideCreate(CamelModel):
    """Request model for a bonafide certificate request."""

    purpose: str = Field(..., min_length=1, max_length=100)
    custom_purpose: str | None = Field(default=None, max_length=255)
    additional_info: str | None = None


class BonafideReject(CamelModel):
    reason: str = Field(..., min_length=1)


class BonafideResponse(CamelModel):
    """Response model for a bonafide request."""

    id: str
    student_id: str
    student_name: str
    student_roll_no: str
    student_semester: int
    purpose: str
    custom_purpose: str | None
    display_purpose: str
    additional_info: str | None
    status: str
    approved_by: str | None
    approved_at: datetime | None
    rejected_by: str | None
    rejection_reason: str | None
    certificate_number: str | None
    created_at: datetime


def bonafide_to_response(request: Any) -> BonafideResponse:
    """Convert a BonafideRequest model to BonafideResponse."""
    return BonafideResponse.model_validate(request)


# Results models


class ResultRecordModel(CamelModel):
    """One subject's outcome, as sent to and returned by the results endpoints."""

    subject_code: str = Field(..., min_length=1)
    subject_name: str = ""
    credits: int
    semester_number: int
    marks_obtained: float = 0.0
    max_marks: float = 100.0
    grade: str | None = None

    def to_record(self) -> ResultRecord:
        return ResultRecord(
            subject_code=self.subject_code,
            subject_name=self.subject_name,
            credits=self.credits,
            semester_number=self.semester_number,
            marks_obtained=self.marks_obtained,
            max_marks=self.max_marks,
            grade=self.grade,
        )


class ResultRecordResponse(ResultRecordModel):
    grade_point: int


class SemesterAggregateResponse(CamelModel):
    semester_number: int
    subjects: list[ResultRecordResponse]
    sgpa: float
    total_credits: int


class GradeSummaryResponse(CamelModel):
    """SGPA per semester (ascending) plus overall CGPA."""

    per_semester: list[SemesterAggregateResponse]
    cgpa: float
    total_credits_overall: int
    completed_semesters: int


def record_to_response(record: ResultRecord) -> ResultRecordResponse:
    return ResultRecordResponse.model_validate(record)


def semester_to_response(semester: SemesterAggregate) -> SemesterAggregateResponse:
    return SemesterAggregateResponse(
        semester_number=semester.semester_number,
        subjects=[record_to_response(r) for r in semester.subjects],
        sgpa=semester.sgpa,
        total_credits=semester.total_credits,
    )


def summary_to_response(summary: GradeSummary) -> GradeSummaryResponse:
    """Convert a GradeSummary to GradeSummaryResponse."""
    return GradeSummaryResponse(
        per_semester=[semester_to_response(s) for s in summary.per_semester],
        cgpa=summary.cgpa,
        total_credits_overall=summary.total_credits_overall,
        completed_semesters=summary.completed_semesters,
    )


class StudentResultsResponse(CamelModel):
    student_id: str
    records: list[ResultRecordResponse]
    summary: GradeSummaryResponse


# Dashboard models


class DashboardStatsResponse(CamelModel):
    """Exam-cell wide counters for the admin dashboard."""

    total_students: int
    active_students: int
    pending_queries: int
    resolved_queries: int
    bonafide_requests: int
    approved_bonafides: int
    rejected_bonafides: int
    results_published: int


def stats_to_response(stats: DashboardStats) -> DashboardStatsResponse:
    return DashboardStatsResponse.model_validate(stats)


class StudentDashboardResponse(CamelModel):
    """Response model for the student landing page."""

    student: StudentResponse
    cgpa: float
    completed_semesters: int
    total_semesters: int
    pending_queries: int
    available_certificates: int
    recent_results: list[MarkResponse]
    recent_queries: list[QueryResponse]


def student_dashboard_to_response(dashboard: StudentDashboard) -> StudentDashboardResponse:
    return StudentDashboardResponse(
        student=student_to_response(dashboard.student),
        cgpa=dashboard.cgpa,
        completed_semesters=dashboard.completed_semesters,
        total_semesters=dashboard.total_semesters,
        pending_queries=dashboard.pending_queries,
        available_certificates=dashboard.available_certificates,
        recent_results=[mark_to_response(m) for m in dashboard.recent_results],
        recent_queries=[query_to_response(q) for q in dashboard.recent_queries],
    )


class TeacherDashboardResponse(CamelModel):
    """Response model for the teacher landing page."""

    teacher: TeacherResponse
    total_students: int
    pending_queries: int
    subjects_teaching: int
    marks_uploaded: int
    assigned_subjects: list[SubjectResponse]
    recent_queries: list[QueryResponse]


def teacher_dashboard_to_response(dashboard: TeacherDashboard) -> TeacherDashboardResponse:
    return TeacherDashboardResponse(
        teacher=teacher_to_response(dashboard.teacher),
        total_students=dashboard.total_students,
        pending_queries=dashboard.pending_queries,
        subjects_teaching=dashboard.subjects_teaching,
        marks_uploaded=dashboard.marks_uploaded,
        assigned_subjects=[subject_to_response(s) for s in dashboard.assigned_subjects],
        recent_queries=[query_to_response(q) for q in dashboard.recent_queries],
    )


# Contact models


class ContactRequest(CamelModel):
    """Contact-form submission. Checked by ``validate_contact_form``."""

    name: str | None = None
    email: str | None = None
    user_type: str | None = None
    subject: str | None = None
    message: str | None = None


class ContactResponse(CamelModel):
    message: str
    reference_id: str
    priority: str
    response_time: str


class HealthResponse(BaseModel):
    status: str
    version: str
