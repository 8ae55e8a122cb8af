"""SQLAlchemy models for State Store."""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field
from datetime import datetime  # noqa: TC003 - used at runtime for SQLAlchemy
from enum import StrEnum
from typing import Any, Generic, TypeVar

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
    relationship,
)

from examcell.grading import GradeSummary, ResultRecord

T = TypeVar("T")

DEFAULT_EXAM_TYPE = "FINAL"
TOTAL_SEMESTERS = 8


class QueryStatus(StrEnum):
    """Lifecycle of a student query."""

    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"
    CLOSED = "CLOSED"


class QueryPriority(StrEnum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class BonafideStatus(StrEnum):
    """Lifecycle of a bonafide certificate request."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


OTHER_PURPOSE = "Other"


def generate_uuid() -> str:
    """Generate a new UUID string."""
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class User(Base):
    """Login account. Linked to at most one Student or Teacher profile."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    username: Mapped[str] = mapped_column(String(100), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    student: Mapped[Student | None] = relationship("Student", uselist=False, lazy="joined")
    teacher: Mapped[Teacher | None] = relationship("Teacher", uselist=False, lazy="joined")

    def __init__(
        self,
        email: str,
        username: str,
        password_hash: str,
        full_name: str,
        role: str,
        id: str | None = None,
        active: bool = True,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.email = email.strip().lower()
        self.username = username
        self.password_hash = password_hash
        self.full_name = full_name
        self.role = role
        self.active = active

    @property
    def student_id(self) -> str | None:
        return self.student.id if self.student is not None else None

    @property
    def teacher_id(self) -> str | None:
        return self.teacher.id if self.teacher is not None else None

    def __repr__(self) -> str:
        return f"<User(id={self.id!r}, email={self.email!r}, role={self.role!r})>"


class Student(Base):
    """Student profile."""

    __tablename__ = "students"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=True, unique=True
    )
    roll_no: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    semester: Mapped[int] = mapped_column(Integer, nullable=False)
    department: Mapped[str | None] = mapped_column(String(100), nullable=True)
    phone_number: Mapped[str | None] = mapped_column(String(30), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    def __init__(
        self,
        roll_no: str,
        name: str,
        email: str,
        semester: int,
        id: str | None = None,
        user_id: str | None = None,
        department: str | None = None,
        phone_number: str | None = None,
        address: str | None = None,
        active: bool = True,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.user_id = user_id
        self.roll_no = roll_no
        self.name = name
        self.email = email
        self.semester = semester
        self.department = department
        self.phone_number = phone_number
        self.address = address
        self.active = active

    def __repr__(self) -> str:
        return f"<Student(id={self.id!r}, roll_no={self.roll_no!r})>"


class Teacher(Base):
    """Teacher profile."""

    __tablename__ = "teachers"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=True, unique=True
    )
    employee_id: Mapped[str | None] = mapped_column(String(50), nullable=True, unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    department: Mapped[str | None] = mapped_column(String(100), nullable=True)
    designation: Mapped[str | None] = mapped_column(String(100), nullable=True)
    specialization: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )

    def __init__(
        self,
        name: str,
        email: str,
        id: str | None = None,
        user_id: str | None = None,
        employee_id: str | None = None,
        department: str | None = None,
        designation: str | None = None,
        specialization: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.user_id = user_id
        self.employee_id = employee_id
        self.name = name
        self.email = email
        self.department = department
        self.designation = designation
        self.specialization = specialization

    def __repr__(self) -> str:
        return f"<Teacher(id={self.id!r}, name={self.name!r})>"


class Subject(Base):
    """Course offered in a semester."""

    __tablename__ = "subjects"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    code: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    semester: Mapped[int] = mapped_column(Integer, nullable=False)
    credits: Mapped[int] = mapped_column(Integer, nullable=False)
    department: Mapped[str | None] = mapped_column(String(100), nullable=True)
    teacher_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("teachers.id", ondelete="SET NULL"), nullable=True
    )
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    teacher: Mapped[Teacher | None] = relationship("Teacher", lazy="joined")

    def __init__(
        self,
        code: str,
        name: str,
        semester: int,
        credits: int,
        id: str | None = None,
        department: str | None = None,
        teacher_id: str | None = None,
        active: bool = True,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.code = code.strip().upper()
        self.name = name
        self.semester = semester
        self.credits = credits
        self.department = department
        self.teacher_id = teacher_id
        self.active = active

    @property
    def faculty(self) -> str | None:
        return self.teacher.name if self.teacher is not None else None

    def __repr__(self) -> str:
        return f"<Subject(id={self.id!r}, code={self.code!r})>"


class Mark(Base):
    """One student's marks in one subject for one exam type."""

    __tablename__ = "marks"
    __table_args__ = (UniqueConstraint("student_id", "subject_id", "exam_type"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    student_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("students.id", ondelete="CASCADE"), nullable=False
    )
    subject_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False
    )
    internal1: Mapped[float] = mapped_column(Float, nullable=False)
    internal2: Mapped[float] = mapped_column(Float, nullable=False)
    external: Mapped[float] = mapped_column(Float, nullable=False)
    marks: Mapped[float] = mapped_column(Float, nullable=False)
    max_marks: Mapped[float] = mapped_column(Float, nullable=False)
    grade: Mapped[str] = mapped_column(String(5), nullable=False)
    exam_type: Mapped[str] = mapped_column(String(30), nullable=False)
    academic_year: Mapped[str | None] = mapped_column(String(20), nullable=True)
    uploaded_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    student: Mapped[Student] = relationship("Student", lazy="joined")
    subject: Mapped[Subject] = relationship("Subject", lazy="joined")

    def __init__(
        self,
        student_id: str,
        subject_id: str,
        internal1: float,
        internal2: float,
        external: float,
        marks: float,
        max_marks: float,
        grade: str,
        id: str | None = None,
        exam_type: str = DEFAULT_EXAM_TYPE,
        academic_year: str | None = None,
        uploaded_by: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.student_id = student_id
        self.subject_id = subject_id
        self.internal1 = internal1
        self.internal2 = internal2
        self.external = external
        self.marks = marks
        self.max_marks = max_marks
        self.grade = grade
        self.exam_type = exam_type
        self.academic_year = academic_year
        self.uploaded_by = uploaded_by

    @property
    def student_name(self) -> str:
        return self.student.name

    @property
    def student_roll_no(self) -> str:
        return self.student.roll_no

    @property
    def subject_name(self) -> str:
        return self.subject.name

    @property
    def subject_code(self) -> str:
        return self.subject.code

    @property
    def semester(self) -> int:
        return self.subject.semester

    @property
    def credits(self) -> int:
        return self.subject.credits

    def to_result_record(self) -> ResultRecord:
        return ResultRecord(
            subject_code=self.subject.code,
            subject_name=self.subject.name,
            credits=self.subject.credits,
            semester_number=self.subject.semester,
            marks_obtained=self.marks,
            max_marks=self.max_marks,
            grade=self.grade,
        )

    def __repr__(self) -> str:
        return f"<Mark(id={self.id!r}, student_id={self.student_id!r}, grade={self.grade!r})>"


class Query(Base):
    """A question raised by a student for a faculty member or the exam cell."""

    __tablename__ = "queries"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    student_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("students.id", ondelete="CASCADE"), nullable=False
    )
    subject: Mapped[str] = mapped_column(String(255), nullable=False)
    faculty: Mapped[str] = mapped_column(String(255), nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    priority: Mapped[str] = mapped_column(String(20), nullable=False)
    response: Mapped[str | None] = mapped_column(Text, nullable=True)
    responded_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    responded_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    student: Mapped[Student] = relationship("Student", lazy="joined")

    def __init__(
        self,
        student_id: str,
        subject: str,
        faculty: str,
        title: str,
        description: str,
        id: str | None = None,
        status: str | None = None,
        priority: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.student_id = student_id
        self.subject = subject
        self.faculty = faculty
        self.title = title
        self.description = description
        self.status = status if status is not None else QueryStatus.OPEN.value
        self.priority = priority if priority is not None else QueryPriority.MEDIUM.value

    @property
    def query_status(self) -> QueryStatus:
        return QueryStatus(self.status)

    @property
    def student_name(self) -> str:
        return self.student.name

    @property
    def student_roll_no(self) -> str:
        return self.student.roll_no

    @property
    def student_email(self) -> str:
        return self.student.email

    def __repr__(self) -> str:
        return f"<Query(id={self.id!r}, title={self.title!r}, status={self.status!r})>"


class BonafideRequest(Base):
    """Request for a bonafide certificate."""

    __tablename__ = "bonafide_requests"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    student_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("students.id", ondelete="CASCADE"), nullable=False
    )
    purpose: Mapped[str] = mapped_column(String(100), nullable=False)
    custom_purpose: Mapped[str | None] = mapped_column(String(255), nullable=True)
    additional_info: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    approved_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    rejected_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    certificate_number: Mapped[str | None] = mapped_column(String(30), nullable=True, unique=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    student: Mapped[Student] = relationship("Student", lazy="joined")

    def __init__(
        self,
        student_id: str,
        purpose: str,
        id: str | None = None,
        custom_purpose: str | None = None,
        additional_info: str | None = None,
        status: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.student_id = student_id
        self.purpose = purpose
        self.custom_purpose = custom_purpose
        self.additional_info = additional_info
        self.status = status if status is not None else BonafideStatus.PENDING.value

    @property
    def bonafide_status(self) -> BonafideStatus:
        return BonafideStatus(self.status)

    @property
    def display_purpose(self) -> str:
        if self.purpose == OTHER_PURPOSE and self.custom_purpose:
            return self.custom_purpose
        return self.purpose

    @property
    def student_name(self) -> str:
        return self.student.name

    @property
    def student_roll_no(self) -> str:
        return self.student.roll_no

    @property
    def student_email(self) -> str:
        return self.student.email

    @property
    def student_semester(self) -> int:
        return self.student.semester

    def __repr__(self) -> str:
        return f"<BonafideRequest(id={self.id!r}, status={self.status!r})>"


class ContactMessage(Base):
    """Contact-form submission."""

    __tablename__ = "contact_messages"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    reference_id: Mapped[str] = mapped_column(String(40), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    user_type: Mapped[str] = mapped_column(String(30), nullable=False)
    subject: Mapped[str] = mapped_column(String(50), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    priority: Mapped[str] = mapped_column(String(10), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )

    def __init__(
        self,
        reference_id: str,
        name: str,
        email: str,
        user_type: str,
        subject: str,
        message: str,
        priority: str,
        id: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.reference_id = reference_id
        self.name = name
        self.email = email
        self.user_type = user_type
        self.subject = subject
        self.message = message
        self.priority = priority


class RevokedToken(Base):
    """Access token invalidated by logout."""

    __tablename__ = "revoked_tokens"

    jti: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False)
    revoked_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )

    def __init__(self, jti: str, user_id: str, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.jti = jti
        self.user_id = user_id


# --- Non-persisted read models ---


@dataclass
class Page(Generic[T]):
    """One page of a paginated listing. ``number`` is zero-based."""

    content: list[T]
    total_elements: int
    size: int
    number: int

    @property
    def total_pages(self) -> int:
        if self.size <= 0:
            return 0
        return math.ceil(self.total_elements / self.size)

    @property
    def first(self) -> bool:
        return self.number == 0

    @property
    def last(self) -> bool:
        return self.number >= self.total_pages - 1


@dataclass
class DashboardStats:
    """Exam-cell wide counters for the admin dashboard."""

    total_students: int
    active_students: int
    pending_queries: int
    resolved_queries: int
    bonafide_requests: int
    approved_bonafides: int
    rejected_bonafides: int
    results_published: int


@dataclass
class StudentDashboard:
    student: Student
    summary: GradeSummary
    pending_queries: int
    available_certificates: int
    recent_results: list[Mark] = field(default_factory=list)
    recent_queries: list[Query] = field(default_factory=list)
    total_semesters: int = TOTAL_SEMESTERS

    @property
    def cgpa(self) -> float:
        return self.summary.cgpa

    @property
    def completed_semesters(self) -> int:
        return self.summary.completed_semesters


@dataclass
class TeacherDashboard:
    teacher: Teacher
    total_students: int
    pending_queries: int
    marks_uploaded: int
    assigned_subjects: list[Subject] = field(default_factory=list)
    recent_queries: list[Query] = field(default_factory=list)

    @property
    def subjects_teaching(self) -> int:
        return len(self.assigned_subjects)
