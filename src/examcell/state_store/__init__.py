"""State Store - Persistent storage for accounts, academic records and requests."""

from examcell.state_store.exceptions import (
    BonafideNotFoundError,
    DuplicateError,
    InvalidStateTransitionError,
    MarkNotFoundError,
    NotFoundError,
    QueryNotFoundError,
    StateStoreError,
    StudentExistsError,
    StudentNotFoundError,
    SubjectExistsError,
    SubjectNotFoundError,
    TeacherNotFoundError,
    UserExistsError,
    UserNotFoundError,
    ValidationError,
)
from examcell.state_store.models import (
    DEFAULT_EXAM_TYPE,
    OTHER_PURPOSE,
    TOTAL_SEMESTERS,
    BonafideRequest,
    BonafideStatus,
    ContactMessage,
    DashboardStats,
    Mark,
    Page,
    Query,
    QueryPriority,
    QueryStatus,
    Student,
    StudentDashboard,
    Subject,
    Teacher,
    TeacherDashboard,
    User,
)
from examcell.state_store.store import MarkRow, StateStore

__all__ = [
    "DEFAULT_EXAM_TYPE",
    "OTHER_PURPOSE",
    "TOTAL_SEMESTERS",
    "BonafideNotFoundError",
    "BonafideRequest",
    "BonafideStatus",
    "ContactMessage",
    "DashboardStats",
    "DuplicateError",
    "InvalidStateTransitionError",
    "Mark",
    "MarkNotFoundError",
    "MarkRow",
    "NotFoundError",
    "Page",
    "Query",
    "QueryNotFoundError",
    "QueryPriority",
    "QueryStatus",
    "StateStore",
    "StateStoreError",
    "Student",
    "StudentDashboard",
    "StudentExistsError",
    "StudentNotFoundError",
    "Subject",
    "SubjectExistsError",
    "SubjectNotFoundError",
    "Teacher",
    "TeacherDashboard",
    "TeacherNotFoundError",
    "User",
    "UserExistsError",
    "UserNotFoundError",
    "ValidationError",
]
