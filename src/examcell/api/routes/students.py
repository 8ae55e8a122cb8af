"""Student CRUD endpoints (admin)."""

from fastapi import APIRouter, Query, status

from examcell.api.dependencies import AdminSessionDep, StateStoreDep
from examcell.api.models import (
    APIResponse,
    PageResponse,
    StudentCreate,
    StudentResponse,
    StudentUpdate,
    page_to_response,
    student_to_response,
)

router = APIRouter(prefix="/students", tags=["students"])


@router.get("", response_model=APIResponse[PageResponse[StudentResponse]])
def list_students(
    _session: AdminSessionDep,
    store: StateStoreDep,
    search: str | None = Query(default=None, description="Name, roll number or email"),
    semester: int | None = Query(default=None, ge=1, description="Filter by semester"),
    department: str | None = Query(default=None, description="Filter by department"),
    page: int = Query(default=0, ge=0, description="Zero-based page number"),
    size: int = Query(default=10, ge=1, le=100, description="Page size"),
) -> APIResponse[PageResponse[StudentResponse]]:
    """List students with optional filters and pagination."""
    result = store.list_students(
        search=search,
        semester=semester,
        department=department,
        page=page,
        size=size,
    )
    return APIResponse(data=page_to_response(result, student_to_response))


@router.post(
    "",
    response_model=APIResponse[StudentResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_student(
    student: StudentCreate, _session: AdminSessionDep, store: StateStoreDep
) -> APIResponse[StudentResponse]:
    """Create a student profile."""
    created = store.create_student(
        roll_no=student.roll_no,
        name=student.name,
        email=student.email,
        semester=student.semester,
        department=student.department,
        phone_number=student.phone_number,
        address=student.address,
    )
    return APIResponse(data=student_to_response(created))


@router.get("/{student_id}", response_model=APIResponse[StudentResponse])
def get_student(
    student_id: str, _session: AdminSessionDep, store: StateStoreDep
) -> APIResponse[StudentResponse]:
    """Get a student by ID."""
    return APIResponse(data=student_to_response(store.get_student(student_id)))


@router.put("/{student_id}", response_model=APIResponse[StudentResponse])
def update_student(
    student_id: str, student: StudentUpdate, _session: AdminSessionDep, store: StateStoreDep
) -> APIResponse[StudentResponse]:
    """Update a student (fields left out are unchanged)."""
    updated = store.update_student(student_id, **student.model_dump(exclude_none=True))
    return APIResponse(data=student_to_response(updated))


@router.delete("/{student_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_student(student_id: str, _session: AdminSessionDep, store: StateStoreDep) -> None:
    """Delete a student with their marks, queries and bonafide requests."""
    store.delete_student(student_id)
