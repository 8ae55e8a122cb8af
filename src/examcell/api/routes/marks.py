"""Marks endpoints (teachers and admins)."""

import csv
import io

from fastapi import APIRouter, File, Form, Query, UploadFile, status
from fastapi.responses import PlainTextResponse

from examcell.api.dependencies import StaffSessionDep, StateStoreDep
from examcell.api.models import (
    APIResponse,
    MarkCreate,
    MarkResponse,
    MarkUpdate,
    MarkUploadResponse,
    PageResponse,
    mark_to_response,
    page_to_response,
)
from examcell.auth import AccessDeniedError, GateDecision, Role, Session
from examcell.grading import COMPONENT_MAX
from examcell.state_store import DEFAULT_EXAM_TYPE, MarkRow, StateStore, ValidationError

router = APIRouter(prefix="/marks", tags=["marks"])

CSV_COLUMNS = ("rollNo", "internal1", "internal2", "external")
CSV_TEMPLATE = ",".join(CSV_COLUMNS) + "\nCS2021001,42,45,78\n"


def parse_marks_csv(text: str) -> list[MarkRow]:
    """Parse an uploaded marks sheet.

    The header must name ``rollNo``, ``internal1``, ``internal2`` and
    ``external``; other columns are ignored.

    Raises:
        ValidationError: On a missing column, a non-numeric or out-of-range
            component, or an empty sheet.
    """
    reader = csv.DictReader(io.StringIO(text.lstrip("\ufeff")))
    missing = [c for c in CSV_COLUMNS if c not in (reader.fieldnames or [])]
    if missing:
        raise ValidationError(f"Missing CSV columns: {', '.join(missing)}")

    rows: list[MarkRow] = []
    for line_no, raw in enumerate(reader, start=2):
        roll_no = (raw["rollNo"] or "").strip()
        if not roll_no:
            continue
        try:
            components = [float(raw[c]) for c in CSV_COLUMNS[1:]]
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Line {line_no}: marks must be numbers") from e
        if any(not 0 <= value <= COMPONENT_MAX for value in components):
            raise ValidationError(f"Line {line_no}: marks must be between 0 and {COMPONENT_MAX:g}")
        internal1, internal2, external = components
        rows.append((roll_no, internal1, internal2, external))

    if not rows:
        raise ValidationError("The CSV file contains no marks")
    return rows


def _ensure_subject_access(session: Session, store: StateStore, subject_id: str) -> None:
    """Teachers may only touch marks of subjects assigned to them."""
    if session.role is Role.ADMIN:
        return
    subject = store.get_subject(subject_id)
    if subject.teacher_id is None or subject.teacher_id != session.teacher_id:
        raise AccessDeniedError(GateDecision.REDIRECT_HOME, "Subject is not assigned to you")


@router.get("", response_model=APIResponse[PageResponse[MarkResponse]])
def list_marks(
    session: StaffSessionDep,
    store: StateStoreDep,
    student_search: str | None = Query(default=None, alias="studentSearch"),
    subject_code: str | None = Query(default=None, alias="subjectCode"),
    semester: int | None = Query(default=None, ge=1),
    subject_id: str | None = Query(default=None, alias="subjectId"),
    page: int = Query(default=0, ge=0, description="Zero-based page number"),
    size: int = Query(default=10, ge=1, le=100, description="Page size"),
) -> APIResponse[PageResponse[MarkResponse]]:
    """List marks. Teachers only see marks of their own subjects."""
    result = store.list_marks(
        student_search=student_search,
        subject_code=subject_code,
        semester=semester,
        subject_id=subject_id,
        teacher_id=session.teacher_id if session.role is Role.TEACHER else None,
        page=page,
        size=size,
    )
    return APIResponse(data=page_to_response(result, mark_to_response))


@router.post(
    "",
    response_model=APIResponse[MarkResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_mark(
    mark: MarkCreate, session: StaffSessionDep, store: StateStoreDep
) -> APIResponse[MarkResponse]:
    """Record (or overwrite) one student's marks in one subject."""
    _ensure_subject_access(session, store, mark.subject_id)
    stored = store.upsert_mark(
        student_id=mark.student_id,
        subject_id=mark.subject_id,
        internal1=mark.internal1,
        internal2=mark.internal2,
        external=mark.external,
        exam_type=mark.exam_type,
        academic_year=mark.academic_year,
        uploaded_by=session.display_name or None,
    )
    return APIResponse(data=mark_to_response(stored))


@router.get("/template", response_class=PlainTextResponse)
def get_upload_template(_session: StaffSessionDep) -> PlainTextResponse:
    """CSV template for bulk uploads."""
    return PlainTextResponse(
        CSV_TEMPLATE,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="marks_template.csv"'},
    )


@router.post(
    "/upload",
    response_model=APIResponse[MarkUploadResponse],
    status_code=status.HTTP_201_CREATED,
)
async def upload_marks(
    session: StaffSessionDep,
    store: StateStoreDep,
    file: UploadFile = File(...),
    subject_id: str = Form(..., alias="subjectId"),
    exam_type: str = Form(default=DEFAULT_EXAM_TYPE, alias="examType"),
    academic_year: str | None = Form(default=None, alias="academicYear"),
) -> APIResponse[MarkUploadResponse]:
    """Bulk-record marks for one subject from a CSV sheet, all or nothing."""
    _ensure_subject_access(session, store, subject_id)
    try:
        text = (await file.read()).decode("utf-8")
    except UnicodeDecodeError as e:
        raise ValidationError("The CSV file must be UTF-8 encoded") from e

    stored = store.upload_marks(
        subject_id,
        parse_marks_csv(text),
        exam_type=exam_type,
        academic_year=academic_year,
        uploaded_by=session.display_name or None,
    )
    return APIResponse(
        data=MarkUploadResponse(
            subject_id=subject_id,
            uploaded=len(stored),
            marks=[mark_to_response(m) for m in stored],
        )
    )


@router.put("/{mark_id}", response_model=APIResponse[MarkResponse])
def update_mark(
    mark_id: str, mark: MarkUpdate, session: StaffSessionDep, store: StateStoreDep
) -> APIResponse[MarkResponse]:
    """Replace a mark's components; total and grade are recomputed."""
    existing = store.get_mark(mark_id)
    _ensure_subject_access(session, store, existing.subject_id)
    updated = store.update_mark(
        mark_id,
        internal1=mark.internal1,
        internal2=mark.internal2,
        external=mark.external,
        exam_type=mark.exam_type,
        academic_year=mark.academic_year,
        uploaded_by=session.display_name or None,
    )
    return APIResponse(data=mark_to_response(updated))


@router.delete("/{mark_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_mark(mark_id: str, session: StaffSessionDep, store: StateStoreDep) -> None:
    """Delete a mark."""
    existing = store.get_mark(mark_id)
    _ensure_subject_access(session, store, existing.subject_id)
    store.delete_mark(mark_id)
