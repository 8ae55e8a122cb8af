"""Subject endpoints."""

from fastapi import APIRouter, Path, Query, status

from examcell.api.dependencies import AdminSessionDep, AnySessionDep, StateStoreDep
from examcell.api.models import APIResponse, SubjectCreate, SubjectResponse, subject_to_response

router = APIRouter(prefix="/subjects", tags=["subjects"])


@router.get("", response_model=APIResponse[list[SubjectResponse]])
def list_subjects(
    _session: AnySessionDep,
    store: StateStoreDep,
    semester: int | None = Query(default=None, ge=1, description="Filter by semester"),
) -> APIResponse[list[SubjectResponse]]:
    """List active subjects."""
    subjects = store.list_subjects(semester=semester)
    return APIResponse(data=[subject_to_response(s) for s in subjects])


@router.get("/semester/{semester}", response_model=APIResponse[list[SubjectResponse]])
def list_subjects_for_semester(
    _session: AnySessionDep,
    store: StateStoreDep,
    semester: int = Path(..., ge=1),
) -> APIResponse[list[SubjectResponse]]:
    """List active subjects of one semester."""
    subjects = store.list_subjects(semester=semester)
    return APIResponse(data=[subject_to_response(s) for s in subjects])


@router.post(
    "",
    response_model=APIResponse[SubjectResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_subject(
    subject: SubjectCreate, _session: AdminSessionDep, store: StateStoreDep
) -> APIResponse[SubjectResponse]:
    """Create a subject, optionally assigned to a teacher."""
    created = store.create_subject(
        code=subject.code,
        name=subject.name,
        semester=subject.semester,
        credits=subject.credits,
        department=subject.department,
        teacher_id=subject.teacher_id,
    )
    return APIResponse(data=subject_to_response(created))
