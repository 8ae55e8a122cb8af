"""Student self-service endpoints.

Students reach only their own records; admins reach any student's.
"""

from fastapi import APIRouter, Query, status

from examcell.api.dependencies import StateStoreDep, StudentSessionDep, ensure_student_access
from examcell.api.models import (
    APIResponse,
    BonafideCreate,
    BonafideResponse,
    PageResponse,
    QueryCreate,
    QueryResponse,
    StudentDashboardResponse,
    StudentResultsResponse,
    bonafide_to_response,
    page_to_response,
    query_to_response,
    record_to_response,
    student_dashboard_to_response,
    summary_to_response,
)
from examcell.grading import aggregate_results

router = APIRouter(prefix="/student", tags=["student"])


@router.get("/dashboard/{student_id}", response_model=APIResponse[StudentDashboardResponse])
def get_student_dashboard(
    student_id: str, session: StudentSessionDep, store: StateStoreDep
) -> APIResponse[StudentDashboardResponse]:
    """Landing page data: CGPA, pending queries, certificates, recent activity."""
    ensure_student_access(session, student_id)
    dashboard = store.get_student_dashboard(student_id)
    return APIResponse(data=student_dashboard_to_response(dashboard))


@router.get("/{student_id}/results", response_model=APIResponse[StudentResultsResponse])
def get_student_results(
    student_id: str, session: StudentSessionDep, store: StateStoreDep
) -> APIResponse[StudentResultsResponse]:
    """Final-exam results with SGPA per semester and CGPA."""
    ensure_student_access(session, student_id)
    records = store.get_result_records(student_id)
    return APIResponse(
        data=StudentResultsResponse(
            student_id=student_id,
            records=[record_to_response(r) for r in records],
            summary=summary_to_response(aggregate_results(records)),
        )
    )


@router.get("/{student_id}/queries", response_model=APIResponse[PageResponse[QueryResponse]])
def list_student_queries(
    student_id: str,
    session: StudentSessionDep,
    store: StateStoreDep,
    page: int = Query(default=0, ge=0, description="Zero-based page number"),
    size: int = Query(default=10, ge=1, le=100, description="Page size"),
) -> APIResponse[PageResponse[QueryResponse]]:
    """The student's queries, most recent first."""
    ensure_student_access(session, student_id)
    result = store.list_queries(student_id=student_id, page=page, size=size)
    return APIResponse(data=page_to_response(result, query_to_response))


@router.post(
    "/{student_id}/queries",
    response_model=APIResponse[QueryResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_student_query(
    student_id: str, query: QueryCreate, session: StudentSessionDep, store: StateStoreDep
) -> APIResponse[QueryResponse]:
    """Submit a query to a faculty member."""
    ensure_student_access(session, student_id)
    created = store.create_query(
        student_id=student_id,
        subject=query.subject,
        faculty=query.faculty,
        title=query.title,
        description=query.description,
        priority=query.priority,
    )
    return APIResponse(data=query_to_response(created))


@router.get(
    "/{student_id}/bonafide-requests",
    response_model=APIResponse[PageResponse[BonafideResponse]],
)
def list_student_bonafide_requests(
    student_id: str,
    session: StudentSessionDep,
    store: StateStoreDep,
    page: int = Query(default=0, ge=0, description="Zero-based page number"),
    size: int = Query(default=10, ge=1, le=100, description="Page size"),
) -> APIResponse[PageResponse[BonafideResponse]]:
    """The student's bonafide requests, most recent first."""
    ensure_student_access(session, student_id)
    result = store.list_bonafide_requests(student_id=student_id, page=page, size=size)
    return APIResponse(data=page_to_response(result, bonafide_to_response))


@router.post(
    "/{student_id}/bonafide-requests",
    response_model=APIResponse[BonafideResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_student_bonafide_request(
    student_id: str, request: BonafideCreate, session: StudentSessionDep, store: StateStoreDep
) -> APIResponse[BonafideResponse]:
    """Request a bonafide certificate."""
    ensure_student_access(session, student_id)
    created = store.create_bonafide_request(
        student_id=student_id,
        purpose=request.purpose,
        custom_purpose=request.custom_purpose,
        additional_info=request.additional_info,
    )
    return APIResponse(data=bonafide_to_response(created))
