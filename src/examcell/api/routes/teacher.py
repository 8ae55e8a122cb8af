"""Teacher self-service endpoints.

Queries reach a teacher through the faculty name the student addressed.
"""

from fastapi import APIRouter, Query

from examcell.api.dependencies import StateStoreDep, TeacherSessionDep, ensure_teacher_access
from examcell.api.models import (
    APIResponse,
    PageResponse,
    QueryRespond,
    QueryResponse,
    TeacherDashboardResponse,
    page_to_response,
    query_to_response,
    teacher_dashboard_to_response,
)
from examcell.auth import AccessDeniedError, GateDecision
from examcell.state_store import QueryStatus

router = APIRouter(prefix="/teacher", tags=["teacher"])


@router.get("/dashboard/{teacher_id}", response_model=APIResponse[TeacherDashboardResponse])
def get_teacher_dashboard(
    teacher_id: str, session: TeacherSessionDep, store: StateStoreDep
) -> APIResponse[TeacherDashboardResponse]:
    """Landing page data: subjects, students, pending queries, uploads."""
    ensure_teacher_access(session, teacher_id)
    dashboard = store.get_teacher_dashboard(teacher_id)
    return APIResponse(data=teacher_dashboard_to_response(dashboard))


@router.get("/{teacher_id}/queries", response_model=APIResponse[PageResponse[QueryResponse]])
def list_teacher_queries(
    teacher_id: str,
    session: TeacherSessionDep,
    store: StateStoreDep,
    status: QueryStatus | None = Query(default=None, description="Filter by status"),
    page: int = Query(default=0, ge=0, description="Zero-based page number"),
    size: int = Query(default=10, ge=1, le=100, description="Page size"),
) -> APIResponse[PageResponse[QueryResponse]]:
    """Queries addressed to the teacher, most recent first."""
    ensure_teacher_access(session, teacher_id)
    teacher = store.get_teacher(teacher_id)
    result = store.list_queries(faculty=teacher.name, status=status, page=page, size=size)
    return APIResponse(data=page_to_response(result, query_to_response))


@router.post(
    "/{teacher_id}/queries/{query_id}/respond",
    response_model=APIResponse[QueryResponse],
)
def respond_to_query(
    teacher_id: str,
    query_id: str,
    body: QueryRespond,
    session: TeacherSessionDep,
    store: StateStoreDep,
) -> APIResponse[QueryResponse]:
    """Answer a query addressed to the teacher; it becomes RESOLVED."""
    ensure_teacher_access(session, teacher_id)
    teacher = store.get_teacher(teacher_id)
    query = store.get_query(query_id)
    if query.faculty.strip().lower() != teacher.name.strip().lower():
        raise AccessDeniedError(GateDecision.REDIRECT_HOME, "Query is not addressed to you")
    updated = store.respond_to_query(query_id, body.response, responded_by=teacher.name)
    return APIResponse(data=query_to_response(updated))
