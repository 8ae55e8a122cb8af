"""Query management endpoints (admin)."""

from fastapi import APIRouter, Query

from examcell.api.dependencies import AdminSessionDep, StateStoreDep
from examcell.api.models import (
    APIResponse,
    PageResponse,
    QueryRespond,
    QueryResponse,
    QueryStatusUpdate,
    page_to_response,
    query_to_response,
)
from examcell.state_store import QueryStatus

router = APIRouter(prefix="/queries", tags=["queries"])


@router.get("", response_model=APIResponse[PageResponse[QueryResponse]])
def list_queries(
    _session: AdminSessionDep,
    store: StateStoreDep,
    search: str | None = Query(default=None, description="Title, description or student"),
    status: QueryStatus | None = Query(default=None, description="Filter by status"),
    page: int = Query(default=0, ge=0, description="Zero-based page number"),
    size: int = Query(default=10, ge=1, le=100, description="Page size"),
) -> APIResponse[PageResponse[QueryResponse]]:
    """List all queries, most recent first."""
    result = store.list_queries(search=search, status=status, page=page, size=size)
    return APIResponse(data=page_to_response(result, query_to_response))


@router.get("/{query_id}", response_model=APIResponse[QueryResponse])
def get_query(
    query_id: str, _session: AdminSessionDep, store: StateStoreDep
) -> APIResponse[QueryResponse]:
    """Get a query by ID."""
    return APIResponse(data=query_to_response(store.get_query(query_id)))


@router.put("/{query_id}/status", response_model=APIResponse[QueryResponse])
def update_query_status(
    query_id: str, body: QueryStatusUpdate, _session: AdminSessionDep, store: StateStoreDep
) -> APIResponse[QueryResponse]:
    """Move a query to another status. Closed queries stay closed."""
    updated = store.update_query_status(query_id, body.status)
    return APIResponse(data=query_to_response(updated))


@router.post("/{query_id}/respond", response_model=APIResponse[QueryResponse])
def respond_to_query(
    query_id: str, body: QueryRespond, session: AdminSessionDep, store: StateStoreDep
) -> APIResponse[QueryResponse]:
    """Answer a query on behalf of the exam cell; it becomes RESOLVED."""
    updated = store.respond_to_query(
        query_id, body.response, responded_by=session.display_name or "Exam Cell"
    )
    return APIResponse(data=query_to_response(updated))
