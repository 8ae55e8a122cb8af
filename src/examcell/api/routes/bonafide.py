"""Bonafide certificate management endpoints (admin)."""

from fastapi import APIRouter, Query

from examcell.api.dependencies import AdminSessionDep, StateStoreDep
from examcell.api.models import (
    APIResponse,
    BonafideReject,
    BonafideResponse,
    PageResponse,
    bonafide_to_response,
    page_to_response,
)
from examcell.state_store import BonafideStatus

router = APIRouter(prefix="/bonafide-requests", tags=["bonafide"])


@router.get("", response_model=APIResponse[PageResponse[BonafideResponse]])
def list_bonafide_requests(
    _session: AdminSessionDep,
    store: StateStoreDep,
    search: str | None = Query(default=None, description="Purpose, student name or roll no"),
    status: BonafideStatus | None = Query(default=None, description="Filter by status"),
    page: int = Query(default=0, ge=0, description="Zero-based page number"),
    size: int = Query(default=10, ge=1, le=100, description="Page size"),
) -> APIResponse[PageResponse[BonafideResponse]]:
    """List all bonafide requests, most recent first."""
    result = store.list_bonafide_requests(search=search, status=status, page=page, size=size)
    return APIResponse(data=page_to_response(result, bonafide_to_response))


@router.get("/{request_id}", response_model=APIResponse[BonafideResponse])
def get_bonafide_request(
    request_id: str, _session: AdminSessionDep, store: StateStoreDep
) -> APIResponse[BonafideResponse]:
    """Get a bonafide request by ID."""
    return APIResponse(data=bonafide_to_response(store.get_bonafide_request(request_id)))


@router.post("/{request_id}/approve", response_model=APIResponse[BonafideResponse])
def approve_bonafide_request(
    request_id: str, session: AdminSessionDep, store: StateStoreDep
) -> APIResponse[BonafideResponse]:
    """Approve a pending request and issue its certificate number."""
    approved = store.approve_bonafide_request(
        request_id, approved_by=session.display_name or session.email
    )
    return APIResponse(data=bonafide_to_response(approved))


@router.post("/{request_id}/reject", response_model=APIResponse[BonafideResponse])
def reject_bonafide_request(
    request_id: str, body: BonafideReject, session: AdminSessionDep, store: StateStoreDep
) -> APIResponse[BonafideResponse]:
    """Reject a pending request with a reason."""
    rejected = store.reject_bonafide_request(
        request_id,
        rejection_reason=body.reason,
        rejected_by=session.display_name or session.email,
    )
    return APIResponse(data=bonafide_to_response(rejected))
