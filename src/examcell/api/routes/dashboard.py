"""Admin dashboard endpoints."""

from fastapi import APIRouter

from examcell.api.dependencies import AdminSessionDep, StateStoreDep
from examcell.api.models import APIResponse, DashboardStatsResponse, stats_to_response

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=APIResponse[DashboardStatsResponse])
def get_dashboard_stats(
    _session: AdminSessionDep, store: StateStoreDep
) -> APIResponse[DashboardStatsResponse]:
    """Exam-cell wide counters."""
    return APIResponse(data=stats_to_response(store.get_dashboard_stats()))
