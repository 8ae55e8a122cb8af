"""SGPA/CGPA calculator endpoint."""

from fastapi import APIRouter

from examcell.api.dependencies import AnySessionDep
from examcell.api.models import (
    APIResponse,
    GradeSummaryResponse,
    ResultRecordModel,
    summary_to_response,
)
from examcell.grading import aggregate_results

router = APIRouter(prefix="/results", tags=["results"])


@router.post("/aggregate", response_model=APIResponse[GradeSummaryResponse])
def aggregate(
    records: list[ResultRecordModel], _session: AnySessionDep
) -> APIResponse[GradeSummaryResponse]:
    """Aggregate arbitrary result records into SGPA per semester and CGPA."""
    summary = aggregate_results(r.to_record() for r in records)
    return APIResponse(data=summary_to_response(summary))
