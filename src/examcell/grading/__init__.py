"""Grading - grade points, marks banding, and SGPA/CGPA aggregation."""

from examcell.grading.aggregator import (
    aggregate_results,
    calc_sgpa,
    group_by_semester,
    round_to_twentieth,
    weighted_grade_point,
)
from examcell.grading.marks import (
    COMPONENT_MAX,
    GRADE_BANDS,
    clamp,
    grade_for_components,
    grade_from_percentage,
    percentage,
    total_marks,
)
from examcell.grading.models import (
    GRADE_POINTS,
    GradeSummary,
    ResultRecord,
    SemesterAggregate,
    grade_point_for,
)

__all__ = [
    "COMPONENT_MAX",
    "GRADE_BANDS",
    "GRADE_POINTS",
    "GradeSummary",
    "ResultRecord",
    "SemesterAggregate",
    "aggregate_results",
    "calc_sgpa",
    "clamp",
    "grade_for_components",
    "grade_from_percentage",
    "grade_point_for",
    "group_by_semester",
    "percentage",
    "round_to_twentieth",
    "total_marks",
    "weighted_grade_point",
]
