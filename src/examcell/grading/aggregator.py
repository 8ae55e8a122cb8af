"""SGPA / CGPA aggregation over result records."""

from __future__ import annotations

import math
from collections.abc import Iterable

from examcell.grading.models import GradeSummary, ResultRecord, SemesterAggregate

# Grade averages are reported to the nearest 0.05
ROUNDING_STEPS_PER_POINT = 20


def round_to_twentieth(value: float) -> float:
    """Round to the nearest 0.05, halves away from zero.

    Args:
        value: The raw average.

    Returns:
        The rounded value, e.g. 8.125 -> 8.15, 8.12 -> 8.1.
    """
    scaled = abs(value) * ROUNDING_STEPS_PER_POINT
    # Absorb float noise such as 162.49999999999997 before flooring
    rounded = math.floor(round(scaled, 9) + 0.5) / ROUNDING_STEPS_PER_POINT
    return math.copysign(rounded, value) if value else 0.0


def weighted_grade_point(records: Iterable[ResultRecord]) -> tuple[float, int]:
    """Credit-weighted grade point average (unrounded).

    Args:
        records: Result records to average.

    Returns:
        Tuple of (average, total credits). Average is 0.0 when there are no
        positive credits.
    """
    weighted = 0.0
    total_credits = 0
    for record in records:
        credits = record.effective_credits
        weighted += record.grade_point * credits
        total_credits += credits
    if total_credits == 0:
        return 0.0, 0
    return weighted / total_credits, total_credits


def calc_sgpa(records: Iterable[ResultRecord]) -> float:
    """SGPA for records of a single semester."""
    average, _ = weighted_grade_point(records)
    return round_to_twentieth(average)


def group_by_semester(records: Iterable[ResultRecord]) -> dict[int, list[ResultRecord]]:
    """Partition records by semester number, ascending, keeping input order within a group."""
    grouped: dict[int, list[ResultRecord]] = {}
    for record in records:
        grouped.setdefault(record.semester_number, []).append(record)
    return {semester: grouped[semester] for semester in sorted(grouped)}


def aggregate_results(records: Iterable[ResultRecord]) -> GradeSummary:
    """Compute per-semester SGPA and overall CGPA.

    CGPA is the credit-weighted average across every record of every
    semester, not the mean of the semester SGPAs.

    Args:
        records: Result records, possibly spanning several semesters.

    Returns:
        GradeSummary with semesters in ascending order. Empty input gives an
        empty summary.
    """
    records = list(records)

    per_semester: list[SemesterAggregate] = []
    for semester, subjects in group_by_semester(records).items():
        average, credits = weighted_grade_point(subjects)
        per_semester.append(
            SemesterAggregate(
                semester_number=semester,
                subjects=subjects,
                sgpa=round_to_twentieth(average),
                total_credits=credits,
            )
        )

    overall, overall_credits = weighted_grade_point(records)
    return GradeSummary(
        per_semester=per_semester,
        cgpa=round_to_twentieth(overall),
        total_credits_overall=overall_credits,
    )
