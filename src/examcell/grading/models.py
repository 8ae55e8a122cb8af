"""Data models for grade aggregation."""

from __future__ import annotations

from dataclasses import dataclass, field

# Letter grade -> grade point
GRADE_POINTS: dict[str, int] = {
    "A+": 10,
    "A": 9,
    "B+": 8,
    "B": 7,
    "C+": 6,
    "C": 5,
    "D": 4,
    "F": 0,
}


def grade_point_for(grade: str | None) -> int:
    """Map a letter grade to its grade point. Unknown grades map to 0."""
    if not grade:
        return 0
    return GRADE_POINTS.get(grade.strip().upper(), 0)


@dataclass(frozen=True)
class ResultRecord:
    """One subject's outcome for one student in one semester."""

    subject_code: str
    subject_name: str
    credits: int
    semester_number: int
    marks_obtained: float = 0.0
    max_marks: float = 100.0
    grade: str | None = None

    @property
    def grade_point(self) -> int:
        return grade_point_for(self.grade)

    @property
    def effective_credits(self) -> int:
        """Credits counted towards averages (non-positive counts as zero)."""
        return self.credits if self.credits > 0 else 0


@dataclass
class SemesterAggregate:
    """Derived per-semester view. Never persisted."""

    semester_number: int
    subjects: list[ResultRecord] = field(default_factory=list)
    sgpa: float = 0.0
    total_credits: int = 0


@dataclass
class GradeSummary:
    """Aggregated SGPA per semester plus overall CGPA."""

    per_semester: list[SemesterAggregate] = field(default_factory=list)
    cgpa: float = 0.0
    total_credits_overall: int = 0

    @property
    def completed_semesters(self) -> int:
        return len(self.per_semester)
