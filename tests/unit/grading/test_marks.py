"""Unit tests for marks banding and grade points."""

import pytest

from examcell.grading import (
    GRADE_POINTS,
    ResultRecord,
    grade_for_components,
    grade_from_percentage,
    grade_point_for,
    percentage,
    total_marks,
)


@pytest.mark.unit
class TestGradePoints:
    def test_table(self) -> None:
        assert GRADE_POINTS == {
            "A+": 10,
            "A": 9,
            "B+": 8,
            "B": 7,
            "C+": 6,
            "C": 5,
            "D": 4,
            "F": 0,
        }

    @pytest.mark.parametrize("grade", [None, "", "E", "O", "pass"])
    def test_unknown_grades_map_to_zero(self, grade: str | None) -> None:
        assert grade_point_for(grade) == 0

    def test_normalizes_case_and_whitespace(self) -> None:
        assert grade_point_for(" b+ ") == 8

    def test_record_properties(self) -> None:
        record = ResultRecord("CS101", "Programming", credits=-1, semester_number=1, grade="A")
        assert record.grade_point == 9
        assert record.effective_credits == 0


@pytest.mark.unit
class TestTotals:
    def test_sum_out_of_three_hundred(self) -> None:
        assert total_marks(40, 45, 80) == (165.0, 300.0)

    def test_components_clamped(self) -> None:
        assert total_marks(-5, 120, 50) == (150.0, 300.0)

    def test_percentage(self) -> None:
        assert percentage(150, 300) == pytest.approx(50.0)
        assert percentage(10, 0) == 0.0


@pytest.mark.unit
class TestBands:
    @pytest.mark.parametrize(
        ("pct", "grade"),
        [
            (100, "A+"),
            (90, "A+"),
            (89.99, "A"),
            (80, "A"),
            (70, "B+"),
            (60, "B"),
            (50, "C+"),
            (45, "C"),
            (40, "D"),
            (39.99, "F"),
            (0, "F"),
            (-10, "F"),
        ],
    )
    def test_grade_from_percentage(self, pct: float, grade: str) -> None:
        assert grade_from_percentage(pct) == grade

    def test_grade_for_components(self) -> None:
        assert grade_for_components(90, 90, 90) == "A+"
        assert grade_for_components(45, 45, 90) == "B"
        assert grade_for_components(30, 30, 30) == "F"
