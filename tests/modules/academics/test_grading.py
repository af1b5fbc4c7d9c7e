from decimal import Decimal

import pytest

from src.core.exceptions import InvalidTotalMarksError, ValidationError
from src.modules.academics.grading import LetterGrade, compute_grade, percentage


class TestComputeGrade:
    """Tests for compute_grade."""

    @pytest.mark.parametrize(
        "marks,total,expected",
        [
            (90, 100, LetterGrade.A_PLUS),
            (100, 100, LetterGrade.A_PLUS),
            (89.99, 100, LetterGrade.A),
            (80, 100, LetterGrade.A),
            (70, 100, LetterGrade.B_PLUS),
            (60, 100, LetterGrade.B),
            (59, 100, LetterGrade.C_PLUS),
            (50, 100, LetterGrade.C_PLUS),
            (40, 100, LetterGrade.C),
            (33, 100, LetterGrade.D),
            (32.99, 100, LetterGrade.F),
            (0, 100, LetterGrade.F),
        ],
    )
    def test_band_boundaries(self, marks, total, expected):
        assert compute_grade(marks, total) == expected

    def test_other_totals(self):
        assert compute_grade(45, 50) == LetterGrade.A_PLUS
        assert compute_grade(Decimal("16.5"), 50) == LetterGrade.D

    def test_zero_total_rejected(self):
        with pytest.raises(InvalidTotalMarksError) as exc_info:
            compute_grade(10, 0)
        assert exc_info.value.status_code == 422

    def test_negative_total_rejected(self):
        with pytest.raises(InvalidTotalMarksError):
            compute_grade(10, -100)

    def test_non_numeric_marks_rejected(self):
        with pytest.raises(ValidationError):
            compute_grade("abc", 100)

    def test_monotonic_in_marks(self):
        """More marks never give a worse grade."""
        grades = [compute_grade(m, 100) for m in range(0, 101)]
        ranks = [g.rank for g in grades]
        assert ranks == sorted(ranks)

    def test_grade_ordering(self):
        assert LetterGrade.A_PLUS.rank > LetterGrade.A.rank > LetterGrade.F.rank
        assert max(LetterGrade, key=lambda g: g.rank) == LetterGrade.A_PLUS
        assert min(LetterGrade, key=lambda g: g.rank) == LetterGrade.F

    def test_percentage(self):
        assert percentage(45, 60) == Decimal("75")
