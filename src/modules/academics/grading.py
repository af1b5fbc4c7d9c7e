"""Letter grades from exam marks."""

from decimal import Decimal, InvalidOperation
from enum import StrEnum
from typing import Any

from src.core.exceptions import InvalidTotalMarksError, ValidationError
from src.shared.utils.money import to_decimal


class LetterGrade(StrEnum):
    """Letter grades, best first. Compare with ``rank`` (higher is better)."""

    A_PLUS = "A+"
    A = "A"
    B_PLUS = "B+"
    B = "B"
    C_PLUS = "C+"
    C = "C"
    D = "D"
    F = "F"

    @property
    def rank(self) -> int:
        return len(_GRADE_ORDER) - _GRADE_ORDER.index(self)


_GRADE_ORDER = list(LetterGrade)

# (minimum percentage, grade), checked top-down, first match wins
GRADE_BANDS: tuple[tuple[Decimal, LetterGrade], ...] = (
    (Decimal("90"), LetterGrade.A_PLUS),
    (Decimal("80"), LetterGrade.A),
    (Decimal("70"), LetterGrade.B_PLUS),
    (Decimal("60"), LetterGrade.B),
    (Decimal("50"), LetterGrade.C_PLUS),
    (Decimal("40"), LetterGrade.C),
    (Decimal("33"), LetterGrade.D),
)


def _as_decimal(value: Any, field: str) -> Decimal:
    try:
        result = to_decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"{field} must be a number, got {value!r}", field=field)
    if not result.is_finite():
        raise ValidationError(f"{field} must be a number, got {value!r}", field=field)
    return result


def percentage(marks_obtained: Any, total_marks: Any) -> Decimal:
    total = _as_decimal(total_marks, "total_marks")
    if total <= 0:
        raise InvalidTotalMarksError(total_marks)
    return _as_decimal(marks_obtained, "marks_obtained") * 100 / total


def compute_grade(marks_obtained: Any, total_marks: Any) -> LetterGrade:
    """
    Letter grade for ``marks_obtained`` out of ``total_marks``.

    >>> compute_grade(59, 100)
    <LetterGrade.C_PLUS: 'C+'>

    Raises:
        InvalidTotalMarksError: total_marks is zero or negative
    """
    pct = percentage(marks_obtained, total_marks)
    for minimum, grade in GRADE_BANDS:
        if pct >= minimum:
            return grade
    return LetterGrade.F
