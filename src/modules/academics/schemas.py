"""Schemas for Academics module."""

from datetime import date
from decimal import Decimal

from pydantic import Field, field_validator

from src.modules.academics.models import ExamType
from src.shared.schemas.base import BaseSchema


class ExamCreate(BaseSchema):
    name: str = Field(..., min_length=1, max_length=200)
    class_name: str = Field(..., min_length=1, max_length=20)
    subject: str = Field(..., min_length=1, max_length=100)
    exam_type: ExamType
    academic_year: str = Field(..., min_length=4, max_length=20)
    exam_date: date
    total_marks: Decimal = Field(gt=0)


class ExamResponse(BaseSchema):
    id: int
    name: str
    class_name: str
    subject: str
    exam_type: str
    academic_year: str
    exam_date: date
    total_marks: Decimal


class MarkEntry(BaseSchema):
    student_id: int
    marks_obtained: Decimal = Field(ge=0)
    remarks: str | None = Field(None, max_length=500)


class MarksRecord(BaseSchema):
    """Marks for one or more students in an exam."""

    entries: list[MarkEntry] = Field(..., min_length=1)

    @field_validator("entries")
    @classmethod
    def one_entry_per_student(cls, v: list[MarkEntry]) -> list[MarkEntry]:
        ids = [e.student_id for e in v]
        if len(ids) != len(set(ids)):
            raise ValueError("Each student may appear only once")
        return v


class ExamResultResponse(BaseSchema):
    id: int
    exam_id: int
    student_id: int
    marks_obtained: Decimal
    grade: str
    remarks: str | None
