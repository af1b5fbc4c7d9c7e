"""Exam and result models."""

from datetime import date
from decimal import Decimal
from enum import StrEnum

from sqlalchemy import BigInteger, Date, ForeignKey, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.core.database.base import BaseModel


class ExamType(StrEnum):
    MIDTERM = "midterm"
    FINAL = "final"
    QUARTERLY = "quarterly"
    HALF_YEARLY = "half_yearly"


class Exam(BaseModel):
    """An exam sat by one class in one subject."""

    __tablename__ = "exams"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    class_name: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    subject: Mapped[str] = mapped_column(String(100), nullable=False)
    exam_type: Mapped[str] = mapped_column(String(20), nullable=False)
    academic_year: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    exam_date: Mapped[date] = mapped_column(Date, nullable=False)
    total_marks: Mapped[Decimal] = mapped_column(Numeric(7, 2), nullable=False)

    created_by_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("users.id"), nullable=False)

    results: Mapped[list["ExamResult"]] = relationship(
        "ExamResult",
        back_populates="exam",
        cascade="all, delete-orphan",
        order_by="ExamResult.student_id",
    )


class ExamResult(BaseModel):
    """Marks of one student in one exam. The grade is stored as computed at entry."""

    __tablename__ = "exam_results"

    exam_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("exams.id", ondelete="CASCADE"), nullable=False, index=True
    )
    student_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("students.id"), nullable=False, index=True
    )
    marks_obtained: Mapped[Decimal] = mapped_column(Numeric(7, 2), nullable=False)
    grade: Mapped[str] = mapped_column(String(5), nullable=False)
    remarks: Mapped[str | None] = mapped_column(String(500), nullable=True)

    recorded_by_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("users.id"), nullable=False)

    exam: Mapped["Exam"] = relationship("Exam", back_populates="results")

    __table_args__ = (UniqueConstraint("exam_id", "student_id", name="uq_exam_result_student"),)
