"""Student model."""

from datetime import date
from enum import StrEnum

from sqlalchemy import BigInteger, Date, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.core.database.base import BaseModel


class StudentStatus(StrEnum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class ResidentialType(StrEnum):
    """Boarding arrangement; fee structures differ between the two."""

    RESIDENTIAL = "residential"
    NON_RESIDENTIAL = "non_residential"


class Student(BaseModel):
    """
    A pupil on the school roll.

    Fees are keyed by student and academic year. Deactivating a student
    (withdrawal, transfer) keeps the fee history; it only hides the student
    from default lists.
    """

    __tablename__ = "students"

    # STU-YYYY-NNNNNN, year of admission
    admission_number: Mapped[str] = mapped_column(
        String(50), nullable=False, unique=True, index=True
    )

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    medical_info: Mapped[str | None] = mapped_column(Text, nullable=True)

    class_name: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    section: Mapped[str | None] = mapped_column(String(10), nullable=True)
    residential_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ResidentialType.NON_RESIDENTIAL.value
    )
    admission_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    parent_name: Mapped[str] = mapped_column(String(200), nullable=False)
    # Stored normalised: +91XXXXXXXXXX
    parent_phone: Mapped[str] = mapped_column(String(20), nullable=False)
    parent_email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=StudentStatus.ACTIVE.value, index=True
    )
    created_by_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id"), nullable=False
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def is_active(self) -> bool:
        return self.status == StudentStatus.ACTIVE.value
