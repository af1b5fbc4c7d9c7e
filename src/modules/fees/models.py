"""Fee ledger models: Fee, FeeInstallment, FeeExpense."""

from datetime import date, datetime
from decimal import Decimal
from enum import StrEnum

from sqlalchemy import (
    BigInteger,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.core.database.base import Base, BigIntPK, MoneyType


class InstallmentStatus(StrEnum):
    """Stored status of a scheduled installment."""

    PAID = "paid"
    DUE = "due"
    OVERDUE = "overdue"


class FeePaymentStatus(StrEnum):
    """Summary status of a whole fee, for list views."""

    PAID = "Paid"
    DUE = "Due"
    OVERDUE = "Overdue"


class ExpenseCategory(StrEnum):
    """What a pool expense was spent on."""

    MEDICAL = "medical"
    STATIONARY = "stationary"


class PaymentMethod(StrEnum):
    """How an installment was paid."""

    CASH = "cash"
    CHEQUE = "cheque"
    ONLINE = "online"
    CARD = "card"


class Fee(Base):
    """
    Fee record for one student in one academic year.

    ``medical_stationary_pool`` is a ring-fenced part of ``total_amount``
    that expenses are drawn against. The remaining pool balance is always
    computed from the expenses, never stored.

    ``version`` is bumped on every ledger mutation; writers claim it with a
    compare-and-swap before changing installments or expenses.
    """

    __tablename__ = "fees"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("students.id"), nullable=False, index=True
    )
    student_name: Mapped[str] = mapped_column(String(200), nullable=False)
    academic_year: Mapped[str] = mapped_column(String(20), nullable=False, index=True)  # "2024-25"

    total_amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    medical_stationary_pool: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False, default=Decimal("0.00")
    )

    fee_structure_id: Mapped[int | None] = mapped_column(
        BigInteger, ForeignKey("fee_structures.id"), nullable=True
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1, server_default="1")

    created_by_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("users.id"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    # Relationships
    installments: Mapped[list["FeeInstallment"]] = relationship(
        "FeeInstallment",
        back_populates="fee",
        cascade="all, delete-orphan",
        order_by="FeeInstallment.due_date, FeeInstallment.id",
    )
    expenses: Mapped[list["FeeExpense"]] = relationship(
        "FeeExpense",
        back_populates="fee",
        cascade="all, delete-orphan",
        order_by="FeeExpense.expense_date, FeeExpense.id",
    )

    __table_args__ = (
        UniqueConstraint("student_id", "academic_year", name="uq_fee_student_year"),
    )


class FeeInstallment(Base):
    """One scheduled partial payment towards a fee's total."""

    __tablename__ = "fee_installments"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    fee_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("fees.id", ondelete="CASCADE"), nullable=False, index=True
    )
    due_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=InstallmentStatus.DUE.value, index=True
    )
    paid_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    receipt_number: Mapped[str | None] = mapped_column(
        String(50), nullable=True, unique=True
    )
    payment_method: Mapped[str | None] = mapped_column(String(20), nullable=True)

    fee: Mapped["Fee"] = relationship("Fee", back_populates="installments")

    @property
    def is_paid(self) -> bool:
        return self.status == InstallmentStatus.PAID.value


class FeeExpense(Base):
    """Itemised medical or stationary spend drawn against a fee's pool."""

    __tablename__ = "fee_expenses"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    fee_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("fees.id", ondelete="CASCADE"), nullable=False, index=True
    )
    expense_date: Mapped[date] = mapped_column(Date, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    category: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    bill_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    receipt_generated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_by_id: Mapped[int | None] = mapped_column(
        BigInteger, ForeignKey("users.id"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    fee: Mapped["Fee"] = relationship("Fee", back_populates="expenses")
