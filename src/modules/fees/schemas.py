"""Pydantic schemas for Fees module."""

from datetime import date
from decimal import Decimal

from pydantic import Field, field_validator, model_validator

from src.modules.fees.models import (
    ExpenseCategory,
    FeePaymentStatus,
    InstallmentStatus,
    PaymentMethod,
)
from src.shared.schemas.base import BaseSchema


# --- Fee Schemas ---


class InstallmentCreate(BaseSchema):
    due_date: date
    amount: Decimal = Field(gt=0)
    status: InstallmentStatus = InstallmentStatus.DUE


class FeeCreate(BaseSchema):
    """Schema for creating a fee with an explicit installment schedule."""

    student_id: int
    academic_year: str = Field(..., min_length=4, max_length=20, examples=["2024-25"])
    total_amount: Decimal = Field(gt=0)
    medical_stationary_pool: Decimal = Field(Decimal("0.00"), ge=0)
    installments: list[InstallmentCreate] = Field(..., min_length=1)

    @model_validator(mode="after")
    def pool_within_total(self):
        if self.medical_stationary_pool > self.total_amount:
            raise ValueError("Medical & stationary pool cannot exceed the total amount")
        return self


class FeeProvision(BaseSchema):
    """Schema for provisioning a student's fee from a fee structure."""

    student_id: int
    fee_structure_id: int
    due_dates: list[date] = Field(..., min_length=1, max_length=12)

    @field_validator("due_dates")
    @classmethod
    def distinct_dates(cls, v: list[date]) -> list[date]:
        if len(set(v)) != len(v):
            raise ValueError("Due dates must be distinct")
        return sorted(v)


class FeeFilters(BaseSchema):
    """Filters for listing fees."""

    academic_year: str | None = None
    student_id: int | None = None
    payment_status: FeePaymentStatus | None = None
    search: str | None = None
    page: int = Field(1, ge=1)
    limit: int = Field(50, ge=1, le=500)


# --- Ledger operations ---


class ExpenseCreate(BaseSchema):
    """Schema for drawing an expense against the pool."""

    # Non-positive amounts are rejected by the ledger as InvalidAmountError
    amount: Decimal
    category: ExpenseCategory
    expense_date: date
    description: str = Field(..., min_length=1, max_length=500)
    bill_number: str | None = Field(None, max_length=50)
    receipt_generated: bool = False


class CommonExpenseCreate(BaseSchema):
    """One expense shared equally by the students of a class (and section)."""

    academic_year: str = Field(..., min_length=4, max_length=20, examples=["2024-25"])
    class_name: str = Field(..., min_length=1, max_length=20)
    section: str | None = Field(None, max_length=10)
    residential_only: bool = True
    amount: Decimal
    category: ExpenseCategory = ExpenseCategory.STATIONARY
    expense_date: date
    description: str = Field(..., min_length=1, max_length=500)
    bill_number: str | None = Field(None, max_length=50)


class InstallmentPayment(BaseSchema):
    payment_date: date
    payment_method: PaymentMethod = PaymentMethod.CASH


# --- Responses ---


class InstallmentResponse(BaseSchema):
    id: int
    due_date: date
    amount: Decimal
    status: str
    paid_date: date | None
    receipt_number: str | None
    payment_method: str | None


class ExpenseResponse(BaseSchema):
    id: int
    expense_date: date
    description: str
    amount: Decimal
    category: str
    bill_number: str | None
    receipt_generated: bool
    created_by_id: int | None


class FeeResponse(BaseSchema):
    """Fee with every derived value computed at read time."""

    id: int
    student_id: int
    student_name: str
    academic_year: str
    fee_structure_id: int | None
    total_amount: Decimal
    medical_stationary_pool: Decimal
    total_expenses: Decimal
    remaining_pool_balance: Decimal
    paid_amount: Decimal
    outstanding_amount: Decimal
    payment_status: FeePaymentStatus
    is_reconciled: bool
    version: int
    installments: list[InstallmentResponse]
    expenses: list[ExpenseResponse]


class PoolSummaryResponse(BaseSchema):
    fee_id: int
    student_name: str
    medical_stationary_pool: Decimal
    total_expenses: Decimal
    remaining_pool_balance: Decimal
    medical_expenses: Decimal
    stationary_expenses: Decimal


class ExpenseResultResponse(BaseSchema):
    """An accepted expense together with the pool after it."""

    expense: ExpenseResponse
    remaining_pool_balance: Decimal


class CommonExpenseShare(BaseSchema):
    fee_id: int
    student_id: int
    student_name: str
    expense_id: int
    amount: Decimal
    remaining_pool_balance: Decimal


class CommonExpenseResponse(BaseSchema):
    academic_year: str
    class_name: str
    section: str | None
    category: str
    total_amount: Decimal
    shares: list[CommonExpenseShare]


class ReminderFeeEntry(BaseSchema):
    fee_id: int
    student_id: int
    student_name: str
    installment_ids: list[int]
    amount_due: Decimal
    earliest_due_date: date


class ReminderClassificationResponse(BaseSchema):
    today: date
    window_days: int
    overdue: list[ReminderFeeEntry]
    upcoming: list[ReminderFeeEntry]
