"""
Fee ledger rules.

Pure functions over Fee / FeeInstallment / FeeExpense objects: no session,
no I/O. Services load a fee, hand it to these functions and persist what
they changed. Everything derived (remaining pool, paid amount, payment
status, reminder eligibility) is recomputed on every call.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import ROUND_DOWN, Decimal, InvalidOperation
from typing import Any

from src.core.config import StatusStrategy
from src.core.exceptions import (
    InstallmentNotFoundError,
    InsufficientPoolFundsError,
    InvalidAmountError,
)
from src.modules.fees.models import (
    ExpenseCategory,
    Fee,
    FeeExpense,
    FeeInstallment,
    FeePaymentStatus,
    InstallmentStatus,
    PaymentMethod,
)
from src.shared.utils.money import ZERO, round_money, to_decimal

DEFAULT_REMINDER_WINDOW_DAYS = 7


@dataclass(frozen=True)
class ExpenseCandidate:
    """An expense as entered by staff, before it is accepted into the ledger."""

    expense_date: date
    description: str
    amount: Any
    category: ExpenseCategory
    bill_number: str | None = None
    receipt_generated: bool = False
    created_by_id: int | None = None


@dataclass
class ReminderBuckets:
    """Fees eligible for reminders. A fee may sit in both lists."""

    overdue: list[Fee] = field(default_factory=list)
    upcoming: list[Fee] = field(default_factory=list)


# --- Pool ---


def total_expenses(fee: Fee) -> Decimal:
    return round_money(sum((to_decimal(e.amount) for e in fee.expenses), ZERO))


def remaining_pool_balance(fee: Fee) -> Decimal:
    """Pool amount minus every expense drawn against it."""
    return round_money(to_decimal(fee.medical_stationary_pool) - total_expenses(fee))


def validate_amount(amount: Any) -> Decimal:
    """Return the amount as money, or raise InvalidAmountError."""
    try:
        value = to_decimal(amount)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmountError(amount)
    if not value.is_finite():
        raise InvalidAmountError(amount)
    value = round_money(value)
    if value <= 0:
        raise InvalidAmountError(amount)
    return value


def add_expense(fee: Fee, candidate: ExpenseCandidate) -> FeeExpense:
    """
    Draw an expense against the fee's pool.

    The amount is validated before the balance check. On rejection the
    expense list is left untouched; on acceptance exactly one expense is
    appended and returned (its id is assigned when the session flushes).

    Raises:
        InvalidAmountError: amount is non-numeric or not positive
        InsufficientPoolFundsError: amount exceeds the remaining pool balance
    """
    amount = validate_amount(candidate.amount)
    available = remaining_pool_balance(fee)
    if amount > available:
        raise InsufficientPoolFundsError(fee.id, attempted=amount, available=available)

    expense = FeeExpense(
        expense_date=candidate.expense_date,
        description=candidate.description,
        amount=amount,
        category=ExpenseCategory(candidate.category).value,
        bill_number=candidate.bill_number,
        receipt_generated=candidate.receipt_generated,
        created_by_id=candidate.created_by_id,
    )
    fee.expenses.append(expense)
    return expense


def expenses_by_category(fee: Fee) -> dict[ExpenseCategory, Decimal]:
    totals = {category: ZERO for category in ExpenseCategory}
    for expense in fee.expenses:
        category = ExpenseCategory(expense.category)
        totals[category] = round_money(totals[category] + to_decimal(expense.amount))
    return totals


# --- Installments ---


def find_installment(fee: Fee, installment_id: int) -> FeeInstallment:
    for installment in fee.installments:
        if installment.id == installment_id:
            return installment
    raise InstallmentNotFoundError(fee.id, installment_id)


def pay_installment(
    fee: Fee,
    installment_id: int,
    payment_date: date,
    receipt_number: str | None = None,
    payment_method: PaymentMethod | None = None,
) -> Fee:
    """
    Mark one installment as paid on ``payment_date``.

    The paid amount is not checked against the installment amount and no
    other installment is touched.

    Raises:
        InstallmentNotFoundError: installment is not part of this fee
    """
    installment = find_installment(fee, installment_id)
    installment.status = InstallmentStatus.PAID.value
    installment.paid_date = payment_date
    if receipt_number is not None:
        installment.receipt_number = receipt_number
    if payment_method is not None:
        installment.payment_method = PaymentMethod(payment_method).value
    return fee


def paid_amount(fee: Fee) -> Decimal:
    return round_money(
        sum((to_decimal(i.amount) for i in fee.installments if i.is_paid), ZERO)
    )


def outstanding_amount(fee: Fee) -> Decimal:
    """Total amount minus paid installments."""
    return round_money(to_decimal(fee.total_amount) - paid_amount(fee))


def scheduled_amount(fee: Fee) -> Decimal:
    return round_money(sum((to_decimal(i.amount) for i in fee.installments), ZERO))


def is_reconciled(fee: Fee) -> bool:
    """Whether the installment schedule adds up to the fee total."""
    return scheduled_amount(fee) == round_money(to_decimal(fee.total_amount))


# --- Status ---


def effective_installment_status(
    installment: FeeInstallment,
    today: date,
    strategy: StatusStrategy = StatusStrategy.STORED,
) -> InstallmentStatus:
    """
    Status of an installment as read under ``strategy``.

    STORED trusts the persisted column. DERIVED ignores it for unpaid
    installments and compares the due date with ``today``.
    """
    if strategy == StatusStrategy.STORED:
        return InstallmentStatus(installment.status)
    if strategy == StatusStrategy.DERIVED:
        if installment.is_paid:
            return InstallmentStatus.PAID
        if installment.due_date < today:
            return InstallmentStatus.OVERDUE
        return InstallmentStatus.DUE
    raise ValueError(f"Unknown status strategy: {strategy!r}")


def fee_payment_status(
    fee: Fee,
    today: date | None = None,
    strategy: StatusStrategy = StatusStrategy.STORED,
) -> FeePaymentStatus:
    """Overdue if any installment is overdue, else Due if any is due, else Paid."""
    today = today or date.today()
    statuses = {effective_installment_status(i, today, strategy) for i in fee.installments}
    if InstallmentStatus.OVERDUE in statuses:
        return FeePaymentStatus.OVERDUE
    if InstallmentStatus.DUE in statuses:
        return FeePaymentStatus.DUE
    return FeePaymentStatus.PAID


# --- Reminders ---


def is_overdue(installment: FeeInstallment, today: date) -> bool:
    """Unpaid and past its due date. The stored overdue/due value is ignored."""
    return not installment.is_paid and installment.due_date < today


def is_upcoming(
    installment: FeeInstallment,
    today: date,
    window_days: int = DEFAULT_REMINDER_WINDOW_DAYS,
) -> bool:
    """Unpaid and due between today and today + window, both inclusive."""
    return (
        not installment.is_paid
        and today <= installment.due_date <= today + timedelta(days=window_days)
    )


def overdue_installments(fee: Fee, today: date) -> list[FeeInstallment]:
    return [i for i in fee.installments if is_overdue(i, today)]


def upcoming_installments(
    fee: Fee, today: date, window_days: int = DEFAULT_REMINDER_WINDOW_DAYS
) -> list[FeeInstallment]:
    return [i for i in fee.installments if is_upcoming(i, today, window_days)]


def classify_reminders(
    fees: Iterable[Fee],
    today: date,
    window_days: int = DEFAULT_REMINDER_WINDOW_DAYS,
) -> ReminderBuckets:
    """Split fees into overdue and upcoming reminder lists, from scratch on every call."""
    buckets = ReminderBuckets()
    for fee in fees:
        if overdue_installments(fee, today):
            buckets.overdue.append(fee)
        if upcoming_installments(fee, today, window_days):
            buckets.upcoming.append(fee)
    return buckets


# --- Provisioning ---


def split_amount(total: Any, parts: int) -> list[Decimal]:
    """
    Split ``total`` into ``parts`` equal installments.

    Every share is rounded down to the paisa; the last one absorbs the
    remainder so the shares always add up to ``total``.
    """
    if parts < 1:
        raise ValueError("parts must be at least 1")
    total = round_money(total)
    share = (total / parts).quantize(Decimal("0.01"), rounding=ROUND_DOWN)
    return [share] * (parts - 1) + [total - share * (parts - 1)]
