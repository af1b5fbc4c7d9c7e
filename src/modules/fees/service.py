"""Service for Fees module."""

from datetime import date
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.audit.service import AuditAction, AuditService
from src.core.config import StatusStrategy, settings
from src.core.documents.number_generator import DocumentNumberGenerator, DocumentPrefix
from src.core.exceptions import (
    DuplicateError,
    InsufficientPoolFundsError,
    ValidationError,
)
from src.core.logging import get_logger
from src.modules.fee_structures.service import FeeStructureService
from src.modules.fees import ledger
from src.modules.fees.models import (
    ExpenseCategory,
    Fee,
    FeeExpense,
    FeeInstallment,
    InstallmentStatus,
)
from src.modules.fees.repository import FeeRepository
from src.modules.fees.schemas import (
    CommonExpenseCreate,
    CommonExpenseResponse,
    CommonExpenseShare,
    ExpenseCreate,
    ExpenseResponse,
    FeeCreate,
    FeeFilters,
    FeeProvision,
    FeeResponse,
    InstallmentPayment,
    InstallmentResponse,
    PoolSummaryResponse,
    ReminderClassificationResponse,
    ReminderFeeEntry,
)
from src.modules.students.models import ResidentialType
from src.modules.students.service import StudentService
from src.shared.utils.money import ZERO, format_money, round_money

log = get_logger("fees")


class FeeService:
    """Service for fee records, pool expenses and installment payments."""

    def __init__(self, db: AsyncSession, strategy: StatusStrategy | None = None):
        self.db = db
        self.audit = AuditService(db)
        self.repo = FeeRepository(db)
        self.strategy = strategy or settings.installment_status_strategy

    # --- Provisioning ---

    async def _ensure_no_fee(self, student_id: int, academic_year: str) -> None:
        if await self.repo.fetch_fee_for_student(student_id, academic_year):
            raise DuplicateError("Fee", "student_id/academic_year", f"{student_id}/{academic_year}")

    async def create_fee(self, data: FeeCreate, created_by_id: int) -> Fee:
        """Create a fee with an explicit total, pool and installment schedule."""
        student = await StudentService(self.db).get_student_by_id(data.student_id)
        await self._ensure_no_fee(student.id, data.academic_year)

        fee = Fee(
            student_id=student.id,
            student_name=student.full_name,
            academic_year=data.academic_year,
            total_amount=round_money(data.total_amount),
            medical_stationary_pool=round_money(data.medical_stationary_pool),
            created_by_id=created_by_id,
            installments=[
                FeeInstallment(
                    due_date=i.due_date,
                    amount=round_money(i.amount),
                    status=i.status.value,
                )
                for i in sorted(data.installments, key=lambda i: i.due_date)
            ],
        )
        return await self._save_new_fee(fee, created_by_id)

    async def provision_from_structure(self, data: FeeProvision, created_by_id: int) -> Fee:
        """
        Create a student's fee from a fee structure.

        The structure total (categories + pool) is split into one equal
        installment per due date.
        """
        student = await StudentService(self.db).get_student_by_id(data.student_id)
        structure = await FeeStructureService(self.db).get_structure_by_id(data.fee_structure_id)

        if structure.class_name != student.class_name:
            raise ValidationError(
                f"Fee structure is for class {structure.class_name}, "
                f"student is in class {student.class_name}",
                field="fee_structure_id",
            )
        if structure.residential_type != student.residential_type:
            raise ValidationError(
                f"Fee structure is for {structure.residential_type} students",
                field="fee_structure_id",
            )
        await self._ensure_no_fee(student.id, structure.academic_year)

        amounts = ledger.split_amount(structure.total_amount, len(data.due_dates))
        fee = Fee(
            student_id=student.id,
            student_name=student.full_name,
            academic_year=structure.academic_year,
            total_amount=round_money(structure.total_amount),
            medical_stationary_pool=round_money(structure.medical_stationary_pool),
            fee_structure_id=structure.id,
            created_by_id=created_by_id,
            installments=[
                FeeInstallment(due_date=due, amount=amount, status=InstallmentStatus.DUE.value)
                for due, amount in zip(data.due_dates, amounts)
            ],
        )
        return await self._save_new_fee(fee, created_by_id)

    async def _save_new_fee(self, fee: Fee, created_by_id: int) -> Fee:
        self.db.add(fee)
        await self.db.flush()

        await self.audit.log(
            action=AuditAction.CREATE,
            entity_type="Fee",
            entity_id=fee.id,
            entity_identifier=f"{fee.student_name} {fee.academic_year}",
            user_id=created_by_id,
            new_values={
                "student_id": fee.student_id,
                "academic_year": fee.academic_year,
                "total_amount": str(fee.total_amount),
                "medical_stationary_pool": str(fee.medical_stationary_pool),
                "installments": len(fee.installments),
            },
        )

        await self.db.commit()
        log.info("Fee %s created for student %s (%s)", fee.id, fee.student_id, fee.academic_year)
        return await self.repo.fetch_fee(fee.id)

    # --- Reads ---

    async def get_fee(self, fee_id: int) -> Fee:
        return await self.repo.fetch_fee(fee_id)

    async def list_fees(
        self, filters: FeeFilters | None = None, today: date | None = None
    ) -> tuple[list[Fee], int]:
        """
        List fees with optional filters.

        Payment status is derived, so only that filter is applied (and paged)
        after loading.
        """
        filters = filters or FeeFilters()
        criteria = {
            "academic_year": filters.academic_year,
            "student_id": filters.student_id,
            "search": filters.search,
        }
        offset = (filters.page - 1) * filters.limit
        if filters.payment_status is None:
            fees = await self.repo.fetch_fees(**criteria, offset=offset, limit=filters.limit)
            return fees, await self.repo.count_fees(**criteria)

        today = today or date.today()
        fees = [
            f
            for f in await self.repo.fetch_fees(**criteria)
            if ledger.fee_payment_status(f, today, self.strategy) == filters.payment_status
        ]
        return fees[offset : offset + filters.limit], len(fees)

    def fee_response(self, fee: Fee, today: date | None = None) -> FeeResponse:
        """Build the API view of a fee, statuses read under the configured strategy."""
        today = today or date.today()
        return FeeResponse(
            id=fee.id,
            student_id=fee.student_id,
            student_name=fee.student_name,
            academic_year=fee.academic_year,
            fee_structure_id=fee.fee_structure_id,
            total_amount=fee.total_amount,
            medical_stationary_pool=fee.medical_stationary_pool,
            total_expenses=ledger.total_expenses(fee),
            remaining_pool_balance=ledger.remaining_pool_balance(fee),
            paid_amount=ledger.paid_amount(fee),
            outstanding_amount=ledger.outstanding_amount(fee),
            payment_status=ledger.fee_payment_status(fee, today, self.strategy),
            is_reconciled=ledger.is_reconciled(fee),
            version=fee.version,
            installments=[
                InstallmentResponse(
                    id=i.id,
                    due_date=i.due_date,
                    amount=i.amount,
                    status=ledger.effective_installment_status(i, today, self.strategy).value,
                    paid_date=i.paid_date,
                    receipt_number=i.receipt_number,
                    payment_method=i.payment_method,
                )
                for i in fee.installments
            ],
            expenses=[ExpenseResponse.model_validate(e) for e in fee.expenses],
        )

    async def pool_summary(self, fee_id: int) -> PoolSummaryResponse:
        fee = await self.repo.fetch_fee(fee_id)
        by_category = ledger.expenses_by_category(fee)
        return PoolSummaryResponse(
            fee_id=fee.id,
            student_name=fee.student_name,
            medical_stationary_pool=fee.medical_stationary_pool,
            total_expenses=ledger.total_expenses(fee),
            remaining_pool_balance=ledger.remaining_pool_balance(fee),
            medical_expenses=by_category[ExpenseCategory.MEDICAL],
            stationary_expenses=by_category[ExpenseCategory.STATIONARY],
        )

    # --- Ledger mutations ---

    async def add_expense(
        self, fee_id: int, data: ExpenseCreate, created_by_id: int
    ) -> tuple[FeeExpense, Decimal]:
        """
        Draw an expense against the fee's medical & stationary pool.

        Returns the stored expense and the remaining pool balance after it.
        """
        candidate = ledger.ExpenseCandidate(
            expense_date=data.expense_date,
            description=data.description,
            amount=data.amount,
            category=data.category,
            bill_number=data.bill_number,
            receipt_generated=data.receipt_generated,
            created_by_id=created_by_id,
        )
        try:
            expense = await self.repo.update_atomically(
                fee_id, lambda fee: ledger.add_expense(fee, candidate)
            )
        except InsufficientPoolFundsError as e:
            log.info(
                "Expense rejected on fee %s: attempted %s, available %s",
                fee_id,
                e.attempted,
                e.available,
            )
            raise

        fee = await self.repo.fetch_fee(fee_id)
        remaining = ledger.remaining_pool_balance(fee)

        await self.audit.log(
            action=AuditAction.ADD_EXPENSE,
            entity_type="Fee",
            entity_id=fee_id,
            entity_identifier=f"{fee.student_name} {fee.academic_year}",
            user_id=created_by_id,
            new_values={
                "expense_id": expense.id,
                "amount": str(expense.amount),
                "category": expense.category,
                "bill_number": expense.bill_number,
                "remaining_pool_balance": str(remaining),
            },
        )

        await self.db.commit()
        log.info(
            "Expense %s of %s (%s) added to fee %s, remaining pool %s",
            expense.id,
            expense.amount,
            expense.category,
            fee_id,
            remaining,
        )
        return expense, remaining

    async def add_common_expense(
        self, data: CommonExpenseCreate, created_by_id: int
    ) -> CommonExpenseResponse:
        """
        Split one expense equally across the pools of a class's students.

        Every share is drawn through the same atomic update as a single
        expense; the last share absorbs the rounding. If any student's pool
        cannot cover its share nothing is recorded.

        Raises:
            InvalidAmountError: amount is not positive
            ValidationError: no matching fees, or a share would round to zero
            InsufficientPoolFundsError: names the first fee that is short
        """
        amount = ledger.validate_amount(data.amount)
        fees = await self.repo.fetch_fees_for_class(
            data.academic_year,
            data.class_name,
            section=data.section,
            residential_type=(
                ResidentialType.RESIDENTIAL.value if data.residential_only else None
            ),
        )
        if not fees:
            raise ValidationError(
                f"No {data.academic_year} fees for class {data.class_name}"
                + (f"-{data.section}" if data.section else ""),
                field="class_name",
            )

        shares = ledger.split_amount(amount, len(fees))
        if min(shares) <= ZERO:
            raise ValidationError(
                f"{format_money(amount)} is too small to split among {len(fees)} students",
                field="amount",
            )

        accepted: list[tuple[Fee, FeeExpense, Decimal]] = []
        try:
            for fee, share in zip(fees, shares):
                candidate = ledger.ExpenseCandidate(
                    expense_date=data.expense_date,
                    description=data.description,
                    amount=share,
                    category=data.category,
                    bill_number=data.bill_number,
                    created_by_id=created_by_id,
                )

                def draw(fee: Fee, candidate=candidate):
                    expense = ledger.add_expense(fee, candidate)
                    return expense, ledger.remaining_pool_balance(fee)

                expense, remaining = await self.repo.update_atomically(fee.id, draw)
                accepted.append((fee, expense, remaining))
        except InsufficientPoolFundsError as e:
            await self.db.rollback()
            log.info(
                "Common expense for class %s rejected: fee %s has %s, share %s",
                data.class_name,
                e.fee_id,
                e.available,
                e.attempted,
            )
            raise

        for fee, expense, remaining in accepted:
            await self.audit.log(
                action=AuditAction.ADD_EXPENSE,
                entity_type="Fee",
                entity_id=fee.id,
                entity_identifier=f"{fee.student_name} {fee.academic_year}",
                user_id=created_by_id,
                new_values={
                    "expense_id": expense.id,
                    "amount": str(expense.amount),
                    "category": expense.category,
                    "remaining_pool_balance": str(remaining),
                },
                comment=f"Common expense of {amount} for class {data.class_name}",
            )

        response = CommonExpenseResponse(
            academic_year=data.academic_year,
            class_name=data.class_name,
            section=data.section,
            category=ExpenseCategory(data.category).value,
            total_amount=amount,
            shares=[
                CommonExpenseShare(
                    fee_id=fee.id,
                    student_id=fee.student_id,
                    student_name=fee.student_name,
                    expense_id=expense.id,
                    amount=expense.amount,
                    remaining_pool_balance=remaining,
                )
                for fee, expense, remaining in accepted
            ],
        )
        await self.db.commit()
        log.info(
            "Common expense of %s split across %s fees of class %s",
            amount,
            len(accepted),
            data.class_name,
        )
        return response

    async def pay_installment(
        self,
        fee_id: int,
        installment_id: int,
        data: InstallmentPayment,
        paid_by_id: int,
    ) -> tuple[Fee, FeeInstallment]:
        """
        Record payment of one installment and issue its receipt number.

        Raises:
            InstallmentNotFoundError: installment is not on this fee
            ValidationError: installment is already paid
        """
        fee = await self.repo.fetch_fee(fee_id)
        self._ensure_unpaid(ledger.find_installment(fee, installment_id))

        number_gen = DocumentNumberGenerator(self.db)
        receipt_number = await number_gen.generate(DocumentPrefix.RECEIPT, on=data.payment_date)

        def apply(fee: Fee) -> str:
            installment = ledger.find_installment(fee, installment_id)
            self._ensure_unpaid(installment)
            previous_status = installment.status
            ledger.pay_installment(
                fee,
                installment_id,
                data.payment_date,
                receipt_number=receipt_number,
                payment_method=data.payment_method,
            )
            return previous_status

        previous_status = await self.repo.update_atomically(fee_id, apply)

        await self.audit.log(
            action=AuditAction.PAY_INSTALLMENT,
            entity_type="FeeInstallment",
            entity_id=installment_id,
            entity_identifier=receipt_number,
            user_id=paid_by_id,
            old_values={"status": previous_status},
            new_values={
                "fee_id": fee_id,
                "status": InstallmentStatus.PAID.value,
                "paid_date": data.payment_date.isoformat(),
                "payment_method": data.payment_method.value,
            },
        )

        await self.db.commit()
        log.info("Installment %s of fee %s paid, receipt %s", installment_id, fee_id, receipt_number)

        fee = await self.repo.fetch_fee(fee_id)
        return fee, ledger.find_installment(fee, installment_id)

    @staticmethod
    def _ensure_unpaid(installment: FeeInstallment) -> None:
        if installment.is_paid:
            raise ValidationError(
                f"Installment {installment.id} is already paid "
                f"(receipt {installment.receipt_number or 'n/a'})",
                field="installment_id",
            )

    # --- Reminders ---

    async def classify_reminders(
        self,
        academic_year: str | None = None,
        today: date | None = None,
        window_days: int | None = None,
    ) -> ReminderClassificationResponse:
        """Which fees need an overdue or an upcoming-payment reminder as of ``today``."""
        today = today or date.today()
        window_days = window_days or settings.reminder_window_days
        if academic_year:
            fees = await self.repo.fetch_fees_for_year(academic_year)
        else:
            fees = await self.repo.fetch_fees()

        buckets = ledger.classify_reminders(fees, today, window_days)
        return ReminderClassificationResponse(
            today=today,
            window_days=window_days,
            overdue=[
                reminder_entry(f, ledger.overdue_installments(f, today)) for f in buckets.overdue
            ],
            upcoming=[
                reminder_entry(f, ledger.upcoming_installments(f, today, window_days))
                for f in buckets.upcoming
            ],
        )


def reminder_entry(fee: Fee, installments: list[FeeInstallment]) -> ReminderFeeEntry:
    return ReminderFeeEntry(
        fee_id=fee.id,
        student_id=fee.student_id,
        student_name=fee.student_name,
        installment_ids=[i.id for i in installments],
        amount_due=round_money(sum((i.amount for i in installments), ZERO)),
        earliest_due_date=min(i.due_date for i in installments),
    )
