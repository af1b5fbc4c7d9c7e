from datetime import date
from decimal import Decimal

import pytest
from httpx import AsyncClient
from sqlalchemy import insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.audit.models import AuditLog
from src.core.auth.models import UserRole
from src.core.config import StatusStrategy
from src.core.exceptions import (
    ConcurrentUpdateError,
    DuplicateError,
    InstallmentNotFoundError,
    InsufficientPoolFundsError,
    InvalidAmountError,
    NotFoundError,
    ValidationError,
)
from src.modules.fee_structures.schemas import FeeCategoryCreate, FeeStructureCreate
from src.modules.fee_structures.service import FeeStructureService
from src.modules.fees.models import ExpenseCategory, Fee, FeeExpense, FeePaymentStatus, PaymentMethod
from src.modules.fees.schemas import (
    CommonExpenseCreate,
    ExpenseCreate,
    FeeCreate,
    FeeFilters,
    FeeProvision,
    InstallmentCreate,
    InstallmentPayment,
)
from src.modules.fees.service import FeeService
from src.modules.students.models import ResidentialType
from src.modules.students.schemas import StudentCreate
from src.modules.students.service import StudentService


async def _create_student(db_session: AsyncSession, first_name: str = "Aarav", **overrides):
    data = {
        "first_name": first_name,
        "last_name": "Sharma",
        "class_name": "5",
        "parent_name": "Rohit Sharma",
        "parent_phone": "9876543210",
    }
    data.update(overrides)
    return await StudentService(db_session).create_student(StudentCreate(**data), created_by_id=1)


async def _create_fee(
    db_session: AsyncSession,
    pool: str = "2000",
    installments: list[tuple[date, str, str]] | None = None,
    first_name: str = "Aarav",
    total: str = "30000",
    **student_fields,
) -> Fee:
    student = await _create_student(db_session, first_name, **student_fields)
    installments = installments or [
        (date(2024, 4, 10), "10000", "due"),
        (date(2024, 8, 10), "10000", "due"),
        (date(2024, 12, 10), "10000", "due"),
    ]
    return await FeeService(db_session).create_fee(
        FeeCreate(
            student_id=student.id,
            academic_year="2024-25",
            total_amount=Decimal(total),
            medical_stationary_pool=Decimal(pool),
            installments=[
                InstallmentCreate(due_date=due, amount=Decimal(amount), status=status)
                for due, amount, status in installments
            ],
        ),
        created_by_id=1,
    )


def _expense(amount, category=ExpenseCategory.MEDICAL) -> ExpenseCreate:
    return ExpenseCreate(
        amount=Decimal(str(amount)),
        category=category,
        expense_date=date(2024, 7, 1),
        description="First aid",
        bill_number="MED-001",
    )


class TestFeeService:
    """Tests for FeeService."""

    async def test_create_fee(self, db_session: AsyncSession):
        fee = await _create_fee(db_session)

        assert fee.id is not None
        assert fee.student_name == "Aarav Sharma"
        assert fee.version == 1
        assert [i.due_date for i in fee.installments] == [
            date(2024, 4, 10),
            date(2024, 8, 10),
            date(2024, 12, 10),
        ]
        assert fee.expenses == []

    async def test_one_fee_per_student_and_year(self, db_session: AsyncSession):
        fee = await _create_fee(db_session)

        with pytest.raises(DuplicateError):
            await FeeService(db_session).create_fee(
                FeeCreate(
                    student_id=fee.student_id,
                    academic_year="2024-25",
                    total_amount=Decimal("100"),
                    installments=[InstallmentCreate(due_date=date(2024, 5, 1), amount=Decimal("100"))],
                ),
                created_by_id=1,
            )

    async def test_create_fee_for_missing_student(self, db_session: AsyncSession):
        with pytest.raises(NotFoundError):
            await FeeService(db_session).create_fee(
                FeeCreate(
                    student_id=404,
                    academic_year="2024-25",
                    total_amount=Decimal("100"),
                    installments=[InstallmentCreate(due_date=date(2024, 5, 1), amount=Decimal("100"))],
                ),
                created_by_id=1,
            )

    async def test_provision_from_structure(self, db_session: AsyncSession):
        student = await _create_student(
            db_session, residential_type=ResidentialType.RESIDENTIAL, class_name="7"
        )
        structure = await FeeStructureService(db_session).create_structure(
            FeeStructureCreate(
                academic_year="2024-25",
                class_name="7",
                residential_type=ResidentialType.RESIDENTIAL,
                medical_stationary_pool=Decimal("3000"),
                categories=[
                    FeeCategoryCreate(name="Tuition", base_amount=Decimal("40000")),
                    FeeCategoryCreate(name="Hostel", base_amount=Decimal("57000.01")),
                ],
            ),
            created_by_id=1,
        )

        fee = await FeeService(db_session).provision_from_structure(
            FeeProvision(
                student_id=student.id,
                fee_structure_id=structure.id,
                due_dates=[date(2024, 12, 1), date(2024, 4, 1), date(2024, 8, 1)],
            ),
            created_by_id=1,
        )

        assert fee.total_amount == Decimal("100000.01")
        assert fee.medical_stationary_pool == Decimal("3000.00")
        assert fee.fee_structure_id == structure.id
        assert [i.amount for i in fee.installments] == [
            Decimal("33333.33"),
            Decimal("33333.33"),
            Decimal("33333.35"),
        ]
        assert fee.installments[0].due_date == date(2024, 4, 1)

    async def test_provision_rejects_structure_for_other_class(self, db_session: AsyncSession):
        student = await _create_student(db_session, class_name="3")
        structure = await FeeStructureService(db_session).create_structure(
            FeeStructureCreate(
                academic_year="2024-25",
                class_name="7",
                residential_type=ResidentialType.NON_RESIDENTIAL,
                categories=[FeeCategoryCreate(name="Tuition", base_amount=Decimal("40000"))],
            ),
            created_by_id=1,
        )

        with pytest.raises(ValidationError):
            await FeeService(db_session).provision_from_structure(
                FeeProvision(
                    student_id=student.id,
                    fee_structure_id=structure.id,
                    due_dates=[date(2024, 4, 1)],
                ),
                created_by_id=1,
            )

    async def test_add_expense_until_pool_empty(self, db_session: AsyncSession):
        fee = await _create_fee(db_session, pool="2000")
        service = FeeService(db_session)

        await service.add_expense(fee.id, _expense(500), created_by_id=1)
        await service.add_expense(fee.id, _expense(800), created_by_id=1)
        expense, remaining = await service.add_expense(
            fee.id, _expense(700, ExpenseCategory.STATIONARY), created_by_id=1
        )

        assert expense.id is not None
        assert remaining == Decimal("0.00")
        assert (await service.get_fee(fee.id)).version == 4

        with pytest.raises(InsufficientPoolFundsError) as exc_info:
            await service.add_expense(fee.id, _expense(1), created_by_id=1)
        assert exc_info.value.attempted == Decimal("1.00")
        assert exc_info.value.available == Decimal("0.00")

        fee = await service.get_fee(fee.id)
        assert len(fee.expenses) == 3

        summary = await service.pool_summary(fee.id)
        assert summary.medical_expenses == Decimal("1300.00")
        assert summary.stationary_expenses == Decimal("700.00")
        assert summary.remaining_pool_balance == Decimal("0.00")

    async def test_add_expense_writes_audit_log(self, db_session: AsyncSession):
        fee = await _create_fee(db_session, pool="2000")

        await FeeService(db_session).add_expense(fee.id, _expense(250), created_by_id=7)

        result = await db_session.execute(select(AuditLog).where(AuditLog.action == "ADD_EXPENSE"))
        entry = result.scalar_one()
        assert entry.entity_id == fee.id
        assert entry.user_id == 7
        assert entry.new_values["remaining_pool_balance"] == "1750.00"

    async def test_lost_race_rechecks_pool_on_fresh_data(self, db_session: AsyncSession):
        """
        Two 80 expenses against a 100 pool: the competing one lands between our
        read and our claim, so the retry sees it and rejects ours.
        """
        fee = await _create_fee(db_session, pool="100")
        service = FeeService(db_session)
        original_fetch = service.repo.fetch_fee
        calls = 0

        async def racing_fetch(fee_id: int) -> Fee:
            nonlocal calls
            calls += 1
            loaded = await original_fetch(fee_id)
            if calls == 1:
                await db_session.execute(
                    insert(FeeExpense).values(
                        fee_id=fee_id,
                        expense_date=date(2024, 7, 1),
                        description="Competing expense",
                        amount=Decimal("80.00"),
                        category="medical",
                        receipt_generated=False,
                    )
                )
                await db_session.execute(
                    update(Fee)
                    .where(Fee.id == fee_id)
                    .values(version=Fee.version + 1)
                    .execution_options(synchronize_session=False)
                )
            return loaded

        service.repo.fetch_fee = racing_fetch

        with pytest.raises(InsufficientPoolFundsError) as exc_info:
            await service.add_expense(fee.id, _expense(80), created_by_id=1)

        assert calls == 2
        assert exc_info.value.attempted == Decimal("80.00")
        assert exc_info.value.available == Decimal("20.00")

    async def test_gives_up_after_max_attempts(self, db_session: AsyncSession):
        fee = await _create_fee(db_session, pool="100")
        service = FeeService(db_session)

        async def always_lose(fee: Fee) -> bool:
            return False

        service.repo._claim = always_lose

        with pytest.raises(ConcurrentUpdateError) as exc_info:
            await service.add_expense(fee.id, _expense(10), created_by_id=1)

        assert exc_info.value.status_code == 409
        assert exc_info.value.details["attempts"] == 3

    async def test_pay_installment(self, db_session: AsyncSession):
        fee = await _create_fee(db_session)
        service = FeeService(db_session)
        target = fee.installments[1]

        fee, installment = await service.pay_installment(
            fee.id,
            target.id,
            InstallmentPayment(payment_date=date(2024, 8, 5), payment_method=PaymentMethod.ONLINE),
            paid_by_id=1,
        )

        assert installment.status == "paid"
        assert installment.paid_date == date(2024, 8, 5)
        assert installment.payment_method == "online"
        assert installment.receipt_number == "RCP-2024-000001"
        assert [i.status for i in fee.installments] == ["due", "paid", "due"]

    async def test_pay_installment_twice_rejected(self, db_session: AsyncSession):
        fee = await _create_fee(db_session)
        service = FeeService(db_session)
        payment = InstallmentPayment(payment_date=date(2024, 8, 5))

        await service.pay_installment(fee.id, fee.installments[0].id, payment, paid_by_id=1)

        with pytest.raises(ValidationError) as exc_info:
            await service.pay_installment(fee.id, fee.installments[0].id, payment, paid_by_id=1)
        assert "already paid" in exc_info.value.message

    async def test_pay_installment_of_other_fee(self, db_session: AsyncSession):
        fee = await _create_fee(db_session)
        other = await _create_fee(db_session, first_name="Diya")

        with pytest.raises(InstallmentNotFoundError):
            await FeeService(db_session).pay_installment(
                fee.id,
                other.installments[0].id,
                InstallmentPayment(payment_date=date(2024, 8, 5)),
                paid_by_id=1,
            )

    async def test_fee_response_under_both_strategies(self, db_session: AsyncSession):
        fee = await _create_fee(
            db_session,
            installments=[
                (date(2024, 4, 10), "10000", "paid"),
                (date(2024, 8, 10), "10000", "due"),
                (date(2024, 12, 10), "10000", "due"),
            ],
        )
        today = date(2024, 9, 1)

        stored = FeeService(db_session, StatusStrategy.STORED).fee_response(fee, today)
        derived = FeeService(db_session, StatusStrategy.DERIVED).fee_response(fee, today)

        assert stored.payment_status == FeePaymentStatus.DUE
        assert [i.status for i in stored.installments] == ["paid", "due", "due"]
        assert derived.payment_status == FeePaymentStatus.OVERDUE
        assert [i.status for i in derived.installments] == ["paid", "overdue", "due"]
        assert stored.paid_amount == Decimal("10000.00")
        assert stored.outstanding_amount == Decimal("20000.00")
        assert stored.remaining_pool_balance == Decimal("2000.00")

    async def test_list_fees_by_payment_status(self, db_session: AsyncSession):
        await _create_fee(
            db_session, first_name="Paid", installments=[(date(2024, 4, 10), "30000", "paid")]
        )
        await _create_fee(
            db_session, first_name="Late", installments=[(date(2024, 4, 10), "30000", "overdue")]
        )
        service = FeeService(db_session)

        fees, total = await service.list_fees(
            FeeFilters(payment_status=FeePaymentStatus.OVERDUE), today=date(2024, 9, 1)
        )
        assert total == 1
        assert fees[0].student_name == "Late Sharma"

        fees, total = await service.list_fees(FeeFilters(search="paid"))
        assert total == 1

    async def test_pay_overdue_installment_audits_previous_status(
        self, db_session: AsyncSession
    ):
        fee = await _create_fee(
            db_session, installments=[(date(2024, 4, 10), "30000", "overdue")]
        )

        await FeeService(db_session).pay_installment(
            fee.id,
            fee.installments[0].id,
            InstallmentPayment(payment_date=date(2024, 5, 2)),
            paid_by_id=1,
        )

        result = await db_session.execute(
            select(AuditLog).where(AuditLog.action == "PAY_INSTALLMENT")
        )
        entry = result.scalar_one()
        assert entry.old_values == {"status": "overdue"}
        assert entry.new_values["status"] == "paid"

    async def test_list_fees_pages_in_query(self, db_session: AsyncSession):
        for name in ("Aarav", "Bhavna", "Chirag"):
            await _create_fee(db_session, first_name=name)
        service = FeeService(db_session)

        fees, total = await service.list_fees(FeeFilters(page=2, limit=2))
        assert total == 3
        assert [f.student_name for f in fees] == ["Chirag Sharma"]

        fees, total = await service.list_fees(FeeFilters(search="bhav", limit=2))
        assert total == 1
        assert fees[0].student_name == "Bhavna Sharma"

    async def test_common_expense_split_across_class(self, db_session: AsyncSession):
        boarders = [
            await _create_fee(
                db_session,
                pool="500",
                first_name=name,
                section="A",
                residential_type=ResidentialType.RESIDENTIAL,
            )
            for name in ("Aarav", "Bhavna", "Chirag")
        ]
        day_scholar = await _create_fee(db_session, pool="500", first_name="Dev", section="A")
        other_section = await _create_fee(
            db_session,
            pool="500",
            first_name="Esha",
            section="B",
            residential_type=ResidentialType.RESIDENTIAL,
        )
        service = FeeService(db_session)

        result = await service.add_common_expense(
            CommonExpenseCreate(
                academic_year="2024-25",
                class_name="5",
                section="A",
                amount=Decimal("100"),
                expense_date=date(2024, 7, 15),
                description="Chart paper for science project",
            ),
            created_by_id=1,
        )

        assert result.total_amount == Decimal("100.00")
        assert [s.fee_id for s in result.shares] == [f.id for f in boarders]
        assert [s.amount for s in result.shares] == [
            Decimal("33.33"),
            Decimal("33.33"),
            Decimal("33.34"),
        ]
        assert result.shares[2].remaining_pool_balance == Decimal("466.66")

        for fee in boarders:
            fee = await service.get_fee(fee.id)
            assert len(fee.expenses) == 1
            assert fee.expenses[0].category == "stationary"
            assert fee.version == 2
        for fee in (day_scholar, other_section):
            assert (await service.get_fee(fee.id)).expenses == []

        result = await db_session.execute(select(AuditLog).where(AuditLog.action == "ADD_EXPENSE"))
        assert len(result.scalars().all()) == 3

    async def test_common_expense_rejected_when_one_pool_is_short(
        self, db_session: AsyncSession
    ):
        rich = await _create_fee(
            db_session, pool="500", first_name="Aarav", residential_type=ResidentialType.RESIDENTIAL
        )
        short = await _create_fee(
            db_session, pool="10", first_name="Bhavna", residential_type=ResidentialType.RESIDENTIAL
        )
        fee_ids = [rich.id, short.id]
        service = FeeService(db_session)

        with pytest.raises(InsufficientPoolFundsError) as exc_info:
            await service.add_common_expense(
                CommonExpenseCreate(
                    academic_year="2024-25",
                    class_name="5",
                    amount=Decimal("60"),
                    expense_date=date(2024, 7, 15),
                    description="Notebooks",
                ),
                created_by_id=1,
            )

        assert exc_info.value.fee_id == fee_ids[1]
        assert exc_info.value.attempted == Decimal("30.00")
        assert exc_info.value.available == Decimal("10.00")
        for fee_id in fee_ids:
            fee = await service.get_fee(fee_id)
            assert fee.expenses == []
            assert fee.version == 1

    async def test_common_expense_without_fees(self, db_session: AsyncSession):
        with pytest.raises(ValidationError):
            await FeeService(db_session).add_common_expense(
                CommonExpenseCreate(
                    academic_year="2024-25",
                    class_name="9",
                    amount=Decimal("60"),
                    expense_date=date(2024, 7, 15),
                    description="Notebooks",
                ),
                created_by_id=1,
            )

    async def test_non_positive_expense_amount(self, db_session: AsyncSession):
        fee = await _create_fee(db_session)

        with pytest.raises(InvalidAmountError):
            await FeeService(db_session).add_expense(fee.id, _expense(0), created_by_id=1)

    async def test_classify_reminders(self, db_session: AsyncSession):
        await _create_fee(
            db_session, first_name="Late", installments=[(date(2024, 1, 5), "30000", "due")]
        )
        await _create_fee(
            db_session, first_name="Soon", installments=[(date(2024, 1, 15), "30000", "due")]
        )
        await _create_fee(
            db_session, first_name="Later", installments=[(date(2024, 2, 1), "30000", "due")]
        )

        result = await FeeService(db_session).classify_reminders(
            academic_year="2024-25", today=date(2024, 1, 10)
        )

        assert [e.student_name for e in result.overdue] == ["Late Sharma"]
        assert [e.student_name for e in result.upcoming] == ["Soon Sharma"]
        assert result.upcoming[0].amount_due == Decimal("30000.00")
        assert result.window_days == 7


class TestFeeEndpoints:
    """Tests for fee API endpoints."""

    async def test_create_and_get_fee(
        self, client: AsyncClient, db_session: AsyncSession, auth_headers
    ):
        headers = await auth_headers(UserRole.SUPER_ADMIN)
        student = await _create_student(db_session)

        response = await client.post(
            "/api/v1/fees",
            json={
                "student_id": student.id,
                "academic_year": "2024-25",
                "total_amount": "20000",
                "medical_stationary_pool": "1500",
                "installments": [
                    {"due_date": "2024-04-10", "amount": "10000"},
                    {"due_date": "2024-10-10", "amount": "10000"},
                ],
            },
            headers=headers,
        )
        assert response.status_code == 201
        fee_id = response.json()["data"]["id"]

        response = await client.get(f"/api/v1/fees/{fee_id}", headers=headers)
        assert response.status_code == 200
        data = response.json()["data"]
        assert Decimal(data["remaining_pool_balance"]) == Decimal("1500")
        assert Decimal(data["outstanding_amount"]) == Decimal("20000")
        assert data["is_reconciled"] is True
        assert len(data["installments"]) == 2

    async def test_pool_larger_than_total_rejected(
        self, client: AsyncClient, db_session: AsyncSession, auth_headers
    ):
        headers = await auth_headers(UserRole.SUPER_ADMIN)
        student = await _create_student(db_session)

        response = await client.post(
            "/api/v1/fees",
            json={
                "student_id": student.id,
                "academic_year": "2024-25",
                "total_amount": "1000",
                "medical_stationary_pool": "1500",
                "installments": [{"due_date": "2024-04-10", "amount": "1000"}],
            },
            headers=headers,
        )
        assert response.status_code == 422

    async def test_expense_over_pool_returns_details(
        self, client: AsyncClient, db_session: AsyncSession, auth_headers
    ):
        headers = await auth_headers(UserRole.SUPER_ADMIN)
        fee = await _create_fee(db_session, pool="100")

        response = await client.post(
            f"/api/v1/fees/{fee.id}/expenses",
            json={
                "amount": "120",
                "category": "medical",
                "expense_date": "2024-07-01",
                "description": "Inhaler",
            },
            headers=headers,
        )

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["details"]["attempted"] == "120.00"
        assert body["details"]["available"] == "100.00"

    async def test_medical_staff_limited_to_medical_expenses(
        self, client: AsyncClient, db_session: AsyncSession, auth_headers
    ):
        headers = await auth_headers(UserRole.MEDICAL)
        fee = await _create_fee(db_session, pool="500")
        payload = {
            "amount": "50",
            "expense_date": "2024-07-01",
            "description": "Supplies",
        }

        response = await client.post(
            f"/api/v1/fees/{fee.id}/expenses",
            json={**payload, "category": "stationary"},
            headers=headers,
        )
        assert response.status_code == 403

        response = await client.post(
            f"/api/v1/fees/{fee.id}/expenses",
            json={**payload, "category": "medical"},
            headers=headers,
        )
        assert response.status_code == 201
        assert Decimal(response.json()["data"]["remaining_pool_balance"]) == Decimal("450")

    async def test_teacher_cannot_add_expense(
        self, client: AsyncClient, db_session: AsyncSession, auth_headers
    ):
        headers = await auth_headers(UserRole.TEACHER)
        fee = await _create_fee(db_session, pool="500")

        response = await client.post(
            f"/api/v1/fees/{fee.id}/expenses",
            json={
                "amount": "50",
                "category": "medical",
                "expense_date": "2024-07-01",
                "description": "Supplies",
            },
            headers=headers,
        )
        assert response.status_code == 403

    async def test_non_positive_expense_amount_endpoint(
        self, client: AsyncClient, db_session: AsyncSession, auth_headers
    ):
        headers = await auth_headers(UserRole.SUPER_ADMIN)
        fee = await _create_fee(db_session, pool="500")

        response = await client.post(
            f"/api/v1/fees/{fee.id}/expenses",
            json={
                "amount": "-5",
                "category": "medical",
                "expense_date": "2024-07-01",
                "description": "Refund",
            },
            headers=headers,
        )

        assert response.status_code == 422
        body = response.json()
        assert body["message"].startswith("Amount must be a positive number")
        assert body["errors"][0]["field"] == "amount"

    async def test_common_expense_endpoint(
        self, client: AsyncClient, db_session: AsyncSession, auth_headers
    ):
        for name in ("Aarav", "Bhavna"):
            await _create_fee(
                db_session,
                pool="500",
                first_name=name,
                residential_type=ResidentialType.RESIDENTIAL,
            )
        payload = {
            "academic_year": "2024-25",
            "class_name": "5",
            "amount": "250",
            "expense_date": "2024-07-15",
            "description": "Geometry boxes",
        }

        medical = await auth_headers(UserRole.MEDICAL)
        response = await client.post(
            "/api/v1/fees/common-expenses", json=payload, headers=medical
        )
        assert response.status_code == 403

        stationary = await auth_headers(UserRole.STATIONARY)
        response = await client.post(
            "/api/v1/fees/common-expenses", json=payload, headers=stationary
        )
        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Expense divided among 2 students"
        assert [Decimal(s["amount"]) for s in body["data"]["shares"]] == [
            Decimal("125"),
            Decimal("125"),
        ]

    async def test_pay_installment_endpoint(
        self, client: AsyncClient, db_session: AsyncSession, auth_headers
    ):
        headers = await auth_headers(UserRole.SUPER_ADMIN)
        fee = await _create_fee(db_session)
        installment_id = fee.installments[0].id

        response = await client.post(
            f"/api/v1/fees/{fee.id}/installments/{installment_id}/pay",
            json={"payment_date": "2024-04-08", "payment_method": "cheque"},
            headers=headers,
        )
        assert response.status_code == 200
        body = response.json()
        assert "RCP-2024-000001" in body["message"]
        assert body["data"]["installments"][0]["status"] == "paid"
        assert Decimal(body["data"]["paid_amount"]) == Decimal("10000")

        response = await client.post(
            f"/api/v1/fees/{fee.id}/installments/{installment_id}/pay",
            json={"payment_date": "2024-04-09"},
            headers=headers,
        )
        assert response.status_code == 422

        response = await client.post(
            f"/api/v1/fees/{fee.id}/installments/9999/pay",
            json={"payment_date": "2024-04-09"},
            headers=headers,
        )
        assert response.status_code == 404

    async def test_reminder_classification_endpoint(
        self, client: AsyncClient, db_session: AsyncSession, auth_headers
    ):
        headers = await auth_headers(UserRole.SUPER_ADMIN)
        await _create_fee(
            db_session,
            installments=[
                (date(2024, 1, 5), "15000", "due"),
                (date(2024, 1, 12), "15000", "due"),
            ],
        )

        response = await client.get(
            "/api/v1/fees/reminders",
            params={"today": "2024-01-10"},
            headers=headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert len(data["overdue"]) == 1
        assert len(data["upcoming"]) == 1
        assert data["overdue"][0]["earliest_due_date"] == "2024-01-05"
