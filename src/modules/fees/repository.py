"""Loading and atomically updating fee records."""

from collections.abc import Callable
from typing import TypeVar

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.core.config import settings
from src.core.exceptions import ConcurrentUpdateError, NotFoundError
from src.core.logging import get_logger
from src.modules.fees.models import Fee
from src.modules.students.models import Student, StudentStatus

T = TypeVar("T")

log = get_logger("fees.repository")


class FeeRepository:
    """
    Persistence for Fee aggregates (fee + installments + expenses).

    Every read goes back to the database and overwrites whatever the
    session already holds, so callers always see the current row.
    """

    def __init__(self, db: AsyncSession, max_attempts: int | None = None):
        self.db = db
        self.max_attempts = max_attempts or settings.fee_update_max_attempts

    def _fee_query(self):
        return (
            select(Fee)
            .options(selectinload(Fee.installments), selectinload(Fee.expenses))
            .execution_options(populate_existing=True)
        )

    async def fetch_fee(self, fee_id: int) -> Fee:
        result = await self.db.execute(self._fee_query().where(Fee.id == fee_id))
        fee = result.scalar_one_or_none()
        if not fee:
            raise NotFoundError("Fee", fee_id)
        return fee

    async def fetch_fee_for_student(self, student_id: int, academic_year: str) -> Fee | None:
        result = await self.db.execute(
            self._fee_query().where(
                Fee.student_id == student_id, Fee.academic_year == academic_year
            )
        )
        return result.scalar_one_or_none()

    async def fetch_fees_for_year(self, academic_year: str) -> list[Fee]:
        result = await self.db.execute(
            self._fee_query()
            .where(Fee.academic_year == academic_year)
            .order_by(Fee.student_name, Fee.id)
        )
        return list(result.scalars().all())

    @staticmethod
    def _filter(query, academic_year=None, student_id=None, search=None):
        if academic_year:
            query = query.where(Fee.academic_year == academic_year)
        if student_id is not None:
            query = query.where(Fee.student_id == student_id)
        if search:
            query = query.where(Fee.student_name.ilike(f"%{search}%"))
        return query

    async def fetch_fees(
        self,
        academic_year: str | None = None,
        student_id: int | None = None,
        search: str | None = None,
        offset: int | None = None,
        limit: int | None = None,
    ) -> list[Fee]:
        query = self._filter(
            self._fee_query().order_by(Fee.academic_year.desc(), Fee.student_name, Fee.id),
            academic_year,
            student_id,
            search,
        )
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def count_fees(
        self,
        academic_year: str | None = None,
        student_id: int | None = None,
        search: str | None = None,
    ) -> int:
        query = self._filter(select(func.count(Fee.id)), academic_year, student_id, search)
        return (await self.db.execute(query)).scalar_one()

    async def fetch_fees_for_class(
        self,
        academic_year: str,
        class_name: str,
        section: str | None = None,
        residential_type: str | None = None,
    ) -> list[Fee]:
        """Fees of the active students of one class (and section) for a year."""
        query = (
            self._fee_query()
            .join(Student, Student.id == Fee.student_id)
            .where(
                Fee.academic_year == academic_year,
                Student.class_name == class_name,
                Student.status == StudentStatus.ACTIVE.value,
            )
            .order_by(Fee.student_name, Fee.id)
        )
        if section is not None:
            query = query.where(Student.section == section)
        if residential_type is not None:
            query = query.where(Student.residential_type == residential_type)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def _claim(self, fee: Fee) -> bool:
        """
        Compare-and-swap on the fee's version.

        Succeeds only if nobody changed the row since ``fee`` was loaded. On
        PostgreSQL the UPDATE also holds the row lock until commit, so a
        competing writer's claim fails once we commit.
        """
        result = await self.db.execute(
            update(Fee)
            .where(Fee.id == fee.id, Fee.version == fee.version)
            .values(version=fee.version + 1)
            .execution_options(synchronize_session="evaluate")
        )
        return result.rowcount == 1

    async def update_atomically(self, fee_id: int, mutate: Callable[[Fee], T]) -> T:
        """
        Apply ``mutate`` to the current fee as a single atomic update.

        The fee is (re)loaded, its version claimed, then ``mutate`` runs
        against that snapshot and the changes are flushed. When the claim
        is lost to a concurrent writer the fee is reloaded and ``mutate``
        re-runs on fresh data, so its checks (e.g. pool balance) always see
        what the other writer did.

        Raises:
            ConcurrentUpdateError: claim lost ``max_attempts`` times in a row
            whatever ``mutate`` raises (nothing is flushed in that case)
        """
        for attempt in range(1, self.max_attempts + 1):
            fee = await self.fetch_fee(fee_id)
            if await self._claim(fee):
                outcome = mutate(fee)
                await self.db.flush()
                return outcome
            log.warning(
                "Fee %s changed concurrently (attempt %s/%s), reloading",
                fee_id,
                attempt,
                self.max_attempts,
            )
        raise ConcurrentUpdateError("Fee", fee_id, self.max_attempts)
