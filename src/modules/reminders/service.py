"""Service for Reminders module."""

from datetime import date, datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.audit.service import AuditAction, AuditService
from src.core.config import settings
from src.core.exceptions import ValidationError
from src.core.logging import get_logger
from src.modules.fees import ledger
from src.modules.fees.models import Fee, FeeInstallment
from src.modules.fees.repository import FeeRepository
from src.modules.reminders.dispatcher import NotificationDispatcher
from src.modules.reminders.models import (
    DeliveryStatus,
    FeeReminder,
    ReminderChannel,
    ReminderKind,
)
from src.modules.reminders.schemas import BulkReminderSend, ReminderFilters, ReminderSend

log = get_logger("reminders")


class ReminderService:
    """
    Sends fee reminders and keeps their history.

    Which fees are eligible is decided by the fee ledger; delivery is left
    to the injected NotificationDispatcher.
    """

    def __init__(self, db: AsyncSession, dispatcher: NotificationDispatcher):
        self.db = db
        self.dispatcher = dispatcher
        self.audit = AuditService(db)
        self.repo = FeeRepository(db)

    async def send_reminder(self, data: ReminderSend, sent_by_id: int) -> FeeReminder:
        """
        Remind about one installment.

        The reminder kind follows the due date: overdue when it has passed,
        upcoming otherwise.
        """
        today = data.today or date.today()
        fee = await self.repo.fetch_fee(data.fee_id)
        installment = ledger.find_installment(fee, data.installment_id)
        if installment.is_paid:
            raise ValidationError(
                f"Installment {installment.id} is already paid", field="installment_id"
            )

        kind = ReminderKind.OVERDUE if ledger.is_overdue(installment, today) else ReminderKind.UPCOMING
        reminder = await self._dispatch(fee, installment, kind, data.channel, sent_by_id)

        await self.db.commit()
        return reminder

    async def send_bulk(self, data: BulkReminderSend, sent_by_id: int) -> list[FeeReminder]:
        """
        Remind every fee in the requested bucket, once per fee.

        The earliest matching installment of each fee is the one reminded about.
        """
        today = data.today or date.today()
        window_days = data.window_days or settings.reminder_window_days
        if data.academic_year:
            fees = await self.repo.fetch_fees_for_year(data.academic_year)
        else:
            fees = await self.repo.fetch_fees()

        buckets = ledger.classify_reminders(fees, today, window_days)
        reminders = []
        if data.kind == ReminderKind.OVERDUE:
            for fee in buckets.overdue:
                installment = ledger.overdue_installments(fee, today)[0]
                reminders.append(
                    await self._dispatch(fee, installment, data.kind, data.channel, sent_by_id)
                )
        else:
            for fee in buckets.upcoming:
                installment = ledger.upcoming_installments(fee, today, window_days)[0]
                reminders.append(
                    await self._dispatch(fee, installment, data.kind, data.channel, sent_by_id)
                )

        await self.db.commit()
        log.info(
            "Bulk %s reminders: %s dispatched, %s failed",
            data.kind.value,
            len(reminders),
            sum(1 for r in reminders if r.status == DeliveryStatus.FAILED.value),
        )
        return reminders

    async def _dispatch(
        self,
        fee: Fee,
        installment: FeeInstallment,
        kind: ReminderKind,
        channel: ReminderChannel,
        sent_by_id: int,
    ) -> FeeReminder:
        try:
            status = await self.dispatcher.dispatch(
                fee.student_id, fee.id, installment.id, channel
            )
        except Exception:
            log.exception(
                "Reminder dispatch failed for fee %s installment %s", fee.id, installment.id
            )
            status = DeliveryStatus.FAILED

        reminder = FeeReminder(
            student_id=fee.student_id,
            fee_id=fee.id,
            installment_id=installment.id,
            kind=kind.value,
            channel=channel.value,
            status=DeliveryStatus(status).value,
            sent_by_id=sent_by_id,
            sent_at=datetime.now(timezone.utc),
        )
        self.db.add(reminder)
        await self.db.flush()

        await self.audit.log(
            action=AuditAction.SEND_REMINDER,
            entity_type="FeeReminder",
            entity_id=reminder.id,
            entity_identifier=f"{fee.student_name} {fee.academic_year}",
            user_id=sent_by_id,
            new_values={
                "fee_id": fee.id,
                "installment_id": installment.id,
                "kind": reminder.kind,
                "channel": reminder.channel,
                "status": reminder.status,
            },
        )
        return reminder

    async def list_reminders(
        self, filters: ReminderFilters | None = None
    ) -> tuple[list[FeeReminder], int]:
        """Reminder history, newest first."""
        filters = filters or ReminderFilters()
        query = select(FeeReminder).order_by(FeeReminder.sent_at.desc(), FeeReminder.id.desc())

        if filters.fee_id is not None:
            query = query.where(FeeReminder.fee_id == filters.fee_id)
        if filters.student_id is not None:
            query = query.where(FeeReminder.student_id == filters.student_id)
        if filters.kind is not None:
            query = query.where(FeeReminder.kind == filters.kind.value)
        if filters.status is not None:
            query = query.where(FeeReminder.status == filters.status.value)

        count_query = select(func.count()).select_from(query.subquery())
        total = (await self.db.execute(count_query)).scalar() or 0

        query = query.offset((filters.page - 1) * filters.limit).limit(filters.limit)
        result = await self.db.execute(query)
        return list(result.scalars().all()), total
