"""Schemas for Reminders module."""

from datetime import date, datetime

from pydantic import Field

from src.modules.reminders.models import DeliveryStatus, ReminderChannel, ReminderKind
from src.shared.schemas.base import BaseSchema


class ReminderSend(BaseSchema):
    """Send one reminder about one installment."""

    fee_id: int
    installment_id: int
    channel: ReminderChannel = ReminderChannel.BOTH
    today: date | None = None


class BulkReminderSend(BaseSchema):
    """Remind every fee in the overdue or the upcoming bucket."""

    kind: ReminderKind
    channel: ReminderChannel = ReminderChannel.BOTH
    academic_year: str | None = None
    today: date | None = None
    window_days: int | None = Field(None, ge=1, le=90)


class ReminderFilters(BaseSchema):
    fee_id: int | None = None
    student_id: int | None = None
    kind: ReminderKind | None = None
    status: DeliveryStatus | None = None
    page: int = Field(1, ge=1)
    limit: int = Field(50, ge=1, le=500)


class ReminderResponse(BaseSchema):
    id: int
    student_id: int
    fee_id: int
    installment_id: int
    kind: str
    channel: str
    status: str
    sent_by_id: int | None
    sent_at: datetime


class BulkReminderResponse(BaseSchema):
    kind: ReminderKind
    sent: int
    failed: int
    reminders: list[ReminderResponse]
