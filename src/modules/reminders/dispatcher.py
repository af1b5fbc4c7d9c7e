"""Delivery of fee reminders to parents."""

from typing import Protocol

from src.core.logging import get_logger
from src.modules.reminders.models import DeliveryStatus, ReminderChannel

log = get_logger("reminders.dispatcher")


class NotificationDispatcher(Protocol):
    """Sends one reminder and reports what the gateway said about it."""

    async def dispatch(
        self,
        student_id: int,
        fee_id: int,
        installment_id: int,
        channel: ReminderChannel,
    ) -> DeliveryStatus: ...


class LogNotificationDispatcher:
    """Default dispatcher: writes the reminder to the log and reports it as sent."""

    async def dispatch(
        self,
        student_id: int,
        fee_id: int,
        installment_id: int,
        channel: ReminderChannel,
    ) -> DeliveryStatus:
        log.info(
            "Reminder via %s: student %s, fee %s, installment %s",
            channel.value,
            student_id,
            fee_id,
            installment_id,
        )
        return DeliveryStatus.SENT


def get_dispatcher() -> NotificationDispatcher:
    """FastAPI dependency; override it to plug in an SMS or email gateway."""
    return LogNotificationDispatcher()
