"""Fee reminder history."""

from datetime import datetime
from enum import StrEnum

from sqlalchemy import BigInteger, DateTime, ForeignKey, String, func
from sqlalchemy.orm import Mapped, mapped_column

from src.core.database.base import Base, BigIntPK


class ReminderKind(StrEnum):
    OVERDUE = "overdue"
    UPCOMING = "upcoming"


class ReminderChannel(StrEnum):
    EMAIL = "email"
    SMS = "sms"
    BOTH = "both"


class DeliveryStatus(StrEnum):
    """What the notification gateway reported for a dispatch."""

    SENT = "sent"
    DELIVERED = "delivered"
    FAILED = "failed"


class FeeReminder(Base):
    """One reminder dispatched to a student's parent about one installment."""

    __tablename__ = "fee_reminders"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("students.id"), nullable=False, index=True
    )
    fee_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("fees.id", ondelete="CASCADE"), nullable=False, index=True
    )
    installment_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("fee_installments.id", ondelete="CASCADE"), nullable=False
    )
    kind: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    channel: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)

    sent_by_id: Mapped[int | None] = mapped_column(
        BigInteger, ForeignKey("users.id"), nullable=True
    )
    sent_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
