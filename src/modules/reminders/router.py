"""API endpoints for Reminders module."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.auth.dependencies import ADMIN_ROLES, require_roles
from src.core.auth.models import User
from src.core.database.session import get_db
from src.modules.reminders.dispatcher import NotificationDispatcher, get_dispatcher
from src.modules.reminders.models import DeliveryStatus, ReminderKind
from src.modules.reminders.schemas import (
    BulkReminderResponse,
    BulkReminderSend,
    ReminderFilters,
    ReminderResponse,
    ReminderSend,
)
from src.modules.reminders.service import ReminderService
from src.shared.schemas.base import ApiResponse, PaginatedResponse

router = APIRouter(prefix="/reminders", tags=["Reminders"])


@router.post(
    "",
    response_model=ApiResponse[ReminderResponse],
    status_code=status.HTTP_201_CREATED,
)
async def send_reminder(
    data: ReminderSend,
    db: AsyncSession = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
    current_user: User = Depends(require_roles(*ADMIN_ROLES)),
):
    """Send a payment reminder for one installment."""
    service = ReminderService(db, dispatcher)
    reminder = await service.send_reminder(data, current_user.id)
    return ApiResponse(
        data=ReminderResponse.model_validate(reminder),
        message="Reminder sent",
    )


@router.post("/bulk", response_model=ApiResponse[BulkReminderResponse])
async def send_bulk_reminders(
    data: BulkReminderSend,
    db: AsyncSession = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
    current_user: User = Depends(require_roles(*ADMIN_ROLES)),
):
    """Send reminders to every overdue (or every upcoming) fee."""
    service = ReminderService(db, dispatcher)
    reminders = await service.send_bulk(data, current_user.id)
    failed = sum(1 for r in reminders if r.status == DeliveryStatus.FAILED.value)
    return ApiResponse(
        data=BulkReminderResponse(
            kind=data.kind,
            sent=len(reminders) - failed,
            failed=failed,
            reminders=[ReminderResponse.model_validate(r) for r in reminders],
        ),
        message=f"{len(reminders) - failed} reminders sent",
    )


@router.get("", response_model=ApiResponse[PaginatedResponse[ReminderResponse]])
async def list_reminders(
    fee_id: int | None = Query(None),
    student_id: int | None = Query(None),
    kind: ReminderKind | None = Query(None),
    status: DeliveryStatus | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
    current_user: User = Depends(require_roles(*ADMIN_ROLES)),
):
    """Reminder history."""
    service = ReminderService(db, dispatcher)
    reminders, total = await service.list_reminders(
        ReminderFilters(
            fee_id=fee_id,
            student_id=student_id,
            kind=kind,
            status=status,
            page=page,
            limit=limit,
        )
    )
    return ApiResponse(
        data=PaginatedResponse.create(
            items=[ReminderResponse.model_validate(r) for r in reminders],
            total=total,
            page=page,
            limit=limit,
        )
    )
