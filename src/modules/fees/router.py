"""API endpoints for Fees module."""

from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.auth.dependencies import ADMIN_ROLES, require_roles
from src.core.auth.models import User, UserRole
from src.core.database.session import get_db
from src.core.exceptions import AuthorizationError
from src.modules.fees.models import ExpenseCategory, FeePaymentStatus
from src.modules.fees.schemas import (
    CommonExpenseCreate,
    CommonExpenseResponse,
    ExpenseCreate,
    ExpenseResponse,
    ExpenseResultResponse,
    FeeCreate,
    FeeFilters,
    FeeProvision,
    FeeResponse,
    InstallmentPayment,
    PoolSummaryResponse,
    ReminderClassificationResponse,
)
from src.modules.fees.service import FeeService
from src.shared.schemas.base import ApiResponse, PaginatedResponse

router = APIRouter(prefix="/fees", tags=["Fees"])

POOL_STAFF = (*ADMIN_ROLES, UserRole.MEDICAL, UserRole.STATIONARY)

# Pool staff may only spend from their own category
CATEGORY_ROLES = {
    UserRole.MEDICAL.value: ExpenseCategory.MEDICAL,
    UserRole.STATIONARY.value: ExpenseCategory.STATIONARY,
}


def _ensure_category_allowed(user: User, category: ExpenseCategory) -> None:
    allowed = CATEGORY_ROLES.get(user.role)
    if allowed is not None and allowed != category:
        raise AuthorizationError(f"{user.role} staff can only add {allowed.value} expenses")


# --- Fee Endpoints ---


@router.post(
    "",
    response_model=ApiResponse[FeeResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_fee(
    data: FeeCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*ADMIN_ROLES)),
):
    """Create a fee with an explicit installment schedule."""
    service = FeeService(db)
    fee = await service.create_fee(data, current_user.id)
    return ApiResponse(
        data=service.fee_response(fee),
        message="Fee created successfully",
    )


@router.post(
    "/provision",
    response_model=ApiResponse[FeeResponse],
    status_code=status.HTTP_201_CREATED,
)
async def provision_fee(
    data: FeeProvision,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*ADMIN_ROLES)),
):
    """Create a student's fee from a fee structure, split into equal installments."""
    service = FeeService(db)
    fee = await service.provision_from_structure(data, current_user.id)
    return ApiResponse(
        data=service.fee_response(fee),
        message="Fee provisioned successfully",
    )


@router.get(
    "",
    response_model=ApiResponse[PaginatedResponse[FeeResponse]],
)
async def list_fees(
    academic_year: str | None = Query(None),
    student_id: int | None = Query(None),
    payment_status: FeePaymentStatus | None = Query(None),
    search: str | None = Query(None, description="Search by student name"),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*POOL_STAFF)),
):
    service = FeeService(db)
    fees, total = await service.list_fees(
        FeeFilters(
            academic_year=academic_year,
            student_id=student_id,
            payment_status=payment_status,
            search=search,
            page=page,
            limit=limit,
        )
    )
    return ApiResponse(
        data=PaginatedResponse.create(
            items=[service.fee_response(f) for f in fees],
            total=total,
            page=page,
            limit=limit,
        )
    )


@router.get(
    "/reminders",
    response_model=ApiResponse[ReminderClassificationResponse],
)
async def classify_reminders(
    academic_year: str | None = Query(None),
    today: date | None = Query(None, description="Defaults to the current date"),
    window_days: int | None = Query(None, ge=1, le=90),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*ADMIN_ROLES)),
):
    """Fees with overdue installments, and fees with installments due soon."""
    service = FeeService(db)
    result = await service.classify_reminders(academic_year, today, window_days)
    return ApiResponse(data=result)


@router.get("/{fee_id}", response_model=ApiResponse[FeeResponse])
async def get_fee(
    fee_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*POOL_STAFF)),
):
    service = FeeService(db)
    fee = await service.get_fee(fee_id)
    return ApiResponse(data=service.fee_response(fee))


@router.get("/{fee_id}/pool", response_model=ApiResponse[PoolSummaryResponse])
async def get_pool_summary(
    fee_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*POOL_STAFF)),
):
    """Medical & stationary pool usage for one fee."""
    service = FeeService(db)
    return ApiResponse(data=await service.pool_summary(fee_id))


# --- Ledger Endpoints ---


@router.post(
    "/{fee_id}/expenses",
    response_model=ApiResponse[ExpenseResultResponse],
    status_code=status.HTTP_201_CREATED,
)
async def add_expense(
    fee_id: int,
    data: ExpenseCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*POOL_STAFF)),
):
    """Draw a medical or stationary expense against the fee's pool."""
    _ensure_category_allowed(current_user, data.category)
    service = FeeService(db)
    expense, remaining = await service.add_expense(fee_id, data, current_user.id)
    return ApiResponse(
        data=ExpenseResultResponse(
            expense=ExpenseResponse.model_validate(expense),
            remaining_pool_balance=remaining,
        ),
        message="Expense added successfully",
    )


@router.post(
    "/common-expenses",
    response_model=ApiResponse[CommonExpenseResponse],
    status_code=status.HTTP_201_CREATED,
)
async def add_common_expense(
    data: CommonExpenseCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*POOL_STAFF)),
):
    """Split one expense equally across the pools of a class's students."""
    _ensure_category_allowed(current_user, data.category)
    result = await FeeService(db).add_common_expense(data, current_user.id)
    return ApiResponse(
        data=result,
        message=f"Expense divided among {len(result.shares)} students",
    )


@router.post(
    "/{fee_id}/installments/{installment_id}/pay",
    response_model=ApiResponse[FeeResponse],
)
async def pay_installment(
    fee_id: int,
    installment_id: int,
    data: InstallmentPayment,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*ADMIN_ROLES)),
):
    """Mark an installment as paid and issue a receipt number."""
    service = FeeService(db)
    fee, installment = await service.pay_installment(fee_id, installment_id, data, current_user.id)
    return ApiResponse(
        data=service.fee_response(fee),
        message=f"Installment paid, receipt {installment.receipt_number}",
    )
