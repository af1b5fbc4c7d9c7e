from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.audit.schemas import AuditLogResponse
from src.core.audit.service import AuditAction, AuditService
from src.core.auth.dependencies import AdminUser
from src.core.database import get_db
from src.shared.schemas import PaginatedResponse, SuccessResponse

router = APIRouter(prefix="/audit-logs", tags=["Audit"])


@router.get("", response_model=SuccessResponse[PaginatedResponse[AuditLogResponse]])
async def list_audit_logs(
    current_user: AdminUser,
    entity_type: str | None = Query(None, examples=["Fee"]),
    entity_id: int | None = Query(None),
    user_id: int | None = Query(None),
    action: AuditAction | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
):
    """Who changed what, newest first. Requires ADMIN role."""
    entries, total = await AuditService(db).list_entries(
        entity_type=entity_type,
        entity_id=entity_id,
        user_id=user_id,
        action=action,
        page=page,
        limit=limit,
    )
    return SuccessResponse(
        data=PaginatedResponse.create(
            items=[AuditLogResponse.model_validate(e) for e in entries],
            total=total,
            page=page,
            limit=limit,
        )
    )
