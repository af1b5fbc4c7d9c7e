"""API endpoints for Fee Structures module."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.auth.dependencies import ADMIN_ROLES, require_roles
from src.core.auth.models import User
from src.core.database.session import get_db
from src.modules.fee_structures.schemas import FeeStructureCreate, FeeStructureResponse
from src.modules.fee_structures.service import FeeStructureService
from src.modules.students.models import ResidentialType
from src.shared.schemas.base import ApiResponse

router = APIRouter(prefix="/fee-structures", tags=["Fee Structures"])


@router.post(
    "",
    response_model=ApiResponse[FeeStructureResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_fee_structure(
    data: FeeStructureCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*ADMIN_ROLES)),
):
    """Create a fee structure for a class. Requires ADMIN role."""
    service = FeeStructureService(db)
    structure = await service.create_structure(data, current_user.id)
    return ApiResponse(
        success=True,
        message="Fee structure created successfully",
        data=FeeStructureResponse.model_validate(structure),
    )


@router.get("", response_model=ApiResponse[list[FeeStructureResponse]])
async def list_fee_structures(
    academic_year: str | None = Query(None),
    class_name: str | None = Query(None),
    residential_type: ResidentialType | None = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*ADMIN_ROLES)),
):
    service = FeeStructureService(db)
    structures = await service.list_structures(academic_year, class_name, residential_type)
    return ApiResponse(
        success=True,
        data=[FeeStructureResponse.model_validate(s) for s in structures],
    )


@router.get("/{structure_id}", response_model=ApiResponse[FeeStructureResponse])
async def get_fee_structure(
    structure_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*ADMIN_ROLES)),
):
    service = FeeStructureService(db)
    structure = await service.get_structure_by_id(structure_id)
    return ApiResponse(success=True, data=FeeStructureResponse.model_validate(structure))
