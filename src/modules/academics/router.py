"""API endpoints for Academics module."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.auth.dependencies import ADMIN_ROLES, require_roles
from src.core.auth.models import User, UserRole
from src.core.database.session import get_db
from src.modules.academics.models import ExamType
from src.modules.academics.schemas import (
    ExamCreate,
    ExamResponse,
    ExamResultResponse,
    MarksRecord,
)
from src.modules.academics.service import AcademicsService
from src.shared.schemas.base import ApiResponse

router = APIRouter(prefix="/exams", tags=["Academics"])

ACADEMIC_STAFF = (*ADMIN_ROLES, UserRole.TEACHER)


@router.post(
    "",
    response_model=ApiResponse[ExamResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_exam(
    data: ExamCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*ACADEMIC_STAFF)),
):
    service = AcademicsService(db)
    exam = await service.create_exam(data, current_user.id)
    return ApiResponse(
        data=ExamResponse.model_validate(exam),
        message="Exam created successfully",
    )


@router.get("", response_model=ApiResponse[list[ExamResponse]])
async def list_exams(
    class_name: str | None = Query(None),
    academic_year: str | None = Query(None),
    exam_type: ExamType | None = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*ACADEMIC_STAFF)),
):
    service = AcademicsService(db)
    exams = await service.list_exams(class_name, academic_year, exam_type)
    return ApiResponse(data=[ExamResponse.model_validate(e) for e in exams])


@router.get("/{exam_id}", response_model=ApiResponse[ExamResponse])
async def get_exam(
    exam_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*ACADEMIC_STAFF)),
):
    service = AcademicsService(db)
    exam = await service.get_exam_by_id(exam_id)
    return ApiResponse(data=ExamResponse.model_validate(exam))


@router.post("/{exam_id}/marks", response_model=ApiResponse[list[ExamResultResponse]])
async def record_marks(
    exam_id: int,
    data: MarksRecord,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*ACADEMIC_STAFF)),
):
    """Record marks; grades are computed from the exam total."""
    service = AcademicsService(db)
    results = await service.record_marks(exam_id, data, current_user.id)
    return ApiResponse(
        data=[ExamResultResponse.model_validate(r) for r in results],
        message=f"Marks recorded for {len(results)} students",
    )


@router.get("/{exam_id}/results", response_model=ApiResponse[list[ExamResultResponse]])
async def list_results(
    exam_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*ACADEMIC_STAFF)),
):
    service = AcademicsService(db)
    results = await service.list_results(exam_id)
    return ApiResponse(data=[ExamResultResponse.model_validate(r) for r in results])
