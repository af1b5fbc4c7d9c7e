"""API endpoints for Students module."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.auth.dependencies import ADMIN_ROLES, require_roles
from src.core.auth.models import User, UserRole
from src.core.database.session import get_db
from src.modules.students.models import StudentStatus
from src.modules.students.schemas import (
    StudentCreate,
    StudentFilters,
    StudentResponse,
    StudentUpdate,
)
from src.modules.students.service import StudentService
from src.shared.schemas.base import ApiResponse, PaginatedResponse

router = APIRouter(prefix="/students", tags=["Students"])

# Every staff role may look students up; only admins change them
ANY_STAFF = tuple(UserRole)


@router.post(
    "",
    response_model=ApiResponse[StudentResponse],
    status_code=status.HTTP_201_CREATED,
)
async def admit_student(
    data: StudentCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*ADMIN_ROLES)),
):
    """Admit a student; the admission number is generated."""
    student = await StudentService(db).create_student(data, current_user.id)
    return ApiResponse(
        data=StudentResponse.model_validate(student),
        message=f"Student admitted as {student.admission_number}",
    )


@router.get("", response_model=ApiResponse[PaginatedResponse[StudentResponse]])
async def list_students(
    status: StudentStatus | None = Query(None),
    class_name: str | None = Query(None),
    search: str | None = Query(None, description="Name, admission number or parent"),
    page: int = Query(1, ge=1),
    limit: int = Query(100, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*ANY_STAFF)),
):
    filters = StudentFilters(
        status=status, class_name=class_name, search=search, page=page, limit=limit
    )
    students, total = await StudentService(db).list_students(filters)
    return ApiResponse(
        data=PaginatedResponse.create(
            items=[StudentResponse.model_validate(s) for s in students],
            total=total,
            page=page,
            limit=limit,
        ),
    )


@router.get("/{student_id}", response_model=ApiResponse[StudentResponse])
async def get_student(
    student_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*ANY_STAFF)),
):
    student = await StudentService(db).get_student_by_id(student_id)
    return ApiResponse(data=StudentResponse.model_validate(student))


@router.patch("/{student_id}", response_model=ApiResponse[StudentResponse])
async def update_student(
    student_id: int,
    data: StudentUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*ADMIN_ROLES)),
):
    """Update contact, class or residential details. Requires ADMIN role."""
    student = await StudentService(db).update_student(student_id, data, current_user.id)
    return ApiResponse(
        data=StudentResponse.model_validate(student),
        message="Student updated successfully",
    )


async def _change_status(
    db: AsyncSession, student_id: int, new_status: StudentStatus, user: User
) -> ApiResponse[StudentResponse]:
    student = await StudentService(db).set_status(student_id, new_status, user.id)
    return ApiResponse(
        data=StudentResponse.model_validate(student),
        message=f"Student {student.admission_number} is now {new_status.value}",
    )


@router.post("/{student_id}/activate", response_model=ApiResponse[StudentResponse])
async def activate_student(
    student_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*ADMIN_ROLES)),
):
    return await _change_status(db, student_id, StudentStatus.ACTIVE, current_user)


@router.post("/{student_id}/deactivate", response_model=ApiResponse[StudentResponse])
async def deactivate_student(
    student_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*ADMIN_ROLES)),
):
    """Withdrawn students keep their fee history."""
    return await _change_status(db, student_id, StudentStatus.INACTIVE, current_user)
