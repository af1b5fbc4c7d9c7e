from datetime import date

import pytest
from httpx import AsyncClient
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.auth.models import UserRole
from src.core.exceptions import NotFoundError, ValidationError
from src.modules.students.models import ResidentialType, StudentStatus
from src.modules.students.schemas import StudentCreate, StudentFilters, StudentUpdate
from src.modules.students.service import StudentService


def _student_data(**overrides) -> StudentCreate:
    data = {
        "first_name": "Aarav",
        "last_name": "Sharma",
        "class_name": "5",
        "section": "A",
        "parent_name": "Rohit Sharma",
        "parent_phone": "9876543210",
    }
    data.update(overrides)
    return StudentCreate(**data)


class TestStudentService:
    """Tests for StudentService."""

    async def test_create_student(self, db_session: AsyncSession):
        """Test creating a student with a generated admission number."""
        service = StudentService(db_session)

        student = await service.create_student(
            _student_data(residential_type=ResidentialType.RESIDENTIAL),
            created_by_id=1,
        )

        assert student.id is not None
        assert student.admission_number.startswith("STU-")
        assert student.admission_number.endswith("-000001")
        assert student.full_name == "Aarav Sharma"
        assert student.residential_type == "residential"
        assert student.status == StudentStatus.ACTIVE.value

    async def test_admission_number_follows_admission_year(self, db_session: AsyncSession):
        service = StudentService(db_session)

        student = await service.create_student(
            _student_data(admission_date=date(2023, 6, 12)), created_by_id=1
        )

        assert student.admission_number == "STU-2023-000001"

    async def test_create_student_phone_normalization(self, db_session: AsyncSession):
        """Phone numbers in common Indian formats end up as +91XXXXXXXXXX."""
        service = StudentService(db_session)

        for phone in ("9876543210", "09876543210", "919876543210", "+91 98765-43210"):
            student = await service.create_student(
                _student_data(parent_phone=phone), created_by_id=1
            )
            assert student.parent_phone == "+919876543210"

    def test_invalid_phone_rejected(self):
        with pytest.raises(PydanticValidationError):
            _student_data(parent_phone="12345")
        with pytest.raises(PydanticValidationError):
            _student_data(parent_phone="+445551234567")

    async def test_get_student_not_found(self, db_session: AsyncSession):
        service = StudentService(db_session)

        with pytest.raises(NotFoundError):
            await service.get_student_by_id(999)

    async def test_list_students(self, db_session: AsyncSession):
        """Test listing with class filter, search and pagination."""
        service = StudentService(db_session)
        await service.create_student(_student_data(first_name="Aarav"), created_by_id=1)
        await service.create_student(_student_data(first_name="Diya"), created_by_id=1)
        await service.create_student(
            _student_data(first_name="Kabir", class_name="6"), created_by_id=1
        )

        students, total = await service.list_students(StudentFilters(class_name="5"))
        assert total == 2
        assert {s.first_name for s in students} == {"Aarav", "Diya"}

        students, total = await service.list_students(StudentFilters(search="kab"))
        assert total == 1
        assert students[0].first_name == "Kabir"

        students, total = await service.list_students(StudentFilters(page=2, limit=2))
        assert total == 3
        assert len(students) == 1

    async def test_update_student(self, db_session: AsyncSession):
        """Only provided fields change."""
        service = StudentService(db_session)
        student = await service.create_student(_student_data(), created_by_id=1)

        updated = await service.update_student(
            student.id,
            StudentUpdate(class_name="6", parent_phone="9123456789"),
            updated_by_id=1,
        )

        assert updated.class_name == "6"
        assert updated.parent_phone == "+919123456789"
        assert updated.first_name == "Aarav"
        assert updated.section == "A"

    async def test_activate_deactivate_student(self, db_session: AsyncSession):
        service = StudentService(db_session)
        student = await service.create_student(_student_data(), created_by_id=1)

        student = await service.set_status(student.id, StudentStatus.INACTIVE, changed_by_id=1)
        assert student.status == "inactive"
        assert student.is_active is False

        with pytest.raises(ValidationError):
            await service.set_status(student.id, StudentStatus.INACTIVE, changed_by_id=1)

        student = await service.set_status(student.id, StudentStatus.ACTIVE, changed_by_id=1)
        assert student.is_active is True

        active, total = await service.list_students(StudentFilters(status=StudentStatus.ACTIVE))
        assert total == 1


class TestStudentEndpoints:
    """Tests for student API endpoints."""

    async def test_create_student(
        self, client: AsyncClient, db_session: AsyncSession, auth_headers
    ):
        headers = await auth_headers(UserRole.SUPER_ADMIN)

        response = await client.post(
            "/api/v1/students",
            json={
                "first_name": "Ishaan",
                "last_name": "Verma",
                "class_name": "8",
                "residential_type": "residential",
                "parent_name": "Meera Verma",
                "parent_phone": "+91 91234 56789",
            },
            headers=headers,
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["full_name"] == "Ishaan Verma"
        assert data["parent_phone"] == "+919123456789"
        assert data["admission_number"].startswith("STU-")

    async def test_phone_validation_invalid(
        self, client: AsyncClient, db_session: AsyncSession, auth_headers
    ):
        headers = await auth_headers(UserRole.SUPER_ADMIN)

        response = await client.post(
            "/api/v1/students",
            json={
                "first_name": "Ishaan",
                "last_name": "Verma",
                "class_name": "8",
                "parent_name": "Meera Verma",
                "parent_phone": "12345678901",
            },
            headers=headers,
        )

        assert response.status_code == 422
        assert response.json()["success"] is False

    async def test_teacher_cannot_create_student(
        self, client: AsyncClient, db_session: AsyncSession, auth_headers
    ):
        headers = await auth_headers(UserRole.TEACHER)

        response = await client.post(
            "/api/v1/students",
            json={
                "first_name": "Ishaan",
                "last_name": "Verma",
                "class_name": "8",
                "parent_name": "Meera Verma",
                "parent_phone": "9123456789",
            },
            headers=headers,
        )

        assert response.status_code == 403

    async def test_list_and_search_students(
        self, client: AsyncClient, db_session: AsyncSession, auth_headers
    ):
        headers = await auth_headers(UserRole.SUPER_ADMIN)
        service = StudentService(db_session)
        await service.create_student(_student_data(first_name="Aarav"), created_by_id=1)
        await service.create_student(_student_data(first_name="Diya"), created_by_id=1)

        response = await client.get(
            "/api/v1/students",
            params={"search": "diya"},
            headers=headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["total"] == 1
        assert data["items"][0]["first_name"] == "Diya"

    async def test_deactivate_student(
        self, client: AsyncClient, db_session: AsyncSession, auth_headers
    ):
        headers = await auth_headers(UserRole.SUPER_ADMIN)
        student = await StudentService(db_session).create_student(
            _student_data(), created_by_id=1
        )

        response = await client.post(
            f"/api/v1/students/{student.id}/deactivate",
            headers=headers,
        )

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "inactive"
