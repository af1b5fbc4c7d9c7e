"""Service for Students module."""

from enum import Enum

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.audit.service import AuditAction, AuditService
from src.core.documents.number_generator import DocumentNumberGenerator, DocumentPrefix
from src.core.exceptions import NotFoundError, ValidationError
from src.core.logging import get_logger
from src.modules.students.models import Student, StudentStatus
from src.modules.students.schemas import StudentCreate, StudentFilters, StudentUpdate

log = get_logger("students")

# Columns matched by the free-text search on the student list
SEARCH_COLUMNS = (
    Student.first_name,
    Student.last_name,
    Student.admission_number,
    Student.parent_name,
    Student.parent_phone,
)


def _plain(value):
    return value.value if isinstance(value, Enum) else value


class StudentService:
    """Admissions and the student roll."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)

    async def create_student(self, data: StudentCreate, created_by_id: int) -> Student:
        """Admit a student under a new ``STU-YYYY-NNNNNN`` admission number."""
        admission_number = await DocumentNumberGenerator(self.db).generate(
            DocumentPrefix.STUDENT, on=data.admission_date
        )
        fields = {k: _plain(v) for k, v in data.model_dump().items()}
        student = Student(
            admission_number=admission_number,
            status=StudentStatus.ACTIVE.value,
            created_by_id=created_by_id,
            **fields,
        )
        self.db.add(student)
        await self.db.flush()

        await self.audit.log(
            action=AuditAction.CREATE,
            entity_type="Student",
            entity_id=student.id,
            entity_identifier=admission_number,
            user_id=created_by_id,
            new_values={
                "name": student.full_name,
                "class_name": student.class_name,
                "residential_type": student.residential_type,
            },
        )
        await self.db.commit()
        log.info("Admitted %s as %s", student.full_name, admission_number)
        return await self.get_student_by_id(student.id)

    async def get_student_by_id(self, student_id: int) -> Student:
        result = await self.db.execute(
            select(Student)
            .where(Student.id == student_id)
            .execution_options(populate_existing=True)
        )
        student = result.scalar_one_or_none()
        if student is None:
            raise NotFoundError("Student", student_id)
        return student

    async def list_students(
        self, filters: StudentFilters | None = None
    ) -> tuple[list[Student], int]:
        """Students ordered by surname, with the unpaginated total."""
        filters = filters or StudentFilters()
        query = select(Student)
        if filters.status is not None:
            query = query.where(Student.status == filters.status.value)
        if filters.class_name is not None:
            query = query.where(Student.class_name == filters.class_name)
        if filters.search:
            pattern = f"%{filters.search.strip()}%"
            query = query.where(or_(*(column.ilike(pattern) for column in SEARCH_COLUMNS)))

        total = (
            await self.db.execute(select(func.count()).select_from(query.subquery()))
        ).scalar_one()

        query = (
            query.order_by(Student.last_name, Student.first_name, Student.id)
            .offset((filters.page - 1) * filters.limit)
            .limit(filters.limit)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all()), total

    async def update_student(
        self, student_id: int, data: StudentUpdate, updated_by_id: int
    ) -> Student:
        """Apply the fields present in ``data``; an explicit null leaves a field as is."""
        student = await self.get_student_by_id(student_id)

        changes = {
            field: _plain(value)
            for field, value in data.model_dump(exclude_unset=True).items()
            if value is not None and _plain(value) != getattr(student, field)
        }
        if changes:
            old_values = {
                field: None if getattr(student, field) is None else str(getattr(student, field))
                for field in changes
            }
            for field, value in changes.items():
                setattr(student, field, value)

            await self.audit.log(
                action=AuditAction.UPDATE,
                entity_type="Student",
                entity_id=student.id,
                entity_identifier=student.admission_number,
                user_id=updated_by_id,
                old_values=old_values,
                new_values={field: str(value) for field, value in changes.items()},
            )

        await self.db.commit()
        return await self.get_student_by_id(student_id)

    async def set_status(
        self, student_id: int, status: StudentStatus, changed_by_id: int
    ) -> Student:
        student = await self.get_student_by_id(student_id)
        if student.status == status.value:
            raise ValidationError(f"Student is already {status.value}", field="status")

        old_status, student.status = student.status, status.value
        await self.audit.log(
            action=(
                AuditAction.ACTIVATE if status == StudentStatus.ACTIVE else AuditAction.DEACTIVATE
            ),
            entity_type="Student",
            entity_id=student.id,
            entity_identifier=student.admission_number,
            user_id=changed_by_id,
            old_values={"status": old_status},
            new_values={"status": status.value},
        )
        await self.db.commit()
        log.info("Student %s is now %s", student.admission_number, status.value)
        return await self.get_student_by_id(student_id)
