"""Service for Academics module."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.audit.service import AuditAction, AuditService
from src.core.exceptions import NotFoundError, ValidationError
from src.modules.academics.grading import compute_grade
from src.modules.academics.models import Exam, ExamResult, ExamType
from src.modules.academics.schemas import ExamCreate, MarksRecord
from src.modules.students.models import Student


class AcademicsService:
    """Service for exams and marks."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)

    async def create_exam(self, data: ExamCreate, created_by_id: int) -> Exam:
        exam = Exam(
            name=data.name,
            class_name=data.class_name,
            subject=data.subject,
            exam_type=data.exam_type.value,
            academic_year=data.academic_year,
            exam_date=data.exam_date,
            total_marks=data.total_marks,
            created_by_id=created_by_id,
        )
        self.db.add(exam)
        await self.db.flush()

        await self.audit.log(
            action=AuditAction.CREATE,
            entity_type="Exam",
            entity_id=exam.id,
            entity_identifier=f"{data.name} ({data.class_name} {data.subject})",
            user_id=created_by_id,
            new_values={
                "exam_type": data.exam_type.value,
                "academic_year": data.academic_year,
                "total_marks": str(data.total_marks),
            },
        )

        await self.db.commit()
        return await self.get_exam_by_id(exam.id)

    async def get_exam_by_id(self, exam_id: int) -> Exam:
        result = await self.db.execute(
            select(Exam).where(Exam.id == exam_id).execution_options(populate_existing=True)
        )
        exam = result.scalar_one_or_none()
        if not exam:
            raise NotFoundError("Exam", exam_id)
        return exam

    async def list_exams(
        self,
        class_name: str | None = None,
        academic_year: str | None = None,
        exam_type: ExamType | None = None,
    ) -> list[Exam]:
        query = select(Exam).order_by(Exam.exam_date.desc(), Exam.id.desc())
        if class_name:
            query = query.where(Exam.class_name == class_name)
        if academic_year:
            query = query.where(Exam.academic_year == academic_year)
        if exam_type:
            query = query.where(Exam.exam_type == exam_type.value)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def record_marks(
        self, exam_id: int, data: MarksRecord, recorded_by_id: int
    ) -> list[ExamResult]:
        """
        Record (or correct) marks for students of the exam's class.

        The grade is computed from the marks at entry time. Nothing is saved
        if any entry is invalid.
        """
        exam = await self.get_exam_by_id(exam_id)

        student_ids = [e.student_id for e in data.entries]
        students = {
            s.id: s
            for s in (
                await self.db.execute(select(Student).where(Student.id.in_(student_ids)))
            ).scalars()
        }
        existing = {
            r.student_id: r
            for r in (
                await self.db.execute(
                    select(ExamResult).where(
                        ExamResult.exam_id == exam.id, ExamResult.student_id.in_(student_ids)
                    )
                )
            ).scalars()
        }

        for entry in data.entries:
            student = students.get(entry.student_id)
            if student is None:
                raise NotFoundError("Student", entry.student_id)
            if student.class_name != exam.class_name:
                raise ValidationError(
                    f"Student {student.id} is in class {student.class_name}, "
                    f"exam is for class {exam.class_name}",
                    field="student_id",
                )
            if entry.marks_obtained > exam.total_marks:
                raise ValidationError(
                    f"Marks {entry.marks_obtained} exceed exam total {exam.total_marks} "
                    f"for student {student.id}",
                    field="marks_obtained",
                )

        for entry in data.entries:
            grade = compute_grade(entry.marks_obtained, exam.total_marks)
            result = existing.get(entry.student_id)
            old_values = None
            if result is None:
                result = ExamResult(
                    exam_id=exam.id,
                    student_id=entry.student_id,
                    recorded_by_id=recorded_by_id,
                )
                self.db.add(result)
            else:
                old_values = {"marks_obtained": str(result.marks_obtained), "grade": result.grade}
            result.marks_obtained = entry.marks_obtained
            result.grade = grade.value
            result.remarks = entry.remarks
            result.recorded_by_id = recorded_by_id
            await self.db.flush()

            await self.audit.log(
                action=AuditAction.RECORD_MARKS,
                entity_type="ExamResult",
                entity_id=result.id,
                entity_identifier=f"exam {exam.id} student {entry.student_id}",
                user_id=recorded_by_id,
                old_values=old_values,
                new_values={"marks_obtained": str(entry.marks_obtained), "grade": grade.value},
            )

        await self.db.commit()
        return [r for r in await self.list_results(exam.id) if r.student_id in students]

    async def list_results(self, exam_id: int) -> list[ExamResult]:
        await self.get_exam_by_id(exam_id)
        result = await self.db.execute(
            select(ExamResult)
            .where(ExamResult.exam_id == exam_id)
            .order_by(ExamResult.student_id)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())
