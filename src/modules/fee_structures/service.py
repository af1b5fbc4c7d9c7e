"""Service for Fee Structures module."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.core.audit.service import AuditAction, AuditService
from src.core.exceptions import DuplicateError, NotFoundError
from src.modules.fee_structures.models import FeeStructure, FeeStructureCategory
from src.modules.fee_structures.schemas import FeeStructureCreate
from src.modules.students.models import ResidentialType
from src.shared.utils.money import round_money


class FeeStructureService:
    """Service for managing yearly fee structures."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)

    async def create_structure(
        self, data: FeeStructureCreate, created_by_id: int
    ) -> FeeStructure:
        existing = await self.db.execute(
            select(FeeStructure.id).where(
                FeeStructure.academic_year == data.academic_year,
                FeeStructure.class_name == data.class_name,
                FeeStructure.residential_type == data.residential_type.value,
            )
        )
        if existing.scalar_one_or_none():
            raise DuplicateError(
                "FeeStructure",
                "academic_year/class/residential_type",
                f"{data.academic_year}/{data.class_name}/{data.residential_type.value}",
            )

        structure = FeeStructure(
            academic_year=data.academic_year,
            class_name=data.class_name,
            residential_type=data.residential_type.value,
            medical_stationary_pool=round_money(data.medical_stationary_pool),
            created_by_id=created_by_id,
            categories=[
                FeeStructureCategory(
                    name=c.name,
                    description=c.description,
                    base_amount=round_money(c.base_amount),
                    is_required=c.is_required,
                )
                for c in data.categories
            ],
        )
        self.db.add(structure)
        await self.db.flush()

        await self.audit.log(
            action=AuditAction.CREATE,
            entity_type="FeeStructure",
            entity_id=structure.id,
            entity_identifier=f"{data.academic_year} class {data.class_name}",
            user_id=created_by_id,
            new_values={
                "total_amount": str(structure.total_amount),
                "medical_stationary_pool": str(structure.medical_stationary_pool),
                "categories": len(data.categories),
            },
        )

        await self.db.commit()
        return await self.get_structure_by_id(structure.id)

    async def get_structure_by_id(self, structure_id: int) -> FeeStructure:
        result = await self.db.execute(
            select(FeeStructure)
            .where(FeeStructure.id == structure_id)
            .options(selectinload(FeeStructure.categories))
            .execution_options(populate_existing=True)
        )
        structure = result.scalar_one_or_none()
        if not structure:
            raise NotFoundError("FeeStructure", structure_id)
        return structure

    async def list_structures(
        self,
        academic_year: str | None = None,
        class_name: str | None = None,
        residential_type: ResidentialType | None = None,
    ) -> list[FeeStructure]:
        query = (
            select(FeeStructure)
            .options(selectinload(FeeStructure.categories))
            .order_by(FeeStructure.academic_year.desc(), FeeStructure.class_name)
        )
        if academic_year:
            query = query.where(FeeStructure.academic_year == academic_year)
        if class_name:
            query = query.where(FeeStructure.class_name == class_name)
        if residential_type:
            query = query.where(FeeStructure.residential_type == residential_type.value)
        result = await self.db.execute(query)
        return list(result.scalars().all())
