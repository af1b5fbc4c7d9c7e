"""Fee structure models."""

from decimal import Decimal

from sqlalchemy import BigInteger, Boolean, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.core.database.base import BaseModel, MoneyType


class FeeStructure(BaseModel):
    """
    Yearly fee template for one class and residential type.

    The total is the sum of the category amounts plus the medical &
    stationary pool: the pool is part of what parents pay, not on top.
    """

    __tablename__ = "fee_structures"

    academic_year: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    class_name: Mapped[str] = mapped_column(String(20), nullable=False)
    residential_type: Mapped[str] = mapped_column(String(20), nullable=False)
    medical_stationary_pool: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False, default=Decimal("0.00")
    )

    created_by_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("users.id"), nullable=False)

    categories: Mapped[list["FeeStructureCategory"]] = relationship(
        "FeeStructureCategory",
        back_populates="structure",
        cascade="all, delete-orphan",
        order_by="FeeStructureCategory.id",
    )

    __table_args__ = (
        UniqueConstraint(
            "academic_year", "class_name", "residential_type", name="uq_fee_structure_year_class_type"
        ),
    )

    @property
    def categories_total(self) -> Decimal:
        return sum((c.base_amount for c in self.categories), Decimal("0.00"))

    @property
    def total_amount(self) -> Decimal:
        return self.categories_total + self.medical_stationary_pool


class FeeStructureCategory(BaseModel):
    """A named line of a fee structure, e.g. tuition, hostel, transport."""

    __tablename__ = "fee_structure_categories"

    structure_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("fee_structures.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    base_amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    is_required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    structure: Mapped["FeeStructure"] = relationship("FeeStructure", back_populates="categories")
