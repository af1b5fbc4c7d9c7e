"""Schemas for Fee Structures module."""

from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from src.modules.students.models import ResidentialType


class FeeCategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = None
    base_amount: Decimal = Field(..., ge=0, decimal_places=2)
    is_required: bool = True


class FeeStructureCreate(BaseModel):
    """Schema for creating a fee structure."""

    academic_year: str = Field(..., min_length=4, max_length=20, examples=["2024-25"])
    class_name: str = Field(..., min_length=1, max_length=20)
    residential_type: ResidentialType
    medical_stationary_pool: Decimal = Field(Decimal("0.00"), ge=0, decimal_places=2)
    categories: list[FeeCategoryCreate] = Field(..., min_length=1)

    @field_validator("categories")
    @classmethod
    def unique_names(cls, v: list[FeeCategoryCreate]) -> list[FeeCategoryCreate]:
        names = [c.name.strip().lower() for c in v]
        if len(names) != len(set(names)):
            raise ValueError("Category names must be unique")
        return v


class FeeCategoryResponse(BaseModel):
    id: int
    name: str
    description: str | None
    base_amount: Decimal
    is_required: bool

    model_config = {"from_attributes": True}


class FeeStructureResponse(BaseModel):
    id: int
    academic_year: str
    class_name: str
    residential_type: str
    medical_stationary_pool: Decimal
    categories: list[FeeCategoryResponse]
    categories_total: Decimal
    total_amount: Decimal

    model_config = {"from_attributes": True}
