"""Schemas for Students module."""

import re
from datetime import date

from pydantic import BaseModel, Field, field_validator

from src.modules.students.models import ResidentialType, StudentStatus


# Indian mobile: +91 followed by 10 digits starting 6-9
INDIAN_PHONE_REGEX = re.compile(r"^\+91[6-9][0-9]{9}$")


def normalize_phone(v: str) -> str:
    """Normalize Indian mobile numbers to +91XXXXXXXXXX."""
    normalized = v.replace(" ", "").replace("-", "")

    # 0-prefixed trunk format: 09876543210
    if normalized.startswith("0") and len(normalized) == 11:
        normalized = normalized[1:]

    if len(normalized) == 10 and normalized.isdigit():
        normalized = "+91" + normalized

    if normalized.startswith("91") and len(normalized) == 12:
        normalized = "+" + normalized

    if not INDIAN_PHONE_REGEX.match(normalized):
        raise ValueError("Phone must be an Indian mobile number: +91XXXXXXXXXX (e.g., +919876543210)")
    return normalized


class StudentCreate(BaseModel):
    """Schema for creating a student."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    date_of_birth: date | None = None
    class_name: str = Field(..., min_length=1, max_length=20)
    section: str | None = Field(None, max_length=10)
    residential_type: ResidentialType = ResidentialType.NON_RESIDENTIAL
    parent_name: str = Field(..., min_length=1, max_length=200)
    parent_phone: str = Field(..., min_length=10, max_length=20)
    parent_email: str | None = Field(None, max_length=255)
    address: str | None = None
    medical_info: str | None = None
    admission_date: date | None = None

    @field_validator("parent_phone")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        return normalize_phone(v)


class StudentUpdate(BaseModel):
    """Schema for updating a student. Only provided fields change."""

    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    date_of_birth: date | None = None
    class_name: str | None = Field(None, min_length=1, max_length=20)
    section: str | None = Field(None, max_length=10)
    residential_type: ResidentialType | None = None
    parent_name: str | None = Field(None, min_length=1, max_length=200)
    parent_phone: str | None = Field(None, min_length=10, max_length=20)
    parent_email: str | None = Field(None, max_length=255)
    address: str | None = None
    medical_info: str | None = None

    @field_validator("parent_phone")
    @classmethod
    def validate_phone(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return normalize_phone(v)


class StudentFilters(BaseModel):
    status: StudentStatus | None = None
    class_name: str | None = None
    search: str | None = None
    page: int = Field(1, ge=1)
    limit: int = Field(100, ge=1, le=500)


class StudentResponse(BaseModel):
    """Schema for student response."""

    id: int
    admission_number: str
    first_name: str
    last_name: str
    full_name: str
    date_of_birth: date | None
    class_name: str
    section: str | None
    residential_type: str
    parent_name: str
    parent_phone: str
    parent_email: str | None
    address: str | None
    medical_info: str | None
    status: str
    admission_date: date | None
    created_by_id: int

    model_config = {"from_attributes": True}
