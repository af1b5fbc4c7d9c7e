from datetime import datetime

from pydantic import EmailStr, Field

from src.core.auth.models import UserRole
from src.shared.schemas import BaseSchema


class LoginRequest(BaseSchema):
    email: EmailStr
    password: str = Field(..., min_length=1)


class RefreshRequest(BaseSchema):
    refresh_token: str


class StaffCreate(BaseSchema):
    """New staff account; teachers record marks, medical/stationary staff spend the pool."""

    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    full_name: str = Field(..., min_length=1, max_length=200)
    role: UserRole
    phone: str | None = Field(None, max_length=50)


class TokenResponse(BaseSchema):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class UserResponse(BaseSchema):
    id: int
    email: str
    full_name: str
    phone: str | None
    role: str
    is_active: bool
    last_login_at: datetime | None


class LoginResponse(TokenResponse):
    user: UserResponse
