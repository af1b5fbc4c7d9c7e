from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.auth.dependencies import CurrentUser, SuperAdminUser
from src.core.auth.schemas import (
    LoginRequest,
    LoginResponse,
    RefreshRequest,
    StaffCreate,
    TokenResponse,
    UserResponse,
)
from src.core.auth.service import AuthService
from src.core.database import get_db
from src.shared.schemas import SuccessResponse

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _client_ip(request: Request) -> str | None:
    return request.client.host if request.client else None


@router.post("/login", response_model=SuccessResponse[LoginResponse])
async def login(
    request: Request,
    data: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    """Open a session and return its token pair."""
    user, access_token, refresh_token = await AuthService(db).authenticate(
        email=data.email, password=data.password, ip_address=_client_ip(request)
    )
    return SuccessResponse(
        data=LoginResponse(
            user=UserResponse.model_validate(user),
            access_token=access_token,
            refresh_token=refresh_token,
        ),
        message="Login successful",
    )


@router.post("/refresh", response_model=SuccessResponse[TokenResponse])
async def refresh_tokens(data: RefreshRequest, db: AsyncSession = Depends(get_db)):
    access_token, refresh_token = await AuthService(db).refresh_tokens(data.refresh_token)
    return SuccessResponse(
        data=TokenResponse(access_token=access_token, refresh_token=refresh_token),
        message="Tokens refreshed",
    )


@router.post("/logout", response_model=SuccessResponse[None])
async def logout(
    request: Request,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    """Close the session; tokens issued for it stop working."""
    await AuthService(db).logout(current_user, ip_address=_client_ip(request))
    await db.commit()
    return SuccessResponse(data=None, message="Logged out")


@router.get("/me", response_model=SuccessResponse[UserResponse])
async def get_current_user_info(current_user: CurrentUser):
    return SuccessResponse(data=UserResponse.model_validate(current_user))


@router.post(
    "/users",
    response_model=SuccessResponse[UserResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_staff_account(
    data: StaffCreate,
    current_user: SuperAdminUser,
    db: AsyncSession = Depends(get_db),
):
    """Create a staff account. Requires SUPER_ADMIN role."""
    user = await AuthService(db).create_user(
        email=data.email,
        password=data.password,
        full_name=data.full_name,
        role=data.role,
        phone=data.phone,
        created_by_id=current_user.id,
    )
    await db.commit()
    return SuccessResponse(
        data=UserResponse.model_validate(user),
        message=f"{data.role.value} account created",
    )
