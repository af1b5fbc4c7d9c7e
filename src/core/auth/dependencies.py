from typing import Annotated

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.auth.models import User, UserRole
from src.core.auth.service import AuthService
from src.core.database import get_db
from src.core.exceptions import AuthenticationError, AuthorizationError

ADMIN_ROLES = (UserRole.SUPER_ADMIN, UserRole.ADMIN)


async def get_current_user(
    authorization: Annotated[str | None, Header()] = None,
    db: AsyncSession = Depends(get_db),
) -> User:
    """User owning the ``Authorization: Bearer <access token>`` header."""
    if not authorization:
        raise AuthenticationError("Authorization header required")

    scheme, _, token = authorization.partition(" ")
    if scheme != "Bearer" or not token:
        raise AuthenticationError("Invalid authorization header format")

    return await AuthService(db).resolve_token(token, token_type="access")


def require_roles(*roles: UserRole):
    """
    Dependency factory restricting an endpoint to the given roles.

    Usage:
        @router.post("/{fee_id}/expenses")
        async def add_expense(
            user: User = Depends(require_roles(UserRole.ADMIN, UserRole.MEDICAL))
        ):
            ...
    """

    async def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if not current_user.has_role(*roles):
            raise AuthorizationError(f"Required role: {', '.join(r.value for r in roles)}")
        return current_user

    return role_checker


CurrentUser = Annotated[User, Depends(get_current_user)]
SuperAdminUser = Annotated[User, Depends(require_roles(UserRole.SUPER_ADMIN))]
AdminUser = Annotated[User, Depends(require_roles(*ADMIN_ROLES))]
