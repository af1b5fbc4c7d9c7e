from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.audit import AuditAction, AuditService
from src.core.auth.jwt import create_access_token, create_refresh_token, decode_token
from src.core.auth.models import User, UserRole
from src.core.auth.password import hash_password, verify_password
from src.core.exceptions import AuthenticationError, DuplicateError
from src.core.logging import get_logger

log = get_logger("auth")

INVALID_CREDENTIALS = "Invalid email or password"


def _normalize_email(email: str) -> str:
    return email.strip().lower()


class AuthService:
    """
    Staff accounts and their sessions.

    A session starts at login and ends at logout. Tokens carry the user's
    ``session_version``; logout bumps it so every token from the closed
    session is rejected by ``resolve_token``.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.audit = AuditService(session)

    async def _find_user(self, *criteria) -> User | None:
        result = await self.session.execute(select(User).where(*criteria))
        return result.scalar_one_or_none()

    async def get_user_by_email(self, email: str) -> User | None:
        return await self._find_user(func.lower(User.email) == _normalize_email(email))

    async def get_user_by_id(self, user_id: int) -> User | None:
        return await self._find_user(User.id == user_id)

    async def create_user(
        self,
        email: str,
        password: str,
        full_name: str,
        role: UserRole,
        phone: str | None = None,
        created_by_id: int | None = None,
    ) -> User:
        """Create a staff account. The caller commits."""
        email = _normalize_email(email)
        if await self.get_user_by_email(email):
            raise DuplicateError("User", "email", email)

        user = User(
            email=email,
            password_hash=hash_password(password),
            full_name=full_name,
            phone=phone,
            role=role.value,
            is_active=True,
            session_version=0,
        )
        self.session.add(user)
        await self.session.flush()

        await self.audit.log(
            action=AuditAction.CREATE,
            entity_type="User",
            entity_id=user.id,
            user_id=created_by_id,
            entity_identifier=email,
            new_values={"role": user.role, "full_name": full_name},
        )
        log.info("Created %s account %s", user.role, email)
        return user

    def _issue_tokens(self, user: User) -> tuple[str, str]:
        return (
            create_access_token(user.id, user.role, user.session_version),
            create_refresh_token(user.id, user.session_version),
        )

    async def authenticate(
        self, email: str, password: str, ip_address: str | None = None
    ) -> tuple[User, str, str]:
        """
        Check credentials and open a session.

        Returns:
            (user, access_token, refresh_token)

        Raises:
            AuthenticationError: unknown email, wrong password, no password
                set, or deactivated account
        """
        user = await self.get_user_by_email(email)
        if user is None:
            raise AuthenticationError(INVALID_CREDENTIALS)
        if not user.can_login:
            raise AuthenticationError("User does not have system access")
        if not verify_password(password, user.password_hash):
            log.info("Failed login for %s", email)
            raise AuthenticationError(INVALID_CREDENTIALS)
        if not user.is_active:
            raise AuthenticationError("User account is deactivated")

        user.last_login_at = datetime.now(timezone.utc)
        await self.audit.log(
            action=AuditAction.LOGIN,
            entity_type="User",
            entity_id=user.id,
            user_id=user.id,
            entity_identifier=user.email,
            new_values={"session_version": user.session_version},
            ip_address=ip_address,
        )

        access_token, refresh_token = self._issue_tokens(user)
        return user, access_token, refresh_token

    async def resolve_token(self, token: str, token_type: str = "access") -> User:
        """
        The active user a token belongs to.

        Raises:
            AuthenticationError: bad token, missing or deactivated user, or
                a token from a session that has since been closed
        """
        payload = decode_token(token, token_type=token_type)
        user = await self.get_user_by_id(int(payload["sub"]))

        if user is None:
            raise AuthenticationError("User not found")
        if not user.is_active:
            raise AuthenticationError("User account is deactivated")
        if payload.get("sv", 0) != user.session_version:
            raise AuthenticationError("Session has ended, please log in again")
        return user

    async def refresh_tokens(self, refresh_token: str) -> tuple[str, str]:
        """New (access, refresh) pair for the same session."""
        user = await self.resolve_token(refresh_token, token_type="refresh")
        return self._issue_tokens(user)

    async def logout(self, user: User, ip_address: str | None = None) -> None:
        previous = user.session_version
        user.session_version = previous + 1
        await self.audit.log(
            action=AuditAction.LOGOUT,
            entity_type="User",
            entity_id=user.id,
            user_id=user.id,
            entity_identifier=user.email,
            old_values={"session_version": previous},
            new_values={"session_version": user.session_version},
            ip_address=ip_address,
        )
        log.info("Session %s closed for %s", previous, user.email)
