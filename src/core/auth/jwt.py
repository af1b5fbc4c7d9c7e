from datetime import datetime, timedelta, timezone
from typing import Any, Literal

from jose import JWTError, jwt

from src.core.config import settings
from src.core.exceptions import AuthenticationError

TokenType = Literal["access", "refresh"]


def _encode(
    user_id: int,
    token_type: TokenType,
    session_version: int,
    lifetime: timedelta,
    **claims: Any,
) -> str:
    issued_at = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "sv": session_version,
        "type": token_type,
        "iat": issued_at,
        "exp": issued_at + lifetime,
        **claims,
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(user_id: int, role: str, session_version: int = 0) -> str:
    """Short-lived token sent with every API call; carries the role."""
    return _encode(
        user_id,
        "access",
        session_version,
        timedelta(minutes=settings.access_token_expire_minutes),
        role=role,
    )


def create_refresh_token(user_id: int, session_version: int = 0) -> str:
    return _encode(
        user_id,
        "refresh",
        session_version,
        timedelta(days=settings.refresh_token_expire_days),
    )


def decode_token(token: str, token_type: TokenType = "access") -> dict[str, Any]:
    """
    Verify signature and expiry and return the claims.

    Raises:
        AuthenticationError: bad signature, expired, or a token of the
            other type (a refresh token used as access token or vice versa)
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        raise AuthenticationError(f"Invalid token: {e}")

    if payload.get("type") != token_type:
        raise AuthenticationError(f"Invalid token type, expected {token_type}")
    return payload
