"""
FastAPI Dependencies for Authentication.

Key patterns:
1. Identity is resolved here, once per request, and handed to the chat
   core as an explicit caller_id. The core never looks up a session itself.
2. get_caller_id is lenient: a missing or invalid token yields None, and the
   core decides (reads return empty, writes raise Unauthenticated).
3. get_current_user is strict and used by profile routes.

Security model:
- JWT stored in HttpOnly cookie (recommended) or Authorization header
- Tokens are issued by the auth collaborator; only the subject claim is read
"""

from datetime import datetime, timedelta, timezone
from typing import Annotated
from uuid import UUID

from fastapi import Cookie, Depends, Header, HTTPException, status
from jose import JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from financeai.config import get_settings
from financeai.db.models import User
from financeai.db.session import get_db

settings = get_settings()


# =============================================================================
# JWT UTILITIES
# =============================================================================


def create_access_token(user_id: UUID) -> str:
    """
    Create a JWT access token for a user.

    Token payload contains only `sub` (user id) and `exp`.
    """
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.jwt_expire_minutes)
    payload = {
        "sub": str(user_id),
        "exp": expire,
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> UUID | None:
    """
    Decode and validate a JWT access token.

    Returns user_id if valid, None if invalid/expired.
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
        user_id_str = payload.get("sub")
        if user_id_str is None:
            return None
        return UUID(user_id_str)
    except (JWTError, ValueError):
        return None


# =============================================================================
# AUTHENTICATION DEPENDENCIES
# =============================================================================


async def get_optional_token(
    authorization: Annotated[str | None, Header()] = None,
    access_token: Annotated[str | None, Cookie()] = None,
) -> str | None:
    """
    Extract JWT token from request, if any.

    Checks the HttpOnly 'access_token' cookie first, then an
    'Authorization: Bearer <token>' header.
    """
    if access_token:
        return access_token

    if authorization:
        parts = authorization.split()
        if len(parts) == 2 and parts[0].lower() == "bearer":
            return parts[1]

    return None


async def get_caller_id(
    token: Annotated[str | None, Depends(get_optional_token)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UUID | None:
    """
    Resolve the caller's user id, or None when there is no valid identity.

    A token whose subject no longer exists resolves to None as well.
    """
    if token is None:
        return None

    user_id = decode_access_token(token)
    if user_id is None:
        return None

    result = await db.execute(select(User.id).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_current_user(
    caller_id: Annotated[UUID | None, Depends(get_caller_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """
    Return the authenticated user or fail with 401.

    Use for routes that operate on the user record itself.
    """
    if caller_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = await db.get(User, caller_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


# Type aliases for dependency injection
CallerId = Annotated[UUID | None, Depends(get_caller_id)]
CurrentUser = Annotated[User, Depends(get_current_user)]
DbSession = Annotated[AsyncSession, Depends(get_db)]
