"""
Session and profile routes.

Endpoints:
- POST /auth/logout - Clear session cookie
- GET /auth/me - Get current user profile
- PATCH /auth/me - Update onboarding/profile fields

Sign-in itself belongs to the identity provider; it issues the JWT that
financeai.api.deps decodes.
"""

from fastapi import APIRouter, Response, status

from financeai.api.deps import CurrentUser, DbSession
from financeai.config import get_settings
from financeai.schemas.user import UserRead, UserUpdate

router = APIRouter(prefix="/auth", tags=["auth"])
settings = get_settings()


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(response: Response) -> None:
    """
    Clear the authentication session.

    Note: This only clears the cookie. A JWT stored elsewhere by the client
    remains valid until expiry.
    """
    response.delete_cookie(
        key="access_token",
        httponly=True,
        secure=settings.cookie_cross_domain or settings.environment != "development",
        samesite="none" if settings.cookie_cross_domain else "lax",
    )


@router.get("/me", response_model=UserRead)
async def get_me(current_user: CurrentUser) -> UserRead:
    """Get the current authenticated user's profile."""
    return UserRead.model_validate(current_user)


@router.patch("/me", response_model=UserRead)
async def update_me(data: UserUpdate, current_user: CurrentUser, db: DbSession) -> UserRead:
    """Update the current user's profile. Only fields that are sent change."""
    for key, value in data.model_dump(exclude_unset=True).items():
        if key == "name" and value is None:
            continue  # name is required on the record
        setattr(current_user, key, value)

    await db.commit()
    await db.refresh(current_user)
    return UserRead.model_validate(current_user)
