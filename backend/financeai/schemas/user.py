"""User schemas."""

from uuid import UUID

from pydantic import Field

from financeai.schemas.base import BaseSchema, EditableMixin


class UserRead(BaseSchema, EditableMixin):
    """Schema for reading the current user's profile."""

    email: str | None
    name: str
    first_name: str | None = None
    middle_name: str | None = None
    last_name: str | None = None
    dob: str | None = None
    gender: str | None = None
    location: str | None = None
    currency: str | None = None
    timezone: str | None = None


class UserUpdate(BaseSchema):
    """Onboarding/profile update. Only fields that are sent are changed."""

    name: str | None = Field(None, min_length=1, max_length=255)
    first_name: str | None = Field(None, max_length=255)
    middle_name: str | None = Field(None, max_length=255)
    last_name: str | None = Field(None, max_length=255)
    dob: str | None = Field(None, pattern=r"^\d{4}-\d{2}-\d{2}$")
    gender: str | None = Field(None, max_length=64)
    location: str | None = Field(None, max_length=255)
    currency: str | None = Field(None, min_length=3, max_length=8)
    timezone: str | None = Field(None, max_length=64)
