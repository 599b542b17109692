"""Shared schema configuration and stored-row fields."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Schema that can be validated directly from ORM rows."""

    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        validate_assignment=True,
    )


class StoredMixin(BaseModel):
    """Identity and creation time of a persisted row.

    Messages only ever carry these: they are never edited after append.
    """

    id: UUID
    created_at: datetime


class EditableMixin(StoredMixin):
    """Rows that can change after creation (chats, user profiles)."""

    updated_at: datetime
