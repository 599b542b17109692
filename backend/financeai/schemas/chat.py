"""Pydantic schemas for chat operations."""

import re
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, computed_field

from financeai.db.models import ChatRole, MoveDirection
from financeai.schemas.base import BaseSchema, EditableMixin, StoredMixin

_BULLET_PREFIX = re.compile(r"^[-*•]\s?")


def split_brief(brief: str | None) -> list[str]:
    """Split a stored brief into bullet items, dropping blank lines and bullet marks."""
    if not brief:
        return []
    lines = (line.strip() for line in brief.splitlines())
    return [_BULLET_PREFIX.sub("", line) for line in lines if line]


# Request schemas
class ChatCreateRequest(BaseModel):
    """Request to create a new chat. Blank or missing titles become 'New Chat'."""

    title: str | None = Field(None, max_length=200)


class ChatRenameRequest(BaseModel):
    """Request to rename a chat."""

    title: str = Field(..., max_length=200)


class ChatMoveRequest(BaseModel):
    """Request to move a chat one step up or down."""

    direction: MoveDirection


class ChatReorderRequest(BaseModel):
    """Full or partial sidebar order; ids the caller doesn't own are skipped."""

    ordered_ids: list[UUID]


class ChatDragRequest(BaseModel):
    """Drop the chat named in the URL onto another chat's slot."""

    target_id: UUID


class ChatTurn(BaseModel):
    """One role-tagged turn sent to the completion gateway."""

    role: Literal["user", "assistant", "system"]
    content: str = Field(..., max_length=10000)


class MessageAppendRequest(BaseModel):
    """Request to append a message to a chat."""

    role: ChatRole
    content: str = Field(..., max_length=10000)


class ReplyRequest(BaseModel):
    """Request to generate an assistant reply from prior turns."""

    messages: list[ChatTurn] = Field(default_factory=list)
    model: str | None = None


class SendRequest(BaseModel):
    """Request to send a user message and receive the assistant reply."""

    message: str = Field(..., min_length=1, max_length=10000)
    model: str | None = None


class SummarizeRequest(BaseModel):
    """Optional overrides for brief generation."""

    model: str | None = None


# Response schemas
class ChatResponse(BaseSchema, EditableMixin):
    """Chat response."""

    owner_id: UUID
    title: str
    position: int
    brief: str | None = None

    @computed_field
    @property
    def brief_items(self) -> list[str]:
        return split_brief(self.brief)


class ChatListResponse(BaseModel):
    """Chats in sidebar order."""

    chats: list[ChatResponse]
    total: int


class MessageResponse(BaseSchema, StoredMixin):
    """Chat message response."""

    chat_id: UUID
    role: ChatRole
    content: str


class SendResponse(BaseModel):
    """The stored user message and the assistant reply to it."""

    user_message: MessageResponse
    reply: MessageResponse
