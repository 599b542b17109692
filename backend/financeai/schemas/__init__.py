"""Pydantic schemas for API request/response validation."""

from financeai.schemas.user import UserRead, UserUpdate
from financeai.schemas.chat import (
    ChatCreateRequest,
    ChatDragRequest,
    ChatListResponse,
    ChatMoveRequest,
    ChatRenameRequest,
    ChatReorderRequest,
    ChatResponse,
    ChatTurn,
    MessageAppendRequest,
    MessageResponse,
    ReplyRequest,
    SendRequest,
    SendResponse,
    SummarizeRequest,
)

__all__ = [
    # User
    "UserRead",
    "UserUpdate",
    # Chats
    "ChatCreateRequest",
    "ChatRenameRequest",
    "ChatMoveRequest",
    "ChatReorderRequest",
    "ChatDragRequest",
    "ChatResponse",
    "ChatListResponse",
    # Messages
    "ChatTurn",
    "MessageAppendRequest",
    "MessageResponse",
    "ReplyRequest",
    "SendRequest",
    "SendResponse",
    "SummarizeRequest",
]
