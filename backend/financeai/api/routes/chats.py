"""API routes for chats, their ordering, and their messages."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status

from financeai.api.deps import CallerId, DbSession
from financeai.schemas.chat import (
    ChatCreateRequest,
    ChatDragRequest,
    ChatListResponse,
    ChatMoveRequest,
    ChatRenameRequest,
    ChatReorderRequest,
    ChatResponse,
    MessageAppendRequest,
    MessageResponse,
    ReplyRequest,
    SendRequest,
    SendResponse,
    SummarizeRequest,
)
from financeai.services import chat_manager, message_log
from financeai.services.chat_service import ChatService, get_chat_service

router = APIRouter(prefix="/chats", tags=["chats"])

ChatServiceDep = Annotated[ChatService, Depends(get_chat_service)]


def _list_response(chats) -> ChatListResponse:
    return ChatListResponse(
        chats=[ChatResponse.model_validate(c) for c in chats],
        total=len(chats),
    )


# =============================================================================
# CHAT ORDERING
# =============================================================================


@router.get("", response_model=ChatListResponse)
async def list_chats(db: DbSession, caller_id: CallerId):
    """List the caller's chats in sidebar order. Empty when not signed in."""
    chats = await chat_manager.list_chats(db, caller_id)
    return _list_response(chats)


@router.post("", response_model=ChatResponse, status_code=status.HTTP_201_CREATED)
async def create_chat(request: ChatCreateRequest, db: DbSession, caller_id: CallerId):
    """Create a chat at the end of the caller's list."""
    chat = await chat_manager.create_chat(db, caller_id, request.title)
    return ChatResponse.model_validate(chat)


@router.post("/reorder", response_model=ChatListResponse)
async def reorder_chats(request: ChatReorderRequest, db: DbSession, caller_id: CallerId):
    """
    Renumber the caller's chats in the given order.

    Ids the caller doesn't own are ignored rather than rejected.
    """
    chats = await chat_manager.reorder_chats(db, request.ordered_ids, caller_id)
    return _list_response(chats)


@router.patch("/{chat_id}", response_model=ChatResponse)
async def rename_chat(
    chat_id: UUID, request: ChatRenameRequest, db: DbSession, caller_id: CallerId
):
    """Rename a chat."""
    chat = await chat_manager.rename_chat(db, chat_id, request.title, caller_id)
    return ChatResponse.model_validate(chat)


@router.post("/{chat_id}/move", response_model=ChatListResponse)
async def move_chat(
    chat_id: UUID, request: ChatMoveRequest, db: DbSession, caller_id: CallerId
):
    """Move a chat one step up or down. No-op at either end."""
    chats = await chat_manager.move_chat(db, chat_id, request.direction, caller_id)
    return _list_response(chats)


@router.post("/{chat_id}/drag", response_model=ChatListResponse)
async def drag_chat(
    chat_id: UUID, request: ChatDragRequest, db: DbSession, caller_id: CallerId
):
    """Drop a chat onto another chat's slot (sidebar drag-and-drop)."""
    chats = await chat_manager.drag_chat(db, chat_id, request.target_id, caller_id)
    return _list_response(chats)


# =============================================================================
# MESSAGES
# =============================================================================


@router.get("/{chat_id}/messages", response_model=list[MessageResponse])
async def list_messages(chat_id: UUID, db: DbSession, caller_id: CallerId):
    """Messages in creation order. Empty for chats the caller can't see."""
    messages = await message_log.list_messages(db, chat_id, caller_id)
    return [MessageResponse.model_validate(m) for m in messages]


@router.post(
    "/{chat_id}/messages",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def append_message(
    chat_id: UUID, request: MessageAppendRequest, db: DbSession, caller_id: CallerId
):
    """Append a message to a chat."""
    message = await message_log.append_message(
        db, chat_id, request.role, request.content, caller_id
    )
    return MessageResponse.model_validate(message)


# =============================================================================
# COMPLETIONS
# =============================================================================


@router.post(
    "/{chat_id}/reply",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def generate_reply(
    chat_id: UUID,
    request: ReplyRequest,
    db: DbSession,
    caller_id: CallerId,
    service: ChatServiceDep,
):
    """
    Generate and store the assistant's reply to the given turns.

    Gateway failures never surface here: the stored reply is a fixed
    apology instead.
    """
    message = await service.generate_reply(
        db,
        chat_id,
        [turn.model_dump() for turn in request.messages],
        caller_id,
        model=request.model,
    )
    return MessageResponse.model_validate(message)


@router.post(
    "/{chat_id}/send",
    response_model=SendResponse,
    status_code=status.HTTP_201_CREATED,
)
async def send_message(
    chat_id: UUID,
    request: SendRequest,
    db: DbSession,
    caller_id: CallerId,
    service: ChatServiceDep,
):
    """Store a user message and the assistant's reply in one round trip."""
    user_message, reply = await service.send(
        db, chat_id, request.message, caller_id, model=request.model
    )
    return SendResponse(
        user_message=MessageResponse.model_validate(user_message),
        reply=MessageResponse.model_validate(reply),
    )


@router.post("/{chat_id}/summarize", response_model=ChatResponse)
async def summarize_chat(
    chat_id: UUID,
    db: DbSession,
    caller_id: CallerId,
    service: ChatServiceDep,
    request: SummarizeRequest | None = None,
):
    """
    Generate the chat's brief.

    Gateway failures are returned as 502/504 and the previous brief is kept.
    """
    chat = await service.summarize_chat(
        db, chat_id, caller_id, model=request.model if request else None
    )
    return ChatResponse.model_validate(chat)
