"""Append-only message log for chats."""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from financeai.db.models import Chat, ChatRole, Message
from financeai.services.chat_manager import ChatManager, chat_manager
from financeai.services.errors import InvalidInput

logger = logging.getLogger(__name__)


class MessageLog:
    """Ordered, owner-checked reads and appends of chat messages."""

    def __init__(self, chats: ChatManager | None = None):
        self.chats = chats or chat_manager

    async def list_messages(
        self, db: AsyncSession, chat_id: UUID, caller_id: UUID | None
    ) -> list[Message]:
        """
        Return a chat's messages in creation order.

        Fail-soft: a missing caller, a missing chat, or a chat owned by
        someone else all yield an empty list instead of an error.
        """
        if caller_id is None:
            return []
        chat = await db.get(Chat, chat_id)
        if chat is None or chat.owner_id != caller_id:
            return []

        stmt = (
            select(Message)
            .where(Message.chat_id == chat_id)
            .order_by(Message.created_at.asc(), Message.id.asc())
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def append_message(
        self,
        db: AsyncSession,
        chat_id: UUID,
        role: ChatRole | str,
        content: str,
        caller_id: UUID | None,
    ) -> Message:
        """
        Store one message at the end of the chat.

        Raises:
            Unauthenticated: no caller
            Forbidden: chat missing or owned by someone else
            InvalidInput: role is not 'user' or 'assistant'
        """
        await self.chats.get_owned_chat(db, chat_id, caller_id)

        try:
            role = ChatRole(role)
        except ValueError as e:
            raise InvalidInput(f"Unknown message role: {role!r}") from e

        message = Message(chat_id=chat_id, role=role.value, content=content)
        db.add(message)
        await db.commit()
        await db.refresh(message)

        logger.info("Appended %s message %s to chat %s", role.value, message.id, chat_id)
        return message

    async def recent_messages(
        self, db: AsyncSession, chat_id: UUID, limit: int
    ) -> list[Message]:
        """Last `limit` messages in chronological order. No ownership check."""
        stmt = (
            select(Message)
            .where(Message.chat_id == chat_id)
            .order_by(Message.created_at.desc(), Message.id.desc())
            .limit(limit)
        )
        result = await db.execute(stmt)
        return list(reversed(result.scalars().all()))


# Singleton instance
message_log = MessageLog()
