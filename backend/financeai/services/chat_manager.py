"""Chat ordering service: list, create, rename, move and reorder a user's chats."""

import logging
from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from financeai.db.models import Chat, MoveDirection
from financeai.services.errors import Forbidden, InvalidInput, NotFound, Unauthenticated

logger = logging.getLogger(__name__)

DEFAULT_CHAT_TITLE = "New Chat"


def _require_caller(caller_id: UUID | None) -> UUID:
    if caller_id is None:
        raise Unauthenticated()
    return caller_id


class ChatManager:
    """
    Maintains the per-owner ordering of chats.

    Every operation takes the caller's id explicitly; identity is resolved by
    the API layer before the call. Ownership is checked before any write, so
    a failed operation never leaves a partial mutation behind.

    Positions need not be contiguous. Reads sort by (position, id), which
    keeps the order deterministic when a create racing a reorder produces a
    collision.
    """

    async def _ordered_chats(self, db: AsyncSession, owner_id: UUID) -> list[Chat]:
        stmt = (
            select(Chat)
            .where(Chat.owner_id == owner_id)
            .order_by(Chat.position.asc(), Chat.id.asc())
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def list_chats(self, db: AsyncSession, caller_id: UUID | None) -> list[Chat]:
        """Return the caller's chats in sidebar order; empty without a caller."""
        if caller_id is None:
            return []
        return await self._ordered_chats(db, caller_id)

    async def get_owned_chat(
        self, db: AsyncSession, chat_id: UUID, caller_id: UUID | None
    ) -> Chat:
        """
        Fetch a chat the caller owns.

        Raises:
            Unauthenticated: no caller
            Forbidden: chat missing or owned by someone else (not distinguished)
        """
        owner_id = _require_caller(caller_id)
        chat = await db.get(Chat, chat_id)
        if chat is None or chat.owner_id != owner_id:
            raise Forbidden()
        return chat

    async def create_chat(
        self, db: AsyncSession, caller_id: UUID | None, title: str | None = None
    ) -> Chat:
        """Append a new chat after the caller's current last position."""
        owner_id = _require_caller(caller_id)

        result = await db.execute(
            select(func.max(Chat.position)).where(Chat.owner_id == owner_id)
        )
        max_position = result.scalar()
        position = 1 if max_position is None else max_position + 1

        clean_title = (title or "").strip() or DEFAULT_CHAT_TITLE
        chat = Chat(owner_id=owner_id, title=clean_title, position=position)
        db.add(chat)
        await db.commit()
        await db.refresh(chat)

        logger.info("Created chat %s for user %s at position %d", chat.id, owner_id, position)
        return chat

    async def rename_chat(
        self, db: AsyncSession, chat_id: UUID, title: str, caller_id: UUID | None
    ) -> Chat:
        """Set a new title; blank titles are rejected."""
        chat = await self.get_owned_chat(db, chat_id, caller_id)

        clean_title = (title or "").strip()
        if not clean_title:
            raise InvalidInput("Chat title must not be empty")

        chat.title = clean_title
        await db.commit()
        await db.refresh(chat)
        return chat

    async def move_chat(
        self,
        db: AsyncSession,
        chat_id: UUID,
        direction: MoveDirection | str,
        caller_id: UUID | None,
    ) -> list[Chat]:
        """
        Swap a chat with its neighbour in the caller's order.

        Moving past either end is a successful no-op. Returns the caller's
        chats in their new order.

        Raises:
            Unauthenticated: no caller
            NotFound: chat_id is not in the caller's list
        """
        owner_id = _require_caller(caller_id)
        try:
            direction = MoveDirection(direction)
        except ValueError as e:
            raise InvalidInput(f"Unknown move direction: {direction!r}") from e

        chats = await self._ordered_chats(db, owner_id)
        index = next((i for i, c in enumerate(chats) if c.id == chat_id), None)
        if index is None:
            raise NotFound(chat_id)

        neighbour_index = index - 1 if direction is MoveDirection.UP else index + 1
        if neighbour_index < 0 or neighbour_index >= len(chats):
            return chats

        current, neighbour = chats[index], chats[neighbour_index]
        chats[index], chats[neighbour_index] = neighbour, current

        if current.position != neighbour.position:
            current.position, neighbour.position = neighbour.position, current.position
        else:
            # Colliding positions cannot be swapped; renumber the whole list instead
            for position, chat in enumerate(chats, start=1):
                chat.position = position

        await db.commit()
        return chats

    async def reorder_chats(
        self, db: AsyncSession, ordered_ids: Iterable[UUID], caller_id: UUID | None
    ) -> list[Chat]:
        """
        Assign positions 1..n to the caller's chats in the given order.

        Ids the caller does not own are skipped without error and their
        stored positions are left untouched. Repeated ids count once.
        Owned chats missing from `ordered_ids` keep their relative order
        after the listed ones.
        """
        owner_id = _require_caller(caller_id)

        owned = {chat.id: chat for chat in await self._ordered_chats(db, owner_id)}
        seen: set[UUID] = set()
        position = 0
        for chat_id in ordered_ids:
            chat = owned.get(chat_id)
            if chat is None or chat_id in seen:
                continue
            seen.add(chat_id)
            position += 1
            chat.position = position

        listed = position
        for chat_id, chat in owned.items():
            if chat_id not in seen:
                position += 1
                chat.position = position

        await db.commit()
        logger.info("Reordered %d of %d chats for user %s", listed, position, owner_id)
        return await self._ordered_chats(db, owner_id)

    async def drag_chat(
        self,
        db: AsyncSession,
        source_id: UUID,
        target_id: UUID,
        caller_id: UUID | None,
    ) -> list[Chat]:
        """Drop `source_id` onto `target_id`'s slot and densely renumber."""
        owner_id = _require_caller(caller_id)

        ids = [chat.id for chat in await self._ordered_chats(db, owner_id)]
        if source_id == target_id or source_id not in ids or target_id not in ids:
            return await self._ordered_chats(db, owner_id)

        to_index = ids.index(target_id)
        ids.remove(source_id)
        ids.insert(to_index, source_id)
        return await self.reorder_chats(db, ids, owner_id)


# Singleton instance
chat_manager = ChatManager()
