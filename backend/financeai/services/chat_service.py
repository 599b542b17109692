"""Chat service: completion replies and chat briefs via the completion gateway."""

import logging
from collections.abc import Mapping, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from financeai.config import get_settings
from financeai.db.models import Chat, ChatRole, Message
from financeai.services.chat_manager import ChatManager, chat_manager
from financeai.services.errors import GatewayError, InvalidInput
from financeai.services.message_log import MessageLog, message_log
from financeai.services.openrouter import CompletionGateway, OpenRouterClient

logger = logging.getLogger(__name__)
settings = get_settings()

ADVISOR_PROMPT = (
    "You are FinanceAI, an expert financial advisor. Explain clearly and professionally. "
    "Include risks and caveats where relevant. Keep answers concise and actionable."
)

BRIEF_PROMPT = (
    "You summarize conversations between a user and a financial advisor. "
    "Return 3-4 concise bullet points covering the user's goal, the main topics "
    "discussed, and suggested next steps. Output only the bullets."
)

REPLY_FALLBACK_TEXT = "Sorry, I couldn't process that. Please try again."

_EMPTY_TRANSCRIPT = "(no messages yet)"


def format_transcript(messages: Sequence[Message]) -> str:
    """Render messages as 'ROLE: content' lines for the summarizer."""
    lines = [f"{message.role.upper()}: {message.content}" for message in messages]
    return "\n".join(lines) if lines else _EMPTY_TRANSCRIPT


class ChatService:
    """
    Orchestrates one request/response cycle against the completion gateway.

    generate_reply is fail-soft: any gateway failure becomes a fixed
    assistant message so the conversation always gets exactly one reply.
    summarize_chat is fail-hard: gateway errors propagate and the chat's
    existing brief is left untouched.
    """

    def __init__(
        self,
        gateway: CompletionGateway | None = None,
        chats: ChatManager | None = None,
        messages: MessageLog | None = None,
    ):
        self.gateway = gateway or OpenRouterClient.from_settings()
        self.chats = chats or chat_manager
        self.messages = messages or message_log

    async def generate_reply(
        self,
        db: AsyncSession,
        chat_id: UUID,
        prior_messages: Sequence[Mapping[str, str]],
        caller_id: UUID | None,
        model: str | None = None,
    ) -> Message:
        """
        Ask the gateway for the next assistant turn and append it.

        Args:
            db: Database session
            chat_id: Chat receiving the reply
            prior_messages: Role-tagged turns sent as conversation context
            caller_id: Authenticated caller
            model: Optional model override

        Returns:
            The appended assistant message (generated text or the fallback)
        """
        # Ownership errors are not swallowed
        await self.chats.get_owned_chat(db, chat_id, caller_id)
        # Close the read transaction before waiting on the network
        await db.commit()

        payload = [{"role": "system", "content": ADVISOR_PROMPT}]
        payload.extend(
            {"role": turn["role"], "content": turn["content"]} for turn in prior_messages
        )

        try:
            content = await self.gateway.complete(
                payload,
                model=model,
                temperature=settings.chat_temperature,
                max_tokens=settings.chat_max_tokens,
            )
        except GatewayError:
            logger.exception("Reply generation failed for chat_id=%s, storing fallback", chat_id)
            content = REPLY_FALLBACK_TEXT

        return await self.messages.append_message(
            db, chat_id, ChatRole.ASSISTANT, content, caller_id
        )

    async def send(
        self,
        db: AsyncSession,
        chat_id: UUID,
        content: str,
        caller_id: UUID | None,
        model: str | None = None,
    ) -> tuple[Message, Message]:
        """Append a user message, then generate the assistant reply to it."""
        await self.chats.get_owned_chat(db, chat_id, caller_id)

        text = (content or "").strip()
        if not text:
            raise InvalidInput("Message must not be empty")

        user_message = await self.messages.append_message(
            db, chat_id, ChatRole.USER, text, caller_id
        )
        reply = await self.generate_reply(
            db,
            chat_id,
            [{"role": ChatRole.USER.value, "content": text}],
            caller_id,
            model=model,
        )
        return user_message, reply

    async def summarize_chat(
        self,
        db: AsyncSession,
        chat_id: UUID,
        caller_id: UUID | None,
        model: str | None = None,
    ) -> Chat:
        """
        Generate a short brief from the chat's recent messages and store it.

        Raises:
            Unauthenticated / Forbidden: ownership check failed
            GatewayError: the gateway failed; chat.brief is unchanged
        """
        chat = await self.chats.get_owned_chat(db, chat_id, caller_id)
        recent = await self.messages.recent_messages(
            db, chat_id, settings.summary_history_window
        )
        await db.commit()

        brief = await self.gateway.complete(
            [
                {"role": "system", "content": BRIEF_PROMPT},
                {"role": "user", "content": f"Conversation:\n{format_transcript(recent)}"},
            ],
            model=model,
            temperature=settings.summary_temperature,
            max_tokens=settings.summary_max_tokens,
        )

        chat.brief = brief.strip()
        await db.commit()
        await db.refresh(chat)

        logger.info("Stored brief for chat %s from %d messages", chat_id, len(recent))
        return chat


def get_chat_service() -> ChatService:
    """FastAPI dependency returning the shared chat service."""
    return chat_service


# Singleton instance
chat_service = ChatService()
