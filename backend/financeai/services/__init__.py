"""Chat core services and external integrations."""

from financeai.services.chat_manager import chat_manager
from financeai.services.message_log import message_log
from financeai.services.chat_service import chat_service

__all__ = ["chat_manager", "message_log", "chat_service"]
