"""API routes package."""

from financeai.api.routes import auth, chats

__all__ = ["auth", "chats"]
