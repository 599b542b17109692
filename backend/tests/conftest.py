"""Pytest configuration and fixtures."""

import os

# Settings are read at import time; configure before importing financeai
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "development")

from collections.abc import AsyncGenerator, Callable  # noqa: E402
from uuid import UUID  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from financeai.api.deps import create_access_token  # noqa: E402
from financeai.db.base import Base  # noqa: E402
from financeai.db.models import User  # noqa: E402
from financeai.db.session import get_db  # noqa: E402
from financeai.main import app  # noqa: E402
from financeai.services.chat_service import ChatService, get_chat_service  # noqa: E402


class FakeGateway:
    """In-process CompletionGateway that records calls and returns a canned reply."""

    def __init__(self, reply: str = "Here is some advice.") -> None:
        self.reply = reply
        self.error: Exception | None = None
        self.calls: list[dict] = []

    async def complete(
        self,
        messages: list[dict[str, str]],
        *,
        model: str | None = None,
        temperature: float,
        max_tokens: int,
    ) -> str:
        self.calls.append(
            {
                "messages": messages,
                "model": model,
                "temperature": temperature,
                "max_tokens": max_tokens,
            }
        )
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory SQLite database per test."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Database session for service-level tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_user(db: AsyncSession) -> Callable:
    """Factory that persists a user and returns it."""

    async def _make_user(name: str = "Test User", email: str | None = None) -> User:
        user = User(name=name, email=email)
        db.add(user)
        await db.commit()
        await db.refresh(user)
        return user

    return _make_user


@pytest.fixture
async def user(make_user) -> User:
    return await make_user("Alice", "alice@example.com")


@pytest.fixture
async def other_user(make_user) -> User:
    return await make_user("Mallory", "mallory@example.com")


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def chat_service(gateway: FakeGateway) -> ChatService:
    return ChatService(gateway=gateway)


@pytest.fixture
def auth_headers() -> Callable[[UUID], dict[str, str]]:
    """Build an Authorization header for a user id."""

    def _auth_headers(user_id: UUID) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user_id)}"}

    return _auth_headers


@pytest.fixture
async def client(session_factory, chat_service: ChatService) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for testing FastAPI endpoints against the test database."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_chat_service] = lambda: chat_service
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()
