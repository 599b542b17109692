"""Application configuration using Pydantic Settings."""

import logging
from functools import lru_cache
from typing import Literal

from pydantic import computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


_POSTGRES_SCHEMES = ("postgresql+asyncpg://", "postgresql://", "postgres://")


def _with_scheme(url: str, scheme: str) -> str:
    """Rewrite a Postgres URL onto the given scheme. Other URLs pass through."""
    for prefix in _POSTGRES_SCHEMES:
        if url.startswith(prefix):
            return scheme + url[len(prefix):]
    return url


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "FinanceAI"
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Database
    # A full URL (e.g. a hosted Postgres with SSL) wins over the individual parts
    database_url_override: str | None = None
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "financeai"
    postgres_password: str = ""
    postgres_db: str = "financeai"

    def _postgres_location(self) -> str:
        return f"{self.postgres_user}:{self.postgres_password}@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"

    @computed_field
    @property
    def database_url(self) -> str:
        """Async SQLAlchemy URL for the application engine."""
        if not self.database_url_override:
            return f"postgresql+asyncpg://{self._postgres_location()}"
        url = _with_scheme(self.database_url_override, "postgresql+asyncpg://")
        if url.startswith("postgresql+asyncpg://"):
            # asyncpg rejects libpq query params; SSL is passed via connect_args
            url = url.partition("?")[0]
        return url

    @computed_field
    @property
    def database_requires_ssl(self) -> bool:
        override = self.database_url_override or ""
        return "sslmode=require" in override or "ssl=require" in override

    @computed_field
    @property
    def database_url_sync(self) -> str:
        """Blocking-driver URL for Alembic."""
        if not self.database_url_override:
            return f"postgresql://{self._postgres_location()}"
        url = self.database_url_override
        if url.startswith("sqlite+aiosqlite://"):
            return "sqlite://" + url[len("sqlite+aiosqlite://"):]
        return _with_scheme(url, "postgresql://")

    # Auth / JWT
    jwt_secret_key: str  # Required - no default, must be set in .env
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 60 * 24 * 7  # 7 days

    # CORS
    cors_origins: list[str] = ["http://localhost:5173"]

    # Cookies
    # Set to true when frontend and backend are on different domains
    cookie_cross_domain: bool = False

    # OpenRouter completion gateway
    # Optional at startup; a missing key is reported when a completion is requested
    openrouter_api_key: str | None = None
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    openrouter_referer: str = "https://app.local"
    openrouter_app_title: str = "FinanceAI"

    # LLM Configuration
    llm_model: str = "deepseek/deepseek-chat"
    chat_temperature: float = 0.7
    chat_max_tokens: int = 1200
    summary_temperature: float = 0.5
    summary_max_tokens: int = 400

    # Number of trailing messages fed to the summarizer
    summary_history_window: int = 30

    # Gateway resilience
    gateway_timeout_seconds: float = 30.0
    gateway_max_attempts: int = 2
    gateway_retry_base_delay: float = 0.5


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(settings: Settings | None = None) -> None:
    """Configure root logging from settings (called once at startup)."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def sanitize_error(error: Exception, *, generic_message: str = "An internal error occurred.") -> str:
    """Detail text for an error response: the raw exception in development, else generic_message."""
    if get_settings().environment == "development":
        return str(error)
    return generic_message
