"""OpenRouter chat-completions gateway.

Security: the API key is read from settings (environment) only, never
hardcoded. A missing key is reported as GatewayUnavailable before any
network call is attempted.
"""

import asyncio
import logging
from typing import Any, Protocol

import httpx

from financeai.config import get_settings
from financeai.services.errors import GatewayTimeout, GatewayUnavailable

logger = logging.getLogger(__name__)

EMPTY_COMPLETION_TEXT = (
    "I couldn't generate a response. Please try again or rephrase your question."
)

# Upstream statuses that are worth a second attempt
_RETRYABLE_STATUS = frozenset({429, 502, 503})


class CompletionGateway(Protocol):
    """Protocol for completion providers used by the chat service."""

    async def complete(
        self,
        messages: list[dict[str, str]],
        *,
        model: str | None = None,
        temperature: float,
        max_tokens: int,
    ) -> str:
        """Return the generated text for an ordered list of role-tagged messages.

        Raises:
            GatewayUnavailable: missing credential, non-2xx response or transport error
            GatewayTimeout: the request exceeded the configured bound
        """
        ...


def _extract_content(data: Any) -> str | None:
    """Pull choices[0].message.content out of a completions payload."""
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return None
    return content if isinstance(content, str) else None


class OpenRouterClient:
    """httpx-backed client for the OpenRouter /chat/completions endpoint."""

    def __init__(
        self,
        api_key: str | None,
        *,
        base_url: str = "https://openrouter.ai/api/v1",
        default_model: str = "deepseek/deepseek-chat",
        timeout_seconds: float = 30.0,
        max_attempts: int = 2,
        retry_base_delay: float = 0.5,
        referer: str | None = None,
        app_title: str | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        """
        Args:
            api_key: OpenRouter API key; None defers the failure to call time
            base_url: API root, without the /chat/completions suffix
            default_model: Model used when a call does not name one
            timeout_seconds: Per-attempt bound, surfaced as GatewayTimeout
            max_attempts: Attempts for connection errors and 429/502/503
            retry_base_delay: Base backoff delay in seconds (doubles each retry)
            referer: Optional HTTP-Referer attribution header
            app_title: Optional X-Title attribution header
            client: Optional httpx client (for testing with mocks)
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.default_model = default_model
        self.timeout_seconds = timeout_seconds
        self.max_attempts = max(1, max_attempts)
        self.retry_base_delay = retry_base_delay
        self.referer = referer
        self.app_title = app_title
        self._client = client

    @classmethod
    def from_settings(cls, client: httpx.AsyncClient | None = None) -> "OpenRouterClient":
        """Build a client from application settings."""
        settings = get_settings()
        return cls(
            settings.openrouter_api_key,
            base_url=settings.openrouter_base_url,
            default_model=settings.llm_model,
            timeout_seconds=settings.gateway_timeout_seconds,
            max_attempts=settings.gateway_max_attempts,
            retry_base_delay=settings.gateway_retry_base_delay,
            referer=settings.openrouter_referer,
            app_title=settings.openrouter_app_title,
            client=client,
        )

    @property
    def completions_url(self) -> str:
        return f"{self.base_url}/chat/completions"

    def _headers(self) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        if self.referer:
            headers["HTTP-Referer"] = self.referer
        if self.app_title:
            headers["X-Title"] = self.app_title
        return headers

    async def complete(
        self,
        messages: list[dict[str, str]],
        *,
        model: str | None = None,
        temperature: float,
        max_tokens: int,
    ) -> str:
        """Send one completion request and return the generated text."""
        if not self.api_key:
            raise GatewayUnavailable(
                "OpenRouter API key not configured. Set OPENROUTER_API_KEY."
            )

        payload = {
            "model": model or self.default_model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }

        response = await self._post(payload)

        if not response.is_success:
            raise GatewayUnavailable(
                f"OpenRouter error: {response.text}", status_code=response.status_code
            )

        try:
            data = response.json()
        except ValueError as e:
            raise GatewayUnavailable("OpenRouter returned a non-JSON body") from e

        content = _extract_content(data)
        if content is None:
            logger.warning("OpenRouter response had no message content, using fallback text")
            return EMPTY_COMPLETION_TEXT
        return content

    async def _post(self, payload: dict[str, Any]) -> httpx.Response:
        """POST with exponential backoff on connection errors and retryable statuses."""
        close_client = False
        client = self._client
        if client is None:
            client = httpx.AsyncClient(timeout=self.timeout_seconds)
            close_client = True

        try:
            for attempt in range(self.max_attempts):
                is_last = attempt == self.max_attempts - 1
                try:
                    response = await client.post(
                        self.completions_url,
                        json=payload,
                        headers=self._headers(),
                        timeout=self.timeout_seconds,
                    )
                except httpx.TimeoutException as e:
                    raise GatewayTimeout(self.timeout_seconds) from e
                except httpx.ConnectError as e:
                    if is_last:
                        raise GatewayUnavailable(f"OpenRouter request failed: {e}") from e
                    await self._backoff(attempt, str(e))
                    continue
                except httpx.HTTPError as e:
                    raise GatewayUnavailable(f"OpenRouter request failed: {e}") from e

                if response.status_code in _RETRYABLE_STATUS and not is_last:
                    await self._backoff(attempt, f"HTTP {response.status_code}")
                    continue
                return response
        finally:
            if close_client:
                await client.aclose()

        raise GatewayUnavailable("OpenRouter request failed")  # pragma: no cover

    async def _backoff(self, attempt: int, reason: str) -> None:
        delay = self.retry_base_delay * (2 ** attempt)
        logger.warning(
            "OpenRouter transient error (attempt %d/%d), retrying in %.1fs: %s",
            attempt + 1, self.max_attempts, delay, reason,
        )
        await asyncio.sleep(delay)
