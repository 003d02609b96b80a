"""
LLM Helpers Module

Client for the remote text-generation endpoint. All generation calls go
through ``GenerationClient.generate`` so the request body, rate limiting and
retry policy live in one place.

Example Usage:
    from src.utils.llm_helpers import GenerationClient

    async with GenerationClient(api_key=api_key) as client:
        text = await client.generate(prompt)
"""

import asyncio
from typing import Any, Awaitable, Callable, Optional

import httpx
import structlog

from src.models.config import GenerationConfig, RetryConfig
from src.utils.errors import GenerationError
from src.utils.rate_limiter import HostRateLimiter
from src.utils.retry import RetryPolicy, is_retryable_status, with_retry

# Initialize logger
logger = structlog.get_logger(__name__)


def extract_generated_text(data: Any) -> Optional[str]:
    """Return ``candidates[0].content.parts[0].text`` or None if the path is absent."""
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None
    if not isinstance(text, str) or not text.strip():
        return None
    return text


class GenerationClient:
    """
    Sends prompts to the generation endpoint with bounded retry and backoff.

    Retries on HTTP 429, HTTP 5xx and transport failures. Any other non-2xx
    status fails immediately. The client owns its ``httpx.AsyncClient``
    unless one is passed in.
    """

    def __init__(
        self,
        api_key: str,
        config: Optional[GenerationConfig] = None,
        retry_config: Optional[RetryConfig] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        rate_limiter: Optional[HostRateLimiter] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        Initialize the generation client.

        Args:
            api_key: Generation API key, sent as the ``key`` query parameter
            config: Endpoint and sampling configuration (defaults if None)
            retry_config: Attempt limit and backoff base (defaults if None)
            http_client: Shared HTTP client; created and owned here if None
            rate_limiter: Per-host limiter; built from config if None
            sleep: Async sleep used for backoff (injectable for tests)
        """
        self.api_key = api_key
        self.config = config or GenerationConfig()
        retry_config = retry_config or RetryConfig()
        self.policy = RetryPolicy(
            max_attempts=retry_config.max_attempts,
            base_delay=retry_config.base_delay,
        )
        self._owns_client = http_client is None
        self.http_client = http_client or httpx.AsyncClient(timeout=self.config.timeout)
        self.rate_limiter = rate_limiter or HostRateLimiter(
            default_rate=self.config.requests_per_minute, time_period=60.0
        )
        self.sleep = sleep

    async def __aenter__(self) -> "GenerationClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            await self.http_client.aclose()

    def build_request_body(self, prompt: str) -> dict[str, Any]:
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": self.config.as_request_config(),
        }

    async def _post_once(self, prompt: str, correlation_id: Optional[str]) -> str:
        """Single attempt. Raises GenerationError flagged retryable or terminal."""
        await self.rate_limiter.acquire(self.config.endpoint)

        try:
            response = await self.http_client.post(
                self.config.endpoint,
                params={"key": self.api_key},
                json=self.build_request_body(prompt),
            )
        except httpx.HTTPError as e:
            # Connection-level failures are retried, the rest are terminal
            retryable = isinstance(e, httpx.TransportError)
            logger.warning(
                "Generation transport failure",
                error_type=type(e).__name__,
                error=str(e),
                retryable=retryable,
                correlation_id=correlation_id,
            )
            raise GenerationError(
                f"Generation request failed: {e}", retryable=retryable
            ) from e

        if response.status_code < 200 or response.status_code >= 300:
            retryable = is_retryable_status(response.status_code)
            logger.warning(
                "Generation request returned error status",
                status_code=response.status_code,
                retryable=retryable,
                correlation_id=correlation_id,
            )
            raise GenerationError(
                f"API request failed with status {response.status_code}",
                status_code=response.status_code,
                retryable=retryable,
            )

        try:
            data = response.json()
        except ValueError:
            data = None

        text = extract_generated_text(data)
        if text is None:
            raise GenerationError("No content generated", status_code=response.status_code)

        return text

    async def generate(self, prompt: str, correlation_id: Optional[str] = None) -> str:
        """
        Generate text for a prompt.

        Args:
            prompt: Non-empty natural-language request
            correlation_id: Optional correlation ID for logging

        Returns:
            Raw generated text

        Raises:
            GenerationError: On empty prompt, terminal HTTP status, missing
                text payload, or after exhausting retries
        """
        if not prompt or not prompt.strip():
            raise GenerationError("Cannot generate content for an empty prompt")

        log = logger.bind(correlation_id=correlation_id) if correlation_id else logger
        log.debug("Generation call initiated", prompt_length=len(prompt))

        try:
            text = await with_retry(
                lambda: self._post_once(prompt, correlation_id),
                self.policy,
                sleep=self.sleep,
                correlation_id=correlation_id,
            )
        except GenerationError as e:
            log.error(
                "Generation call failed",
                error=str(e),
                status_code=e.status_code,
                prompt_length=len(prompt),
            )
            raise

        log.debug("Generation call succeeded", response_length=len(text))
        return text
