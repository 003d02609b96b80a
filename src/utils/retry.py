"""
Bounded Retry Combinator

Wraps an async callable in a tenacity retry loop driven by an explicit
policy: maximum attempts, a retryable-error predicate and an exponential
delay. Kept separate from the HTTP call so the policy can be tested on its
own with a fake sleep.

Example Usage:
    from src.utils.retry import RetryPolicy, with_retry

    policy = RetryPolicy(max_attempts=3, base_delay=1.0)
    text = await with_retry(lambda: client.post_once(prompt), policy)
"""

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional, TypeVar

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from src.utils.errors import GenerationError

logger = structlog.get_logger(__name__)

T = TypeVar("T")

RETRYABLE_STATUS_CODES = frozenset({429})


def is_retryable_status(status_code: int) -> bool:
    """HTTP 429 and every 5xx may succeed on a later attempt."""
    return status_code in RETRYABLE_STATUS_CODES or status_code >= 500


def is_retryable_error(error: BaseException) -> bool:
    """Default predicate: transport failures and retryable generation errors."""
    if isinstance(error, GenerationError):
        return error.retryable
    return isinstance(error, (httpx.TransportError, ConnectionError, TimeoutError))


@dataclass(frozen=True)
class RetryPolicy:
    """Retry parameters.

    Attributes:
        max_attempts: Total attempts including the first (3 = up to 2 retries)
        base_delay: Delay before the first retry; doubles for each retry after
        retryable: Predicate deciding whether an exception warrants another attempt
    """

    max_attempts: int = 3
    base_delay: float = 1.0
    retryable: Callable[[BaseException], bool] = field(default=is_retryable_error)


def _log_retry(call_id: Optional[str]) -> Callable[[RetryCallState], None]:
    def before_sleep(retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            "Retrying after transient failure",
            attempt=retry_state.attempt_number,
            next_delay=retry_state.next_action.sleep if retry_state.next_action else None,
            error=str(error) if error else None,
            correlation_id=call_id,
        )

    return before_sleep


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    correlation_id: Optional[str] = None,
) -> T:
    """
    Run ``operation`` until it succeeds, fails terminally, or attempts run out.

    Args:
        operation: Zero-argument coroutine factory; called once per attempt
        policy: Attempt limit, backoff base and retryable predicate
        sleep: Async sleep used between attempts (injectable for tests)
        correlation_id: Optional correlation ID for logging

    Returns:
        The operation's result

    Raises:
        The last exception raised by ``operation`` when it is not retryable
        or attempts are exhausted
    """
    retrying = AsyncRetrying(
        stop=stop_after_attempt(policy.max_attempts),
        wait=wait_exponential(multiplier=policy.base_delay, exp_base=2, min=0),
        retry=retry_if_exception(policy.retryable),
        before_sleep=_log_retry(correlation_id),
        sleep=sleep,
        reraise=True,
    )

    async for attempt in retrying:
        with attempt:
            return await operation()

    # AsyncRetrying either returns inside the loop or reraises
    raise RuntimeError("retry loop exited without result")
