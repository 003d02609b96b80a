"""Per-host rate limiting for outbound generation requests."""

from urllib.parse import urlparse

from aiolimiter import AsyncLimiter


class HostRateLimiter:
    """Per-host rate limiting to stay under the generation endpoint's quota.

    Uses aiolimiter AsyncLimiter to throttle requests on a per-host basis.
    Each host gets its own limiter, so one orchestrator can talk to several
    endpoints without them sharing a budget.
    """

    def __init__(self, default_rate: float = 30.0, time_period: float = 60.0):
        """Initialize the host rate limiter.

        Args:
            default_rate: Maximum requests per time_period (default: 30 req/min)
            time_period: Time period in seconds (default: 60 seconds)
        """
        self.limiters: dict[str, AsyncLimiter] = {}
        self.default_rate = default_rate
        self.time_period = time_period

    async def acquire(self, url: str) -> None:
        """Acquire rate limit token for URL's host.

        Args:
            url: Full URL to extract host from
        """
        host = urlparse(url).netloc

        if host not in self.limiters:
            self.limiters[host] = AsyncLimiter(
                max_rate=self.default_rate, time_period=self.time_period
            )

        await self.limiters[host].acquire()
