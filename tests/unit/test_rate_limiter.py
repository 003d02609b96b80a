"""
Unit tests for the per-host rate limiter.
"""

import pytest

from src.utils.rate_limiter import HostRateLimiter


class TestHostRateLimiter:
    @pytest.mark.asyncio
    async def test_one_limiter_per_host(self):
        # Arrange
        limiter = HostRateLimiter(default_rate=30, time_period=60)

        # Act
        await limiter.acquire("https://generativelanguage.googleapis.com/v1beta/models/a")
        await limiter.acquire("https://generativelanguage.googleapis.com/v1beta/models/b")
        await limiter.acquire("https://latexonline.cc/compile")

        # Assert
        assert set(limiter.limiters) == {
            "generativelanguage.googleapis.com",
            "latexonline.cc",
        }

    @pytest.mark.asyncio
    async def test_limiter_uses_configured_rate(self):
        limiter = HostRateLimiter(default_rate=5, time_period=1)

        await limiter.acquire("https://api.test/generate")

        host_limiter = limiter.limiters["api.test"]
        assert host_limiter.max_rate == 5
        assert host_limiter.time_period == 1
