"""
Profile API Client

Fetches the authenticated user's stored profile from the auth/profile REST
service. Token storage and login belong to the caller; this client only
sends the bearer token it is given.
"""

from typing import Any, Optional

import httpx
import structlog

from src.utils.errors import ProfileLoadError

logger = structlog.get_logger(__name__)


class ProfileClient:
    """Thin async client for ``GET profile/``."""

    def __init__(
        self,
        base_url: str,
        token: Optional[str],
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ) -> None:
        """
        Initialize the profile client.

        Args:
            base_url: Auth API base URL (e.g. "http://localhost:8000/api/auth/")
            token: Bearer access token; None when the user is not logged in
            http_client: Shared HTTP client; created and owned here if None
            timeout: Request timeout in seconds for an owned client
        """
        self.base_url = base_url if base_url.endswith("/") else f"{base_url}/"
        self.token = token
        self._owns_client = http_client is None
        self.http_client = http_client or httpx.AsyncClient(timeout=timeout)

    async def aclose(self) -> None:
        if self._owns_client:
            await self.http_client.aclose()

    @staticmethod
    def _error_message(response: httpx.Response, default: str) -> str:
        try:
            body = response.json()
        except ValueError:
            return default
        if isinstance(body, dict) and body.get("error"):
            return str(body["error"])
        return default

    async def get_profile(self) -> dict[str, Any]:
        """
        Fetch the raw profile payload.

        Returns:
            ``{"user": {...}, "profile": {...}}``

        Raises:
            ProfileLoadError: No token, transport failure, non-2xx status,
                or a body that is not a JSON object
        """
        if not self.token:
            raise ProfileLoadError("No authentication token found")

        url = f"{self.base_url}profile/"
        try:
            response = await self.http_client.get(
                url, headers={"Authorization": f"Bearer {self.token}"}
            )
        except httpx.HTTPError as e:
            logger.error("Profile request failed", url=url, error=str(e))
            raise ProfileLoadError("Failed to fetch profile") from e

        if response.status_code < 200 or response.status_code >= 300:
            message = self._error_message(response, "Failed to fetch profile")
            logger.error(
                "Profile request returned error status",
                url=url,
                status_code=response.status_code,
                error=message,
            )
            raise ProfileLoadError(message)

        try:
            payload = response.json()
        except ValueError as e:
            raise ProfileLoadError("Profile response was not valid JSON") from e

        if not isinstance(payload, dict):
            raise ProfileLoadError("Profile response had an unexpected shape")

        return payload
