"""
Shared fixtures for unit tests.

HTTP services are faked with httpx.MockTransport; backoff sleeps are
recorded instead of awaited.
"""

import json
from datetime import datetime
from typing import Any, Callable

import httpx
import pytest

from src.models.profile import UserProfile
from src.utils.llm_helpers import GenerationClient
from src.utils.profile_api import ProfileClient


def gemini_payload(text: str) -> dict[str, Any]:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


class RecordingSleep:
    """Async sleep stand-in that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class FakeClock:
    """Settable clock for freshness tests."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class ScriptedGenerationServer:
    """
    Fake generation endpoint.

    Responses are consumed in order; the last one repeats. Each entry is
    either an int status code, a str (200 with that generated text), an
    httpx.Response, or an Exception to raise as a transport failure.
    """

    def __init__(self, *responses: Any) -> None:
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    @property
    def prompts(self) -> list[str]:
        return [
            json.loads(request.content)["contents"][0]["parts"][0]["text"]
            for request in self.requests
        ]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        index = min(len(self.requests) - 1, len(self.responses) - 1)
        response = self.responses[index]
        if isinstance(response, Exception):
            raise response
        if isinstance(response, httpx.Response):
            return response
        if isinstance(response, int):
            return httpx.Response(response, json={"error": {"code": response}})
        return httpx.Response(200, json=gemini_payload(response))


@pytest.fixture
def profile_payload() -> dict[str, Any]:
    """Profile API response for a typical user."""
    return {
        "user": {
            "first_name": "Asha",
            "last_name": "Verma",
            "phone_number": "+91 98765 43210",
            "email": "asha.verma@example.com",
        },
        "profile": {
            "qualification": "B.Tech in Computer Science",
            "date_of_birth": "1999-04-12",
            "address": "Pune, Maharashtra",
            "skills": ["Python", "SQL", "Machine Learning"],
            "industries": ["Technology", "Finance"],
        },
    }


@pytest.fixture
def user_profile(profile_payload) -> UserProfile:
    return UserProfile.from_api(profile_payload)


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock(datetime(2024, 10, 6, 10, 30))


@pytest.fixture
def generation_server() -> Callable[..., ScriptedGenerationServer]:
    """Factory: generation_server(*responses) -> ScriptedGenerationServer."""
    return ScriptedGenerationServer


@pytest.fixture
def make_generation_client(recording_sleep) -> Callable[[ScriptedGenerationServer], GenerationClient]:
    """Factory building a GenerationClient wired to a scripted server."""

    def factory(server: ScriptedGenerationServer) -> GenerationClient:
        return GenerationClient(
            api_key="test-api-key",
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(server.handler)),
            sleep=recording_sleep,
        )

    return factory


@pytest.fixture
def make_profile_client(profile_payload) -> Callable[..., ProfileClient]:
    """Factory building a ProfileClient answering with the given status/body."""

    def factory(
        status_code: int = 200,
        body: Any = None,
        token: str | None = "access-token",
    ) -> ProfileClient:
        payload = profile_payload if body is None else body

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status_code, json=payload)

        return ProfileClient(
            base_url="http://profile.test/api/auth/",
            token=token,
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )

    return factory
