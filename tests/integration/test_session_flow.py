"""
Integration tests for a full content session.

The profile API, generation endpoint and LaTeX service are served by one
httpx.MockTransport so the orchestrator, prompt builder, parser, retry
policy and CV generator run together against realistic payloads.
"""

import json
import time
from datetime import datetime, timedelta

import httpx
import pytest

from src.agents.content_orchestrator import ContentOrchestrator
from src.agents.cv_generator import LatexCompiler, generate_cv
from src.coordinator import SessionCoordinator, parse_args
from src.models.config import RetryConfig
from src.models.content import ContentCategory
from src.utils.llm_helpers import GenerationClient
from src.utils.profile_api import ProfileClient

PROFILE = {
    "user": {
        "first_name": "Asha",
        "last_name": "Verma",
        "phone_number": "+91 98765 43210",
        "email": "asha.verma@example.com",
    },
    "profile": {
        "qualification": "B.Tech in Computer Science",
        "address": "Pune, Maharashtra",
        "skills": ["Python", "SQL", "Machine Learning"],
        "industries": ["Technology", "Finance"],
    },
}

EXAMS = [
    {
        "title": "GATE Computer Science",
        "description": "Graduate Aptitude Test in Engineering",
        "conductingBody": "IIT",
        "eligibility": "B.Tech graduates",
        "applicationProcess": "Online via GOAPS",
        "examDate": "February 2025",
        "fee": "₹1,800",
        "syllabus": "Algorithms, Databases, Operating Systems",
        "url": "https://gate.iitk.ac.in",
        "buttonText": "Access Now",
    },
    {
        "title": "UGC NET Computer Science",
        "description": "National Eligibility Test",
        "conductingBody": "NTA",
        "eligibility": "Postgraduates",
        "applicationProcess": "Online",
        "examDate": "June 2025",
        "fee": "₹1,150",
        "syllabus": "Computer Networks, Compilers",
        "url": "https://ugcnet.nta.nic.in",
        "buttonText": "Access Now",
    },
]

QUESTIONS = [
    {
        "subject": "GATE Computer Science",
        "question": "What is the worst-case time complexity of quicksort?",
        "options": ["O(n log n)", "O(n^2)", "O(n)", "O(log n)"],
        "correctAnswer": "O(n^2)",
        "explanation": "A poor pivot choice splits the array unevenly every time.",
    }
]


def gemini(text):
    return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": text}]}}]})


class FakeServices:
    """Routes requests to the profile API, generation endpoint and LaTeX service."""

    def __init__(self, generations):
        self.generations = list(generations)
        self.prompts = []
        self.compiles = 0

    def handler(self, request):
        if request.url.host == "profile.test":
            return httpx.Response(200, json=PROFILE)
        if request.url.host == "latex.test":
            self.compiles += 1
            return httpx.Response(200, content=b"%PDF-1.5 cv")

        self.prompts.append(json.loads(request.content)["contents"][0]["parts"][0]["text"])
        response = self.generations.pop(0)
        if isinstance(response, int):
            return httpx.Response(response)
        return gemini(response)


class Clock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


async def no_sleep(delay):
    return None


@pytest.fixture
def clock():
    return Clock(datetime(2024, 10, 6, 9, 15))


@pytest.fixture
def session(clock):
    def factory(*generations):
        services = FakeServices(generations)
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(services.handler))
        orchestrator = ContentOrchestrator(
            GenerationClient(api_key="integration-key", http_client=http_client, sleep=no_sleep),
            ProfileClient("http://profile.test/api/auth/", "token", http_client=http_client),
            clock=clock,
        )
        return orchestrator, services, http_client

    return factory


@pytest.mark.integration
@pytest.mark.asyncio
async def test_exam_titles_steer_sample_questions(session):
    """examHelper content flows into the sampleQuestions prompt."""
    # Arrange
    orchestrator, services, _ = session(
        "```json\n" + json.dumps(EXAMS) + "\n```",
        "Here are your questions:\n" + json.dumps(QUESTIONS),
    )

    # Act
    await orchestrator.load_profile()
    await orchestrator.load_tab_data("examHelper")
    await orchestrator.load_tab_data("sampleQuestions")

    # Assert
    assert "GATE Computer Science, UGC NET Computer Science" in services.prompts[1]
    questions = orchestrator.get_records("sampleQuestions")
    assert questions[0]["correctAnswer"] == "O(n^2)"
    assert questions[0]["options"][1] == "O(n^2)"
    assert orchestrator.error is None


@pytest.mark.integration
@pytest.mark.asyncio
async def test_day_rollover_with_transient_failures(session, clock):
    """A stale entry survives a failed reload and is replaced by the next success."""
    # Arrange
    jobs_day_one = json.dumps([{"title": "Data Analyst", "salary": "₹6,00,000"}])
    jobs_day_two = json.dumps([{"title": "ML Engineer", "salary": "₹14,00,000"}])
    orchestrator, services, _ = session(jobs_day_one, 503, 503, 503, 429, jobs_day_two)
    await orchestrator.load_profile()

    # Act: day one
    await orchestrator.load_tab_data(ContentCategory.JOBS)
    await orchestrator.load_tab_data(ContentCategory.JOBS)

    # Assert: cached for the rest of the day
    assert len(services.prompts) == 1

    # Act: next morning, endpoint down for all three attempts
    clock.now += timedelta(days=1)
    await orchestrator.load_tab_data(ContentCategory.JOBS)

    # Assert: old entry kept, error surfaced
    assert orchestrator.get_records("jobs")[0]["title"] == "Data Analyst"
    assert orchestrator.error == "API request failed with status 503"
    assert orchestrator.get_data_freshness("jobs") == "1 day ago"
    assert not orchestrator.is_loading

    # Act: user refreshes; one rate-limit response, then success
    await orchestrator.refresh_tab_data(ContentCategory.JOBS)

    # Assert
    assert orchestrator.get_records("jobs")[0]["title"] == "ML Engineer"
    assert orchestrator.get_data_freshness("jobs") == "Just now"
    assert orchestrator.error is None
    assert len(services.prompts) == 6


@pytest.mark.integration
@pytest.mark.slow
@pytest.mark.asyncio
async def test_backoff_waits_on_the_real_clock(clock):
    """Two 503s cost base_delay + 2 * base_delay of wall time before success."""
    # Arrange
    services = FakeServices([503, 503, json.dumps(EXAMS)])
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(services.handler))
    orchestrator = ContentOrchestrator(
        GenerationClient(
            api_key="integration-key",
            retry_config=RetryConfig(max_attempts=3, base_delay=0.2),
            http_client=http_client,
        ),
        ProfileClient("http://profile.test/api/auth/", "token", http_client=http_client),
        clock=clock,
    )
    await orchestrator.load_profile()

    # Act
    started = time.monotonic()
    await orchestrator.load_tab_data(ContentCategory.EXAM_HELPER)
    elapsed = time.monotonic() - started

    # Assert
    assert elapsed >= 0.6
    assert len(services.prompts) == 3
    assert orchestrator.get_records("examHelper")[0]["title"] == "GATE Computer Science"
    assert orchestrator.error is None


@pytest.mark.integration
@pytest.mark.asyncio
async def test_cv_from_loaded_profile(session, tmp_path):
    # Arrange
    orchestrator, services, http_client = session()
    profile = await orchestrator.load_profile()
    compiler = LatexCompiler("https://latex.test/compile", http_client=http_client)

    # Act
    result = await generate_cv(profile, compiler)
    path = result.save(tmp_path)

    # Assert
    assert services.compiles == 1
    assert path.name == "Asha_Verma_resume.pdf"
    assert path.read_bytes() == b"%PDF-1.5 cv"


class TestCoordinator:
    """Command-line entry point wiring."""

    def test_parse_args(self):
        args = parse_args(["--tabs", "jobs", "progress", "--refresh"])

        assert args.tabs == ["jobs", "progress"]
        assert args.refresh is True
        assert args.cv is None
        assert args.config == "config/system_params.json"

    @pytest.fixture
    def coordinator(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("GEMINI_API_KEY", "integration-key")
        monkeypatch.setenv("PROFILE_API_TOKEN", "token")
        config = tmp_path / "system_params.json"
        config.write_text(json.dumps({"usd_to_inr_rate": 84, "log_level": "WARNING"}))
        return SessionCoordinator(
            config_path=str(config),
            env_file=str(tmp_path / ".env"),
            correlation_id="cli-session",
            interactive=False,
        )

    def test_loads_config_and_credentials(self, coordinator):
        assert coordinator.system_params.usd_to_inr_rate == 84
        assert coordinator.credentials["PROFILE_API_TOKEN"] == "token"

    @pytest.mark.asyncio
    async def test_show_tabs(self, coordinator, session, monkeypatch):
        # Arrange
        orchestrator, services, _ = session(json.dumps(EXAMS))
        monkeypatch.setattr(coordinator, "build_orchestrator", lambda: orchestrator)

        # Act
        exit_code = await coordinator.show_tabs(["examHelper", "progress"])

        # Assert
        assert exit_code == 0
        assert len(services.prompts) == 1

    @pytest.mark.asyncio
    async def test_show_unknown_tab(self, coordinator, session, monkeypatch):
        orchestrator, _, _ = session()
        monkeypatch.setattr(coordinator, "build_orchestrator", lambda: orchestrator)

        assert await coordinator.show_tabs(["not-a-tab"]) == 1
