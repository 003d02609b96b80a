"""
Content Orchestrator

Owns one user session's dashboard content: loads the profile, builds
prompts, calls the generation endpoint, parses the response and caches the
records per category with a calendar-day freshness policy.

All failures are caught at the operation boundary and recorded as state
(``error`` for the session, ``category_errors`` per tab); no public method
raises them. Each instance holds its own cache, so two sessions never share
content.

Example Usage:
    from src.agents.content_orchestrator import ContentOrchestrator

    async with ContentOrchestrator(generation_client, profile_client) as orchestrator:
        await orchestrator.load_profile()
        await orchestrator.load_tab_data("jobs")
        for job in orchestrator.get_records("jobs"):
            print(job["title"], job["salary"])
        print(orchestrator.get_data_freshness("jobs"))  # "Just now"
"""

import uuid
from datetime import datetime
from typing import Any, Callable, Optional, Union

from src.agents.prompt_builder import (
    USD_TO_INR_RATE,
    build_progress_records,
    build_prompt,
)
from src.models.content import (
    CATEGORY_SPECS,
    CacheEntry,
    ContentCategory,
    ContentRecord,
)
from src.models.profile import UserProfile
from src.utils.errors import GenerationError, ProfileLoadError, ResponseParseError
from src.utils.llm_helpers import GenerationClient
from src.utils.logger import get_logger
from src.utils.profile_api import ProfileClient
from src.utils.prompt_loader import PromptLoader
from src.utils.response_parser import coerce_records, parse_records

CategoryLike = Union[str, ContentCategory, None]


def format_relative_time(fetched_at: Optional[datetime], now: datetime) -> str:
    """Human-readable age of a cache entry."""
    if fetched_at is None:
        return "Never updated"

    seconds = max(0, int((now - fetched_at).total_seconds()))
    if seconds < 60:
        return "Just now"

    minutes = seconds // 60
    if minutes < 60:
        return f"{minutes} minute{'' if minutes == 1 else 's'} ago"

    hours = minutes // 60
    if hours < 24:
        return f"{hours} hour{'' if hours == 1 else 's'} ago"

    days = hours // 24
    return f"{days} day{'' if days == 1 else 's'} ago"


class ContentOrchestrator:
    """
    Per-session content state and the operations that fill it.

    Attributes:
        profile: Loaded user profile, None until ``load_profile`` succeeds
        cache: One CacheEntry per category, replaced wholesale
        error: Latest session-level error message, None when clear
        category_errors: Latest error per category
    """

    def __init__(
        self,
        generation_client: GenerationClient,
        profile_client: ProfileClient,
        usd_to_inr: float = USD_TO_INR_RATE,
        prompt_loader: Optional[PromptLoader] = None,
        clock: Callable[[], datetime] = datetime.now,
        correlation_id: Optional[str] = None,
    ) -> None:
        """
        Initialize an orchestrator for one session.

        Args:
            generation_client: Client for the text-generation endpoint
            profile_client: Client for the profile API, holding the session token
            usd_to_inr: Conversion constant given to the generator
            prompt_loader: Template loader (default loader if None)
            clock: Returns the current local time (injectable for tests)
            correlation_id: Correlation ID for logging (auto-generated if None)
        """
        self.generation_client = generation_client
        self.profile_client = profile_client
        self.usd_to_inr = usd_to_inr
        self.prompt_loader = prompt_loader
        self.clock = clock

        self.profile: Optional[UserProfile] = None
        self.cache: dict[ContentCategory, CacheEntry] = {}
        self.error: Optional[str] = None
        self.category_errors: dict[ContentCategory, str] = {}
        self._in_flight = 0

        # Generate correlation ID if not provided
        if correlation_id is None:
            correlation_id = str(uuid.uuid4())

        self.correlation_id = correlation_id
        self.logger = get_logger(
            correlation_id=correlation_id,
            phase="content",
            component="content_orchestrator",
        )

    async def __aenter__(self) -> "ContentOrchestrator":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """End the session: drop state and close owned HTTP clients."""
        self.clear()
        await self.generation_client.aclose()
        await self.profile_client.aclose()

    @property
    def is_loading(self) -> bool:
        """True only while at least one generation attempt sequence is in flight."""
        return self._in_flight > 0

    @property
    def is_ready(self) -> bool:
        return self.profile is not None

    @property
    def last_updated(self) -> dict[str, datetime]:
        return {category.value: entry.fetched_at for category, entry in self.cache.items()}

    def clear(self) -> None:
        """Forget the profile and all cached content (logout)."""
        self.profile = None
        self.cache = {}
        self.error = None
        self.category_errors = {}
        self.logger.info("Session state cleared")

    def _fail(self, category: Optional[ContentCategory], message: str) -> None:
        self.error = message
        if category is not None:
            self.category_errors[category] = message

    async def load_profile(self) -> Optional[UserProfile]:
        """
        Fetch and store the user's profile.

        Returns:
            The profile, or None on failure (``error`` is set)
        """
        try:
            payload = await self.profile_client.get_profile()
        except ProfileLoadError as e:
            self.logger.error("Profile load failed", error=str(e))
            self.profile = None
            self._fail(None, str(e) or "Failed to load profile")
            return None

        self.profile = UserProfile.from_api(payload)
        self.logger.info(
            "Profile loaded",
            skill_count=len(self.profile.skills),
            industry_count=len(self.profile.industries),
        )
        return self.profile

    def is_fresh(self, category: CategoryLike) -> bool:
        resolved = ContentCategory.resolve(category)
        if resolved is None:
            return False
        entry = self.cache.get(resolved)
        return entry is not None and entry.is_fresh(self.clock())

    async def load_tab_data(self, category: CategoryLike) -> Optional[CacheEntry]:
        """
        Ensure a fresh cache entry exists for a category.

        No-op when the profile is not loaded, the category is empty or
        unknown, or a fresh entry already exists. A failed generation or
        parse leaves any previous entry untouched and records the error.

        Returns:
            The category's current cache entry (possibly stale or None)
        """
        resolved = ContentCategory.resolve(category)
        if self.profile is None or resolved is None:
            return None

        log = self.logger.bind(category=resolved.value)

        if self.is_fresh(resolved):
            log.debug("Cache hit, entry is fresh")
            return self.cache[resolved]

        if not CATEGORY_SPECS[resolved].generated:
            now = self.clock()
            records = build_progress_records(self.profile, now.date())
            self._store(resolved, records, now)
            return self.cache[resolved]

        prompt = build_prompt(
            resolved,
            self.profile,
            self.cache,
            usd_to_inr=self.usd_to_inr,
            loader=self.prompt_loader,
            correlation_id=self.correlation_id,
        )
        if not prompt:
            return self.cache.get(resolved)

        self._in_flight += 1
        self.error = None
        try:
            text = await self.generation_client.generate(
                prompt, correlation_id=self.correlation_id
            )
        except GenerationError as e:
            log.error("Generation failed", error=str(e), status_code=e.status_code)
            self._fail(resolved, str(e) or "Failed to generate content")
            return self.cache.get(resolved)
        finally:
            self._in_flight -= 1

        try:
            items = parse_records(text, correlation_id=self.correlation_id)
        except ResponseParseError as e:
            log.error("Parse failed, keeping previous entry", error=str(e))
            self._fail(resolved, f"Failed to parse generated content: {e}")
            return self.cache.get(resolved)

        records = coerce_records(resolved, items, correlation_id=self.correlation_id)
        if not records:
            log.warning("Generated content held no usable records")
            self._fail(resolved, "Generated content contained no usable records")
            return self.cache.get(resolved)

        self._store(resolved, records, self.clock())
        return self.cache[resolved]

    async def refresh_tab_data(self, category: CategoryLike) -> Optional[CacheEntry]:
        """Drop the category's entry and load it again regardless of freshness."""
        resolved = ContentCategory.resolve(category)
        if self.profile is None or resolved is None:
            return None

        self.cache.pop(resolved, None)
        self.logger.info("Cache entry cleared for refresh", category=resolved.value)
        return await self.load_tab_data(resolved)

    def _store(
        self,
        category: ContentCategory,
        records: list[ContentRecord],
        fetched_at: datetime,
    ) -> None:
        self.cache[category] = CacheEntry(
            category=category,
            records=tuple(records),
            fetched_at=fetched_at,
        )
        self.category_errors.pop(category, None)
        self.logger.info(
            "Cache entry replaced",
            category=category.value,
            record_count=len(records),
        )

    def get_records(self, category: CategoryLike) -> list[dict[str, Any]]:
        """Cached records for display, camelCase keys, [] if none."""
        resolved = ContentCategory.resolve(category)
        if resolved is None or resolved not in self.cache:
            return []
        return [record.to_display() for record in self.cache[resolved].records]

    def get_data_freshness(self, category: CategoryLike) -> str:
        """Relative age of the category's entry, or "Never updated"."""
        resolved = ContentCategory.resolve(category)
        entry = self.cache.get(resolved) if resolved is not None else None
        return format_relative_time(entry.fetched_at if entry else None, self.clock())
