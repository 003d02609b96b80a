"""
Prompt Builder

Turns a content category and the user's profile into the generation
request for that category. Pure: same inputs, same prompt.

The progress category is never generated; its records are computed from
the profile by ``build_progress_records``.
"""

from datetime import date
from typing import Mapping, Optional, Union

from src.models.content import (
    CATEGORY_SPECS,
    CacheEntry,
    ContentCategory,
    ProgressRecord,
)
from src.models.profile import UserProfile
from src.utils.prompt_loader import PromptLoader, get_default_loader

USD_TO_INR_RATE = 83.0


def _exam_titles(cache: Mapping[ContentCategory, CacheEntry]) -> list[str]:
    entry = cache.get(ContentCategory.EXAM_HELPER)
    if entry is None:
        return []
    titles = []
    for record in entry.records:
        title = getattr(record, "title", None)
        if title:
            titles.append(title)
    return titles


def _format_rate(rate: float) -> str:
    return str(int(rate)) if float(rate).is_integer() else str(rate)


def build_prompt(
    category: Union[str, ContentCategory, None],
    profile: Optional[UserProfile],
    cache: Optional[Mapping[ContentCategory, CacheEntry]] = None,
    usd_to_inr: float = USD_TO_INR_RATE,
    loader: Optional[PromptLoader] = None,
    correlation_id: Optional[str] = None,
) -> str:
    """
    Build the generation prompt for a category.

    Args:
        category: Tab name or ContentCategory
        profile: Loaded user profile (None while not ready)
        cache: Current cache; cached examHelper titles steer sampleQuestions
        usd_to_inr: Currency conversion constant given to the generator
        loader: Template loader (default loader if None)
        correlation_id: Optional correlation ID for logging

    Returns:
        Prompt text, or "" for unknown categories, a missing profile, or
        categories that are computed locally
    """
    resolved = ContentCategory.resolve(category)
    if resolved is None or profile is None:
        return ""

    spec = CATEGORY_SPECS[resolved]
    if not spec.generated:
        return ""

    loader = loader or get_default_loader()
    exam_titles = (
        _exam_titles(cache or {})
        if resolved is ContentCategory.SAMPLE_QUESTIONS
        else []
    )

    return loader.render_content(
        resolved.value,
        correlation_id=correlation_id,
        profile=profile,
        count=spec.batch_size,
        fields=spec.fields,
        button_text=spec.button_text,
        usd_to_inr=_format_rate(usd_to_inr),
        exam_titles=exam_titles,
    )


def build_progress_records(profile: UserProfile, today: date) -> list[ProgressRecord]:
    """
    Compute the progress tab locally from the profile.

    Always returns exactly three records: profile completion, skill count,
    and industry count.
    """
    skill_count = len(profile.skills)
    industry_count = len(profile.industries)

    return [
        ProgressRecord(
            milestone="Profile completed",
            description=f"Profile completed on {today.strftime('%d/%m/%Y')}",
            timeframe=today.isoformat(),
        ),
        ProgressRecord(
            milestone="Skills added",
            description=f"Added {skill_count} skill{'' if skill_count == 1 else 's'} to your profile",
            timeframe=today.isoformat(),
        ),
        ProgressRecord(
            milestone="Industries selected",
            description=(
                f"Selected {industry_count} "
                f"{'industry' if industry_count == 1 else 'industries'} of interest"
            ),
            timeframe=today.isoformat(),
        ),
    ]
