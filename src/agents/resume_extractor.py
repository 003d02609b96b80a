"""
Résumé Extractor

Turns plain résumé text into profile fields for the profile-setup step.
Text extraction from PDF/Word files happens upstream; this module starts
from the extracted text.

The generation endpoint is tried first. When the call or its parse fails,
a keyword and regex heuristic produces a best-effort result instead, so the
user always gets a pre-filled form.
"""

import re
from typing import Any, Optional

import structlog

from src.models.profile import ExtractedResume
from src.utils.errors import GenerationError, ResponseParseError
from src.utils.llm_helpers import GenerationClient
from src.utils.prompt_loader import render_prompt
from src.utils.response_parser import parse_json_object

logger = structlog.get_logger(__name__)

MAX_INDUSTRIES = 3

NAME_PATTERN = re.compile(r"([A-Z][a-z]+(?: [A-Z][a-z]+)+)")
MOBILE_PATTERN = re.compile(r"(?:\+?\d{1,3}[-\s]?)?\(?\d{3}\)?[-\s]?\d{3}[-\s]?\d{4}")
SKILL_SPLIT_PATTERN = re.compile(r"[,•·\n]")

EDUCATION_KEYWORDS = ("education", "qualification", "degree", "university", "college")
SKILLS_KEYWORDS = ("skills", "technologies", "competencies")
INDUSTRY_KEYWORDS = {
    "Technology": ("software", "developer", "programming"),
    "Engineering": ("engineer", "mechanical", "electrical"),
    "Finance": ("finance", "accounting", "bank"),
    "Healthcare": ("health", "medical", "doctor"),
}


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item).strip() for item in value if str(item).strip()]


def fallback_parse_resume(text: str) -> ExtractedResume:
    """
    Heuristic extraction used when the generator is unavailable.

    Args:
        text: Plain résumé text

    Returns:
        ExtractedResume with source="fallback"
    """
    lines = [line.strip() for line in text.split("\n") if line.strip()]
    lowered_text = text.lower()

    name_match = NAME_PATTERN.search(text)
    mobile_match = MOBILE_PATTERN.search(text)

    qualification = ""
    for i, line in enumerate(lines):
        if any(keyword in line.lower() for keyword in EDUCATION_KEYWORDS):
            qualification = " ".join(lines[i : i + 5])
            break

    skills: list[str] = []
    for i, line in enumerate(lines):
        if any(keyword in line.lower() for keyword in SKILLS_KEYWORDS):
            # Heading line may carry skills after a colon
            inline = line.partition(":")[2]
            section = "\n".join([inline, *lines[i + 1 : i + 15]])
            skills = [
                part.strip()
                for part in SKILL_SPLIT_PATTERN.split(section)
                if len(part.strip()) > 2
            ]
            break

    industries = [
        industry
        for industry, keywords in INDUSTRY_KEYWORDS.items()
        if any(keyword in lowered_text for keyword in keywords)
    ]

    return ExtractedResume(
        name=name_match.group(0) if name_match else "",
        qualification=qualification,
        mobile_number=mobile_match.group(0) if mobile_match else "",
        skills=skills,
        industries=industries[:MAX_INDUSTRIES],
        source="fallback",
    )


async def extract_resume(
    resume_text: str,
    generation_client: GenerationClient,
    correlation_id: Optional[str] = None,
) -> ExtractedResume:
    """
    Extract profile fields from résumé text.

    Args:
        resume_text: Plain text extracted from the uploaded résumé
        generation_client: Client for the generation endpoint
        correlation_id: Optional correlation ID for logging

    Returns:
        ExtractedResume from the generator, or from the heuristic fallback
        with ``error`` describing why the generator result was not used
    """
    prompt = render_prompt(
        "resume/extract.j2",
        correlation_id=correlation_id,
        resume_text=resume_text,
        max_industries=MAX_INDUSTRIES,
    )

    try:
        response = await generation_client.generate(prompt, correlation_id=correlation_id)
        data = parse_json_object(response)
    except (GenerationError, ResponseParseError) as e:
        logger.warning(
            "Résumé extraction fell back to heuristic parsing",
            error=str(e),
            correlation_id=correlation_id,
        )
        result = fallback_parse_resume(resume_text)
        return result.model_copy(update={"error": str(e)})

    industries = _string_list(data.get("industries"))

    return ExtractedResume(
        name=str(data.get("name") or ""),
        qualification=str(data.get("qualification") or ""),
        mobile_number=str(data.get("mobileNumber") or data.get("mobile_number") or ""),
        skills=_string_list(data.get("skills")),
        industries=industries[:MAX_INDUSTRIES],
        source="llm",
    )
