"""
Response Parser

Best-effort extraction of a JSON array from generated text. Generators wrap
their output in code fences, prepend prose, or append commentary; each
strategy below handles one of those shapes and they are tried in order
until one yields a list.

Example Usage:
    from src.utils.response_parser import parse_records

    items = parse_records(raw_text)  # raises ResponseParseError if nothing parses
"""

import json
import re
from typing import Any, Callable, Optional, Sequence

import structlog
from pydantic import ValidationError

from src.models.content import CATEGORY_SPECS, ContentCategory, ContentRecord
from src.utils.errors import ResponseParseError

logger = structlog.get_logger(__name__)

ParseStrategy = Callable[[str], Optional[list[Any]]]

_FENCE_PATTERN = re.compile(r"```(?:json|JSON)?\s*([\s\S]*?)\s*```")
_ARRAY_PATTERN = re.compile(r"\[[\s\S]*\]")


def _loads_array(candidate: str) -> Optional[list[Any]]:
    """json.loads that only accepts arrays; None on any failure."""
    # Deeply nested text raises RecursionError inside the decoder
    try:
        value = json.loads(candidate)
    except (json.JSONDecodeError, TypeError, RecursionError):
        return None
    return value if isinstance(value, list) else None


def parse_fenced_block(text: str) -> Optional[list[Any]]:
    """Body of the first fenced code block that holds a JSON array."""
    for match in _FENCE_PATTERN.finditer(text):
        parsed = _loads_array(match.group(1))
        if parsed is not None:
            return parsed
    return None


def parse_embedded_array(text: str) -> Optional[list[Any]]:
    """Outermost bracket-delimited span anywhere in the text."""
    match = _ARRAY_PATTERN.search(text)
    if not match:
        return None
    return _loads_array(match.group(0))


def parse_whole_text(text: str) -> Optional[list[Any]]:
    return _loads_array(text.strip())


def parse_trimmed_text(text: str) -> Optional[list[Any]]:
    """Drop everything before the first '[' and after the last ']'."""
    trimmed = re.sub(r"^[^\[]*", "", text)
    trimmed = re.sub(r"[^\]]*$", "", trimmed)
    if not trimmed:
        return None
    return _loads_array(trimmed)


PARSE_STRATEGIES: tuple[tuple[str, ParseStrategy], ...] = (
    ("fenced_block", parse_fenced_block),
    ("embedded_array", parse_embedded_array),
    ("whole_text", parse_whole_text),
    ("trimmed_text", parse_trimmed_text),
)


def parse_records(
    text: Optional[str],
    strategies: Sequence[tuple[str, ParseStrategy]] = PARSE_STRATEGIES,
    correlation_id: Optional[str] = None,
) -> list[Any]:
    """
    Extract a JSON array from generated text.

    Args:
        text: Raw generated text
        strategies: Ordered (name, strategy) pairs; first non-None result wins
        correlation_id: Optional correlation ID for logging

    Returns:
        The parsed list (possibly empty)

    Raises:
        ResponseParseError: If the text is empty or no strategy succeeds
    """
    if not text or not text.strip():
        raise ResponseParseError("Generated content was empty")

    for name, strategy in strategies:
        parsed = strategy(text)
        if parsed is not None:
            logger.debug(
                "Parsed generated content",
                strategy=name,
                item_count=len(parsed),
                correlation_id=correlation_id,
            )
            return parsed

    logger.error(
        "Failed to parse JSON from generated content",
        response=text[:200],
        correlation_id=correlation_id,
    )
    raise ResponseParseError("Could not parse generated content as a JSON array")


def coerce_records(
    category: ContentCategory,
    items: Sequence[Any],
    correlation_id: Optional[str] = None,
) -> list[ContentRecord]:
    """
    Convert parsed items into the category's record model.

    Non-mapping and unvalidatable items are dropped. Missing fields are tolerated.
    """
    record_model = CATEGORY_SPECS[category].record_model
    records: list[ContentRecord] = []
    dropped = 0

    for item in items:
        if not isinstance(item, dict):
            dropped += 1
            continue
        try:
            records.append(record_model.model_validate(item))
        except ValidationError:
            dropped += 1

    if dropped:
        logger.warning(
            "Dropped malformed items from generated content",
            category=category.value,
            dropped=dropped,
            correlation_id=correlation_id,
        )

    return records


_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")


def parse_json_object(text: Optional[str]) -> dict[str, Any]:
    """
    Extract a single JSON object from generated text.

    Tries a fenced block, then the outermost brace-delimited span, then the
    whole text.

    Raises:
        ResponseParseError: If no JSON object can be extracted
    """
    if not text or not text.strip():
        raise ResponseParseError("Generated content was empty")

    candidates = [match.group(1) for match in _FENCE_PATTERN.finditer(text)]
    object_match = _OBJECT_PATTERN.search(text)
    if object_match:
        candidates.append(object_match.group(0))
    candidates.append(text.strip())

    for candidate in candidates:
        try:
            value = json.loads(candidate)
        except (json.JSONDecodeError, RecursionError):
            continue
        if isinstance(value, dict):
            return value

    raise ResponseParseError("Could not parse generated content as a JSON object")
