"""
Structured JSON logging with session correlation IDs.

Each orchestrator session binds one correlation ID, so the profile load,
every generation attempt and each cache update for a user can be followed
through the log file together:

    logger = get_logger(correlation_id=session_id, phase="content",
                        component="content_orchestrator")
    logger.warning("Retrying generation request", attempt=2, status_code=429)

Levels:
    - DEBUG: prompt/response sizes, template rendering, parse strategies
    - INFO: profile loaded, cache hits, cache entries replaced
    - WARNING: retries, résumé fallbacks, unreachable links
    - ERROR: failed generations, parse failures, profile load failures
"""

import logging
import re
import sys
import uuid
from pathlib import Path
from typing import Optional
import structlog
from structlog.types import BindableLogger, EventDict, WrappedLogger

MASK = "***MASKED***"

SENSITIVE_FIELDS = frozenset(
    {"password", "api_key", "key", "token", "secret", "credential", "auth", "authorization"}
)

# The generation endpoint takes its API key as a query parameter
_URL_KEY_PATTERN = re.compile(r"([?&]key=)[^&\s\"']+")
_FIELD_SEPARATORS = re.compile(r"[_-]")


def _is_sensitive(field: str) -> bool:
    lowered = field.lower()
    if lowered in SENSITIVE_FIELDS:
        return True
    parts = _FIELD_SEPARATORS.split(lowered)
    # api_key spans two parts
    suffix = "_".join(parts[-2:])
    return parts[0] in SENSITIVE_FIELDS or parts[-1] in SENSITIVE_FIELDS or suffix in SENSITIVE_FIELDS


def mask_credentials(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """
    structlog processor hiding credentials before rendering.

    Whole values are replaced for fields named like a credential
    (``api_key``, ``access_token``, ``client-secret``...). Other string
    values keep their text but lose any ``?key=...`` query parameter.
    """
    for field, value in event_dict.items():
        if _is_sensitive(field):
            event_dict[field] = MASK
        elif isinstance(value, str):
            event_dict[field] = _URL_KEY_PATTERN.sub(rf"\1{MASK}", value)
    return event_dict


def configure_logging(
    log_file: str = "logs/career-guide.log", log_level: str = "INFO"
) -> None:
    """Send JSON log lines to ``log_file`` and stdout at ``log_level``."""
    log_path = Path(log_file)
    log_path.parent.mkdir(exist_ok=True)

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, log_level.upper()),
        handlers=[logging.FileHandler(log_file), logging.StreamHandler(sys.stdout)],
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            mask_credentials,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(
    correlation_id: Optional[str] = None,
    phase: Optional[str] = None,
    component: Optional[str] = None,
) -> BindableLogger:
    """
    Get a logger bound to a session.

    Args:
        correlation_id: Session ID (a new UUID when omitted)
        phase: "profile", "content", "cv" or "resume"
        component: Module emitting the events, e.g. "content_orchestrator"
    """
    context = {"correlation_id": correlation_id or str(uuid.uuid4())}
    if phase:
        context["phase"] = phase
    if component:
        context["component"] = component
    return structlog.get_logger().bind(**context)


configure_logging()
