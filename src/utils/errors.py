"""
Error Types

Exception hierarchy for the content orchestrator and its collaborators.
Orchestrator operations catch these at their boundary and convert them into
session-level error state; lower-level clients raise them.
"""

from typing import Optional


class CareerGuideError(Exception):
    """Base class for all career guide errors."""

    pass


class ConfigurationError(CareerGuideError):
    """Raised when configuration validation fails."""

    pass


class ProfileLoadError(CareerGuideError):
    """Raised when the user's profile cannot be fetched."""

    pass


class GenerationError(CareerGuideError):
    """Raised when the text-generation endpoint fails to return content.

    Attributes:
        status_code: HTTP status of the failed response, None for transport
            failures and missing payloads
        retryable: Whether another attempt may succeed (429, 5xx, transport)
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.retryable = retryable


class ResponseParseError(CareerGuideError):
    """Raised when no parsing strategy can extract a JSON array."""

    pass


class LatexCompileError(CareerGuideError):
    """Raised when the remote LaTeX compile service rejects a document."""

    pass


class CVGenerationError(CareerGuideError):
    """Raised when the profile lacks fields required to build a CV."""

    def __init__(self, message: str, missing_fields: Optional[list[str]] = None) -> None:
        super().__init__(message)
        self.missing_fields = missing_fields or []
