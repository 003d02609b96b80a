"""
User Profile Data Models
"""

from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class UserProfile(BaseModel):
    """Career profile of the authenticated user.

    Loaded once per session from the profile API and treated as immutable
    until re-fetched. List fields are always lists, never None.
    """

    model_config = ConfigDict(frozen=True)

    name: str = ""
    qualification: str = ""
    date_of_birth: str = ""
    address: str = ""
    mobile_number: str = ""
    email: str = ""
    skills: List[str] = Field(default_factory=list)
    industries: List[str] = Field(default_factory=list)
    experience: List[Any] = Field(default_factory=list)
    education: List[Any] = Field(default_factory=list)

    @field_validator(
        "name",
        "qualification",
        "date_of_birth",
        "address",
        "mobile_number",
        "email",
        mode="before",
    )
    @classmethod
    def none_to_empty_string(cls, v: Any) -> str:
        if v is None:
            return ""
        return str(v)

    @field_validator("skills", "industries", mode="before")
    @classmethod
    def normalize_string_list(cls, v: Any) -> list[str]:
        """Missing list fields default to empty; a lone value becomes a one-item list."""
        if v is None:
            return []
        if not isinstance(v, (list, tuple)):
            v = [v]
        return [str(item).strip() for item in v if item is not None and str(item).strip()]

    @field_validator("experience", "education", mode="before")
    @classmethod
    def none_to_empty_list(cls, v: Any) -> list[Any]:
        if v is None:
            return []
        if isinstance(v, (list, tuple)):
            return list(v)
        return [v]

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> "UserProfile":
        """Build a profile from the profile API response shape.

        Args:
            payload: ``{"user": {...}, "profile": {...}}`` as returned by ``GET profile/``

        Returns:
            UserProfile with missing fields defaulted
        """
        user = payload.get("user")
        profile = payload.get("profile")
        if not isinstance(user, dict):
            user = {}
        if not isinstance(profile, dict):
            profile = {}

        first_name = user.get("first_name") or ""
        last_name = user.get("last_name") or ""

        return cls(
            name=f"{first_name} {last_name}".strip(),
            qualification=profile.get("qualification"),
            date_of_birth=profile.get("date_of_birth"),
            address=profile.get("address"),
            mobile_number=user.get("phone_number"),
            email=user.get("email"),
            skills=profile.get("skills"),
            industries=profile.get("industries"),
            experience=profile.get("experience"),
            education=profile.get("education"),
        )


class ExtractedResume(BaseModel):
    """Profile fields extracted from plain résumé text."""

    name: str = ""
    qualification: str = ""
    mobile_number: str = ""
    skills: List[str] = Field(default_factory=list)
    industries: List[str] = Field(default_factory=list)
    source: str = "llm"  # "llm" or "fallback"
    error: Optional[str] = None
