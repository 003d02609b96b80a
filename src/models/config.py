"""
Configuration Models

Pydantic models for system configuration validation.
"""

from pathlib import Path
from pydantic import BaseModel, Field, field_validator

from src.utils.validator import ConfigValidator


DEFAULT_GENERATION_ENDPOINT = (
    "https://generativelanguage.googleapis.com/v1beta/models/"
    "gemini-2.0-flash:generateContent"
)


class GenerationConfig(BaseModel):
    """Text-generation endpoint and sampling configuration."""

    endpoint: str = Field(default=DEFAULT_GENERATION_ENDPOINT)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    top_k: int = Field(default=40, gt=0)
    top_p: float = Field(default=0.95, gt=0.0, le=1.0)
    max_output_tokens: int = Field(default=2048, gt=0)
    requests_per_minute: int = Field(
        default=30,
        gt=0,
        description="Client-side throttle for generation requests per endpoint host",
    )
    timeout: float = Field(default=60.0, gt=0)

    def as_request_config(self) -> dict[str, float | int]:
        """Return the generationConfig block of a request body."""
        return {
            "temperature": self.temperature,
            "topK": self.top_k,
            "topP": self.top_p,
            "maxOutputTokens": self.max_output_tokens,
        }


class RetryConfig(BaseModel):
    """Bounded retry configuration for generation requests."""

    max_attempts: int = Field(default=3, ge=1, le=10)
    base_delay: float = Field(default=1.0, gt=0)


class ServiceEndpoints(BaseModel):
    """External service URLs."""

    profile_api_url: str = Field(default="http://localhost:8000/api/auth/")
    latex_compile_url: str = Field(default="https://latexonline.cc/compile")
    latex_editor_url: str = Field(default="https://www.overleaf.com/docs")
    search_url: str = Field(default="https://www.google.com/search")
    timeout: float = Field(default=30.0, gt=0)

    @field_validator("profile_api_url")
    @classmethod
    def ensure_trailing_slash(cls, v: str) -> str:
        """Profile paths are joined relative to the base URL."""
        return v if v.endswith("/") else f"{v}/"


class SystemParams(BaseModel):
    """System parameters configuration model."""

    generation: GenerationConfig = Field(default_factory=GenerationConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    services: ServiceEndpoints = Field(default_factory=ServiceEndpoints)
    usd_to_inr_rate: float = Field(default=83.0, gt=0)
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {', '.join(valid_levels)}")
        return v.upper()

    @classmethod
    def load(cls, config_path: Path | str | None = None) -> "SystemParams":
        """Load system parameters from config file.

        The file is checked against its JSON Schema first. A missing file
        means every setting takes its default.

        Args:
            config_path: Path to system_params.json (defaults to config/system_params.json)

        Returns:
            SystemParams: Validated configuration

        Raises:
            ConfigurationError: If the file exists but fails validation
        """
        config_path = Path(config_path or "config/system_params.json")
        config_data = ConfigValidator().validate_system_params(config_path)
        return cls(**config_data)
