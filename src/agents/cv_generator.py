"""
CV Generator

Renders the user's profile into a LaTeX résumé, compiles it through the
remote LaTeX service and returns the PDF. When compilation fails the
result carries an editor URL pre-loaded with the same source so the user
can compile it manually.

Example Usage:
    from src.agents.cv_generator import LatexCompiler, generate_cv

    compiler = LatexCompiler(compile_url="https://latexonline.cc/compile")
    result = await generate_cv(profile, compiler)
    if result.pdf:
        result.save(Path("downloads"))
    else:
        print(result.message, result.fallback_url)
"""

import re
from pathlib import Path
from typing import Any, Optional
from urllib.parse import quote

import httpx
import structlog
from pydantic import BaseModel

from src.models.profile import UserProfile
from src.utils.errors import CVGenerationError, LatexCompileError
from src.utils.prompt_loader import render_prompt

logger = structlog.get_logger(__name__)

REQUIRED_CV_FIELDS = ("name", "qualification", "address", "mobile_number")
DEFAULT_EDITOR_URL = "https://www.overleaf.com/docs"

COMPILE_FAILURE_MESSAGE = (
    "We couldn't compile your CV automatically. Open it in the online LaTeX "
    "editor to compile and download the PDF yourself."
)


class CVResult(BaseModel):
    """Outcome of a CV generation attempt."""

    latex: str
    filename: str
    pdf: Optional[bytes] = None
    fallback_url: Optional[str] = None
    message: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.pdf is not None

    def save(self, directory: Path) -> Path:
        """Write the PDF into ``directory`` and return its path."""
        if self.pdf is None:
            raise LatexCompileError("No PDF to save; compilation did not succeed")
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / self.filename
        path.write_bytes(self.pdf)
        return path


class LatexCompiler:
    """Client for the remote LaTeX-to-PDF compile service."""

    def __init__(
        self,
        compile_url: str,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ) -> None:
        self.compile_url = compile_url
        self._owns_client = http_client is None
        self.http_client = http_client or httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self) -> "LatexCompiler":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.http_client.aclose()

    async def compile(self, latex: str) -> bytes:
        """
        Compile a LaTeX document.

        Args:
            latex: Complete LaTeX source

        Returns:
            PDF bytes

        Raises:
            LatexCompileError: Transport failure, non-2xx status, or empty body
        """
        try:
            response = await self.http_client.post(
                self.compile_url,
                params={"text": latex},
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
        except httpx.HTTPError as e:
            raise LatexCompileError(f"LaTeX compilation request failed: {e}") from e

        if response.status_code < 200 or response.status_code >= 300:
            raise LatexCompileError(
                f"LaTeX compilation failed: {response.status_code} - {response.text[:200]}"
            )

        if not response.content:
            raise LatexCompileError("LaTeX compilation returned an empty document")

        return response.content


def missing_cv_fields(profile: Optional[UserProfile]) -> list[str]:
    """Names of required profile fields that are empty."""
    if profile is None:
        return list(REQUIRED_CV_FIELDS)
    return [field for field in REQUIRED_CV_FIELDS if not getattr(profile, field).strip()]


def render_cv_latex(profile: UserProfile) -> str:
    """Render the résumé LaTeX source for a profile."""
    return render_prompt("cv/resume.tex.j2", profile=profile)


def editor_fallback_url(latex: str, editor_url: str = DEFAULT_EDITOR_URL) -> str:
    """URL that opens the LaTeX source in the online editor."""
    return f"{editor_url}?snip={quote(latex, safe='')}"


def cv_filename(name: str) -> str:
    safe_name = re.sub(r"[^A-Za-z0-9]+", "_", name).strip("_") or "user"
    return f"{safe_name}_resume.pdf"


async def generate_cv(
    profile: Optional[UserProfile],
    compiler: LatexCompiler,
    editor_url: str = DEFAULT_EDITOR_URL,
    correlation_id: Optional[str] = None,
) -> CVResult:
    """
    Build and compile the user's CV.

    Args:
        profile: Loaded user profile
        compiler: LaTeX compile client
        editor_url: Online editor used as the manual-compile fallback
        correlation_id: Optional correlation ID for logging

    Returns:
        CVResult with ``pdf`` on success, or ``fallback_url`` and a
        user-facing ``message`` when compilation failed

    Raises:
        CVGenerationError: If the profile lacks name, qualification,
            address, or mobile number
    """
    missing = missing_cv_fields(profile)
    if missing or profile is None:
        raise CVGenerationError(
            f"Missing required profile fields: {', '.join(missing)}",
            missing_fields=missing,
        )

    latex = render_cv_latex(profile)
    filename = cv_filename(profile.name)

    try:
        pdf = await compiler.compile(latex)
    except LatexCompileError as e:
        logger.warning(
            "CV compilation failed, offering editor fallback",
            error=str(e),
            correlation_id=correlation_id,
        )
        return CVResult(
            latex=latex,
            filename=filename,
            fallback_url=editor_fallback_url(latex, editor_url),
            message=COMPILE_FAILURE_MESSAGE,
        )

    logger.info("CV compiled", pdf_bytes=len(pdf), correlation_id=correlation_id)
    return CVResult(latex=latex, filename=filename, pdf=pdf)
