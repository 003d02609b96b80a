"""
Jinja2 templates for generation prompts and the CV document.

Layout under prompts/:
    content/<category>.j2   one per generated tab, all extending content/_base.j2
    resume/extract.j2       résumé field extraction
    cv/resume.tex.j2        LaTeX CV body (values pass through ``latex_escape``)

Usage:
    from src.utils.prompt_loader import render_prompt

    prompt = render_prompt("content/jobs.j2", profile=user_profile, count=6)
"""

import re
from pathlib import Path
from typing import Any, Optional

import structlog
from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateNotFound,
    TemplateSyntaxError,
    Undefined,
    UndefinedError,
)

logger = structlog.get_logger(__name__)

PROMPTS_DIR = Path(__file__).parent.parent.parent / "prompts"

_LATEX_SPECIAL_CHARS = {
    "\\": r"\textbackslash{}",
    "&": r"\&",
    "%": r"\%",
    "$": r"\$",
    "#": r"\#",
    "_": r"\_",
    "{": r"\{",
    "}": r"\}",
    "~": r"\textasciitilde{}",
    "^": r"\textasciicircum{}",
}
_LATEX_ESCAPE_PATTERN = re.compile("|".join(re.escape(c) for c in _LATEX_SPECIAL_CHARS))


def latex_escape(value: Any) -> str:
    """Escape LaTeX special characters in a profile value."""
    if value is None:
        return ""
    return _LATEX_ESCAPE_PATTERN.sub(lambda m: _LATEX_SPECIAL_CHARS[m.group()], str(value))


class PromptLoader:
    """Renders templates from one directory (prompts/ by default)."""

    def __init__(
        self,
        template_dir: Optional[Path] = None,
        strict_undefined: bool = False,
    ) -> None:
        self.template_dir = template_dir or PROMPTS_DIR
        self.strict_undefined = strict_undefined

        # Prompts are plain text and LaTeX, never HTML
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined if strict_undefined else Undefined,
        )
        self.env.filters["latex_escape"] = latex_escape

    def render(
        self,
        template_name: str,
        correlation_id: Optional[str] = None,
        **variables: Any,
    ) -> str:
        """
        Render a template with provided variables.

        Raises:
            TemplateNotFound: If template file doesn't exist
            TemplateSyntaxError: If template has syntax errors
            UndefinedError: If strict_undefined=True and variable is missing
        """
        log = logger.bind(template_name=template_name, correlation_id=correlation_id)

        try:
            rendered = self.env.get_template(template_name).render(**variables)
        except (TemplateNotFound, TemplateSyntaxError, UndefinedError) as e:
            log.error(
                "Template rendering failed",
                error_type=type(e).__name__,
                error=str(e),
                template_dir=str(self.template_dir),
            )
            raise

        log.debug("Template rendered", rendered_length=len(rendered))
        return rendered

    def render_content(
        self,
        category: str,
        correlation_id: Optional[str] = None,
        **variables: Any,
    ) -> str:
        """Render the generation prompt for a content tab (``content/<category>.j2``)."""
        return self.render(f"content/{category}.j2", correlation_id=correlation_id, **variables)

    def has_template(self, template_name: str) -> bool:
        return (self.template_dir / template_name).is_file()


_default_loader: Optional[PromptLoader] = None


def get_default_loader() -> PromptLoader:
    global _default_loader
    if _default_loader is None:
        _default_loader = PromptLoader()
    return _default_loader


def render_prompt(
    template_name: str,
    correlation_id: Optional[str] = None,
    **variables: Any,
) -> str:
    """Render a template with the shared default loader."""
    return get_default_loader().render(template_name, correlation_id=correlation_id, **variables)
