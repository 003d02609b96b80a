#!/usr/bin/env python3
"""
Dependency Verification Script
Checks that runtime libraries import and that every generated content
category has its prompt template.
"""

import sys
from importlib import import_module
from pathlib import Path

PROMPTS_DIR = Path(__file__).resolve().parent.parent / "prompts"

# (import name, distribution name)
DEPENDENCIES = [
    ("httpx", "httpx"),
    ("pydantic", "pydantic"),
    ("structlog", "structlog"),
    ("tenacity", "tenacity"),
    ("aiolimiter", "aiolimiter"),
    ("jinja2", "jinja2"),
    ("jsonschema", "jsonschema"),
    ("dotenv", "python-dotenv"),
    ("rich", "rich"),
]

REQUIRED_TEMPLATES = [
    "content/_base.j2",
    "content/courses.j2",
    "content/jobs.j2",
    "content/examHelper.j2",
    "content/mockInterview.j2",
    "content/sampleQuestions.j2",
    "content/trends.j2",
    "content/salary.j2",
    "content/studyMaterial.j2",
    "resume/extract.j2",
    "cv/resume.tex.j2",
]


def missing_templates(prompts_dir: Path = PROMPTS_DIR) -> list[str]:
    return [name for name in REQUIRED_TEMPLATES if not (prompts_dir / name).is_file()]


def verify_imports():
    """Verify all runtime imports and prompt templates; exit 0 or 1."""
    failed = []

    print("Verifying dependencies...\n")

    for module_name, dist_name in DEPENDENCIES:
        try:
            import_module(module_name)
            print(f"[OK] {dist_name}")
        except ImportError as e:
            print(f"[FAILED] {dist_name}: {e}")
            failed.append(dist_name)

    for template in missing_templates():
        print(f"[FAILED] missing prompt template: {template}")
        failed.append(template)

    print(f"\n{'='*60}")

    if failed:
        print(f"[ERROR] {len(failed)} checks failed:")
        for name in failed:
            print(f"   - {name}")
        sys.exit(1)

    print("[SUCCESS] All dependencies and templates present")
    sys.exit(0)


if __name__ == "__main__":
    verify_imports()
