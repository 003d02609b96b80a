"""
Session Coordinator Module

Wires configuration, credentials and logging into a content session, loads
the requested dashboard tabs and prints them to the console. Also drives CV
generation and résumé extraction from the command line.

Usage:
    python -m src.coordinator --tabs jobs courses progress
    python -m src.coordinator --tabs salary --refresh
    python -m src.coordinator --tabs jobs --check-links
    python -m src.coordinator --cv downloads/
    python -m src.coordinator --resume resume.txt
"""

import argparse
import asyncio
import sys
import uuid
from pathlib import Path
from typing import Optional, Sequence

import httpx
from rich.console import Console
from rich.table import Table

from src.agents.content_orchestrator import ContentOrchestrator
from src.agents.cv_generator import LatexCompiler, generate_cv
from src.agents.resume_extractor import extract_resume
from src.models.config import SystemParams
from src.models.content import CATEGORY_SPECS, ContentCategory
from src.utils.credential_manager import (
    GENERATION_API_KEY,
    PROFILE_TOKEN_KEY,
    CredentialManager,
)
from src.utils.errors import CVGenerationError
from src.utils.link_resolver import resolve_link
from src.utils.llm_helpers import GenerationClient
from src.utils.logger import configure_logging, get_logger
from src.utils.profile_api import ProfileClient

console = Console()


class SessionCoordinator:
    """
    Builds one orchestrator session from configuration and runs CLI actions.
    """

    def __init__(
        self,
        config_path: str = "config/system_params.json",
        env_file: str = ".env",
        correlation_id: Optional[str] = None,
        interactive: bool = True,
    ):
        """
        Initialize the coordinator.

        Args:
            config_path: Path to system parameters JSON file
            env_file: Path to the .env file holding credentials
            correlation_id: Correlation ID for logging (auto-generated if None)
            interactive: Prompt for missing credentials
        """
        self.config_path = Path(config_path)
        self.system_params = self._load_config()
        configure_logging(log_level=self.system_params.log_level)

        if correlation_id is None:
            correlation_id = str(uuid.uuid4())
        self.correlation_id = correlation_id
        self.logger = get_logger(
            correlation_id=correlation_id,
            phase="session",
            component="session_coordinator",
        )

        credentials = CredentialManager(Path(env_file), interactive=interactive)
        self.credentials = credentials.session_credentials()

    def _load_config(self) -> SystemParams:
        """
        Validate and load system parameters, falling back to defaults.

        Raises:
            ConfigurationError: If the file exists but is invalid
        """
        return SystemParams.load(self.config_path)

    def build_orchestrator(self) -> ContentOrchestrator:
        params = self.system_params
        generation_client = GenerationClient(
            api_key=self.credentials[GENERATION_API_KEY] or "",
            config=params.generation,
            retry_config=params.retry,
        )
        profile_client = ProfileClient(
            base_url=params.services.profile_api_url,
            token=self.credentials[PROFILE_TOKEN_KEY],
            timeout=params.services.timeout,
        )
        return ContentOrchestrator(
            generation_client,
            profile_client,
            usd_to_inr=params.usd_to_inr_rate,
            correlation_id=self.correlation_id,
        )

    async def show_tabs(
        self, tabs: Sequence[str], refresh: bool = False, check_links: bool = False
    ) -> int:
        """
        Load and print dashboard tabs.

        Returns:
            Process exit code: 0 if every tab has content, 1 otherwise
        """
        async with self.build_orchestrator() as orchestrator:
            if await orchestrator.load_profile() is None:
                console.print(f"[red][X] {orchestrator.error}[/red]")
                return 1

            exit_code = 0
            for tab in tabs:
                category = ContentCategory.resolve(tab)
                if category is None:
                    console.print(f"[yellow][!] Unknown tab: {tab}[/yellow]")
                    exit_code = 1
                    continue

                with console.status(f"Loading {category.value}..."):
                    if refresh:
                        await orchestrator.refresh_tab_data(category)
                    else:
                        await orchestrator.load_tab_data(category)

                error = orchestrator.category_errors.get(category)
                if error:
                    console.print(f"[red][X] {category.value}: {error}[/red]")
                self._render_tab(orchestrator, category)
                if check_links:
                    await self._check_links(orchestrator.get_records(category))
                if not orchestrator.get_records(category):
                    exit_code = 1

            return exit_code

    def _render_tab(self, orchestrator: ContentOrchestrator, category: ContentCategory) -> None:
        records = orchestrator.get_records(category)
        if not records:
            return

        fields = CATEGORY_SPECS[category].fields
        table = Table(
            title=f"{category.value} ({orchestrator.get_data_freshness(category)})",
            show_lines=True,
        )
        for field in fields:
            table.add_column(field, overflow="fold")
        for record in records:
            row = []
            for field in fields:
                value = record.get(field, "")
                row.append(", ".join(value) if isinstance(value, list) else str(value))
            table.add_row(*row)
        console.print(table)

    async def _check_links(self, records: list[dict]) -> None:
        """Probe record links and print the search fallback for dead ones."""
        services = self.system_params.services
        async with httpx.AsyncClient(timeout=services.timeout) as client:
            for record in records:
                if "url" not in record:
                    continue
                resolution = await resolve_link(
                    record["url"],
                    record.get("title", ""),
                    client,
                    search_base_url=services.search_url,
                )
                if not resolution.valid:
                    console.print(f"[yellow][!] {resolution.message}[/yellow]")
                    console.print(f"    -> {resolution.url}")

    async def build_cv(self, output_dir: Path) -> int:
        """Generate the CV PDF into output_dir, or print the editor fallback."""
        services = self.system_params.services
        async with self.build_orchestrator() as orchestrator:
            profile = await orchestrator.load_profile()
            if profile is None:
                console.print(f"[red][X] {orchestrator.error}[/red]")
                return 1

            async with LatexCompiler(services.latex_compile_url, timeout=services.timeout) as compiler:
                try:
                    result = await generate_cv(
                        profile,
                        compiler,
                        editor_url=services.latex_editor_url,
                        correlation_id=self.correlation_id,
                    )
                except CVGenerationError as e:
                    console.print(f"[red][X] {e}[/red]")
                    return 1

        if result.succeeded:
            path = result.save(output_dir)
            console.print(f"[green][+] CV saved to {path}[/green]")
            return 0

        console.print(f"[yellow][!] {result.message}[/yellow]")
        console.print(result.fallback_url or "")
        return 1

    async def extract_resume_file(self, resume_path: Path) -> int:
        """Extract profile fields from a plain-text résumé and print them."""
        text = resume_path.read_text(encoding="utf-8")
        async with GenerationClient(
            api_key=self.credentials[GENERATION_API_KEY] or "",
            config=self.system_params.generation,
            retry_config=self.system_params.retry,
        ) as client:
            result = await extract_resume(text, client, correlation_id=self.correlation_id)

        table = Table(title=f"Résumé ({result.source})")
        table.add_column("field")
        table.add_column("value", overflow="fold")
        table.add_row("name", result.name)
        table.add_row("qualification", result.qualification)
        table.add_row("mobileNumber", result.mobile_number)
        table.add_row("skills", ", ".join(result.skills))
        table.add_row("industries", ", ".join(result.industries))
        console.print(table)
        return 0


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Career guide content session")
    parser.add_argument(
        "--tabs",
        nargs="+",
        default=[],
        help=f"Tabs to load: {', '.join(c.value for c in ContentCategory)}",
    )
    parser.add_argument("--refresh", action="store_true", help="Ignore cached content")
    parser.add_argument(
        "--check-links", action="store_true", help="Probe record links, suggest searches for dead ones"
    )
    parser.add_argument("--cv", type=Path, metavar="DIR", help="Generate CV PDF into DIR")
    parser.add_argument("--resume", type=Path, metavar="FILE", help="Extract fields from a text résumé")
    parser.add_argument("--config", default="config/system_params.json")
    parser.add_argument("--env-file", default=".env")
    return parser.parse_args(argv)


async def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    coordinator = SessionCoordinator(config_path=args.config, env_file=args.env_file)

    if args.resume:
        return await coordinator.extract_resume_file(args.resume)
    if args.cv:
        return await coordinator.build_cv(args.cv)
    return await coordinator.show_tabs(
        args.tabs, refresh=args.refresh, check_links=args.check_links
    )


def cli() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
