"""
Credential Manager Module
Loads the generation API key and the profile API token from .env, prompting
on the console for anything missing.
"""

import os
from pathlib import Path
from typing import Dict, Optional

import structlog
from dotenv import load_dotenv, set_key
from rich.console import Console
from rich.prompt import Prompt

console = Console()
logger = structlog.get_logger(__name__)

GENERATION_API_KEY = "GEMINI_API_KEY"
PROFILE_TOKEN_KEY = "PROFILE_API_TOKEN"


class CredentialManager:
    """Manages credentials with .env storage and CLI prompting."""

    def __init__(self, env_file: Path = Path(".env"), interactive: bool = True):
        """
        Initialize credential manager.

        Args:
            env_file: Path to .env file for credential storage
            interactive: Prompt for missing credentials (False in scripts and tests)
        """
        self.env_file = env_file
        self.interactive = interactive
        self._load_credentials()

    def _load_credentials(self) -> None:
        if self.env_file.exists():
            load_dotenv(self.env_file)
            logger.info("credentials_loaded_from_env", env_file=str(self.env_file))
            self._set_secure_permissions()
        else:
            logger.debug("no_env_file", env_file=str(self.env_file))

    def _set_secure_permissions(self) -> None:
        """Restrict the .env file to its owner (Unix only)."""
        if os.name == "nt":
            return
        try:
            os.chmod(self.env_file, 0o600)
        except OSError as e:
            logger.warning(
                "failed_to_set_permissions", env_file=str(self.env_file), error=str(e)
            )

    def get_credential(
        self,
        key: str,
        prompt_message: str,
        is_password: bool = False,
        required: bool = True,
    ) -> Optional[str]:
        """
        Get credential from environment or prompt user.

        Args:
            key: Environment variable name (e.g., "GEMINI_API_KEY")
            prompt_message: Message to display when prompting
            is_password: Whether to mask input
            required: Whether credential is required

        Returns:
            Credential value or None if optional and not provided

        Raises:
            ValueError: If required credential not provided
        """
        value = os.getenv(key)
        if value:
            logger.debug("credential_found_in_env", key=key)
            return value

        if not self.interactive:
            if required:
                logger.error("required_credential_missing", key=key)
                raise ValueError(f"Required credential not provided: {key}")
            return None

        console.print(f"\n[yellow][*] Credential Required: {key}[/yellow]")
        console.print(f"   {prompt_message}\n")
        value = Prompt.ask("   Enter value", password=is_password)

        if not value and required:
            logger.error("required_credential_not_provided", key=key)
            raise ValueError(f"Required credential not provided: {key}")

        if value:
            self._save_credential(key, value)

        return value or None

    def _save_credential(self, key: str, value: str) -> None:
        set_key(self.env_file, key, value)
        os.environ[key] = value
        console.print(f"   [green][+] Saved {key} to {self.env_file}[/green]\n")
        logger.info("credential_saved", key=key, env_file=str(self.env_file))

    def session_credentials(self) -> Dict[str, Optional[str]]:
        """
        Collect the credentials a content session needs.

        Returns:
            {"GEMINI_API_KEY": ..., "PROFILE_API_TOKEN": ...}; the token may be
            None, in which case profile loading reports "not logged in"

        Raises:
            ValueError: If the generation API key is missing
        """
        return {
            GENERATION_API_KEY: self.get_credential(
                GENERATION_API_KEY,
                "API key for the text-generation endpoint",
                is_password=True,
                required=True,
            ),
            PROFILE_TOKEN_KEY: self.get_credential(
                PROFILE_TOKEN_KEY,
                "Access token from the auth API (leave empty if not logged in)",
                is_password=True,
                required=False,
            ),
        }

    @staticmethod
    def mask_credential(value: str, show_chars: int = 3) -> str:
        """
        Mask credential for display.

        Returns:
            Masked credential (e.g., "abc***")
        """
        if not value or len(value) <= show_chars:
            return "***"
        return f"{value[:show_chars]}{'*' * (len(value) - show_chars)}"
