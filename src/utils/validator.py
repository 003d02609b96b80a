"""
Configuration Validator Module

Checks config/system_params.json against its JSON Schema before the
pydantic model loads it, so a typo produces a readable list of problems
instead of a single stack trace.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import structlog
from jsonschema import Draft7Validator, FormatChecker, ValidationError
from rich.console import Console

from src.utils.errors import ConfigurationError

console = Console()
logger = structlog.get_logger(__name__)

DEFAULT_SCHEMA_DIR = Path(__file__).parent.parent / "schemas"
SYSTEM_PARAMS_SCHEMA = "system_params_schema.json"


class ConfigValidator:
    """Validates configuration files against JSON schemas."""

    def __init__(self, schema_dir: Path = DEFAULT_SCHEMA_DIR):
        """
        Initialize validator with schema directory.

        Args:
            schema_dir: Path to directory containing JSON schemas
        """
        self.schema_dir = schema_dir
        self._schemas: Dict[str, Dict[str, Any]] = {}

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Load a JSON schema, caching it per validator.

        Raises:
            ConfigurationError: If schema file not found or invalid
        """
        if schema_name in self._schemas:
            return self._schemas[schema_name]

        schema_path = self.schema_dir / schema_name
        if not schema_path.exists():
            logger.error("schema_not_found", schema_path=str(schema_path))
            raise ConfigurationError(f"Schema file not found: {schema_path}")

        try:
            schema = json.loads(schema_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            logger.error("schema_invalid_json", schema_name=schema_name, error=str(e))
            raise ConfigurationError(f"Invalid JSON in schema {schema_name}: {e}") from e

        self._schemas[schema_name] = schema
        logger.debug("schema_loaded", schema_name=schema_name)
        return schema

    def validate(self, config: Dict[str, Any], schema_name: str) -> None:
        """
        Validate configuration against schema.

        Raises:
            ConfigurationError: If validation fails, listing every problem found
        """
        validator = Draft7Validator(
            self.load_schema(schema_name), format_checker=FormatChecker()
        )
        errors = sorted(validator.iter_errors(config), key=lambda e: list(e.absolute_path))
        if not errors:
            logger.info("validation_passed", schema_name=schema_name)
            return

        logger.warning("validation_failed", schema_name=schema_name, error_count=len(errors))
        raise ConfigurationError("\n".join(self._describe_errors(errors, schema_name)))

    def validate_file(self, config_path: Path, schema_name: str) -> Dict[str, Any]:
        """
        Load and validate a configuration file.

        Returns:
            Validated configuration dictionary

        Raises:
            ConfigurationError: If file not found, not JSON, or invalid
        """
        if not config_path.exists():
            logger.error("config_file_not_found", config_path=str(config_path))
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            config = json.loads(config_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            logger.error("config_invalid_json", config_path=str(config_path), error=str(e))
            raise ConfigurationError(
                f"Invalid JSON in {config_path.name}: {e}\n"
                f"Check for trailing commas, missing quotes, or invalid syntax."
            ) from e

        self.validate(config, schema_name)
        return config

    @staticmethod
    def _describe_errors(errors: List[ValidationError], schema_name: str) -> List[str]:
        """Turn jsonschema errors into one readable line each."""
        messages = [f"[X] Configuration validation failed for {schema_name}:"]

        for error in errors:
            path = " -> ".join(str(p) for p in error.absolute_path) or "(root)"
            if error.validator == "type":
                hint = f" (expected {error.validator_value})"
            elif error.validator == "enum":
                hint = f" (allowed: {error.validator_value})"
            elif error.validator == "additionalProperties":
                hint = " (unknown setting; check spelling)"
            else:
                hint = ""
            messages.append(f"  * {path}: {error.message}{hint}")

        return messages

    def validate_system_params(
        self, system_params_path: Optional[Path] = None
    ) -> Dict[str, Any]:
        """
        Validate the system parameters file if one is present.

        Returns:
            Validated configuration dictionary, or {} when no file exists
            (defaults apply)

        Raises:
            ConfigurationError: If validation fails
        """
        if system_params_path is None or not system_params_path.exists():
            console.print("[dim][i] No system parameters file found, using defaults[/dim]")
            return {}

        config = self.validate_file(system_params_path, SYSTEM_PARAMS_SCHEMA)
        console.print("[green][+] System parameters valid[/green]")
        return config
