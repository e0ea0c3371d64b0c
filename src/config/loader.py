"""YAML configuration loader for the diversification pipeline."""

import hashlib
from pathlib import Path

import structlog
import yaml
from pydantic import ValidationError

from src.config.schemas.pipeline import DiversificationConfig


logger = structlog.get_logger()


class ConfigValidationError(Exception):
    """Raised when a configuration file cannot be loaded or validated."""

    def __init__(self, errors: list[dict[str, str]], file_path: str) -> None:
        """Initialize the error.

        Args:
            errors: List of validation error details (loc, msg, type).
            file_path: Path to the file that failed validation.
        """
        self.errors = errors
        self.file_path = file_path
        super().__init__(f"Validation failed for {file_path}: {len(errors)} errors")


def _errors_from_validation(error: ValidationError) -> list[dict[str, str]]:
    """Flatten a pydantic ValidationError into loc/msg/type records."""
    return [
        {
            "loc": ".".join(str(loc) for loc in err["loc"]) or "config",
            "msg": err["msg"],
            "type": err["type"],
        }
        for err in error.errors()
    ]


def load_diversification_config(file_path: Path) -> DiversificationConfig:
    """Load and validate a diversification config from a YAML file.

    An empty file yields the default configuration.

    Args:
        file_path: Path to the YAML file.

    Returns:
        Validated, immutable DiversificationConfig.

    Raises:
        ConfigValidationError: If the file is missing, unparsable, or invalid.
    """
    log = logger.bind(component="config", file_path=str(file_path))

    try:
        content_bytes = file_path.read_bytes()
    except FileNotFoundError as e:
        log.error("config_file_not_found", error=str(e))
        raise ConfigValidationError(
            [{"loc": "file", "msg": str(e), "type": "file_not_found"}],
            str(file_path),
        ) from e

    checksum = hashlib.sha256(content_bytes).hexdigest()

    try:
        parsed = yaml.safe_load(content_bytes.decode("utf-8")) or {}
    except yaml.YAMLError as e:
        log.error("config_yaml_parse_error", error=str(e))
        raise ConfigValidationError(
            [{"loc": "yaml", "msg": str(e), "type": "yaml_parse_error"}],
            str(file_path),
        ) from e

    try:
        config = DiversificationConfig.model_validate(parsed)
    except ValidationError as e:
        errors = _errors_from_validation(e)
        log.error(
            "config_validation_failed",
            validation_error_count=len(errors),
            errors=errors,
        )
        raise ConfigValidationError(errors, str(file_path)) from e

    log.info("config_loaded", file_sha256=checksum, version=config.version)
    return config
