"""CLI commands for the feed diversification engine."""

import json
import logging
import sys
from datetime import UTC, datetime
from pathlib import Path

import click
import structlog
from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

from src.config.error_hints import format_validation_error
from src.config.loader import ConfigValidationError, load_diversification_config
from src.config.schemas.pipeline import DiversificationConfig
from src.content.models import FeedEntry, ScoredContent, StoredContent, UserPreferences
from src.observability.logging import (
    bind_request_context,
    clear_request_context,
    configure_logging,
)
from src.orchestrator.orchestrator import DiversificationOrchestrator
from src.providers.memory import (
    InMemoryHistoryProvider,
    LoggingMetricsSink,
    StaticPreferenceProvider,
    StaticTrendingProvider,
)
from src.settings import get_settings


logger = structlog.get_logger()

COMPONENT_CLI = "cli"


class CandidateRecord(BaseModel):
    """One candidate as read from a JSON file."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    content: StoredContent
    score: float


_CANDIDATES = TypeAdapter(list[CandidateRecord])
_HISTORY = TypeAdapter(list[FeedEntry])
_TRENDING = TypeAdapter(dict[str, float])


def _read_json(path: Path, adapter: TypeAdapter, label: str) -> object:
    """Read and validate a JSON file, exiting with a readable error."""
    try:
        return adapter.validate_json(path.read_bytes())
    except ValidationError as e:
        click.echo(f"Invalid {label} file {path}:", err=True)
        for err in e.errors():
            location = ".".join(str(loc) for loc in err["loc"]) or label
            click.echo(f"  - {location}: {err['msg']}", err=True)
        sys.exit(1)


def _load_config(config_path: Path | None) -> DiversificationConfig:
    if config_path is None:
        return DiversificationConfig()
    try:
        return load_diversification_config(config_path)
    except ConfigValidationError as e:
        _echo_config_errors(e)
        sys.exit(1)


def _echo_config_errors(error: ConfigValidationError) -> None:
    click.echo("Configuration validation failed:", err=True)
    for detail in error.errors:
        formatted = format_validation_error(
            location=detail["loc"],
            message=detail["msg"],
            error_type=detail.get("type", "unknown"),
            include_hint=True,
        )
        click.echo(f"  - {formatted}", err=True)


@click.group()
@click.version_option(version="0.1.0")
def cli() -> None:
    """Feed diversification engine CLI."""


@cli.command()
@click.option(
    "--candidates",
    "candidates_path",
    required=True,
    type=click.Path(exists=True, path_type=Path),
    help="JSON list of {content, score} candidate records.",
)
@click.option(
    "--history",
    "history_path",
    type=click.Path(exists=True, path_type=Path),
    help="JSON list of feed history entries.",
)
@click.option(
    "--preferences",
    "preferences_path",
    type=click.Path(exists=True, path_type=Path),
    help="JSON user preferences object.",
)
@click.option(
    "--trending",
    "trending_path",
    type=click.Path(exists=True, path_type=Path),
    help="JSON object mapping content id to trending score.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    help="Path to a diversification YAML config (default: FEED_CONFIG_PATH).",
)
@click.option("--user-id", default="cli-user", show_default=True, help="User id.")
@click.option(
    "--feed-size",
    type=click.IntRange(min=0),
    help="Maximum feed size (default: FEED_DEFAULT_FEED_SIZE).",
)
@click.option(
    "--now",
    "now_iso",
    type=str,
    help="Reference time as ISO 8601, UTC when naive (default: now).",
)
@click.option(
    "--json-logs/--no-json-logs",
    default=None,
    help="Use JSON format for logs (default: FEED_JSON_LOGS).",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose logging.",
)
def rank(  # noqa: PLR0913
    candidates_path: Path,
    history_path: Path | None,
    preferences_path: Path | None,
    trending_path: Path | None,
    config_path: Path | None,
    user_id: str,
    feed_size: int | None,
    now_iso: str | None,
    json_logs: bool | None,
    verbose: bool,
) -> None:
    """Diversify a candidate feed and print the result as JSON."""
    settings = get_settings()
    level = logging.DEBUG if verbose else settings.log_level_value()
    configure_logging(
        level=level,
        json_format=settings.json_logs if json_logs is None else json_logs,
    )
    bind_request_context(user_id)
    log = logger.bind(component=COMPONENT_CLI, command="rank")

    config = _load_config(config_path or settings.config_path)
    if settings.max_history_size is not None:
        config = config.model_copy(
            update={"max_history_size": settings.max_history_size}
        )

    now = None
    if now_iso is not None:
        try:
            now = datetime.fromisoformat(now_iso)
        except ValueError:
            click.echo(f"Error: Invalid --now timestamp '{now_iso}'", err=True)
            sys.exit(1)
        if now.tzinfo is None:
            now = now.replace(tzinfo=UTC)

    records = _read_json(candidates_path, _CANDIDATES, "candidates")
    history = _read_json(history_path, _HISTORY, "history") if history_path else []
    preferences = None
    if preferences_path:
        preferences = _read_json(
            preferences_path, TypeAdapter(UserPreferences), "preferences"
        )
    trending = _read_json(trending_path, _TRENDING, "trending") if trending_path else {}

    orchestrator = DiversificationOrchestrator(
        InMemoryHistoryProvider({user_id: history}),
        preference_provider=StaticPreferenceProvider(
            {user_id: preferences} if preferences is not None else {}
        ),
        trending_provider=StaticTrendingProvider(trending),
        metrics_sink=LoggingMetricsSink(),
        config=config,
    )
    candidates = [ScoredContent(content=r.content, score=r.score) for r in records]
    size = settings.default_feed_size if feed_size is None else feed_size

    log.info(
        "rank_started",
        candidates_path=str(candidates_path),
        candidate_count=len(candidates),
        history_count=len(history),
        feed_size=size,
    )
    try:
        result = orchestrator.diversify_feed(user_id, candidates, size, now=now)
    finally:
        clear_request_context()

    click.echo(json.dumps(result.to_dict(), indent=2, default=str))


@cli.command("validate-config")
@click.option(
    "--config",
    "config_path",
    required=True,
    type=click.Path(exists=True, path_type=Path),
    help="Path to a diversification YAML config.",
)
def validate_config(config_path: Path) -> None:
    """Validate a configuration file without ranking anything."""
    configure_logging(json_format=False, level=logging.WARNING)

    try:
        config = load_diversification_config(config_path)
    except ConfigValidationError as e:
        _echo_config_errors(e)
        sys.exit(1)

    quotas = config.balancing.default_quotas
    click.echo("Configuration is valid!")
    click.echo(f"  Version: {config.version}")
    click.echo(
        f"  Quotas: fresh={quotas.fresh} familiar={quotas.familiar} "
        f"discovery={quotas.discovery}"
    )
    click.echo(f"  Max history size: {config.max_history_size}")


if __name__ == "__main__":
    cli()
