"""CLI for the quiz rating engine."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Any

import structlog
import typer
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from quiz_rating import __version__
from quiz_rating.core.config import EngineConfig, load_config
from quiz_rating.core.errors import ConfigurationError, QuizRatingError
from quiz_rating.ranking import CompetitiveRatingEngine, create_rating_engine
from quiz_rating.ranking.tiers import rank_progress
from quiz_rating.ranking.types import (
    PerformanceTrend,
    RewardLine,
    SessionOutcome,
    TrendDirection,
)

# Configure structlog
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

app = typer.Typer(
    name="quiz-rating",
    help="Quiz Rating Engine - turn finished quiz sessions into ratings and coin rewards",
    add_completion=False,
)
console = Console()

RESULT_STYLES = {"win": "green", "draw": "yellow", "loss": "red"}
TREND_STYLES = {
    TrendDirection.UP: "green",
    TrendDirection.STABLE: "white",
    TrendDirection.DOWN: "red",
}

ConfigOption = Annotated[
    Path | None, typer.Option("--config", "-c", help="Path to config YAML file")
]
DbOption = Annotated[str | None, typer.Option("--db", help="Database URL (overrides config)")]
DryRunOption = Annotated[
    bool, typer.Option("--dry-run", help="Use in-memory stores, nothing is saved")
]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-V", help="Verbose output")]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"quiz-rating v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option("--version", "-v", callback=version_callback, is_eager=True),
    ] = None,
) -> None:
    """Quiz Rating Engine CLI."""


def _configure_logging(verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
        force=True,
    )


def _load_engine(
    config_path: Path | None,
    db_url: str | None,
    dry_run: bool,
) -> CompetitiveRatingEngine:
    config = load_config(config_path) if config_path else EngineConfig()
    if db_url is not None:
        config.storage.db_url = db_url
    if dry_run:
        console.print("[yellow]DRY RUN MODE - ratings and coins are not saved[/yellow]")
    return create_rating_engine(config, dry_run=dry_run)


def _read_session_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        msg = f"Session file not found: {path}"
        raise FileNotFoundError(msg)
    with path.open() as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Expected a mapping of session fields in {path}",
            "See 'quiz-rating info' for an example session file.",
        )
    return data


def _read_baseline_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        msg = f"Baseline file not found: {path}"
        raise FileNotFoundError(msg)
    with path.open() as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Expected a mapping of category to rating in {path}",
            "Example: 'tech: 1400'",
        )
    return data


def _format_trend(result: PerformanceTrend) -> str:
    style = TREND_STYLES[result.direction]
    return f"[{style}]{result.direction.value} ({result.change:+.0f})[/{style}]"


def _handle_error(e: Exception, verbose: bool = False) -> typer.Exit:
    if isinstance(e, FileNotFoundError):
        console.print(f"[red]Error:[/red] {escape(str(e))}")
    elif isinstance(e, QuizRatingError):
        console.print(f"[red]{escape(str(e))}")
    else:
        console.print(f"[red]Unexpected error:[/red] {escape(str(e))}")
        if verbose:
            console.print_exception()
    return typer.Exit(1)


def _print_outcome(outcome: SessionOutcome) -> None:
    result = outcome.outcome.result.value
    style = RESULT_STYLES[result]
    change = outcome.delta.elo_change

    console.print(
        f"[bold {style}]{result.upper()}[/bold {style}]  "
        f"score {outcome.outcome.performance_score:.1f} - {outcome.description}"
    )
    console.print(f"Rating change: [bold]{change:+d}[/bold] (raw {outcome.delta.raw_change:+.2f})")

    breakdown = Table(title="Modifiers", show_header=True)
    breakdown.add_column("Factor")
    breakdown.add_column("Value", justify="right")
    b = outcome.delta.breakdown
    breakdown.add_row("Base change", f"{b.base_change:+.0f}")
    breakdown.add_row("Performance", f"x{b.performance_modifier:.2f}")
    breakdown.add_row("Difficulty", f"x{b.difficulty_modifier:.2f}")
    breakdown.add_row("Rank", f"x{b.rank_modifier:.2f}")
    breakdown.add_row("Streak", f"x{b.streak_modifier:.2f}")
    console.print(breakdown)

    _print_rewards(outcome.rewards)


def _print_rewards(rewards: list[RewardLine], failed: list[RewardLine] | None = None) -> None:
    table = Table(title="Rewards", show_header=True)
    table.add_column("Reward")
    table.add_column("Kind")
    table.add_column("Coins", justify="right")
    for line in rewards:
        marker = " [red](failed)[/red]" if failed and line in failed else ""
        table.add_row(f"{line.label}{marker}", line.kind.value, str(line.amount))
    console.print(table)


@app.command()
def preview(
    session_path: Annotated[Path, typer.Argument(help="Path to session YAML/JSON file")],
    config_path: ConfigOption = None,
    db_url: DbOption = None,
    dry_run: DryRunOption = False,
    verbose: VerboseOption = False,
) -> None:
    """Compute a session's outcome without applying it.

    Args:
        session_path: Path to the session record.
        config_path: Optional config file.
        db_url: Database URL override.
        dry_run: Use in-memory stores.
        verbose: Enable verbose logging.
    """
    _configure_logging(verbose)
    try:
        engine = _load_engine(config_path, db_url, dry_run)
        session = engine.load_session(_read_session_file(session_path))
        _print_outcome(engine.compute_session_outcome(session))
    except Exception as e:
        raise _handle_error(e, verbose) from e


@app.command()
def play(
    session_path: Annotated[Path, typer.Argument(help="Path to session YAML/JSON file")],
    config_path: ConfigOption = None,
    db_url: DbOption = None,
    dry_run: DryRunOption = False,
    verbose: VerboseOption = False,
) -> None:
    """Apply a finished session: update the rating and grant coins.

    Args:
        session_path: Path to the session record.
        config_path: Optional config file.
        db_url: Database URL override.
        dry_run: Use in-memory stores.
        verbose: Enable verbose logging.
    """
    _configure_logging(verbose)
    try:
        engine = _load_engine(config_path, db_url, dry_run)
        session = engine.load_session(_read_session_file(session_path))
        result = engine.process_session(session)
    except Exception as e:
        raise _handle_error(e, verbose) from e

    _print_outcome(result.outcome)
    rating = result.rating
    progress = rank_progress(rating.new_rating or 0, result.outcome.delta.elo_change)
    console.print(
        f"[bold]{rating.category}[/bold]: {rating.previous_rating:.0f} -> "
        f"{rating.new_rating:.0f} ({progress.rank.name}, {progress.league_points} LP)"
    )
    console.print(f"Overall rating: {rating.overall:.0f}")
    console.print(f"Coins granted: {result.grants.total_granted}")
    if not result.grants.ok:
        failed_count = len(result.grants.failed)
        console.print(f"[yellow]{failed_count} reward(s) could not be granted[/yellow]")
        _print_rewards(result.outcome.rewards, result.grants.failed)
    console.print(f"Balance: {engine.currency.balance()}")


@app.command()
def ratings(
    config_path: ConfigOption = None,
    db_url: DbOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Show category ratings with their rank tiers and 7-day trend.

    Args:
        config_path: Optional config file.
        db_url: Database URL override.
        verbose: Enable verbose logging.
    """
    _configure_logging(verbose)
    try:
        engine = _load_engine(config_path, db_url, dry_run=False)
        snapshot = engine.ledger.snapshot()
    except Exception as e:
        raise _handle_error(e, verbose) from e

    if not snapshot.by_category:
        console.print("[yellow]No ratings yet - play a session first.[/yellow]")
        return

    table = Table(title="Ratings", show_header=True)
    table.add_column("Category")
    table.add_column("Rating", justify="right")
    table.add_column("Rank")
    table.add_column("W/D/L", justify="right")
    table.add_column("Peak", justify="right")
    table.add_column("Trend (7d)", justify="right")
    ranked = sorted(snapshot.by_category.items(), key=lambda x: x[1], reverse=True)
    for category, rating in ranked:
        progress = rank_progress(rating)
        stats = engine.ledger.stats(category)
        peak = f"{stats.peak_rating:.0f}" if stats.peak_rating is not None else "-"
        table.add_row(
            category,
            f"{rating:.0f}",
            f"{progress.rank.name} ({progress.league_points} LP)",
            f"{stats.wins}/{stats.draws}/{stats.losses}",
            peak,
            _format_trend(engine.ledger.performance_trend(category=category)),
        )
    console.print(table)
    console.print(f"Overall: [bold]{snapshot.overall:.0f}[/bold]")


@app.command()
def history(
    category: Annotated[
        str | None, typer.Option("--category", help="Only show one category")
    ] = None,
    limit: Annotated[int, typer.Option("--limit", help="Number of entries to show")] = 20,
    config_path: ConfigOption = None,
    db_url: DbOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Show recent rating changes.

    Args:
        category: Optional category filter.
        limit: Maximum entries to show.
        config_path: Optional config file.
        db_url: Database URL override.
        verbose: Enable verbose logging.
    """
    _configure_logging(verbose)
    try:
        engine = _load_engine(config_path, db_url, dry_run=False)
        key = category.strip().lower() if category else None
        records = engine.ledger.store.history(key, limit=limit)
    except Exception as e:
        raise _handle_error(e, verbose) from e

    table = Table(title="History", show_header=True)
    table.add_column("When")
    table.add_column("Category")
    table.add_column("Result")
    table.add_column("Change", justify="right")
    table.add_column("Rating", justify="right")
    for record in records:
        style = RESULT_STYLES.get(record.result, "white")
        table.add_row(
            record.timestamp.strftime("%Y-%m-%d %H:%M"),
            record.category,
            f"[{style}]{record.result}[/{style}]",
            f"{record.change:+d}",
            f"{record.rating:.0f}",
        )
    console.print(table)


@app.command()
def trend(
    days: Annotated[int, typer.Option("--days", min=1, help="Window length in days")] = 7,
    category: Annotated[
        str | None, typer.Option("--category", help="Only consider one category")
    ] = None,
    config_path: ConfigOption = None,
    db_url: DbOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Show whether ratings moved up, down or held steady recently.

    Args:
        days: Window length in days.
        category: Optional category filter.
        config_path: Optional config file.
        db_url: Database URL override.
        verbose: Enable verbose logging.
    """
    _configure_logging(verbose)
    try:
        engine = _load_engine(config_path, db_url, dry_run=False)
        result = engine.ledger.performance_trend(days=days, category=category)
    except Exception as e:
        raise _handle_error(e, verbose) from e

    scope = category.strip().lower() if category else "all categories"
    console.print(
        f"Trend over {days} day(s) for {scope}: {_format_trend(result)} "
        f"across {result.sessions} session(s)"
    )


@app.command()
def seed(
    baseline_path: Annotated[
        Path, typer.Argument(help="YAML mapping of category to starting rating")
    ],
    config_path: ConfigOption = None,
    db_url: DbOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Set starting ratings from a baseline assessment.

    Args:
        baseline_path: Path to the baseline file.
        config_path: Optional config file.
        db_url: Database URL override.
        verbose: Enable verbose logging.
    """
    _configure_logging(verbose)
    try:
        baseline = _read_baseline_file(baseline_path)
        engine = _load_engine(config_path, db_url, dry_run=False)
        snapshot = engine.ledger.seed_from_baseline(baseline)
    except Exception as e:
        raise _handle_error(e, verbose) from e

    console.print(f"[green]Seeded {len(baseline)} baseline rating(s).[/green]")
    console.print(f"Overall: [bold]{snapshot.overall:.0f}[/bold]")


@app.command()
def reset(
    yes: Annotated[bool, typer.Option("--yes", help="Confirm the reset")] = False,
    category: Annotated[
        str | None, typer.Option("--category", help="Only reset one category")
    ] = None,
    config_path: ConfigOption = None,
    db_url: DbOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Reseed every category rating (or one) to the default.

    Args:
        yes: Required confirmation flag.
        category: Reset only this category, keeping its history.
        config_path: Optional config file.
        db_url: Database URL override.
        verbose: Enable verbose logging.
    """
    _configure_logging(verbose)
    if not yes:
        console.print("[red]Refusing to reset without --yes[/red]")
        raise typer.Exit(1)
    try:
        engine = _load_engine(config_path, db_url, dry_run=False)
        if category is None:
            engine.ledger.reset()
            console.print("[green]All ratings reset.[/green]")
            return
        found = engine.ledger.reset_category(category)
    except Exception as e:
        raise _handle_error(e, verbose) from e

    if found:
        console.print(f"[green]Rating for {escape(category.strip().lower())} reset.[/green]")
    else:
        console.print(f"[yellow]No rating for {escape(category)} - nothing to reset.[/yellow]")


@app.command()
def validate(
    config_path: Annotated[Path, typer.Argument(help="Path to config YAML file")],
) -> None:
    """Validate a configuration file.

    Args:
        config_path: Path to YAML configuration file.
    """
    try:
        config = load_config(config_path)
        console.print("[green]Configuration is valid![/green]")
        console.print(f"  Initial rating: {config.rating.initial_rating:.0f}")
        console.print(
            f"  Win/draw thresholds: {config.rating.win_threshold:.0f}"
            f"/{config.rating.draw_threshold:.0f}"
        )
        console.print(f"  Caps: +{config.rating.max_gain}/-{config.rating.max_loss}")
        console.print(f"  Database: {config.storage.get_db_url()}")

    except FileNotFoundError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from e
    except ConfigurationError as e:
        console.print(f"[red]{escape(str(e))}")
        raise typer.Exit(1) from e
    except Exception as e:
        console.print(f"[red]Validation error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from e


@app.command()
def info() -> None:
    """Show tool information and example commands."""
    console.print("[bold]Quiz Rating Engine[/bold]")
    console.print(f"Version: {__version__}\n")

    console.print("[bold]Example session file (session.yaml):[/bold]")
    console.print("  category: tech")
    console.print("  difficulty: medium")
    console.print("  questions_answered: 20")
    console.print("  correct_answers: 18")
    console.print("  time_spent_seconds: 240")
    console.print("  total_time_budget_seconds: 300\n")

    console.print("[bold]Example Commands:[/bold]")
    console.print("  # Preview without saving")
    console.print("  quiz-rating preview session.yaml --dry-run\n")

    console.print("  # Apply a session")
    console.print("  quiz-rating play session.yaml\n")

    console.print("  # Show ratings and recent changes")
    console.print("  quiz-rating ratings")
    console.print("  quiz-rating history --category tech")
    console.print("  quiz-rating trend --days 7\n")

    console.print("  # Start from a baseline assessment, or reset one category")
    console.print("  quiz-rating seed baseline.yaml")
    console.print("  quiz-rating reset --category tech --yes\n")

    console.print("  # Use a custom database")
    console.print("  quiz-rating play session.yaml --db sqlite:///ratings.db")


if __name__ == "__main__":
    app()
