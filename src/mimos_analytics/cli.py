"""mimos-analytics CLI: inspect configuration and send a test event."""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="mimos-analytics",
    help="Inspect mimos-analytics configuration and check delivery to the analytics service.",
    no_args_is_help=True,
)

console = Console()


def _version_callback(value: bool | None) -> None:
    if value:
        import mimos_analytics

        console.print(f"mimos-analytics {mimos_analytics.__version__}")
        raise typer.Exit()


def _mask(secret: str) -> str:
    if len(secret) <= 4:
        return "****"
    return f"{secret[:4]}{'*' * (len(secret) - 4)}"


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    log_level: str = typer.Option(
        "WARNING",
        "--log-level",
        help="Minimum log level printed to stderr.",
    ),
) -> None:
    """Inspect mimos-analytics configuration and check delivery.

    Commands:
        config  - Show the resolved client configuration
        ping    - Send one tool_call test event
    """
    from mimos_analytics.logging import configure_logging

    configure_logging(log_level)


@app.command("config")
def show_config(
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to mimos-analytics.yaml configuration file.",
    ),
    frontend: bool = typer.Option(
        False,
        "--frontend",
        help="Resolve the frontend client configuration (no api key).",
    ),
) -> None:
    """Show the resolved client configuration."""
    from mimos_analytics.config import (
        BACKEND_METRICS_PATH,
        FRONTEND_METRICS_PATH,
        AnalyticsConfig,
        FrontendConfig,
        load_config,
        metrics_url,
    )

    model_class = FrontendConfig if frontend else AnalyticsConfig
    try:
        cfg = load_config(model_class, config)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    path = FRONTEND_METRICS_PATH if frontend else BACKEND_METRICS_PATH

    table = Table(title="Frontend analytics" if frontend else "Backend analytics")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("endpoint", metrics_url(cfg.base_url, path))
    table.add_row("project_id", cfg.project_id)
    if isinstance(cfg, AnalyticsConfig):
        table.add_row("api_key", _mask(cfg.api_key))
    table.add_row("timeout_ms", str(cfg.timeout_ms))
    table.add_row("disabled", str(cfg.disabled))
    console.print(table)


@app.command("ping")
def ping(
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to mimos-analytics.yaml configuration file.",
    ),
    tool: str = typer.Option(
        "mimos_analytics.ping",
        "--tool",
        help="Tool name reported in the test event.",
    ),
) -> None:
    """Send one tool_call test event to the backend endpoint.

    Delivery problems are logged, not raised; run with --log-level ERROR
    to see them.
    """
    from mimos_analytics.client import AnalyticsClient
    from mimos_analytics.config import AnalyticsConfig, load_config

    try:
        cfg = load_config(AnalyticsConfig, config)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    analytics = AnalyticsClient(cfg)
    if analytics.is_disabled():
        console.print("[yellow]Analytics disabled, nothing sent.[/yellow]")
        return

    asyncio.run(analytics.track_success(tool, 0))
    console.print(f"Sent tool_call event for [cyan]{tool}[/cyan] to {analytics.metrics_url}")


def cli() -> None:
    """Run the CLI application."""
    app()


if __name__ == "__main__":
    cli()
