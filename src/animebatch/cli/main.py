"""
AnimeBatch CLI - Main entry point.

Runs one export batch: export → FTP upload → webhook notification.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.traceback import install as install_rich_traceback

from animebatch import __app_name__, __version__
from animebatch.core.config import AppConfig, load_app_config
from animebatch.core.errors import ConfigError
from animebatch.core.export.progress import ProgressEvent
from animebatch.core.logging import setup_logging
from animebatch.core.orchestrator import Pipeline, PipelineResult, resolve_limit

install_rich_traceback(show_locals=False, width=120)

console = Console()
err_console = Console(stderr=True)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

app = typer.Typer(
    name=__app_name__,
    help="Run an AnimeDekho bulk export and ship the SQL dump",
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold cyan]{__app_name__}[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit()


def _echo_progress(event: ProgressEvent) -> None:
    console.print(event.message, markup=False, highlight=False)


def _print_banner(limit: int) -> None:
    console.print("=" * 40)
    console.print("  [bold]AnimeDekho Auto-Scraper[/bold]")
    console.print("=" * 40)
    console.print(f"Time: {datetime.now(timezone.utc).isoformat()}")
    console.print(f"Limit: {limit if limit else 'all'}")
    console.print("-" * 40)
    console.print()


def _print_outcome(result: PipelineResult) -> None:
    console.print()
    if result.success:
        lines = ["[bold green]All tasks completed successfully[/bold green]\n"]
        if result.export:
            lines.append(f"File: [cyan]{escape(str(result.export.file))}[/cyan]")
        if result.remote_path:
            lines.append(f"Uploaded to: [cyan]{escape(result.remote_path)}[/cyan]")
        elif result.upload_error:
            lines.append(f"[yellow]Upload failed: {escape(result.upload_error)}[/yellow]")
        console.print(Panel.fit("\n".join(lines), border_style="green"))
    else:
        err_console.print(Panel.fit(
            f"[bold red]Error:[/bold red] {escape(str(result.error))}",
            border_style="red",
        ))


def _load_config(config_path: Optional[Path]) -> AppConfig:
    try:
        return load_app_config(config_path)
    except ConfigError as e:
        err_console.print(f"[red]Error loading configuration:[/red] {escape(str(e))}")
        if e.details:
            err_console.print(f"[dim]{escape(e.details)}[/dim]")
        raise typer.Exit(1)


@app.command()
def main(
    limit: Optional[int] = typer.Argument(
        None,
        min=0,
        help="Items to export (0 = all). Defaults to EXPORT_LIMIT.",
        show_default=False,
    ),
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="YAML configuration file",
    ),
    env_file: Optional[Path] = typer.Option(
        None,
        "--env-file",
        help="Environment file to load (default: .env)",
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Log level (DEBUG, INFO, WARNING, ERROR)",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Write JSON log lines to this file",
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """Export anime to a SQL batch file, upload it and send a notification.

    Examples:
        animebatch            # use EXPORT_LIMIT (default: all)
        animebatch 0          # export everything
        animebatch 100        # export 100 anime
    """
    # Real environment variables take precedence over the file
    load_dotenv(env_file if env_file else Path(".env"))

    config = _load_config(config_path)

    logging_config = config.logging
    level = (log_level or logging_config.level).upper()
    if level not in LOG_LEVELS:
        err_console.print(f"[red]Unknown log level:[/red] {escape(str(log_level))}")
        raise typer.Exit(1)

    setup_logging(
        level=level,
        log_file=log_file or logging_config.file,
        json_format=logging_config.json_format,
        rich_console=logging_config.rich_console,
    )

    run_limit = resolve_limit(limit, config.export.default_limit)
    _print_banner(run_limit)

    pipeline = Pipeline.from_config(config, on_progress=_echo_progress)
    result = asyncio.run(pipeline.run(run_limit))

    _print_outcome(result)
    raise typer.Exit(result.exit_code)


# =============================================================================
# Entry Point
# =============================================================================


def run() -> None:
    """Run the CLI application."""
    app()


if __name__ == "__main__":
    run()
