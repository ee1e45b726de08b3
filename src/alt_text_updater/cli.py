"""
CLI for the alt text updater.

A single command: run the job once, live or as a dry run.
"""

import asyncio

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from .config import Settings
from .logging import setup_logging

app = typer.Typer(
    name="alt-text-updater",
    help="Generate missing image alt text for a Shopify store",
)
console = Console()


@app.command()
def run(
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Generate alt text and write the report, but do not update the store",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Find images without alt text, generate it and write it back."""
    settings = Settings()
    log_level = "DEBUG" if verbose else settings.log_level
    setup_logging(level=log_level, json_output=settings.log_json, log_file=settings.log_file)
    logger.debug("CLI initialized with log level: {}", log_level)

    from .pipeline import run_alt_text_update

    missing = settings.missing_secrets()
    if missing:
        logger.warning("Missing configuration: {} - the run will fail", ", ".join(missing))
        console.print(f"[red]Warning: {', '.join(missing)} not set. The run will fail.[/]")

    mode = "dry run" if dry_run else "live"
    console.print(f"[bold blue]Alt Text Updater ({mode})[/]")

    result = asyncio.run(run_alt_text_update(settings, dry_run=dry_run))
    report = result.report
    updates = report.updates

    table = Table(title="Run Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Batches", str(len(report.batches)))
    table.add_row("Images processed", str(len(updates)))
    table.add_row("Alt text generated", str(sum(1 for u in updates if u.alt_tag)))
    table.add_row("Failed", str(sum(1 for u in updates if u.error)))
    table.add_row("Report", str(result.report_path) if result.report_path else "[red]NOT WRITTEN[/]")
    console.print(table)

    if not result.succeeded:
        console.print(f"[red]Run failed: {result.error}[/]")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
