# ABOUTME: Main CLI application entry point using asyncclick for native async support
# ABOUTME: Provides the scrape command plus a logging status helper

from pathlib import Path

import asyncclick as click
from rich.console import Console
from rich.panel import Panel

from town_scraper.config import Config, get_config
from town_scraper.core.models import ScrapeResult
from town_scraper.core.pipeline import TownScrapePipeline, save_result
from town_scraper.extraction.base import ScrapeError
from town_scraper.utils.logging import (
    LoggingMode,
    configure_logging,
    create_smart_progress,
    get_logging_status,
    with_pipeline_context,
)
from town_scraper.utils.rich_tables import (
    create_logging_status_table,
    create_scrape_summary_table,
    create_towns_table,
    print_rich_table,
)

console = Console()


def _build_config(url: str | None, concurrency: int | None, headed: bool) -> Config:
    """Apply CLI overrides on top of the environment-driven config."""
    overrides: dict[str, object] = {}
    if url:
        overrides["map_url"] = url
    if concurrency:
        overrides["concurrency"] = concurrency
    if headed:
        overrides["headless"] = False
    config = get_config()
    return config.model_copy(update=overrides) if overrides else config


async def _run_pipeline(config: Config, json_output: bool) -> ScrapeResult:
    if json_output:
        return await TownScrapePipeline(config=config).run()

    _, _, tracker = create_smart_progress(console, f"🗺️ Loading {config.map_url}")

    def on_marker(done: int, total: int) -> None:
        tracker.update(f"🖱️ Reading marker popups {done}/{total}")

    with tracker:
        return await TownScrapePipeline(config=config, progress_callback=on_marker).run()


@click.command()
@click.option("--url", help="Map URL to scrape (defaults to TOWN_SCRAPER_MAP_URL)")
@click.option(
    "--output", "-o", type=click.Path(dir_okay=False, path_type=Path), help="Where to write the towns JSON artifact"
)
@click.option("--concurrency", type=click.IntRange(1, 64), help="Marker workers when clicking popups")
@click.option("--headed", is_flag=True, help="Show the browser window")
@click.option("--show", "show_rows", default=50, show_default=True, help="Towns to list in the results table")
@click.pass_context
async def scrape(ctx, url: str | None, output: Path | None, concurrency: int | None, headed: bool, show_rows: int):
    """
    🏰 Scrape town records from the nations map.

    Reads marker data from the page's own objects when available, otherwise
    clicks every marker and parses its popup. Writes a JSON artifact.
    """
    exit_code = await _scrape_async(url, output, concurrency, headed, show_rows, ctx.obj["json_output"])
    if exit_code:
        ctx.exit(exit_code)


async def _scrape_async(
    url: str | None, output: Path | None, concurrency: int | None, headed: bool, show_rows: int, json_output: bool
) -> int:
    config = _build_config(url, concurrency, headed)
    output_path = output or config.output_path

    with with_pipeline_context("town_scrape", url=config.map_url) as logger:
        logger.info("Starting scrape", output=str(output_path), concurrency=config.concurrency)

        if not json_output:
            console.print(
                Panel.fit(
                    f"🗺️ [bold cyan]Town Scraper[/bold cyan]\nMap: {config.map_url}",
                    border_style="magenta",
                )
            )

        try:
            result = await _run_pipeline(config, json_output)
        except ScrapeError as e:
            logger.error("Scrape failed", error=str(e), error_type=type(e).__name__)
            if not json_output:
                console.print(f"[red]❌ {e}[/red]")
            return 1

        save_result(result, output_path)
        logger.info("Wrote towns artifact", path=str(output_path), towns=len(result.towns))

        if not json_output:
            if result.stats:
                print_rich_table(console, create_scrape_summary_table(result.stats, str(output_path)))
            if show_rows > 0 and result.towns:
                print_rich_table(console, create_towns_table(result.towns, limit=show_rows))
            console.print(f"✅ Wrote [bold green]{len(result.towns)}[/bold green] towns to {output_path}")

    return 0


def _initialize_logging(json_output: bool, log_level: str | None = None, log_file: str | None = None) -> None:
    """Configure logging from CLI flags, falling back to TOWN_SCRAPER_LOG_* settings."""
    try:
        config = get_config()
        mode = LoggingMode.PRODUCTION if json_output else (config.log_mode or LoggingMode.INTERACTIVE)
        configure_logging(
            mode=mode,
            log_level=log_level or config.log_level,
            log_file=log_file or (str(config.log_file) if config.log_file else None),
        )
    except OSError:
        # Fall back to stdout-only logging when the log directory is unusable
        configure_logging(mode=LoggingMode.PRODUCTION, log_level=log_level or "INFO", log_file=None)


@click.command(name="logging-status")
def logging_status():
    """
    📊 Show current logging configuration and status.
    """
    status = get_logging_status()
    print_rich_table(console, create_logging_status_table(status))


@click.group(invoke_without_command=True)
@click.option("--json", is_flag=True, help="Output structured JSON logs instead of rich interface")
@click.option("--log-level", default=None, help="Logging level (DEBUG, INFO, WARNING, ERROR)")
@click.option("--log-file", help="Custom log file path")
@click.pass_context
def app(ctx, json: bool, log_level: str | None, log_file: str | None):
    """
    🗺️ Town Scraper - town treasury data from the nations web map

    Extracts towns, their nations, bank balances and upkeep from map markers,
    merges duplicate sightings and estimates days until each bank runs dry.
    """
    ctx.ensure_object(dict)
    ctx.obj["json_output"] = json

    _initialize_logging(json, log_level, log_file)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


app.add_command(scrape)
app.add_command(logging_status)


if __name__ == "__main__":
    app()
