# ABOUTME: Rich table builders for run summaries, scraped towns and logging status
# ABOUTME: Every CLI table goes through _base_table so the styling stays uniform

from typing import Any

from rich.box import ROUNDED, SIMPLE, Box
from rich.console import Console
from rich.table import Table

from town_scraper.core.models import CanonicalRecord, ScrapeStats

MISSING = "—"
AT_RISK_DAYS = 3


def _base_table(title: str, title_style: str = "bold cyan", box: Box = ROUNDED, **kwargs: Any) -> Table:
    return Table(
        title=f"[{title_style}]{title}[/{title_style}]",
        title_justify="left",
        box=box,
        header_style="bold magenta",
        border_style="cyan",
        **kwargs,
    )


def create_key_value_table(
    title: str,
    rows: dict[str, Any],
    title_style: str = "bold cyan",
    key_style: str = "bold blue",
    value_style: str = "green",
    box: Box = ROUNDED,
) -> Table:
    """Two-column table of labelled values; values are stringified as-is."""
    table = _base_table(title, title_style=title_style, box=box, expand=False)
    table.add_column("Field", style=key_style)
    table.add_column("Value", style=value_style)
    for label, value in rows.items():
        table.add_row(label, str(value))
    return table


def _amount(value: float | None) -> str:
    return MISSING if value is None else f"{value:,.2f}"


def _days(value: int | None) -> str:
    if value is None:
        return MISSING
    return f"[red]{value}[/red]" if value <= AT_RISK_DAYS else str(value)


def create_towns_table(towns: list[CanonicalRecord], limit: int | None = 50) -> Table:
    """Create a table of reconciled towns, most at-risk first.

    Args:
        towns: Final records
        limit: Maximum rows to show (None for all)

    Returns:
        Towns table; towns without a days estimate sort last
    """
    table = _base_table("🏰 Towns", row_styles=["", "dim"])
    table.add_column("Town", style="bold white")
    table.add_column("Nation", style="blue")
    table.add_column("Bank", justify="right", style="green")
    table.add_column("Upkeep", justify="right", style="yellow")
    table.add_column("Days", justify="right")

    ordered = sorted(towns, key=lambda t: (t.days_remaining is None, t.days_remaining or 0, t.town))
    shown = ordered if limit is None else ordered[:limit]
    for town in shown:
        table.add_row(
            town.town, town.nation or MISSING, _amount(town.bank), _amount(town.upkeep), _days(town.days_remaining)
        )

    if len(shown) < len(ordered):
        table.caption = f"Showing {len(shown)} of {len(ordered)} towns"

    return table


def create_scrape_summary_table(stats: ScrapeStats, output_path: str | None = None) -> Table:
    """Create the end-of-run summary: counts at each pipeline stage."""
    rows: dict[str, Any] = {
        "🧭 Source": stats.source_kind.value,
        "🔎 Discovered": f"{stats.discovered:,}",
        "🧹 Unique": f"{stats.unique:,}",
        "📥 Observations": f"{stats.observations:,}",
        "🧩 Parsed": f"{stats.parsed:,}",
        "🏰 Final Towns": f"{stats.final:,}",
    }
    if output_path:
        rows["💾 Written To"] = output_path

    return create_key_value_table("🔄 Scrape Summary", rows, title_style="bold green", key_style="cyan", box=SIMPLE)


LOG_FILE_LABELS = {"main": "📝 Main Log", "json": "📊 JSON Log", "errors": "🚨 Error Log"}


def create_logging_status_table(status: dict[str, Any]) -> Table:
    """Render the dictionary returned by ``get_logging_status``."""
    rows: dict[str, Any] = {
        "🔧 Mode": status["mode"].title(),
        "📁 Log Directory": status["log_directory"] or "N/A (production mode)",
        "🔇 Quieted Loggers": ", ".join(status["third_party_suppressed"]),
    }
    for key, label in LOG_FILE_LABELS.items():
        if status["log_files"].get(key):
            rows[label] = status["log_files"][key]

    return create_key_value_table("🔍 Logging Configuration", rows, title_style="bold green", value_style="white")


def print_rich_table(console: Console, table: Table) -> None:
    """Print a table padded by blank lines."""
    console.print()
    console.print(table)
    console.print()
