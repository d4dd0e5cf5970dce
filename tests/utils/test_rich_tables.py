# ABOUTME: Tests for the CLI table builders
# ABOUTME: Towns ordering, row limits and the end-of-run summary

from rich.console import Console
from rich.table import Table

from town_scraper.core.models import CanonicalRecord, ScrapeStats, SourceKind
from town_scraper.utils.rich_tables import create_scrape_summary_table, create_towns_table


def _render(table: Table) -> str:
    console = Console(width=200, record=True)
    console.print(table)
    return console.export_text()


class TestTownsTable:
    def test_most_at_risk_first(self):
        towns = [
            CanonicalRecord(town="Rich", bank=1000, upkeep=10, days_remaining=100),
            CanonicalRecord(town="Unknown"),
            CanonicalRecord(town="Poor", bank=5, upkeep=10, days_remaining=1),
        ]

        output = _render(create_towns_table(towns))

        assert output.index("Poor") < output.index("Rich") < output.index("Unknown")

    def test_limit_adds_caption(self):
        towns = [CanonicalRecord(town=f"Town {index}") for index in range(5)]

        table = create_towns_table(towns, limit=2)

        assert table.row_count == 2
        assert table.caption == "Showing 2 of 5 towns"


def test_summary_table_lists_stage_counts():
    stats = ScrapeStats(
        source_kind=SourceKind.INTERACTIVE_POPUP, discovered=1200, unique=800, observations=750, parsed=700, final=640
    )

    output = _render(create_scrape_summary_table(stats, "towns.json"))

    assert "interactive-popup" in output
    assert "1,200" in output
    assert "towns.json" in output
