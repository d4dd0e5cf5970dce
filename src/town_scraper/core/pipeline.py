# ABOUTME: Pipeline orchestrator - load the map, pick a source, parse, reconcile, finalize
# ABOUTME: Owns the object-graph-first / interactive-fallback policy and the output artifact

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from pathlib import Path

from town_scraper.config import Config, get_config
from town_scraper.core.models import ParsedFields, RawObservation, ScrapeResult, ScrapeStats, SourceScan
from town_scraper.core.reconciler import reconcile
from town_scraper.extraction.analysis.fields import parse_fields
from town_scraper.extraction.base import MapPage, ObservationSource, SourceUnavailableError
from town_scraper.extraction.browser import open_map_page
from town_scraper.extraction.interactive import InteractiveSource, ProgressCallback
from town_scraper.extraction.object_graph import ObjectGraphSource
from town_scraper.utils.logging import get_logger

MAP_READY_SELECTOR = "#map, .leaflet-container, canvas"

PageFactory = Callable[[Config], AbstractAsyncContextManager[MapPage]]


def parse_observation(observation: RawObservation) -> ParsedFields:
    """Parse one observation, letting structured hints stand in for parsed values.

    A hinted name replaces the town rules entirely; text and markup are still
    parsed for everything the hints do not cover.
    """
    hinted_name = (observation.hinted_name or "").strip()
    skip = {"town"} if hinted_name else set()
    fields = parse_fields(observation.text, observation.markup, skip=skip)

    updates: dict[str, object] = {}
    if hinted_name:
        updates["town"] = hinted_name
    if observation.hinted_location is not None:
        updates["location"] = observation.hinted_location
    return fields.model_copy(update=updates) if updates else fields


class TownScrapePipeline:
    """Runs one scrape of the town map end to end.

    Sequence:
    1. Load the map page (navigation failures abort the run)
    2. Object-graph source; interactive source only if that yields nothing
    3. Parse every observation into typed fields
    4. Reconcile by town name and finalize days remaining
    """

    def __init__(
        self,
        config: Config | None = None,
        page_factory: PageFactory | None = None,
        object_graph_source: ObservationSource | None = None,
        interactive_source: ObservationSource | None = None,
        progress_callback: ProgressCallback | None = None,
    ):
        self.config = config or get_config()
        self.page_factory = page_factory or open_map_page
        self.object_graph_source = object_graph_source or ObjectGraphSource(
            max_candidates=self.config.max_candidates
        )
        self.interactive_source = interactive_source or InteractiveSource(
            concurrency=self.config.concurrency,
            click_attempts=self.config.click_attempts,
            click_timeout_ms=self.config.click_timeout_ms,
            popup_settle_ms=self.config.popup_settle_ms,
            progress_callback=progress_callback,
        )
        self.logger = get_logger(__name__)

    async def run(self) -> ScrapeResult:
        """Scrape the configured map and return the reconciled town records.

        Raises:
            NavigationError: If the map page cannot be loaded
            SourceUnavailableError: If neither source yields any observations
        """
        async with self.page_factory(self.config) as page:
            await self.load_map(page)
            scan = await self.collect(page)
        return self.assemble(scan)

    async def load_map(self, page: MapPage) -> None:
        await page.navigate(self.config.map_url, timeout_ms=self.config.page_load_timeout_ms)
        if not await page.wait_for(MAP_READY_SELECTOR, timeout_ms=self.config.map_ready_timeout_ms):
            self.logger.info("Map container not detected, continuing", selector=MAP_READY_SELECTOR)
        await page.pause(self.config.settle_ms)

    async def collect(self, page: MapPage) -> SourceScan:
        scan = await self.object_graph_source.scan(page)
        if scan.observations:
            return scan

        self.logger.info("Object graph yielded nothing, falling back to clicking markers")
        scan = await self.interactive_source.scan(page)
        if scan.observations:
            return scan

        self.logger.error(
            "No data source available", url=self.config.map_url, markers_found=scan.discovered
        )
        if scan.discovered:
            reason = f"{scan.discovered} marker elements but no readable popups"
        else:
            reason = "no marker objects or marker elements"
        raise SourceUnavailableError(f"No town data found on {self.config.map_url}: {reason}")

    def assemble(self, scan: SourceScan) -> ScrapeResult:
        parsed = [parse_observation(observation) for observation in scan.observations]
        usable = [fields for fields in parsed if not fields.is_empty]
        towns = reconcile(usable)

        stats = ScrapeStats(
            source_kind=scan.kind,
            discovered=scan.discovered,
            unique=scan.unique,
            observations=len(scan.observations),
            parsed=len(usable),
            final=len(towns),
        )
        self.logger.info("Scrape complete", **stats.model_dump(mode="json"))

        return ScrapeResult(source=self.config.map_url, towns=towns, stats=stats)


def save_result(result: ScrapeResult, path: Path) -> Path:
    """Write the artifact as indented JSON, absent fields as explicit nulls."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(result.model_dump_json(indent=2), encoding="utf-8")
    return path
