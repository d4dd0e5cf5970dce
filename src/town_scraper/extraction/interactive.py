# ABOUTME: Interactive observation source - clicks DOM markers and reads the popups they reveal
# ABOUTME: Fallback when page objects yield nothing; bounded worker pool over one shared page

import asyncio
from collections.abc import Callable, Sequence
from itertools import count
from typing import Any

from pydantic import BaseModel

from town_scraper.config import get_config
from town_scraper.core.metrics import round_half_up
from town_scraper.core.models import RawObservation, SourceKind, SourceScan
from town_scraper.extraction.base import BoundingBox, MapPage
from town_scraper.utils.logging import get_logger, log_source_step
from town_scraper.utils.retry import popup_retrying

# Tried in order; the first selector that matches anything is used on its own.
MARKER_SELECTORS = (
    ".leaflet-marker-icon",
    "[class*='marker']",
    ".marker",
)

POPUP_SELECTOR = ".leaflet-popup-content, .la-popup-content, .leaflet-popup, .leaflet-tooltip, [class*='popup']"

ProgressCallback = Callable[[int, int], None]


class PopupContent(BaseModel):
    text: str = ""
    markup: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.text and not self.markup


def position_key(box: BoundingBox) -> tuple[int, int]:
    return round_half_up(box.x), round_half_up(box.y)


def dedupe_by_position(markers: Sequence[tuple[Any, BoundingBox | None]]) -> list[Any]:
    """Keep the first marker per rounded on-screen origin.

    Icon layers of one entity render at (nearly) the same pixel, so markers
    sharing a rounded position collapse into one. Markers without a box are
    not on screen and are dropped.
    """
    unique: dict[tuple[int, int], Any] = {}
    for handle, box in markers:
        if box is None:
            continue
        unique.setdefault(position_key(box), handle)
    return list(unique.values())


class InteractiveSource:
    """Reveals each marker's popup by hovering and clicking, then captures its content."""

    def __init__(
        self,
        concurrency: int | None = None,
        click_attempts: int | None = None,
        click_timeout_ms: int | None = None,
        popup_settle_ms: int | None = None,
        progress_callback: ProgressCallback | None = None,
    ):
        config = get_config()
        self.concurrency = concurrency or config.concurrency
        self.click_attempts = click_attempts or config.click_attempts
        self.click_timeout_ms = click_timeout_ms if click_timeout_ms is not None else config.click_timeout_ms
        self.popup_settle_ms = popup_settle_ms if popup_settle_ms is not None else config.popup_settle_ms
        self.progress_callback = progress_callback
        self.logger = get_logger(__name__)

    async def find_markers(self, page: MapPage) -> list[Any]:
        for selector in MARKER_SELECTORS:
            handles = await page.query_all(selector)
            if handles:
                self.logger.info("Found marker elements", selector=selector, count=len(handles))
                return handles
        return []

    async def unique_markers(self, page: MapPage, handles: Sequence[Any]) -> list[Any]:
        boxes = await asyncio.gather(*(page.bounding_box(handle) for handle in handles))
        return dedupe_by_position(list(zip(handles, boxes, strict=True)))

    async def read_popup(self, page: MapPage) -> PopupContent | None:
        """Read whatever popup content is on the page right now."""
        popups = await page.query_all(POPUP_SELECTOR)
        if not popups:
            return None

        texts: list[str] = []
        markups: list[str] = []
        for popup in popups:
            text = await page.inner_text(popup)
            markup = await page.inner_html(popup)
            if text:
                texts.append(text)
            if markup:
                markups.append(markup)

        # One element per line so a hover tooltip never runs into the popup's first line
        content = PopupContent(text="\n".join(texts).strip(), markup="\n".join(markups).strip())
        return None if content.is_empty else content

    async def reveal_popup(self, page: MapPage, marker: Any) -> PopupContent | None:
        """Hover, then click up to ``click_attempts`` times until a popup shows content."""
        await page.hover(marker)
        attempt_numbers = count(1)

        async def attempt() -> PopupContent | None:
            # Last try: move the pointer away first to clear a stuck hover/tooltip
            if next(attempt_numbers) == self.click_attempts and self.click_attempts > 1:
                await page.nudge_pointer()
            if not await page.click(marker, timeout_ms=self.click_timeout_ms):
                # Whatever popup is open now belongs to another marker
                return None
            await page.pause(self.popup_settle_ms)
            return await self.read_popup(page)

        return await popup_retrying(self.click_attempts)(attempt)

    async def process_marker(self, page: MapPage, marker: Any, index: int) -> RawObservation | None:
        content = await self.reveal_popup(page, marker)
        if content is None:
            self.logger.debug("Marker yielded no popup", marker_index=index)
            return None

        self.logger.debug(
            "Popup captured",
            marker_index=index,
            text_preview=" ".join(content.text.split())[:200],
        )
        return RawObservation(source_kind=SourceKind.INTERACTIVE_POPUP, text=content.text, markup=content.markup)

    async def collect(self, page: MapPage, markers: Sequence[Any]) -> list[RawObservation]:
        """Fan markers out to a fixed pool of workers sharing one index counter."""
        next_index = count()
        observations: list[RawObservation] = []
        processed = 0
        total = len(markers)

        async def worker(worker_id: int) -> None:
            nonlocal processed
            while (index := next(next_index)) < total:
                try:
                    observation = await self.process_marker(page, markers[index], index)
                except Exception as e:
                    self.logger.warning(
                        "Marker processing failed",
                        worker_id=worker_id,
                        marker_index=index,
                        error=str(e),
                        error_type=type(e).__name__,
                    )
                    observation = None
                if observation is not None:
                    observations.append(observation)
                processed += 1
                if self.progress_callback:
                    self.progress_callback(processed, total)

        await asyncio.gather(*(worker(worker_id) for worker_id in range(min(self.concurrency, total))))
        return observations

    @log_source_step("interactive_scan")
    async def scan(self, page: MapPage) -> SourceScan:
        handles = await self.find_markers(page)
        if not handles:
            self.logger.warning("No marker elements detected")
            return SourceScan(kind=SourceKind.INTERACTIVE_POPUP)

        markers = await self.unique_markers(page, handles)
        self.logger.info("Markers deduplicated by position", discovered=len(handles), unique=len(markers))

        observations = await self.collect(page, markers)
        self.logger.info("Popups collected", markers=len(markers), observations=len(observations))

        return SourceScan(
            kind=SourceKind.INTERACTIVE_POPUP,
            discovered=len(handles),
            unique=len(markers),
            observations=observations,
        )
