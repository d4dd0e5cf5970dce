# ABOUTME: Playwright implementation of the MapPage contract
# ABOUTME: Per-element interactions return False/None on failure instead of raising; navigation raises

import random
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from playwright.async_api import ElementHandle, Page, async_playwright
from playwright.async_api import Error as PlaywrightError

from town_scraper.config import Config, get_config
from town_scraper.extraction.base import BoundingBox, NavigationError
from town_scraper.utils.logging import get_logger


class PlaywrightMapPage:
    """MapPage backed by a single Playwright page shared by every worker."""

    def __init__(self, page: Page):
        self.page = page
        self.logger = get_logger(__name__)

    async def navigate(self, url: str, timeout_ms: int) -> None:
        self.logger.info("Loading map page", url=url, timeout_ms=timeout_ms)
        try:
            await self.page.goto(url, wait_until="networkidle", timeout=timeout_ms)
        except PlaywrightError as e:
            self.logger.error("Map page failed to load", url=url, error=str(e))
            raise NavigationError(f"Failed to load {url}: {e}") from e

    async def wait_for(self, selector: str, timeout_ms: int) -> bool:
        try:
            await self.page.wait_for_selector(selector, timeout=timeout_ms)
            return True
        except PlaywrightError as e:
            self.logger.debug("Selector did not appear", selector=selector, error=str(e))
            return False

    async def pause(self, ms: int) -> None:
        await self.page.wait_for_timeout(ms)

    async def evaluate(self, script: str, arg: Any = None) -> Any | None:
        try:
            return await self.page.evaluate(script, arg)
        except PlaywrightError as e:
            self.logger.warning("Page evaluation failed", error=str(e))
            return None

    async def query_all(self, selector: str) -> list[ElementHandle]:
        try:
            return await self.page.query_selector_all(selector)
        except PlaywrightError as e:
            self.logger.debug("Element query failed", selector=selector, error=str(e))
            return []

    async def bounding_box(self, handle: ElementHandle) -> BoundingBox | None:
        try:
            box = await handle.bounding_box()
        except PlaywrightError as e:
            self.logger.debug("Bounding box unavailable", error=str(e))
            return None
        return BoundingBox(**box) if box else None

    async def hover(self, handle: ElementHandle) -> bool:
        try:
            await handle.hover()
            return True
        except PlaywrightError as e:
            self.logger.debug("Hover failed", error=str(e))
            return False

    async def click(self, handle: ElementHandle, timeout_ms: int) -> bool:
        try:
            await handle.click(timeout=timeout_ms)
            return True
        except PlaywrightError as e:
            self.logger.debug("Click failed", timeout_ms=timeout_ms, error=str(e))
            return False

    async def inner_text(self, handle: ElementHandle) -> str | None:
        try:
            return await handle.inner_text()
        except PlaywrightError as e:
            self.logger.debug("Reading inner text failed", error=str(e))
            return None

    async def inner_html(self, handle: ElementHandle) -> str | None:
        try:
            return await handle.inner_html()
        except PlaywrightError as e:
            self.logger.debug("Reading inner HTML failed", error=str(e))
            return None

    async def nudge_pointer(self) -> bool:
        """Move the pointer to a small random offset near the page origin."""
        try:
            await self.page.mouse.move(random.random() * 20, random.random() * 20)
            return True
        except PlaywrightError as e:
            self.logger.debug("Pointer move failed", error=str(e))
            return False


@asynccontextmanager
async def open_map_page(config: Config | None = None) -> AsyncIterator[PlaywrightMapPage]:
    """Launch Chromium and yield a fresh MapPage, closing the browser on exit."""
    config = config or get_config()
    logger = get_logger(__name__)

    async with async_playwright() as playwright:
        browser = await playwright.chromium.launch(headless=config.headless)
        logger.debug("Browser launched", headless=config.headless)
        try:
            context = await browser.new_context(
                viewport={"width": config.viewport_width, "height": config.viewport_height}
            )
            page = await context.new_page()
            yield PlaywrightMapPage(page)
        finally:
            await browser.close()
