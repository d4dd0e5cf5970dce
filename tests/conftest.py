# ABOUTME: Shared fixtures - an in-memory MapPage fake with clickable markers and popups
# ABOUTME: Also isolates every test from TOWN_SCRAPER_* environment variables

import os
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

import pytest

from town_scraper.config import reload_config
from town_scraper.extraction.base import BoundingBox
from town_scraper.extraction.interactive import POPUP_SELECTOR


@dataclass
class FakeMarker:
    """A DOM marker whose popup opens after ``clicks_needed`` successful clicks."""

    box: BoundingBox | None
    text: str = ""
    markup: str = ""
    clicks_needed: int = 1
    clickable: bool = True
    failed_clicks: int = 0
    clicks: int = 0
    hovers: int = 0


@dataclass
class FakePopup:
    text: str
    markup: str


class FakeMapPage:
    """MapPage fake: an object graph for evaluate() plus markers per selector."""

    def __init__(
        self,
        graph: Any = None,
        markers: list[FakeMarker] | None = None,
        marker_selector: str = ".leaflet-marker-icon",
        navigate_error: Exception | None = None,
    ):
        self.graph = graph
        self.selectors: dict[str, list[Any]] = {marker_selector: list(markers or [])}
        self.navigate_error = navigate_error
        self.current_popup: FakePopup | None = None
        self.navigations: list[tuple[str, int]] = []
        self.evaluations: list[Any] = []
        self.nudges = 0

    async def navigate(self, url: str, timeout_ms: int) -> None:
        self.navigations.append((url, timeout_ms))
        if self.navigate_error:
            raise self.navigate_error

    async def wait_for(self, selector: str, timeout_ms: int) -> bool:
        return True

    async def pause(self, ms: int) -> None:
        return None

    async def evaluate(self, script: str, arg: Any = None) -> Any | None:
        self.evaluations.append(arg)
        return self.graph

    async def query_all(self, selector: str) -> list[Any]:
        if selector == POPUP_SELECTOR:
            return [self.current_popup] if self.current_popup else []
        return list(self.selectors.get(selector, []))

    async def bounding_box(self, handle: FakeMarker) -> BoundingBox | None:
        return handle.box

    async def hover(self, handle: FakeMarker) -> bool:
        handle.hovers += 1
        return True

    async def click(self, handle: FakeMarker, timeout_ms: int) -> bool:
        if not handle.clickable:
            return False
        if handle.failed_clicks:
            # Click timed out: nothing changes on the page
            handle.failed_clicks -= 1
            return False
        handle.clicks += 1
        if handle.clicks >= handle.clicks_needed and (handle.text or handle.markup):
            self.current_popup = FakePopup(text=handle.text, markup=handle.markup)
        else:
            self.current_popup = None
        return True

    async def inner_text(self, handle: FakePopup) -> str | None:
        return handle.text

    async def inner_html(self, handle: FakePopup) -> str | None:
        return handle.markup

    async def nudge_pointer(self) -> bool:
        self.nudges += 1
        return True


def _page_factory_for(page: FakeMapPage):
    @asynccontextmanager
    async def factory(config):
        yield page

    return factory


@pytest.fixture(autouse=True)
def clean_config_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith("TOWN_SCRAPER_"):
            monkeypatch.delenv(key, raising=False)
    reload_config()
    yield
    reload_config()


@pytest.fixture
def fake_page_cls():
    return FakeMapPage


@pytest.fixture
def fake_marker_cls():
    return FakeMarker


@pytest.fixture
def page_factory_for():
    return _page_factory_for


@pytest.fixture
def fake_popup_cls():
    return FakePopup
