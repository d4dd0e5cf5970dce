# ABOUTME: Interfaces between the scrape core and the browser layer, plus the error taxonomy
# ABOUTME: MapPage is the page contract the sources consume; ObservationSource is what the pipeline runs

from typing import Any, Protocol

from pydantic import BaseModel

from town_scraper.core.models import SourceScan


class ScrapeError(Exception):
    """Base class for scrape failures that abort a run."""

    pass


class NavigationError(ScrapeError):
    """Raised when the map page cannot be loaded within its timeout."""

    pass


class SourceUnavailableError(ScrapeError):
    """Raised when neither observation source yields any raw data."""

    pass


class BoundingBox(BaseModel):
    x: float
    y: float
    width: float = 0.0
    height: float = 0.0


class MapPage(Protocol):
    """The page capabilities the sources rely on.

    Per-element interactions never raise: a failed hover or click comes back
    as False and a failed read as None. Only navigation escalates.
    """

    async def navigate(self, url: str, timeout_ms: int) -> None:
        """Load ``url``.

        Raises:
            NavigationError: If the page does not load in time
        """
        ...

    async def wait_for(self, selector: str, timeout_ms: int) -> bool: ...

    async def pause(self, ms: int) -> None: ...

    async def evaluate(self, script: str, arg: Any = None) -> Any | None: ...

    async def query_all(self, selector: str) -> list[Any]: ...

    async def bounding_box(self, handle: Any) -> BoundingBox | None: ...

    async def hover(self, handle: Any) -> bool: ...

    async def click(self, handle: Any, timeout_ms: int) -> bool: ...

    async def inner_text(self, handle: Any) -> str | None: ...

    async def inner_html(self, handle: Any) -> str | None: ...

    async def nudge_pointer(self) -> bool: ...


class ObservationSource(Protocol):
    """Protocol for anything that can turn a loaded map page into raw observations."""

    async def scan(self, page: MapPage) -> SourceScan:
        """Collect raw observations from the page.

        Args:
            page: A page that has already been navigated to the map

        Returns:
            Scan result; an empty observation list means the source found nothing usable
        """
        ...
