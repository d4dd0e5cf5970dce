# ABOUTME: Domain models for the town scrape pipeline - observations, parsed fields and final records
# ABOUTME: Pydantic models shared by the sources, the parser, the reconciler and the output artifact

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field


class SourceKind(str, Enum):
    """Where a raw observation came from."""

    OBJECT_GRAPH = "object-graph"
    INTERACTIVE_POPUP = "interactive-popup"


class Location(BaseModel):
    lat: float
    lng: float


class RawObservation(BaseModel):
    """One sighting of an entity on the map, before any parsing.

    Hinted fields come straight from a structured object graph and bypass text
    parsing. Interactive popups only ever fill ``text`` and ``markup``.
    """

    source_kind: SourceKind
    text: str = ""
    markup: str = ""
    hinted_name: str | None = None
    hinted_lat: float | None = None
    hinted_lng: float | None = None

    @property
    def hinted_location(self) -> Location | None:
        if self.hinted_lat is None or self.hinted_lng is None:
            return None
        return Location(lat=self.hinted_lat, lng=self.hinted_lng)

    @property
    def is_usable(self) -> bool:
        """True when there is anything at all to parse."""
        return bool(
            self.text.strip()
            or self.markup.strip()
            or (self.hinted_name and self.hinted_name.strip())
            or self.hinted_lat is not None
            or self.hinted_lng is not None
        )


class ParsedFields(BaseModel):
    """Typed fields recovered from one observation. Every field is independently nullable."""

    town: str | None = None
    nation: str | None = None
    bank: float | None = None
    upkeep: float | None = None
    location: Location | None = None

    @property
    def is_empty(self) -> bool:
        return all(value is None for value in (self.town, self.nation, self.bank, self.upkeep, self.location))

    @property
    def completeness(self) -> int:
        return sum(value is not None for value in (self.town, self.nation, self.bank, self.upkeep, self.location))


class CanonicalRecord(BaseModel):
    """The reconciled record for one town, keyed by its trimmed name."""

    town: str = Field(min_length=1)
    nation: str | None = None
    bank: float | None = None
    upkeep: float | None = None
    days_remaining: int | None = None
    location: Location | None = None


class SourceScan(BaseModel):
    """Outcome of one observation source attempt."""

    kind: SourceKind
    discovered: int = 0
    unique: int = 0
    observations: list[RawObservation] = Field(default_factory=list)


class ScrapeStats(BaseModel):
    source_kind: SourceKind
    discovered: int = 0
    unique: int = 0
    observations: int = 0
    parsed: int = 0
    final: int = 0


class ScrapeResult(BaseModel):
    """The output artifact of a scrape run."""

    scraped_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    source: str
    towns: list[CanonicalRecord] = Field(default_factory=list)
    stats: ScrapeStats | None = Field(default=None, exclude=True)
