# ABOUTME: Object-graph observation source - reads marker records straight from in-page JS objects
# ABOUTME: Probes window globals for marker-like arrays, dedupes by identity and caps the candidate set

import hashlib
import json
import math
import re
from collections.abc import Iterator, Mapping
from typing import Any

from bs4 import BeautifulSoup

from town_scraper.config import get_config
from town_scraper.core.models import RawObservation, SourceKind, SourceScan
from town_scraper.extraction.base import MapPage
from town_scraper.extraction.probe import FieldProbe, ObjectProbe, invoke_field, read_nested
from town_scraper.utils.logging import get_logger, log_source_step

ID_FIELDS = ("id",)
NAME_FIELDS = ("name", "title")
LAT_FIELDS = ("lat", "latitude")
LNG_FIELDS = ("lng", "longitude")
CONTENT_FIELDS = ("popup", "contentHtml", "content", "popupContent")
LATLNG_FIELD = "_latlng"
PROPS_FIELD = "props"

IDENTITY_HASH_LENGTH = 16

TOWN_KEYWORDS = re.compile(r"bank|upkeep|balance|town|nation|member of", re.IGNORECASE)
PLACE_NAME = re.compile(r"^[A-Za-z0-9' \-\u00C0-\u024F]{3,40}$")
MARKUP_HINT = re.compile(r"<[a-zA-Z/][^>]*>")

# Runs in the page. Only plain data crosses back: popup accessors are invoked
# in place and their content returned as strings.
OBJECT_GRAPH_PROBE_SCRIPT = r"""
(maxCandidates) => {
  const NAME_HINT = /marker|liveatlas|layer|map/i;
  const EXPLICIT_KEYS = ["liveatlas", "LA", "LiveAtlas", "markerSets", "markers", "maps", "mapConfig"];
  const SCALAR_FIELDS = [
    "id", "name", "title", "lat", "lng", "latitude", "longitude", "popup", "contentHtml", "content",
  ];
  const PROP_HINT = /bank|upkeep|balance|gold|money|town|nation/i;
  let budget = maxCandidates;
  // Aliased globals reach the same entries more than once; only the first sighting spends budget
  const seen = new Set();

  const read = (obj, key) => { try { return obj == null ? undefined : obj[key]; } catch (e) { return undefined; } };
  const call = (obj, key) => {
    try {
      const fn = read(obj, key);
      return typeof fn === "function" ? fn.call(obj) : undefined;
    } catch (e) { return undefined; }
  };
  const isCandidate = (item) => !!item && typeof item === "object" && !!(
    read(item, "name") || read(item, "title") || read(item, "popup") || read(item, "contentHtml") ||
    read(item, "content") || read(item, "_popup") || read(item, "lat") !== undefined ||
    read(item, "latitude") !== undefined || read(item, "_latlng")
  );

  const snapshot = (item) => {
    const out = {};
    for (const key of SCALAR_FIELDS) {
      const value = read(item, key);
      if (["string", "number", "boolean"].includes(typeof value)) out[key] = value;
    }
    const latlng = read(item, "_latlng");
    const lat = read(latlng, "lat");
    const lng = read(latlng, "lng");
    if (typeof lat === "number" && typeof lng === "number") out._latlng = { lat, lng };

    let content = call(read(item, "_popup"), "getContent");
    if (content === undefined) content = call(call(item, "getPopup"), "getContent");
    if (typeof content === "string") out.popupContent = content;
    else if (content && typeof content.outerHTML === "string") out.popupContent = content.outerHTML;

    const props = {};
    let keys = [];
    try { keys = Object.keys(item); } catch (e) {}
    for (const key of keys) {
      const value = read(item, key);
      if (typeof value === "string" && PROP_HINT.test(key)) props[key] = value;
    }
    out.props = props;
    return out;
  };

  const collect = (array) => {
    const out = [];
    for (const item of array) {
      if (budget <= 0) break;
      if (!isCandidate(item) || seen.has(item)) continue;
      seen.add(item);
      try { out.push(snapshot(item)); budget--; } catch (e) {}
    }
    return out;
  };

  const roots = new Map();
  let windowKeys = [];
  try { windowKeys = Object.keys(window); } catch (e) {}
  for (const key of windowKeys) if (NAME_HINT.test(key)) roots.set(key, read(window, key));
  for (const key of EXPLICIT_KEYS) { const value = read(window, key); if (value) roots.set(key, value); }

  const groups = {};
  for (const [key, value] of roots) {
    if (!value || typeof value !== "object") continue;
    try {
      if (Array.isArray(value)) {
        const found = collect(value);
        if (found.length) groups[key] = found;
        continue;
      }
      for (const child of Object.keys(value)) {
        const nested = read(value, child);
        if (!Array.isArray(nested)) continue;
        const found = collect(nested);
        if (found.length) groups[key + "." + child] = found;
      }
    } catch (e) {}
  }
  return groups;
}
"""

logger = get_logger(__name__)


def _first_text(probe: FieldProbe, names: tuple[str, ...]) -> str | None:
    for name in names:
        value = probe.read_field(name)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def _as_coordinate(value: Any) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _first_coordinate(probe: FieldProbe, names: tuple[str, ...], nested: str) -> float | None:
    for name in names:
        value = _as_coordinate(probe.read_field(name))
        if value is not None:
            return value
    return _as_coordinate(read_nested(probe, LATLNG_FIELD, nested))


def _read_content(probe: FieldProbe) -> str | None:
    for name in CONTENT_FIELDS:
        value = invoke_field(probe, name)
        if isinstance(value, str) and value.strip():
            return value
    return None


def _read_props(probe: FieldProbe) -> list[str]:
    props = probe.read_field(PROPS_FIELD)
    if not isinstance(props, Mapping):
        return []
    return [f"{key}: {value.strip()}" for key, value in props.items() if isinstance(value, str) and value.strip()]


def markup_to_text(markup: str) -> str:
    """Flatten popup HTML to one trimmed line per text node."""
    raw = BeautifulSoup(markup, "html.parser").get_text("\n")
    return "\n".join(line.strip() for line in raw.splitlines() if line.strip())


def is_marker_like(probe: FieldProbe) -> bool:
    """True for entries exposing a name/title, popup/content, or a latitude/longitude."""
    if _first_text(probe, NAME_FIELDS):
        return True
    if any(probe.has_field(name) and probe.read_field(name) is not None for name in CONTENT_FIELDS):
        return True
    return (
        _first_coordinate(probe, LAT_FIELDS, "lat") is not None
        or _first_coordinate(probe, LNG_FIELDS, "lng") is not None
    )


def candidate_identity(probe: FieldProbe) -> str:
    """Identity used for dedup: explicit id, else name, else position, else a truncated content hash."""
    for name in ID_FIELDS:
        value = probe.read_field(name)
        if value is not None and not isinstance(value, bool) and str(value).strip():
            return f"id:{value}"

    name = _first_text(probe, NAME_FIELDS)
    if name:
        return f"name:{name}"

    lat = _first_coordinate(probe, LAT_FIELDS, "lat")
    lng = _first_coordinate(probe, LNG_FIELDS, "lng")
    if lat is not None and lng is not None:
        return f"pos:{lat}_{lng}"

    known = {}
    for field in (*NAME_FIELDS, *LAT_FIELDS, *LNG_FIELDS, *CONTENT_FIELDS, LATLNG_FIELD, PROPS_FIELD):
        value = probe.read_field(field)
        if value is not None and not callable(value):
            known[field] = value
    digest = hashlib.sha256(json.dumps(known, sort_keys=True, default=str).encode("utf-8")).hexdigest()
    return f"hash:{digest[:IDENTITY_HASH_LENGTH]}"


def iter_candidates(graph: Any) -> Iterator[FieldProbe]:
    """Yield probes for marker-like entries of every array in ``graph``.

    ``graph`` maps root names to either an array of entries or an object whose
    array-valued properties hold entries (one level deep).
    """
    if isinstance(graph, list):
        graph = {"": graph}
    if not isinstance(graph, Mapping):
        return

    for root in graph.values():
        if isinstance(root, list):
            arrays = [root]
        elif isinstance(root, Mapping):
            arrays = [value for value in root.values() if isinstance(value, list)]
        else:
            continue
        for array in arrays:
            for entry in array:
                if entry is None:
                    continue
                probe = ObjectProbe(entry)
                if is_marker_like(probe):
                    yield probe


def build_observation(probe: FieldProbe) -> RawObservation:
    content = _read_content(probe) or ""
    if MARKUP_HINT.search(content):
        markup, text = content, markup_to_text(content)
    else:
        markup, text = "", content.strip()

    props = _read_props(probe)
    if props:
        text = "\n".join([text, *props]) if text else "\n".join(props)

    return RawObservation(
        source_kind=SourceKind.OBJECT_GRAPH,
        text=text,
        markup=markup,
        hinted_name=_first_text(probe, NAME_FIELDS),
        hinted_lat=_first_coordinate(probe, LAT_FIELDS, "lat"),
        hinted_lng=_first_coordinate(probe, LNG_FIELDS, "lng"),
    )


def looks_like_town(observation: RawObservation) -> bool:
    """Keep observations that mention town attributes or carry a place-like name."""
    if TOWN_KEYWORDS.search(observation.text) or TOWN_KEYWORDS.search(observation.markup):
        return True
    return bool(observation.hinted_name and PLACE_NAME.match(observation.hinted_name))


class ObjectGraphSource:
    """Reads marker records from the page's own JS objects, bypassing popups entirely."""

    def __init__(self, max_candidates: int | None = None):
        self.max_candidates = max_candidates or get_config().max_candidates
        self.logger = get_logger(__name__)

    @log_source_step("object_graph_scan")
    async def scan(self, page: MapPage) -> SourceScan:
        graph = await page.evaluate(OBJECT_GRAPH_PROBE_SCRIPT, self.max_candidates)
        if not graph:
            self.logger.info("No marker structures found in page objects")
            return SourceScan(kind=SourceKind.OBJECT_GRAPH)
        return self.scan_graph(graph)

    def scan_graph(self, graph: Any) -> SourceScan:
        """Dedupe, cap and convert the candidates of an already-probed object graph."""
        discovered = 0
        seen: set[str] = set()
        unique: list[FieldProbe] = []

        for probe in iter_candidates(graph):
            discovered += 1
            identity = candidate_identity(probe)
            if identity in seen:
                continue
            if len(unique) >= self.max_candidates:
                self.logger.warning("Candidate cap reached", max_candidates=self.max_candidates)
                break
            seen.add(identity)
            unique.append(probe)

        observations = []
        for probe in unique:
            observation = build_observation(probe)
            if observation.is_usable and looks_like_town(observation):
                observations.append(observation)

        self.logger.info(
            "Object graph scanned",
            discovered=discovered,
            unique=len(unique),
            observations=len(observations),
        )
        return SourceScan(
            kind=SourceKind.OBJECT_GRAPH, discovered=discovered, unique=len(unique), observations=observations
        )
