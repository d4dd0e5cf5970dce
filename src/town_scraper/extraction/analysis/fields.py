# ABOUTME: Field parser turning popup text/markup into town, nation, bank and upkeep values
# ABOUTME: Each field is a named, ordered cascade of regex rules; the first rule that yields a value wins

"""
Popup content on the map is free-form HTML whose structure changes with the
renderer version. Only a handful of labels are reliable, so every field is an
ordered tuple of progressively looser patterns: explicit labels first,
positional heuristics last.

A miss is never an error. Numeric tokens that fail to convert count as a miss
and the cascade moves on to the next rule.
"""

import math
import re
from collections.abc import Callable, Collection
from dataclasses import dataclass
from typing import Any, Literal

from town_scraper.core.models import ParsedFields

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 60

NUMBER_PATTERN = re.compile(r"-?\d[\d,]*(?:\.\d+)?")


def parse_number(token: str | None) -> float | None:
    """Parse the first numeric run in ``token``, ignoring thousands separators.

    Returns None for tokens without digits and for values that are not finite.

    Examples:
        >>> parse_number("12,345.50 gold")
        12345.5
        >>> parse_number("--") is None
        True
    """
    if not token:
        return None
    match = NUMBER_PATTERN.search(token)
    if not match:
        return None
    try:
        value = float(match.group(0).replace(",", ""))
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def _clean_name(raw: str) -> str | None:
    value = raw.strip()
    if NAME_MIN_LENGTH <= len(value) <= NAME_MAX_LENGTH:
        return value
    return None


def _clean_label(raw: str) -> str | None:
    return raw.strip() or None


@dataclass(frozen=True)
class ExtractionRule:
    """A single named pattern applied to either the popup text or its markup."""

    name: str
    source: Literal["text", "markup"]
    pattern: re.Pattern[str]
    convert: Callable[[str], Any]

    def apply(self, text: str, markup: str) -> Any | None:
        haystack = text if self.source == "text" else markup
        if not haystack:
            return None
        match = self.pattern.search(haystack)
        if not match:
            return None
        return self.convert(match.group(1))


@dataclass(frozen=True)
class RuleMatch:
    field: str
    rule: str
    value: Any


def _rule(name: str, source: Literal["text", "markup"], pattern: str, convert: Callable[[str], Any]) -> ExtractionRule:
    return ExtractionRule(name=name, source=source, pattern=re.compile(pattern, re.IGNORECASE), convert=convert)


# Order is precedence.
FIELD_RULES: dict[str, tuple[ExtractionRule, ...]] = {
    "town": (
        # First line, up to the first control character or tag
        ExtractionRule("leading-line", "text", re.compile(r"\A\s*([^\x00-\x1f<]+)"), _clean_name),
        _rule("town-label", "text", r"\bTown[ \t]*:[ \t]*([^\n<]+)", _clean_name),
        _rule("bold-markup", "markup", r"<(?:b|strong)\b[^>]*>([^<]+)</(?:b|strong)>", _clean_name),
    ),
    "nation": (
        _rule("nation-label", "text", r"\bNation[ \t]*:[ \t]*([\w' \-]{2,60})", _clean_label),
        _rule("member-of", "text", r"\bMember of[ \t]+([\w' \-]{2,60})", _clean_label),
    ),
    "bank": (
        _rule("bank-label", "text", r"\bBank[ \t]*:?[ \t]*([-\d,.]+)", parse_number),
        _rule("balance-label", "text", r"\bBalance[ \t]*:?[ \t]*([-\d,.]+)", parse_number),
        _rule("bank-markup", "markup", r"Bank[^0-9]{0,200}?(-?\d[\d,.]*)", parse_number),
    ),
    "upkeep": (
        _rule("upkeep-label", "text", r"\bUpkeep[ \t]*:?[ \t]*([-\d,.]+)", parse_number),
        _rule("upkeep-markup", "markup", r"Upkeep[^0-9]{0,200}?(-?\d[\d,.]*)", parse_number),
    ),
}


def match_field(field: str, text: str, markup: str) -> RuleMatch | None:
    """Run the rule cascade for one field and report which rule matched."""
    for rule in FIELD_RULES[field]:
        value = rule.apply(text, markup)
        if value is not None:
            return RuleMatch(field=field, rule=rule.name, value=value)
    return None


def parse_fields(text: str | None, markup: str | None, *, skip: Collection[str] = ()) -> ParsedFields:
    """Extract town fields from popup text and markup.

    Args:
        text: Plain popup text (may be empty or None)
        markup: Popup HTML (may be empty or None)
        skip: Field names whose rules should not run, e.g. a town already hinted by the source

    Returns:
        ParsedFields with every unmatched field left as None
    """
    text = text or ""
    markup = markup or ""

    values: dict[str, Any] = {}
    for field in FIELD_RULES:
        if field in skip:
            continue
        found = match_field(field, text, markup)
        if found is not None:
            values[field] = found.value

    return ParsedFields(**values)
