# ABOUTME: Text analysis of raw marker observations
# ABOUTME: Ordered heuristic rules that turn popup text and markup into typed town fields

from .fields import FIELD_RULES, ExtractionRule, RuleMatch, match_field, parse_fields, parse_number

__all__ = [
    "FIELD_RULES",
    "ExtractionRule",
    "RuleMatch",
    "match_field",
    "parse_fields",
    "parse_number",
]
