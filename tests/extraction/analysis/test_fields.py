# ABOUTME: Tests for the popup field parser - rule order, fallbacks and numeric robustness
# ABOUTME: Covers null-safety, label precedence, markup fallbacks and malformed numbers

import pytest

from town_scraper.core.models import ParsedFields
from town_scraper.extraction.analysis.fields import FIELD_RULES, match_field, parse_fields, parse_number

POPUP_TEXT = "Alpha\nNation: Northwind\nBank: 12,345.50 gold\nUpkeep: 250"


class TestParseNumber:
    """Numeric token coercion."""

    @pytest.mark.parametrize(
        ("token", "expected"),
        [
            ("12,345.50 gold", 12345.5),
            ("1,000", 1000.0),
            ("-1,250.75", -1250.75),
            ("42", 42.0),
            ("1.2.3", 1.2),
        ],
    )
    def test_parses_numeric_runs(self, token, expected):
        assert parse_number(token) == expected

    @pytest.mark.parametrize("token", ["--", ",", ".", "", None, "gold"])
    def test_tokens_without_digits_are_none(self, token):
        assert parse_number(token) is None

    def test_non_finite_values_are_none(self):
        assert parse_number("9" * 400) is None


class TestRuleOrder:
    """The rule cascades are explicit and ordered."""

    def test_rule_names_in_precedence_order(self):
        assert [rule.name for rule in FIELD_RULES["town"]] == ["leading-line", "town-label", "bold-markup"]
        assert [rule.name for rule in FIELD_RULES["nation"]] == ["nation-label", "member-of"]
        assert [rule.name for rule in FIELD_RULES["bank"]] == ["bank-label", "balance-label", "bank-markup"]
        assert [rule.name for rule in FIELD_RULES["upkeep"]] == ["upkeep-label", "upkeep-markup"]

    def test_bank_label_beats_balance_label(self):
        found = match_field("bank", "Alpha\nBalance: 5\nBank: 10", "")
        assert found is not None
        assert found.rule == "bank-label"
        assert found.value == 10.0

    def test_nation_label_beats_member_of(self):
        found = match_field("nation", "Alpha\nMember of Eastmarch\nNation: Northwind", "")
        assert found is not None
        assert found.rule == "nation-label"
        assert found.value == "Northwind"

    def test_text_label_beats_markup(self):
        found = match_field("upkeep", "Upkeep: 10", "<span>Upkeep</span> <i>99</i>")
        assert found is not None
        assert found.rule == "upkeep-label"


class TestParseFields:
    """Full popup parsing."""

    def test_empty_inputs_are_all_null(self):
        assert parse_fields("", "") == ParsedFields()
        assert parse_fields(None, None).is_empty

    def test_typical_popup(self):
        fields = parse_fields(POPUP_TEXT, "")

        assert fields.town == "Alpha"
        assert fields.nation == "Northwind"
        assert fields.bank == 12345.5
        assert fields.upkeep == 250.0

    def test_malformed_bank_is_null(self):
        fields = parse_fields("Alpha\nBank: --", "")

        assert fields.town == "Alpha"
        assert fields.bank is None

    def test_malformed_bank_falls_through_to_markup(self):
        fields = parse_fields("Alpha\nBank: --", "<div>Bank</div><span>3,000</span>")
        assert fields.bank == 3000.0

    def test_balance_label_fallback(self):
        assert parse_fields("Alpha\nBalance: 1,000", "").bank == 1000.0

    def test_markup_fallbacks_for_numbers(self):
        markup = "<div><b>Alpha</b><br><span>Bank</span>: <i>2,500</i><br><span>Upkeep</span> <i>125.5</i></div>"
        fields = parse_fields("", markup)

        assert fields.town == "Alpha"
        assert fields.bank == 2500.0
        assert fields.upkeep == 125.5

    def test_member_of_phrase(self):
        assert parse_fields("Alpha\nMember of Eastmarch", "").nation == "Eastmarch"

    def test_overlong_leading_line_falls_back_to_town_label(self):
        text = "x" * 80 + "\nTown: Beta"
        found = match_field("town", text, "")

        assert found is not None
        assert found.rule == "town-label"
        assert found.value == "Beta"

    def test_single_character_name_is_rejected(self):
        assert parse_fields("A\nBank: 5", "").town is None

    def test_leading_line_stops_at_tag(self):
        assert parse_fields("Delta<br>Bank: 5", "").town == "Delta"

    def test_leading_blank_lines_are_skipped(self):
        assert parse_fields("\n\n  Epsilon  \nUpkeep: 3", "").town == "Epsilon"

    def test_skip_leaves_field_unparsed(self):
        fields = parse_fields("Alpha\nBank: 5", "", skip={"town"})

        assert fields.town is None
        assert fields.bank == 5.0

    def test_negative_bank(self):
        assert parse_fields("Alpha\nBank: -1,200", "").bank == -1200.0
