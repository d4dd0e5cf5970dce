# ABOUTME: Tests for the days-remaining solvency metric and its asymmetric rounding
# ABOUTME: Ceiling above one period, round-half-up at or below one, null for missing or zero upkeep

import pytest

from town_scraper.core.metrics import days_remaining, round_half_up


class TestRoundHalfUp:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [(0.5, 1), (0.49, 0), (1.5, 2), (2.5, 3), (-0.5, 0), (-2.5, -2), (-2.6, -3)],
    )
    def test_halves_round_up(self, value, expected):
        assert round_half_up(value) == expected


class TestDaysRemaining:
    @pytest.mark.parametrize(
        ("bank", "upkeep", "expected"),
        [
            (100, 50, 2),  # ratio 2 -> ceiling
            (101, 50, 3),  # ratio 2.02 -> ceiling
            (1000, 50, 20),
            (100, 100, 1),  # ratio exactly 1 -> nearest
            (50, 100, 1),  # ratio 0.5 -> half-up
            (30, 100, 0),  # ratio 0.3 -> nearest
            (70, 100, 1),
            (0, 10, 0),
        ],
    )
    def test_rounding(self, bank, upkeep, expected):
        assert days_remaining(bank, upkeep) == expected

    @pytest.mark.parametrize(("bank", "upkeep"), [(100, 0), (0, 0), (100, 0.0)])
    def test_zero_upkeep_is_none(self, bank, upkeep):
        assert days_remaining(bank, upkeep) is None

    def test_missing_inputs_are_none(self):
        assert days_remaining(None, 5) is None
        assert days_remaining(100, None) is None
        assert days_remaining(None, None) is None

    def test_returns_int(self):
        assert isinstance(days_remaining(1234.5, 10.0), int)
        assert days_remaining(1234.5, 10.0) == 124
