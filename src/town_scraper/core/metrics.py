# ABOUTME: Derived solvency metric - days until a town's bank is drained by its upkeep
# ABOUTME: Asymmetric rounding: ceiling above one day, round-half-up at or below one day

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from negative infinity (2.5 -> 3, -2.5 -> -2)."""
    return math.floor(value + 0.5)


def days_remaining(bank: float | None, upkeep: float | None) -> int | None:
    """Estimate how many upkeep periods the bank balance covers.

    Well-funded towns (ratio above 1) get a ceiling; towns at or below one
    period get the nearest whole number using round-half-up, so 0.5 -> 1 and
    0.3 -> 0. A zero upkeep has no horizon.

    Examples:
        >>> days_remaining(100, 50)
        2
        >>> days_remaining(30, 100)
        0
    """
    if bank is None or upkeep is None or upkeep == 0:
        return None

    ratio = bank / upkeep
    if ratio > 1:
        return math.ceil(ratio)
    return round_half_up(ratio)
