"""Rounding helpers."""

import math


def round_half_up(value: float, places: int = 2) -> float:
    """
    Round to a number of decimals with ties going up (towards +inf).

    round() rounds ties to even, so round(0.125, 2) is 0.12. Scores here
    are reported with ties rounded up: 0.125 -> 0.13, -0.125 -> -0.12.
    """
    factor = 10**places
    return math.floor(value * factor + 0.5) / factor
