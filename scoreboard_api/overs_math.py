# scoreboard_api/overs_math.py
from __future__ import annotations

import math
from typing import Iterable, Optional, Union

BALLS_PER_OVER = 6
OversLike = Union[str, int, float, None]


def as_number(value: object) -> float:
    """
    Or-zero numeric coercion used for every stats field.
    None, "", "abc", NaN and infinities all become 0.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        n = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(n) or math.isinf(n):
        return 0.0
    return n


def as_int(value: object) -> int:
    return int(as_number(value))


def normalize_overs(overs: OversLike) -> float:
    """
    Brings a decimal overs value back into cricket notation.

    The digit after the point is a ball count, not a fraction. Naive sums
    such as 1.4 + 1.4 = 2.8 leave a ball count of 8; any ball count >= 6
    rolls into the next whole over and the excess is dropped:

        normalize_overs(1.6) -> 2.0
        normalize_overs(2.9) -> 3.0
        normalize_overs(0.5) -> 0.5
    """
    value = as_number(overs)
    if value <= 0:
        return 0.0

    whole = math.floor(value)
    balls = int(round((value - whole) * 10))

    if balls >= BALLS_PER_OVER:
        return float(whole + 1)
    return round(whole + balls / 10.0, 1)


def sum_overs(values: Iterable[OversLike]) -> float:
    """Sum of per-bowler overs, normalized for the 6-ball rollover."""
    total = 0.0
    for v in values:
        total += as_number(v)
    return normalize_overs(total)


def run_rate(runs: float, overs: float) -> float:
    overs = as_number(overs)
    if overs == 0.0:
        return 0.0
    return as_number(runs) / overs


def strike_rate(runs: object, balls: object) -> str:
    """Runs per 100 balls, one decimal. No balls faced gives "0.0"."""
    b = as_number(balls)
    if b <= 0:
        return "0.0"
    return f"{as_number(runs) / b * 100:.1f}"


def economy_rate(runs: object, overs: object) -> str:
    """Runs conceded per over, two decimals. No overs bowled gives "0.00"."""
    o = as_number(overs)
    if o <= 0:
        return "0.00"
    return f"{as_number(runs) / o:.2f}"


def format_nrr(value: Optional[float]) -> str:
    v = as_number(value)
    sign = "+" if v >= 0 else ""
    return f"{sign}{v:.3f}"
