"""
Pure scoring helpers shared by the round view and the dashboard.

None of these touch the database. Invalid numeric input raises InvalidInput
instead of being coerced.
"""

from __future__ import annotations

import enum
import math
from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal

from pydantic import BaseModel

from scorebook.core.errors import InvalidInput

# USGA slope of a course of standard difficulty.
NEUTRAL_SLOPE = 113


class ScoreBucket(str, enum.Enum):
    EAGLE = "eagle"  # eagle or better; an albatross lands here too
    BIRDIE = "birdie"
    PAR = "par"
    BOGEY = "bogey"
    DOUBLE_BOGEY = "double_bogey"
    TRIPLE_BOGEY = "triple_bogey"
    WORSE = "worse"


class ScoreDistribution(BaseModel):
    eagle: int = 0
    birdie: int = 0
    par: int = 0
    bogey: int = 0
    double_bogey: int = 0
    triple_bogey: int = 0
    worse: int = 0

    def add(self, bucket: ScoreBucket) -> None:
        setattr(self, bucket.value, getattr(self, bucket.value) + 1)

    @property
    def total(self) -> int:
        return sum(getattr(self, b.value) for b in ScoreBucket)


def _require_number(name: str, value) -> Decimal:
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise InvalidInput(f"{name} must be a number, got {value!r}")
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise InvalidInput(f"{name} must be finite, got {value!r}")
        return value
    if not math.isfinite(value):
        raise InvalidInput(f"{name} must be finite, got {value!r}")
    # str() keeps 68.7 as 68.7 instead of its binary expansion.
    return Decimal(str(value))


def round_half_up(value: float | Decimal, places: int = 1) -> float:
    """Round the way a scorecard does (2.25 -> 2.3), not banker's rounding."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def _to_par(par, score) -> Decimal:
    return _require_number("score", score) - _require_number("par", par)


def format_score_to_par(par, score) -> str:
    """Render score relative to par: "E", "+3" or "-2"."""
    diff = _to_par(par, score)
    if diff == 0:
        return "E"
    if diff == diff.to_integral_value():
        diff = diff.quantize(Decimal(1))
    if diff > 0:
        return f"+{diff}"
    return f"{diff}"


def calculate_score_differential(score, rating, slope) -> str:
    """
    Handicap score differential, (score - rating) * 113 / slope.

    >>> calculate_score_differential(86, 68.7, 124)
    '15.8'
    """
    score_d = _require_number("score", score)
    rating_d = _require_number("rating", rating)
    slope_d = _require_number("slope", slope)
    if slope_d == 0:
        raise InvalidInput("slope must be non-zero")

    diff = (score_d - rating_d) * (Decimal(NEUTRAL_SLOPE) / slope_d)
    return str(diff.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def classify_score_to_par(par, score) -> ScoreBucket:
    diff = _to_par(par, score)
    if diff != diff.to_integral_value():
        raise InvalidInput(f"score and par must be whole strokes, got {score!r} and {par!r}")

    diff = int(diff)
    if diff <= -2:
        return ScoreBucket.EAGLE
    if diff == -1:
        return ScoreBucket.BIRDIE
    if diff == 0:
        return ScoreBucket.PAR
    if diff == 1:
        return ScoreBucket.BOGEY
    if diff == 2:
        return ScoreBucket.DOUBLE_BOGEY
    if diff == 3:
        return ScoreBucket.TRIPLE_BOGEY
    return ScoreBucket.WORSE


def score_distribution(pairs: Iterable[tuple[int, int]]) -> ScoreDistribution:
    """Histogram of (par, score) pairs."""
    distribution = ScoreDistribution()
    for par, score in pairs:
        distribution.add(classify_score_to_par(par, score))
    return distribution
