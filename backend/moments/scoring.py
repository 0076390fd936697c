"""
Composite quality score for a moment's sub-ratings.
"""
import math
from typing import Optional

RATING_MIN = 1.0
RATING_MAX = 5.0

WEIGHT_OVERALL = 0.4
WEIGHT_VALUE = 0.2
WEIGHT_AUTHENTICITY = 0.2
WEIGHT_CROWD = 0.2


def clamp_rating(rating: float) -> float:
    return min(RATING_MAX, max(RATING_MIN, rating))


def compute_composite_score(
    overall: float,
    value: Optional[float] = None,
    authenticity: Optional[float] = None,
    crowd: Optional[float] = None,
) -> float:
    """
    Combines the four sub-ratings of a moment into one score on a 2-10 scale.

    Formula:
    Raw = Overall * 0.4 + Value * 0.2 + Authenticity * 0.2 + Crowd * 0.2
    Score = round(Raw * 2, 1)

    A missing optional rating takes the value of overall, so a moment rated
    only on overall is not dragged down by the dimensions it skipped. Every
    rating is clamped to [1, 5] first, which keeps the result in [2.0, 10.0].

    Args:
        overall: Required overall rating (1-5)
        value: Optional value-for-money rating (1-5)
        authenticity: Optional authenticity rating (1-5)
        crowd: Optional crowd level rating (1-5)

    Returns:
        float: Composite score rounded to one decimal place
    """
    o = clamp_rating(overall)
    v = clamp_rating(overall if value is None else value)
    a = clamp_rating(overall if authenticity is None else authenticity)
    c = clamp_rating(overall if crowd is None else crowd)

    raw = (o * WEIGHT_OVERALL) + (v * WEIGHT_VALUE) + (a * WEIGHT_AUTHENTICITY) + (c * WEIGHT_CROWD)

    # Round half up; round() would use banker's rounding on exact halves
    return math.floor(round(raw * 2 * 10, 6) + 0.5) / 10
