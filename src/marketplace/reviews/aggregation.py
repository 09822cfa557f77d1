"""Fulfiller rating aggregation.

The aggregate is always re-derived from the full set of ratings, never
adjusted incrementally, so it cannot drift from the reviews it summarizes.
"""

import math


def aggregate_ratings(ratings) -> tuple[float, int]:
    """Return ``(average, count)``; the average is the exact arithmetic mean."""
    ratings = list(ratings)
    if not ratings:
        return 0.0, 0
    return math.fsum(ratings) / len(ratings), len(ratings)
