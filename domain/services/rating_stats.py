"""Domain service deriving profile rating statistics from a full rating set."""

from __future__ import annotations

from typing import TYPE_CHECKING

from domain.value_objects.rating_stats import RatingStats

if TYPE_CHECKING:
    from collections.abc import Iterable

    from domain.aggregates.rating import RatingRecord


def compute_rating_stats(ratings: Iterable[RatingRecord]) -> RatingStats:
    """Compute mean and count over every rating given.

    Always recomputes from the complete set rather than adjusting previous
    values, so the result is reproducible from the ratings alone. An empty set
    yields ``0.0`` / ``0``.
    """
    values = [rating.rating for rating in ratings]
    if not values:
        return RatingStats()
    return RatingStats(average_rating=sum(values) / len(values), total_ratings=len(values))
