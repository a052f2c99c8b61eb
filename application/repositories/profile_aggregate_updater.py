from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from returns.result import Failure, Result, Success

from application.dtos.errors import STORE_UNAVAILABLE, AppError
from domain.aggregates.rating import RatingRecord
from domain.exceptions import InfrastructureError
from domain.services.rating_stats import compute_rating_stats

if TYPE_CHECKING:
    from application.ports.document_store import DocumentStore
    from application.repositories.profile_repository import ProfileRepository
    from domain.value_objects.rating_stats import RatingStats

logger = structlog.get_logger()


class ProfileAggregateUpdater:
    """Recompute a profile's rating statistics from its complete rating set.

    Every call re-reads all ratings of the musician; nothing is incremented.
    There is no guard between the read and the write, so two concurrent
    recomputations for the same musician end with whichever wrote last.
    """

    def __init__(
        self,
        rating_store: DocumentStore,
        profile_repository: ProfileRepository,
    ) -> None:
        self.rating_store = rating_store
        self.profile_repository = profile_repository

    def recompute(self, musician_id: str) -> Result[RatingStats, AppError]:
        """Recompute and persist ``averageRating``/``totalRatings`` for a musician.

        Returns:
            The stats written, ``not_found`` when the profile no longer exists,
            or ``store_unavailable`` when either read or write fails.

        """
        try:
            docs = self.rating_store.find_by({"musicianId": musician_id})
        except InfrastructureError as e:
            return Failure(AppError(STORE_UNAVAILABLE, f"Failed to read ratings: {e!s}"))

        stats = compute_rating_stats(RatingRecord.from_document(doc) for doc in docs)

        update_result = self.profile_repository.update_rating_stats(musician_id, stats)
        if isinstance(update_result, Failure):
            return update_result

        logger.debug(
            "rating_stats_recomputed",
            musician_id=musician_id,
            average_rating=stats.average_rating,
            total_ratings=stats.total_ratings,
        )
        return Success(stats)
