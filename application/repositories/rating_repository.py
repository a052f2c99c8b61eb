from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, TypeVar

import structlog
from returns.result import Failure, Result, Success

from application.dtos.errors import CONFLICT, NOT_FOUND, STORE_UNAVAILABLE, VALIDATION, AppError
from domain.aggregates.rating import MAX_RATING, MIN_RATING, RatingRecord
from domain.exceptions import ConflictError, InfrastructureError

if TYPE_CHECKING:
    from application.ports.document_store import DocumentStore
    from application.repositories.profile_aggregate_updater import ProfileAggregateUpdater

logger = structlog.get_logger()

T = TypeVar("T")


def _check_rating_value(value: int) -> Failure[AppError] | None:
    if MIN_RATING <= value <= MAX_RATING:
        return None
    return Failure(
        AppError(VALIDATION, f"Rating must be between {MIN_RATING} and {MAX_RATING}, got {value}"),
    )


class RatingRepository:
    """Rating CRUD with one rating per (musician, user) pair.

    Every successful mutation synchronously recomputes the musician's profile
    statistics before returning. The pair rule is a check-then-insert in the
    application, not a store constraint, so two concurrent adds for the same
    pair can both succeed.
    """

    def __init__(
        self,
        document_store: DocumentStore,
        aggregate_updater: ProfileAggregateUpdater,
    ) -> None:
        self.document_store = document_store
        self.aggregate_updater = aggregate_updater

    def add(
        self,
        musician_id: str,
        user_id: str,
        value: int,
        comment: str | None = None,
    ) -> Result[RatingRecord, AppError]:
        """Add a rating; fails with ``conflict`` if the user already rated the musician."""
        invalid = _check_rating_value(value)
        if invalid is not None:
            return invalid

        try:
            if self._find_pair(musician_id, user_id) is not None:
                return Failure(
                    AppError(CONFLICT, f"User {user_id} has already rated musician {musician_id}"),
                )
            rating = self._insert(musician_id, user_id, value, comment)
        except ConflictError as e:
            return Failure(AppError(CONFLICT, str(e)))
        except InfrastructureError as e:
            return Failure(AppError(STORE_UNAVAILABLE, f"Failed to add rating: {e!s}"))

        logger.info("rating_added", rating_id=rating.id, musician_id=musician_id, user_id=user_id)
        return self._refresh_stats(musician_id, rating)

    def upsert(
        self,
        musician_id: str,
        user_id: str,
        value: int,
        comment: str | None = None,
    ) -> Result[RatingRecord, AppError]:
        """Replace the user's rating of a musician, or add it if there is none.

        An existing rating is deleted and a new one inserted, so the returned
        record always has a new ``id``.
        """
        invalid = _check_rating_value(value)
        if invalid is not None:
            return invalid

        removed = False
        try:
            existing = self._find_pair(musician_id, user_id)
            if existing is not None:
                removed = self.document_store.delete_by_id(existing.id)
            rating = self._insert(musician_id, user_id, value, comment)
        except ConflictError as e:
            return self._fail_replace(musician_id, AppError(CONFLICT, str(e)), removed=removed)
        except InfrastructureError as e:
            error = AppError(STORE_UNAVAILABLE, f"Failed to save rating: {e!s}")
            return self._fail_replace(musician_id, error, removed=removed)

        logger.info(
            "rating_replaced" if existing is not None else "rating_added",
            rating_id=rating.id,
            previous_rating_id=existing.id if existing is not None else None,
            musician_id=musician_id,
            user_id=user_id,
        )
        return self._refresh_stats(musician_id, rating)

    def delete(self, rating_id: str) -> Result[bool, AppError]:
        try:
            doc = self.document_store.find_by_id(rating_id)
            if doc is None:
                return Success(False)
            rating = RatingRecord.from_document(doc)
            deleted = self.document_store.delete_by_id(rating_id)
        except InfrastructureError as e:
            return Failure(AppError(STORE_UNAVAILABLE, f"Failed to delete rating: {e!s}"))

        if not deleted:
            # removed by someone else between the lookup and the delete
            return Success(False)

        logger.info("rating_deleted", rating_id=rating_id, musician_id=rating.musician_id)
        return self._refresh_stats(rating.musician_id, True)

    def get(self, rating_id: str) -> Result[RatingRecord, AppError]:
        try:
            doc = self.document_store.find_by_id(rating_id)
        except InfrastructureError as e:
            return Failure(AppError(STORE_UNAVAILABLE, f"Failed to load rating: {e!s}"))

        if doc is None:
            return Failure(AppError(NOT_FOUND, f"Rating {rating_id} not found"))
        return Success(RatingRecord.from_document(doc))

    def find_by_user_and_musician(
        self,
        musician_id: str,
        user_id: str,
    ) -> Result[RatingRecord, AppError]:
        try:
            rating = self._find_pair(musician_id, user_id)
        except InfrastructureError as e:
            return Failure(AppError(STORE_UNAVAILABLE, f"Failed to load rating: {e!s}"))

        if rating is None:
            return Failure(
                AppError(NOT_FOUND, f"No rating by user {user_id} for musician {musician_id}"),
            )
        return Success(rating)

    def list_by_musician(self, musician_id: str) -> Result[list[RatingRecord], AppError]:
        try:
            docs = self.document_store.find_by({"musicianId": musician_id})
        except InfrastructureError as e:
            return Failure(AppError(STORE_UNAVAILABLE, f"Failed to list ratings: {e!s}"))
        return Success([RatingRecord.from_document(doc) for doc in docs])

    def list_all(self) -> Result[list[RatingRecord], AppError]:
        """List every rating.

        Best effort: a store failure is logged and yields an empty list, so a
        transient glitch does not fail read-heavy listing endpoints.
        """
        try:
            docs = self.document_store.find_by()
        except InfrastructureError:
            logger.exception("list_all_ratings_failed")
            return Success([])
        return Success([RatingRecord.from_document(doc) for doc in docs])

    def _find_pair(self, musician_id: str, user_id: str) -> RatingRecord | None:
        docs = self.document_store.find_by({"musicianId": musician_id, "userId": user_id})
        if not docs:
            return None
        return RatingRecord.from_document(docs[0])

    def _insert(
        self,
        musician_id: str,
        user_id: str,
        value: int,
        comment: str | None,
    ) -> RatingRecord:
        rating = RatingRecord(
            musician_id=musician_id,
            user_id=user_id,
            rating=value,
            comment=comment,
            created_at=datetime.now(tz=UTC),
        )
        rating.id = self.document_store.insert(rating.to_document())
        return rating

    def _fail_replace(
        self,
        musician_id: str,
        error: AppError,
        *,
        removed: bool,
    ) -> Failure[AppError]:
        """Report a failed upsert, first recomputing stats if the old rating is already gone."""
        if removed:
            logger.warning(
                "rating_replace_incomplete",
                musician_id=musician_id,
                error=error.message,
            )
            self._refresh_stats(musician_id, None)
        return Failure(error)

    def _refresh_stats(self, musician_id: str, value: T) -> Result[T, AppError]:
        """Recompute the musician's stats after a mutation that already succeeded.

        A missing profile does not fail the rating operation; a store failure
        during recomputation does.
        """
        stats_result = self.aggregate_updater.recompute(musician_id)
        if isinstance(stats_result, Failure):
            error = stats_result.failure()
            if error.category == NOT_FOUND:
                logger.warning("rating_stats_profile_missing", musician_id=musician_id)
                return Success(value)
            logger.error(
                "rating_stats_recompute_failed",
                musician_id=musician_id,
                error=error.message,
            )
            return Failure(error)
        return Success(value)
