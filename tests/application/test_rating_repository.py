"""Tests for RatingRepository and ProfileAggregateUpdater."""

from __future__ import annotations

import pytest
from returns.result import Failure, Success
from structlog.testing import capture_logs

from application.dtos.errors import CONFLICT, NOT_FOUND, STORE_UNAVAILABLE, VALIDATION
from application.repositories.profile_aggregate_updater import ProfileAggregateUpdater
from application.repositories.profile_repository import ProfileRepository
from application.repositories.rating_repository import RatingRepository
from domain.aggregates.profile import ProfileRecord
from tests.mocks import InMemoryDocumentStore

MISSING_PROFILE_ID = "65a000000000000000000000"


def _stats(profile_repository: ProfileRepository, profile_id: str) -> tuple[float, int]:
    profile = profile_repository.get(profile_id).unwrap()
    return profile.average_rating, profile.total_ratings


class TestAddRating:
    def test_ratings_update_profile_stats(
        self,
        rating_repository: RatingRepository,
        profile_repository: ProfileRepository,
        musician: ProfileRecord,
    ) -> None:
        rating_repository.add(musician.id, "u1", 5).unwrap()
        rating_repository.add(musician.id, "u2", 3).unwrap()
        rating_repository.add(musician.id, "u3", 4).unwrap()

        average, total = _stats(profile_repository, musician.id)
        assert average == pytest.approx(4.0)
        assert total == 3

    def test_add_returns_stored_rating(
        self,
        rating_repository: RatingRepository,
        musician: ProfileRecord,
    ) -> None:
        rating = rating_repository.add(musician.id, "u1", 4, "Great groove").unwrap()

        assert rating.id is not None
        assert rating.comment == "Great groove"
        assert rating.created_at is not None
        assert rating_repository.get(rating.id).unwrap() == rating

    def test_second_rating_by_same_user_conflicts(
        self,
        rating_repository: RatingRepository,
        rating_store: InMemoryDocumentStore,
        musician: ProfileRecord,
    ) -> None:
        rating_repository.add(musician.id, "u1", 4).unwrap()

        result = rating_repository.add(musician.id, "u1", 2)

        assert isinstance(result, Failure)
        assert result.failure().category == CONFLICT
        assert len(rating_store.docs) == 1

    def test_same_user_may_rate_other_musicians(
        self,
        rating_repository: RatingRepository,
        musician: ProfileRecord,
    ) -> None:
        rating_repository.add(musician.id, "u1", 4).unwrap()
        assert isinstance(rating_repository.add(MISSING_PROFILE_ID, "u1", 4), Success)

    @pytest.mark.parametrize("value", [0, 6, -1, 100])
    def test_out_of_range_is_rejected(
        self,
        rating_repository: RatingRepository,
        rating_store: InMemoryDocumentStore,
        musician: ProfileRecord,
        value: int,
    ) -> None:
        result = rating_repository.add(musician.id, "u1", value)

        assert isinstance(result, Failure)
        assert result.failure().category == VALIDATION
        assert rating_store.writes == 0

    @pytest.mark.parametrize("value", [1, 5])
    def test_boundaries_are_accepted(
        self,
        rating_repository: RatingRepository,
        musician: ProfileRecord,
        value: int,
    ) -> None:
        assert rating_repository.add(musician.id, "u1", value).unwrap().rating == value

    def test_missing_profile_does_not_fail_the_rating(
        self,
        rating_repository: RatingRepository,
        rating_store: InMemoryDocumentStore,
    ) -> None:
        with capture_logs() as logs:
            result = rating_repository.add(MISSING_PROFILE_ID, "u1", 3)

        assert isinstance(result, Success)
        assert len(rating_store.docs) == 1
        assert any(entry["event"] == "rating_stats_profile_missing" for entry in logs)

    def test_store_failure_during_recompute_is_reported(
        self,
        rating_repository: RatingRepository,
        rating_store: InMemoryDocumentStore,
        profile_store: InMemoryDocumentStore,
        musician: ProfileRecord,
    ) -> None:
        profile_store.fail_on.add("update_partial")

        result = rating_repository.add(musician.id, "u1", 3)

        assert isinstance(result, Failure)
        assert result.failure().category == STORE_UNAVAILABLE
        # the rating itself was stored before the recompute failed
        assert len(rating_store.docs) == 1

    def test_store_failure_on_insert(
        self,
        rating_repository: RatingRepository,
        rating_store: InMemoryDocumentStore,
        musician: ProfileRecord,
    ) -> None:
        rating_store.fail_on.add("insert")
        assert rating_repository.add(musician.id, "u1", 3).failure().category == STORE_UNAVAILABLE


class TestUpsertRating:
    def test_upsert_replaces_with_new_id(
        self,
        rating_repository: RatingRepository,
        rating_store: InMemoryDocumentStore,
        profile_repository: ProfileRepository,
        musician: ProfileRecord,
    ) -> None:
        first = rating_repository.add(musician.id, "u1", 2).unwrap()

        second = rating_repository.upsert(musician.id, "u1", 5, "Changed my mind").unwrap()

        assert second.id != first.id
        assert list(rating_store.docs) == [second.id]
        assert rating_repository.get(first.id).failure().category == NOT_FOUND
        assert _stats(profile_repository, musician.id) == (5.0, 1)

    def test_upsert_without_existing_rating_adds(
        self,
        rating_repository: RatingRepository,
        profile_repository: ProfileRepository,
        musician: ProfileRecord,
    ) -> None:
        rating = rating_repository.upsert(musician.id, "u1", 4).unwrap()

        assert rating_repository.find_by_user_and_musician(musician.id, "u1").unwrap() == rating
        assert _stats(profile_repository, musician.id) == (4.0, 1)

    def test_upsert_rejects_out_of_range(
        self,
        rating_repository: RatingRepository,
        rating_store: InMemoryDocumentStore,
        musician: ProfileRecord,
    ) -> None:
        rating_repository.add(musician.id, "u1", 3).unwrap()

        result = rating_repository.upsert(musician.id, "u1", 6)

        assert result.failure().category == VALIDATION
        # existing rating untouched
        assert rating_repository.find_by_user_and_musician(musician.id, "u1").unwrap().rating == 3
        assert len(rating_store.docs) == 1

    def test_failed_insert_after_replace_still_recomputes(
        self,
        rating_repository: RatingRepository,
        rating_store: InMemoryDocumentStore,
        profile_repository: ProfileRepository,
        musician: ProfileRecord,
    ) -> None:
        rating_repository.add(musician.id, "u1", 2).unwrap()
        rating_repository.add(musician.id, "u2", 4).unwrap()
        rating_store.fail_on.add("insert")

        with capture_logs() as logs:
            result = rating_repository.upsert(musician.id, "u1", 5)

        assert result.failure().category == STORE_UNAVAILABLE
        # old rating is gone, so the stats must already reflect only u2
        assert _stats(profile_repository, musician.id) == (4.0, 1)
        assert any(entry["event"] == "rating_replace_incomplete" for entry in logs)


class TestStatsFollowRatings:
    @pytest.mark.parametrize(
        "steps",
        [
            [("add", "u1", 5), ("add", "u2", 3), ("delete", "u1"), ("upsert", "u2", 1), ("add", "u3", 4)],
            [("upsert", "u1", 2), ("upsert", "u1", 4), ("add", "u2", 1), ("delete", "u2"), ("delete", "u1")],
            [("add", "u1", 1), ("delete", "u1"), ("add", "u1", 5), ("upsert", "u2", 5), ("upsert", "u1", 3)],
        ],
    )
    def test_stats_match_stored_ratings_after_every_step(
        self,
        steps: list[tuple],
        rating_repository: RatingRepository,
        rating_store: InMemoryDocumentStore,
        profile_repository: ProfileRepository,
        musician: ProfileRecord,
    ) -> None:
        for op, user_id, *value in steps:
            if op == "add":
                rating_repository.add(musician.id, user_id, value[0]).unwrap()
            elif op == "upsert":
                rating_repository.upsert(musician.id, user_id, value[0]).unwrap()
            else:
                rating = rating_repository.find_by_user_and_musician(musician.id, user_id).unwrap()
                assert rating_repository.delete(rating.id).unwrap() is True

            values = [d["rating"] for d in rating_store.docs.values() if d["musicianId"] == musician.id]
            expected_average = sum(values) / len(values) if values else 0.0

            average, total = _stats(profile_repository, musician.id)
            assert total == len(values)
            assert average == pytest.approx(expected_average)


class TestDeleteRating:
    def test_delete_recomputes_stats(
        self,
        rating_repository: RatingRepository,
        profile_repository: ProfileRepository,
        musician: ProfileRecord,
    ) -> None:
        rating_repository.add(musician.id, "u1", 5).unwrap()
        middle = rating_repository.add(musician.id, "u2", 3).unwrap()
        rating_repository.add(musician.id, "u3", 4).unwrap()

        assert rating_repository.delete(middle.id).unwrap() is True

        average, total = _stats(profile_repository, musician.id)
        assert average == pytest.approx(4.5)
        assert total == 2

    def test_deleting_last_rating_resets_stats(
        self,
        rating_repository: RatingRepository,
        profile_repository: ProfileRepository,
        musician: ProfileRecord,
    ) -> None:
        rating = rating_repository.add(musician.id, "u1", 5).unwrap()
        rating_repository.delete(rating.id).unwrap()

        assert _stats(profile_repository, musician.id) == (0.0, 0)

    def test_delete_unknown_rating(
        self,
        rating_repository: RatingRepository,
        rating_store: InMemoryDocumentStore,
    ) -> None:
        assert rating_repository.delete(MISSING_PROFILE_ID).unwrap() is False
        assert rating_store.writes == 0


class TestRatingQueries:
    def test_list_by_musician(
        self,
        rating_repository: RatingRepository,
        musician: ProfileRecord,
    ) -> None:
        rating_repository.add(musician.id, "u1", 5).unwrap()
        rating_repository.add(musician.id, "u2", 2).unwrap()
        rating_repository.add(MISSING_PROFILE_ID, "u1", 1).unwrap()

        ratings = rating_repository.list_by_musician(musician.id).unwrap()

        assert sorted(rating.user_id for rating in ratings) == ["u1", "u2"]
        assert rating_repository.list_by_musician("nobody").unwrap() == []

    def test_find_by_user_and_musician_not_found(
        self,
        rating_repository: RatingRepository,
        musician: ProfileRecord,
    ) -> None:
        result = rating_repository.find_by_user_and_musician(musician.id, "u9")
        assert result.failure().category == NOT_FOUND

    def test_list_all(
        self,
        rating_repository: RatingRepository,
        musician: ProfileRecord,
    ) -> None:
        rating_repository.add(musician.id, "u1", 5).unwrap()
        rating_repository.add(MISSING_PROFILE_ID, "u2", 2).unwrap()
        assert len(rating_repository.list_all().unwrap()) == 2

    def test_list_all_store_failure_yields_empty_list(
        self,
        rating_repository: RatingRepository,
        rating_store: InMemoryDocumentStore,
    ) -> None:
        rating_store.fail_on.add("find_by")

        with capture_logs() as logs:
            result = rating_repository.list_all()

        assert result.unwrap() == []
        assert any(entry["event"] == "list_all_ratings_failed" for entry in logs)

    def test_list_by_musician_store_failure(
        self,
        rating_repository: RatingRepository,
        rating_store: InMemoryDocumentStore,
    ) -> None:
        rating_store.fail_on.add("find_by")
        result = rating_repository.list_by_musician("m1")
        assert result.failure().category == STORE_UNAVAILABLE


class StaleRatingStore(InMemoryDocumentStore):
    """Rating store that answers queries from a snapshot taken earlier."""

    def __init__(self, snapshot: list[dict]) -> None:
        super().__init__()
        self.snapshot = snapshot

    def find_by(self, filters: dict | None = None) -> list[dict]:
        return list(self.snapshot)


class TestProfileAggregateUpdater:
    def test_recompute_returns_written_stats(
        self,
        aggregate_updater: ProfileAggregateUpdater,
        rating_repository: RatingRepository,
        musician: ProfileRecord,
    ) -> None:
        rating_repository.add(musician.id, "u1", 2).unwrap()
        rating_repository.add(musician.id, "u2", 3).unwrap()

        stats = aggregate_updater.recompute(musician.id).unwrap()

        assert stats.average_rating == pytest.approx(2.5)
        assert stats.total_ratings == 2

    def test_recompute_only_touches_stats(
        self,
        aggregate_updater: ProfileAggregateUpdater,
        profile_repository: ProfileRepository,
        musician: ProfileRecord,
    ) -> None:
        aggregate_updater.recompute(musician.id).unwrap()

        profile = profile_repository.get(musician.id).unwrap()
        assert profile.name == musician.name
        assert profile.genres == musician.genres
        assert profile.updated_at == musician.updated_at

    def test_recompute_missing_profile(self, aggregate_updater: ProfileAggregateUpdater) -> None:
        result = aggregate_updater.recompute(MISSING_PROFILE_ID)
        assert result.failure().category == NOT_FOUND

    def test_recompute_rating_read_failure(
        self,
        aggregate_updater: ProfileAggregateUpdater,
        rating_store: InMemoryDocumentStore,
        musician: ProfileRecord,
    ) -> None:
        rating_store.fail_on.add("find_by")
        result = aggregate_updater.recompute(musician.id)
        assert result.failure().category == STORE_UNAVAILABLE

    def test_interleaved_recomputes_last_writer_wins(
        self,
        rating_store: InMemoryDocumentStore,
        rating_repository: RatingRepository,
        profile_repository: ProfileRepository,
        musician: ProfileRecord,
    ) -> None:
        rating_repository.add(musician.id, "u1", 5).unwrap()
        # a slow recompute read the ratings before the second one arrived
        slow = ProfileAggregateUpdater(
            StaleRatingStore(rating_store.find_by({"musicianId": musician.id})),
            profile_repository,
        )
        rating_repository.add(musician.id, "u2", 1).unwrap()
        assert _stats(profile_repository, musician.id) == (3.0, 2)

        slow.recompute(musician.id).unwrap()

        # the stale write lands last, and the next mutation repairs it
        assert _stats(profile_repository, musician.id) == (5.0, 1)
        rating_repository.add(musician.id, "u3", 3).unwrap()
        assert _stats(profile_repository, musician.id) == (3.0, 3)
