from __future__ import annotations

from datetime import UTC, datetime

from pydantic import Field, field_validator

from domain.aggregates.base import StoredRecord

MIN_RATING = 1
MAX_RATING = 5


def clamp_rating(value: int) -> int:
    """Coerce a rating into [MIN_RATING, MAX_RATING]."""
    return max(MIN_RATING, min(MAX_RATING, value))


class RatingRecord(StoredRecord):
    """A single user's rating of a musician.

    Construction and assignment clamp ``rating`` instead of rejecting it, so
    legacy documents with out-of-range values still load. Strict range checks
    belong to the rating repository's write paths.
    """

    musician_id: str
    user_id: str
    rating: int
    comment: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(tz=UTC))

    @field_validator("rating")
    @classmethod
    def _clamp(cls, value: int) -> int:
        return clamp_rating(value)
