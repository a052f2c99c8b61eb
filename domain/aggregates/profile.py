from __future__ import annotations

from datetime import UTC, datetime

from pydantic import Field, field_validator

from domain.aggregates.base import StoredRecord


def normalize_tags(values: list[str]) -> list[str]:
    # first occurrence wins, display order kept
    return list(dict.fromkeys(values))


class ProfileRecord(StoredRecord):
    """Musician profile.

    ``average_rating`` and ``total_ratings`` are derived from the rating set
    and are only written by the profile aggregate updater.
    """

    user_id: str
    name: str
    biography: str | None = None
    genres: list[str] = Field(default_factory=list)
    instruments: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(tz=UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(tz=UTC))
    average_rating: float = 0.0
    total_ratings: int = 0

    @field_validator("genres", "instruments", mode="before")
    @classmethod
    def _normalize_tags(cls, value: list[str] | None) -> list[str]:
        if value is None:
            return []
        return normalize_tags(list(value))
