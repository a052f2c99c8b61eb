"""Domain layer exports."""

from domain.aggregates import MultimediaRecord, ProfileRecord, RatingRecord
from domain.exceptions import DomainError
from domain.value_objects import MediaType, RatingStats

__all__ = [
    "DomainError",
    "MediaType",
    "MultimediaRecord",
    "ProfileRecord",
    "RatingRecord",
    "RatingStats",
]
