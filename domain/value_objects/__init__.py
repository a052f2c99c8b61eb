from .media_type import MediaType
from .rating_stats import RatingStats

__all__ = [
    "MediaType",
    "RatingStats",
]
