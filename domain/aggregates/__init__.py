from .base import StoredRecord
from .multimedia import BlobEnvelope, MultimediaRecord
from .profile import ProfileRecord
from .rating import MAX_RATING, MIN_RATING, RatingRecord, clamp_rating

__all__ = [
    "MAX_RATING",
    "MIN_RATING",
    "BlobEnvelope",
    "MultimediaRecord",
    "ProfileRecord",
    "RatingRecord",
    "StoredRecord",
    "clamp_rating",
]
