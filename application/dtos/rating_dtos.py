from pydantic import Field

from application.dtos.base import CamelModel


class SubmitRatingRequest(CamelModel):
    """Body of an add or upsert call.

    ``rating`` is not range-checked here; the rating repository rejects values
    outside 1..5 so the error surfaces as a validation failure.
    """

    musician_id: str = Field(..., min_length=1, description="Profile id of the rated musician")
    user_id: str = Field(..., min_length=1, description="Id of the rating user")
    rating: int = Field(..., description="Rating value, 1 to 5")
    comment: str | None = Field(None, max_length=1000)
