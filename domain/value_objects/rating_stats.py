from pydantic import BaseModel, ConfigDict, Field


class RatingStats(BaseModel):
    """Denormalized rating statistics kept on a profile."""

    model_config = ConfigDict(frozen=True)

    average_rating: float = Field(0.0, ge=0.0, description="Mean of all rating values")
    total_ratings: int = Field(0, ge=0, description="Number of ratings")
