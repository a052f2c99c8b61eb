from pydantic import Field

from application.dtos.base import CamelModel


class CreateProfileRequest(CamelModel):
    user_id: str = Field(..., min_length=1, description="Id of the user owning the profile")
    name: str = Field(..., min_length=1, max_length=255, description="Musician display name")
    biography: str | None = Field(None, max_length=1000)
    genres: list[str] = Field(default_factory=list)
    instruments: list[str] = Field(default_factory=list)


class UpdateProfileRequest(CamelModel):
    """Partial update. ``genres`` and ``instruments`` replace the stored lists wholesale."""

    name: str | None = Field(None, min_length=1, max_length=255)
    biography: str | None = Field(None, max_length=1000)
    genres: list[str] | None = None
    instruments: list[str] | None = None
