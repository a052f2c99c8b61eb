from collections.abc import Iterator
from dataclasses import dataclass

from pydantic import Field

from application.dtos.base import CamelModel
from domain.aggregates.multimedia import MultimediaRecord


class UploadMultimediaRequest(CamelModel):
    filename: str = Field(..., min_length=1, description="Original filename of the upload")
    content_type: str | None = Field(None, description="MIME type reported by the client")
    owner_id: str = Field(..., min_length=1, description="Profile id of the uploading musician")
    title: str = Field(..., min_length=1, max_length=255, description="Display title")
    description: str | None = Field(None, max_length=1000, description="Free text description")
    is_public: bool = Field(True, description="Whether the file is publicly listed")
    file_size: int | None = Field(
        None,
        ge=0,
        description="Declared size in bytes; checked against the stored blob when given",
    )


class UpdateMultimediaRequest(CamelModel):
    """Partial update; only fields explicitly set are written."""

    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=1000)
    is_public: bool | None = None


@dataclass(frozen=True)
class DownloadedContent:
    record: MultimediaRecord
    chunks: Iterator[bytes]
