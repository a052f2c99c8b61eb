from __future__ import annotations

from datetime import UTC, datetime

from pydantic import Field

from domain.aggregates.base import StoredRecord
from domain.value_objects.media_type import MediaType


class MultimediaRecord(StoredRecord):
    """Metadata record bound to one stored blob.

    ``id`` belongs to the metadata store and ``blob_id`` to the blob store;
    the two namespaces are never interchangeable.
    """

    blob_id: str
    filename: str
    content_type: str | None = None
    media_type: MediaType = MediaType.UNKNOWN
    owner_id: str
    title: str
    description: str | None = None
    file_size: int = Field(..., ge=0)
    upload_date: datetime = Field(default_factory=lambda: datetime.now(tz=UTC))
    is_public: bool = True

    @classmethod
    def create(  # noqa: PLR0913
        cls,
        *,
        blob_id: str,
        filename: str,
        content_type: str | None,
        owner_id: str,
        title: str,
        file_size: int,
        upload_date: datetime,
        description: str | None = None,
        is_public: bool = True,
    ) -> MultimediaRecord:
        return cls(
            blob_id=blob_id,
            filename=filename,
            content_type=content_type,
            media_type=MediaType.from_content_type(content_type),
            owner_id=owner_id,
            title=title,
            description=description,
            file_size=file_size,
            upload_date=upload_date,
            is_public=is_public,
        )


class BlobEnvelope(StoredRecord):
    """Advisory copy of the descriptive fields, stored alongside the blob itself."""

    owner_id: str
    title: str
    description: str | None = None
    upload_date: datetime
    is_public: bool = True
