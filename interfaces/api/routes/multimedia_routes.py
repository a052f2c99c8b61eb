from collections.abc import Container
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Response, UploadFile, status
from fastapi.responses import StreamingResponse

from application.dtos.multimedia_dtos import (
    DownloadedContent,
    UpdateMultimediaRequest,
    UploadMultimediaRequest,
)
from application.repositories.multimedia_repository import MultimediaRepository
from application.repositories.profile_repository import ProfileRepository
from domain.aggregates.multimedia import MultimediaRecord
from infrastructure.config import settings
from interfaces.api.middleware import handle_repository_errors
from interfaces.api.routes.helpers import deleted_or_not_found
from interfaces.dependencies import get_container

router = APIRouter(prefix="/multimedia", tags=["multimedia"])


def _check_upload_size(file: UploadFile) -> None:
    if file.size is None:
        return
    if file.size <= 0:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="File is empty")
    if file.size > settings.max_file_size:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"File size exceeds maximum allowed size of "
            f"{settings.max_file_size // (1024 * 1024)} MB",
        )


def _streaming_response(content: DownloadedContent) -> StreamingResponse:
    record = content.record
    return StreamingResponse(
        content.chunks,
        media_type=record.content_type or "application/octet-stream",
        headers={
            "Content-Disposition": f'attachment; filename="{record.filename}"',
            "Content-Length": str(record.file_size),
        },
    )


@router.post("", status_code=status.HTTP_201_CREATED)
@handle_repository_errors
def upload_multimedia(  # noqa: PLR0913
    container: Annotated[Container, Depends(get_container)],
    file: Annotated[UploadFile, File()],
    owner_id: Annotated[str, Form(alias="ownerId", min_length=1)],
    title: Annotated[str, Form(min_length=1, max_length=255)],
    description: Annotated[str | None, Form(max_length=1000)] = None,
    is_public: Annotated[bool, Form(alias="isPublic")] = True,  # noqa: FBT002
) -> MultimediaRecord:
    """Upload a file for a musician.

    Returns:
        201 Created: File stored and indexed
        400 Bad Request: Empty or oversized file, size mismatch
        404 Not Found: Owner profile does not exist
        503 Service Unavailable: Store failure

    """
    _check_upload_size(file)

    request = UploadMultimediaRequest(
        filename=file.filename or "unnamed",
        content_type=file.content_type,
        owner_id=owner_id,
        title=title,
        description=description,
        is_public=is_public,
        file_size=file.size,
    )
    repository = container[MultimediaRepository]
    return container[ProfileRepository].get(owner_id).bind(
        lambda _: repository.upload(request, file.file),
    )


@router.get("/owner/{owner_id}", status_code=status.HTTP_200_OK)
@handle_repository_errors
def list_multimedia_by_owner(
    owner_id: str,
    container: Annotated[Container, Depends(get_container)],
    public_only: Annotated[bool, Query(alias="publicOnly")] = False,  # noqa: FBT002
) -> list[MultimediaRecord]:
    """List an owner's files, optionally only the public ones."""
    return container[MultimediaRepository].list_by_owner(owner_id, public_only=public_only)


@router.get("/{multimedia_id}", status_code=status.HTTP_200_OK)
@handle_repository_errors
def get_multimedia(
    multimedia_id: str,
    container: Annotated[Container, Depends(get_container)],
) -> MultimediaRecord:
    return container[MultimediaRepository].get(multimedia_id)


@router.get("/{multimedia_id}/download", status_code=status.HTTP_200_OK)
@handle_repository_errors
def download_multimedia(
    multimedia_id: str,
    container: Annotated[Container, Depends(get_container)],
) -> StreamingResponse:
    """Stream the file content. 410 Gone when the metadata exists but the content does not."""
    return container[MultimediaRepository].download(multimedia_id).map(_streaming_response)


@router.get("/{multimedia_id}/content", status_code=status.HTTP_200_OK)
@handle_repository_errors
def get_multimedia_content(
    multimedia_id: str,
    container: Annotated[Container, Depends(get_container)],
) -> Response:
    """Whole file inline, for previews. 410 Gone when the content is missing."""
    repository = container[MultimediaRepository]
    return repository.get(multimedia_id).bind(
        lambda record: repository.read_content(multimedia_id).map(
            lambda content: Response(
                content=content,
                media_type=record.content_type or "application/octet-stream",
            ),
        ),
    )


@router.get("/{multimedia_id}/content/exists", status_code=status.HTTP_200_OK)
@handle_repository_errors
def multimedia_content_exists(
    multimedia_id: str,
    container: Annotated[Container, Depends(get_container)],
) -> dict[str, object]:
    return (
        container[MultimediaRepository]
        .content_exists(multimedia_id)
        .map(lambda exists: {"id": multimedia_id, "contentExists": exists})
    )


@router.patch("/{multimedia_id}", status_code=status.HTTP_200_OK)
@handle_repository_errors
def update_multimedia(
    multimedia_id: str,
    request: UpdateMultimediaRequest,
    container: Annotated[Container, Depends(get_container)],
) -> MultimediaRecord:
    """Update title, description or visibility."""
    return container[MultimediaRepository].update_metadata(multimedia_id, request)


@router.delete("/{multimedia_id}", status_code=status.HTTP_200_OK)
@handle_repository_errors
def delete_multimedia(
    multimedia_id: str,
    container: Annotated[Container, Depends(get_container)],
) -> dict[str, object]:
    return (
        container[MultimediaRepository]
        .delete(multimedia_id)
        .bind(lambda deleted: deleted_or_not_found(deleted, "Multimedia", multimedia_id))
    )
