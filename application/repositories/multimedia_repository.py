from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, BinaryIO

import structlog
from returns.result import Failure, Result, Success

from application.dtos.errors import (
    CONTENT_MISSING,
    NOT_FOUND,
    STORE_UNAVAILABLE,
    VALIDATION,
    AppError,
)
from application.dtos.multimedia_dtos import DownloadedContent
from domain.aggregates.multimedia import BlobEnvelope, MultimediaRecord
from domain.exceptions import BlobNotFoundError, InfrastructureError

if TYPE_CHECKING:
    from application.dtos.multimedia_dtos import UpdateMultimediaRequest, UploadMultimediaRequest
    from application.ports.blob_store import BlobStore
    from application.ports.document_store import DocumentStore

logger = structlog.get_logger()

# keys of the metadata document that UpdateMetadata may change
_MUTABLE_FIELDS = frozenset({"title", "description", "isPublic"})
# fields that may not be cleared by an update
_REQUIRED_ON_UPDATE = ("title", "isPublic")


def _multimedia_not_found(multimedia_id: str) -> Failure[AppError]:
    return Failure(AppError(NOT_FOUND, f"Multimedia {multimedia_id} not found"))


class MultimediaRepository:
    """Binds a stored blob and its metadata record into one logical file.

    Writes go blob first, metadata second; deletes go blob first, metadata
    second. Neither sequence is atomic. A crash between the two delete steps
    leaves a metadata record whose blob is gone, which later reads report as
    ``content_missing``.
    """

    def __init__(self, document_store: DocumentStore, blob_store: BlobStore) -> None:
        self.document_store = document_store
        self.blob_store = blob_store

    def upload(
        self,
        request: UploadMultimediaRequest,
        stream: BinaryIO,
    ) -> Result[MultimediaRecord, AppError]:
        """Store the content, then index it.

        Steps:
            1. Upload the stream to the blob store with an envelope of the
               descriptive fields.
            2. Reject the upload when a declared ``file_size`` disagrees with
               the stored length (the blob is removed again).
            3. Insert the metadata record. If this fails the blob is deleted
               as compensation; should that delete fail too, the orphaned
               blob id is logged for out-of-band cleanup.

        Returns:
            The record with both ``id`` and ``blob_id`` set.

        """
        upload_date = datetime.now(tz=UTC)
        envelope = BlobEnvelope(
            owner_id=request.owner_id,
            title=request.title,
            description=request.description,
            upload_date=upload_date,
            is_public=request.is_public,
        )

        try:
            stored = self.blob_store.upload(request.filename, stream, envelope.to_document())
        except InfrastructureError as e:
            return Failure(AppError(STORE_UNAVAILABLE, f"Failed to store file content: {e!s}"))

        if request.file_size is not None and request.file_size != stored.size_bytes:
            self._discard_blob(stored.blob_id, reason="size_mismatch")
            return Failure(
                AppError(
                    VALIDATION,
                    f"Declared file size {request.file_size} does not match "
                    f"received {stored.size_bytes} bytes",
                ),
            )

        record = MultimediaRecord.create(
            blob_id=stored.blob_id,
            filename=request.filename,
            content_type=request.content_type,
            owner_id=request.owner_id,
            title=request.title,
            description=request.description,
            file_size=stored.size_bytes,
            upload_date=upload_date,
            is_public=request.is_public,
        )

        try:
            record.id = self.document_store.insert(record.to_document())
        except InfrastructureError as e:
            self._discard_blob(stored.blob_id, reason="metadata_insert_failed")
            return Failure(AppError(STORE_UNAVAILABLE, f"Failed to save file metadata: {e!s}"))

        logger.info(
            "multimedia_uploaded",
            multimedia_id=record.id,
            blob_id=record.blob_id,
            owner_id=record.owner_id,
            size_bytes=record.file_size,
            sha256=stored.sha256,
        )
        return Success(record)

    def get(self, multimedia_id: str) -> Result[MultimediaRecord, AppError]:
        try:
            doc = self.document_store.find_by_id(multimedia_id)
        except InfrastructureError as e:
            return Failure(AppError(STORE_UNAVAILABLE, f"Failed to load file metadata: {e!s}"))

        if doc is None:
            return _multimedia_not_found(multimedia_id)
        return Success(MultimediaRecord.from_document(doc))

    def download(self, multimedia_id: str) -> Result[DownloadedContent, AppError]:
        """Resolve the record and open a chunked stream over its blob."""
        record_result = self.get(multimedia_id)
        if isinstance(record_result, Failure):
            return record_result
        record = record_result.unwrap()

        try:
            chunks = self.blob_store.download(record.blob_id)
        except BlobNotFoundError:
            return self._content_missing(record)
        except InfrastructureError as e:
            return Failure(AppError(STORE_UNAVAILABLE, f"Failed to read file content: {e!s}"))

        return Success(DownloadedContent(record=record, chunks=chunks))

    def read_content(self, multimedia_id: str) -> Result[bytes, AppError]:
        """Like ``download`` but returns the whole content at once."""
        record_result = self.get(multimedia_id)
        if isinstance(record_result, Failure):
            return record_result
        record = record_result.unwrap()

        try:
            return Success(self.blob_store.get_bytes(record.blob_id))
        except BlobNotFoundError:
            return self._content_missing(record)
        except InfrastructureError as e:
            return Failure(AppError(STORE_UNAVAILABLE, f"Failed to read file content: {e!s}"))

    def content_exists(self, multimedia_id: str) -> Result[bool, AppError]:
        record_result = self.get(multimedia_id)
        if isinstance(record_result, Failure):
            return record_result

        try:
            return Success(self.blob_store.exists(record_result.unwrap().blob_id))
        except InfrastructureError as e:
            return Failure(AppError(STORE_UNAVAILABLE, f"Failed to check file content: {e!s}"))

    def update_metadata(
        self,
        multimedia_id: str,
        request: UpdateMultimediaRequest,
    ) -> Result[MultimediaRecord, AppError]:
        """Update ``title``, ``description`` and/or ``is_public``.

        The metadata record is written first and is authoritative. The blob
        envelope is then patched on a best-effort basis; a failure there is
        logged and does not fail the update.
        """
        fields = {
            key: value
            for key, value in request.model_dump(exclude_unset=True, by_alias=True).items()
            if key in _MUTABLE_FIELDS
        }
        for key in _REQUIRED_ON_UPDATE:
            if key in fields and fields[key] is None:
                del fields[key]

        try:
            doc = self.document_store.find_by_id(multimedia_id)
            if doc is None:
                return _multimedia_not_found(multimedia_id)
            if not fields:
                return Success(MultimediaRecord.from_document(doc))

            updated = self.document_store.update_partial(multimedia_id, fields)
        except InfrastructureError as e:
            return Failure(AppError(STORE_UNAVAILABLE, f"Failed to update file metadata: {e!s}"))

        if updated is None:
            return _multimedia_not_found(multimedia_id)

        record = MultimediaRecord.from_document(updated)
        self._patch_envelope(record, fields)

        logger.info("multimedia_metadata_updated", multimedia_id=multimedia_id, fields=sorted(fields))
        return Success(record)

    def delete(self, multimedia_id: str) -> Result[bool, AppError]:
        """Delete the blob, then the metadata record.

        Returns ``False`` when there is no such record. ``True`` only when the
        metadata delete removed the record.
        """
        try:
            doc = self.document_store.find_by_id(multimedia_id)
            if doc is None:
                return Success(False)
            record = MultimediaRecord.from_document(doc)

            if not self.blob_store.delete(record.blob_id):
                logger.warning(
                    "multimedia_blob_already_missing",
                    multimedia_id=multimedia_id,
                    blob_id=record.blob_id,
                )

            deleted = self.document_store.delete_by_id(multimedia_id)
        except InfrastructureError as e:
            return Failure(AppError(STORE_UNAVAILABLE, f"Failed to delete file: {e!s}"))

        logger.info(
            "multimedia_deleted",
            multimedia_id=multimedia_id,
            blob_id=record.blob_id,
            metadata_deleted=deleted,
        )
        return Success(deleted)

    def list_by_owner(
        self,
        owner_id: str,
        *,
        public_only: bool = False,
    ) -> Result[list[MultimediaRecord], AppError]:
        """List an owner's files in store order; sort by ``upload_date`` if order matters."""
        filters: dict[str, object] = {"ownerId": owner_id}
        if public_only:
            filters["isPublic"] = True

        try:
            docs = self.document_store.find_by(filters)
        except InfrastructureError as e:
            return Failure(AppError(STORE_UNAVAILABLE, f"Failed to list files: {e!s}"))
        return Success([MultimediaRecord.from_document(doc) for doc in docs])

    def _content_missing(self, record: MultimediaRecord) -> Failure[AppError]:
        logger.warning(
            "multimedia_content_missing",
            multimedia_id=record.id,
            blob_id=record.blob_id,
        )
        return Failure(
            AppError(
                CONTENT_MISSING,
                f"Content of multimedia {record.id} is missing (blob {record.blob_id})",
            ),
        )

    def _patch_envelope(self, record: MultimediaRecord, fields: dict[str, object]) -> None:
        try:
            patched = self.blob_store.update_metadata(record.blob_id, fields)
        except InfrastructureError:
            logger.exception(
                "blob_envelope_update_failed",
                multimedia_id=record.id,
                blob_id=record.blob_id,
            )
            return
        if not patched:
            logger.warning(
                "blob_envelope_missing",
                multimedia_id=record.id,
                blob_id=record.blob_id,
            )

    def _discard_blob(self, blob_id: str, *, reason: str) -> None:
        """Compensate a failed upload by removing its blob."""
        try:
            self.blob_store.delete(blob_id)
        except InfrastructureError:
            logger.exception("orphaned_blob", blob_id=blob_id, reason=reason)
            return
        logger.warning("uploaded_blob_discarded", blob_id=blob_id, reason=reason)
