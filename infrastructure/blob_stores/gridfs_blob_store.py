from __future__ import annotations

import hashlib
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, BinaryIO

import gridfs
from bson import ObjectId
from gridfs.errors import NoFile
from pymongo.errors import PyMongoError

from application.ports.blob_store import BlobStore, StoredBlob
from domain.exceptions import BlobNotFoundError, InfrastructureError

if TYPE_CHECKING:
    from collections.abc import Generator, Iterator

    from gridfs import GridOut
    from pymongo.database import Database


class _HashingReader:
    """File-like wrapper counting and hashing everything read through it."""

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream
        self._hash = hashlib.sha256()
        self.size = 0

    def read(self, size: int = -1) -> bytes:
        chunk = self._stream.read(size)
        self._hash.update(chunk)
        self.size += len(chunk)
        return chunk

    def hexdigest(self) -> str:
        return self._hash.hexdigest()


@contextmanager
def _translate_errors(action: str, blob_id: str | None = None) -> Generator[None, None, None]:
    try:
        yield
    except NoFile:
        # NoFile is a PyMongoError subclass; it means absent
        raise
    except PyMongoError as e:
        target = f" {blob_id}" if blob_id else ""
        msg = f"Failed to {action}{target}: {e!s}"
        raise InfrastructureError(msg) from e


def _parse_blob_id(blob_id: str) -> ObjectId | None:
    if not isinstance(blob_id, str) or not ObjectId.is_valid(blob_id):
        return None
    return ObjectId(blob_id)


class GridFsBlobStore(BlobStore):
    """BlobStore over a MongoDB GridFS bucket.

    The envelope passed to ``upload`` becomes the GridFS file's ``metadata``
    sub-document.
    """

    def __init__(
        self,
        database: Database,
        *,
        bucket_name: str = "files",
        chunk_size_bytes: int = 1024 * 1024,
    ) -> None:
        self.bucket = gridfs.GridFSBucket(
            database,
            bucket_name=bucket_name,
            chunk_size_bytes=chunk_size_bytes,
        )
        self.files = database[f"{bucket_name}.files"]
        self.chunk_size_bytes = chunk_size_bytes

    def upload(self, name: str, stream: BinaryIO, metadata: dict[str, Any]) -> StoredBlob:
        reader = _HashingReader(stream)
        with _translate_errors("upload blob"):
            file_id = self.bucket.upload_from_stream(name, reader, metadata=metadata)
        return StoredBlob(blob_id=str(file_id), size_bytes=reader.size, sha256=reader.hexdigest())

    def download(self, blob_id: str) -> Iterator[bytes]:
        return self._iter_chunks(blob_id, self._open(blob_id))

    def get_bytes(self, blob_id: str) -> bytes:
        grid_out = self._open(blob_id)
        try:
            with _translate_errors("read blob", blob_id):
                return grid_out.read()
        finally:
            grid_out.close()

    def exists(self, blob_id: str) -> bool:
        oid = _parse_blob_id(blob_id)
        if oid is None:
            return False
        with _translate_errors("look up blob", blob_id):
            return self.files.find_one({"_id": oid}, {"_id": 1}) is not None

    def delete(self, blob_id: str) -> bool:
        oid = _parse_blob_id(blob_id)
        if oid is None:
            return False
        try:
            with _translate_errors("delete blob", blob_id):
                self.bucket.delete(oid)
        except NoFile:
            return False
        return True

    def update_metadata(self, blob_id: str, fields: dict[str, Any]) -> bool:
        oid = _parse_blob_id(blob_id)
        if oid is None or not fields:
            return False
        with _translate_errors("update blob metadata", blob_id):
            result = self.files.update_one(
                {"_id": oid},
                {"$set": {f"metadata.{key}": value for key, value in fields.items()}},
            )
        return result.matched_count == 1

    def _open(self, blob_id: str) -> GridOut:
        oid = _parse_blob_id(blob_id)
        if oid is None:
            msg = f"Blob {blob_id} not found"
            raise BlobNotFoundError(msg)
        try:
            with _translate_errors("open blob", blob_id):
                return self.bucket.open_download_stream(oid)
        except NoFile as e:
            msg = f"Blob {blob_id} not found"
            raise BlobNotFoundError(msg) from e

    def _iter_chunks(self, blob_id: str, grid_out: GridOut) -> Iterator[bytes]:
        try:
            while True:
                with _translate_errors("read blob", blob_id):
                    chunk = grid_out.read(self.chunk_size_bytes)
                if not chunk:
                    break
                yield chunk
        finally:
            grid_out.close()
