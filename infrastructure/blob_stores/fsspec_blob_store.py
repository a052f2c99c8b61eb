from __future__ import annotations

import hashlib
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, BinaryIO
from uuid import uuid4

import fsspec
import structlog
from pydantic_core import from_json, to_json

from application.ports.blob_store import BlobStore, StoredBlob
from domain.exceptions import BlobNotFoundError, InfrastructureError

if TYPE_CHECKING:
    from collections.abc import Generator, Iterator

logger = structlog.get_logger()


class FsspecBlobStore(BlobStore):
    """BlobStore on any fsspec filesystem (local disk, memory, object storage).

    Content lives at ``<base_url>/<blob_id>`` and the envelope in a JSON
    sidecar at ``<base_url>/<blob_id>.meta.json``.
    """

    def __init__(
        self,
        base_url: str,
        *,
        storage_options: dict | None = None,
        chunk_size_bytes: int = 1024 * 1024,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.storage_options = storage_options or {}
        self.chunk_size_bytes = chunk_size_bytes
        self.fs, self.base_path = fsspec.core.url_to_fs(self.base_url, **self.storage_options)

    def _path(self, blob_id: str) -> str:
        return f"{self.base_path}/{blob_id}"

    def _meta_path(self, blob_id: str) -> str:
        return f"{self._path(blob_id)}.meta.json"

    @contextmanager
    def _translate_errors(self, action: str, blob_id: str) -> Generator[None, None, None]:
        try:
            yield
        except FileNotFoundError as e:
            msg = f"Blob {blob_id} not found"
            raise BlobNotFoundError(msg) from e
        except OSError as e:
            msg = f"Failed to {action} {blob_id}: {e!s}"
            raise InfrastructureError(msg) from e

    def upload(self, name: str, stream: BinaryIO, metadata: dict[str, Any]) -> StoredBlob:
        blob_id = uuid4().hex

        h = hashlib.sha256()
        size = 0

        try:
            with self._translate_errors("upload blob", blob_id):
                self.fs.makedirs(self.base_path, exist_ok=True)
                with self.fs.open(self._path(blob_id), "wb") as out:
                    while True:
                        chunk = stream.read(self.chunk_size_bytes)
                        if not chunk:
                            break
                        out.write(chunk)
                        h.update(chunk)
                        size += len(chunk)

                sidecar = {
                    "filename": name,
                    "length": size,
                    "sha256": h.hexdigest(),
                    "metadata": metadata,
                }
                self.fs.pipe_file(self._meta_path(blob_id), to_json(sidecar))
        except Exception:
            self._remove_partial(blob_id)
            raise

        return StoredBlob(blob_id=blob_id, size_bytes=size, sha256=h.hexdigest())

    def download(self, blob_id: str) -> Iterator[bytes]:
        with self._translate_errors("open blob", blob_id):
            handle = self.fs.open(self._path(blob_id), "rb")
        return self._iter_chunks(blob_id, handle)

    def get_bytes(self, blob_id: str) -> bytes:
        with self._translate_errors("read blob", blob_id):
            return self.fs.cat_file(self._path(blob_id))

    def exists(self, blob_id: str) -> bool:
        with self._translate_errors("look up blob", blob_id):
            return self.fs.exists(self._path(blob_id))

    def delete(self, blob_id: str) -> bool:
        with self._translate_errors("delete blob", blob_id):
            if not self.fs.exists(self._path(blob_id)):
                return False
            self.fs.rm(self._path(blob_id))
            if self.fs.exists(self._meta_path(blob_id)):
                self.fs.rm(self._meta_path(blob_id))
        return True

    def update_metadata(self, blob_id: str, fields: dict[str, Any]) -> bool:
        """Read-modify-write the sidecar; last writer wins."""
        with self._translate_errors("update blob metadata", blob_id):
            if not self.fs.exists(self._meta_path(blob_id)):
                return False
            sidecar = from_json(self.fs.cat_file(self._meta_path(blob_id)))
            sidecar["metadata"] = {**sidecar.get("metadata", {}), **fields}
            self.fs.pipe_file(self._meta_path(blob_id), to_json(sidecar))
        return True

    def _remove_partial(self, blob_id: str) -> None:
        for path in (self._path(blob_id), self._meta_path(blob_id)):
            try:
                if self.fs.exists(path):
                    self.fs.rm(path)
            except OSError:
                logger.exception("partial_blob_cleanup_failed", blob_id=blob_id, path=path)

    def _iter_chunks(self, blob_id: str, handle: BinaryIO) -> Iterator[bytes]:
        try:
            while True:
                with self._translate_errors("read blob", blob_id):
                    chunk = handle.read(self.chunk_size_bytes)
                if not chunk:
                    break
                yield chunk
        finally:
            handle.close()
