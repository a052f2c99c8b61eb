from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, BinaryIO, Protocol

if TYPE_CHECKING:
    from collections.abc import Iterator


@dataclass(frozen=True)
class StoredBlob:
    blob_id: str
    size_bytes: int
    sha256: str


class BlobStore(Protocol):
    """Chunked binary storage keyed by a store-assigned blob id.

    Implementations raise ``BlobNotFoundError`` for unknown ids on reads and
    ``InfrastructureError`` when the backend itself fails.
    """

    def upload(self, name: str, stream: BinaryIO, metadata: dict[str, Any]) -> StoredBlob: ...
    def download(self, blob_id: str) -> Iterator[bytes]:
        """Stream the blob in chunks.

        The blob is resolved before the iterator is returned, so a missing
        blob fails here rather than on first iteration.
        """
        ...

    def get_bytes(self, blob_id: str) -> bytes: ...
    def exists(self, blob_id: str) -> bool: ...
    def delete(self, blob_id: str) -> bool: ...
    def update_metadata(self, blob_id: str, fields: dict[str, Any]) -> bool: ...
