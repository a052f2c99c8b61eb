from __future__ import annotations

from typing import Any, Protocol

Document = dict[str, Any]


class DocumentStore(Protocol):
    """A single document collection keyed by a store-assigned surrogate id.

    Returned documents carry their key as a string under ``"id"``. Ids that the
    store cannot parse are treated as absent. Backend failures are raised as
    ``InfrastructureError``.
    """

    def insert(self, doc: Document) -> str: ...
    def find_by_id(self, doc_id: str) -> Document | None: ...
    def find_by(self, filters: Document | None = None) -> list[Document]: ...
    def update_partial(self, doc_id: str, fields: Document) -> Document | None:
        """Set ``fields`` on one document and return it as it is after the update."""
        ...

    def delete_by_id(self, doc_id: str) -> bool: ...
