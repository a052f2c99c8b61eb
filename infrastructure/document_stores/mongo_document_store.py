from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from application.ports.document_store import Document, DocumentStore
from domain.exceptions import ConflictError, InfrastructureError

if TYPE_CHECKING:
    from collections.abc import Generator

    from pymongo.collection import Collection


def _object_id(doc_id: str) -> ObjectId | None:
    """Parse a document id; ``None`` for anything that is not an ObjectId string."""
    if not isinstance(doc_id, str) or not ObjectId.is_valid(doc_id):
        return None
    return ObjectId(doc_id)


def _from_mongo(raw: dict[str, Any]) -> Document:
    doc = dict(raw)
    doc["id"] = str(doc.pop("_id"))
    return doc


def _body(doc: Document) -> Document:
    return {key: value for key, value in doc.items() if key not in ("id", "_id")}


class MongoDocumentStore(DocumentStore):
    """DocumentStore over one pymongo collection, keyed by ObjectId."""

    def __init__(self, collection: Collection) -> None:
        self.collection = collection

    @contextmanager
    def _translate_errors(self, action: str) -> Generator[None, None, None]:
        try:
            yield
        except DuplicateKeyError as e:
            msg = f"Duplicate document in {self.collection.name}: {e!s}"
            raise ConflictError(msg) from e
        except PyMongoError as e:
            msg = f"Failed to {action} in {self.collection.name}: {e!s}"
            raise InfrastructureError(msg) from e

    def insert(self, doc: Document) -> str:
        with self._translate_errors("insert document"):
            result = self.collection.insert_one(_body(doc))
        return str(result.inserted_id)

    def find_by_id(self, doc_id: str) -> Document | None:
        oid = _object_id(doc_id)
        if oid is None:
            return None
        with self._translate_errors("find document"):
            raw = self.collection.find_one({"_id": oid})
        return _from_mongo(raw) if raw is not None else None

    def find_by(self, filters: Document | None = None) -> list[Document]:
        with self._translate_errors("query documents"):
            return [_from_mongo(raw) for raw in self.collection.find(filters or {})]

    def update_partial(self, doc_id: str, fields: Document) -> Document | None:
        oid = _object_id(doc_id)
        if oid is None:
            return None
        with self._translate_errors("update document"):
            raw = self.collection.find_one_and_update(
                {"_id": oid},
                {"$set": _body(fields)},
                return_document=ReturnDocument.AFTER,
            )
        return _from_mongo(raw) if raw is not None else None

    def delete_by_id(self, doc_id: str) -> bool:
        oid = _object_id(doc_id)
        if oid is None:
            return False
        with self._translate_errors("delete document"):
            result = self.collection.delete_one({"_id": oid})
        return result.deleted_count == 1
