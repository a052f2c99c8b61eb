"""Tests for container wiring helpers."""

from __future__ import annotations

from typing import Any
from uuid import uuid4

from infrastructure.blob_stores.fsspec_blob_store import FsspecBlobStore
from infrastructure.config import Settings
from infrastructure.di.container import create_blob_store, ensure_indexes


class RecordingCollection:
    def __init__(self) -> None:
        self.indexes: list[Any] = []

    def create_index(self, keys: Any, **kwargs: Any) -> str:
        self.indexes.append((keys, kwargs))
        return "index"


class RecordingDatabase:
    def __init__(self) -> None:
        self.collections: dict[str, RecordingCollection] = {}

    def __getitem__(self, name: str) -> RecordingCollection:
        return self.collections.setdefault(name, RecordingCollection())


class TestContainerHelpers:
    def test_fsspec_backend_selected(self) -> None:
        config = Settings(
            BLOB_BACKEND="fsspec",
            BLOB_BASE_URL=f"memory://container-{uuid4().hex}",
            BLOB_CHUNK_SIZE_BYTES=512,
        )

        store = create_blob_store(RecordingDatabase(), config)

        assert isinstance(store, FsspecBlobStore)
        assert store.chunk_size_bytes == 512

    def test_ensure_indexes_creates_non_unique_lookups(self) -> None:
        database = RecordingDatabase()
        config = Settings()

        ensure_indexes(database, config)

        assert set(database.collections) == {
            config.mongo_profiles_collection,
            config.mongo_multimedia_collection,
            config.mongo_ratings_collection,
        }
        for collection in database.collections.values():
            assert collection.indexes
            assert all("unique" not in kwargs for _, kwargs in collection.indexes)

    def test_defaults(self) -> None:
        config = Settings()
        assert config.mongo_multimedia_collection == "multimedia"
        assert config.mongo_profiles_collection == "musician_profiles"
        assert config.mongo_ratings_collection == "ratings"
        assert config.gridfs_bucket == "files"
        assert config.blob_chunk_size_bytes == 1024 * 1024
        assert config.max_file_size == 10 * 1024 * 1024
