from __future__ import annotations

import structlog
from lagom import Container
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database

from application.ports.blob_store import BlobStore
from application.repositories.multimedia_repository import MultimediaRepository
from application.repositories.profile_aggregate_updater import ProfileAggregateUpdater
from application.repositories.profile_repository import ProfileRepository
from application.repositories.rating_repository import RatingRepository
from infrastructure.blob_stores.fsspec_blob_store import FsspecBlobStore
from infrastructure.blob_stores.gridfs_blob_store import GridFsBlobStore
from infrastructure.config import Settings, settings
from infrastructure.document_stores.mongo_document_store import MongoDocumentStore

logger = structlog.get_logger()


def create_blob_store(database: Database, config: Settings) -> BlobStore:
    if config.blob_backend == "fsspec":
        return FsspecBlobStore(
            base_url=config.blob_base_url,
            storage_options=config.blob_storage_options,
            chunk_size_bytes=config.blob_chunk_size_bytes,
        )
    return GridFsBlobStore(
        database,
        bucket_name=config.gridfs_bucket,
        chunk_size_bytes=config.blob_chunk_size_bytes,
    )


def ensure_indexes(database: Database, config: Settings) -> None:
    """Create lookup indexes. None are unique: one rating per user is checked in code."""
    database[config.mongo_profiles_collection].create_index("userId")
    database[config.mongo_multimedia_collection].create_index(
        [("ownerId", ASCENDING), ("isPublic", ASCENDING)],
    )
    database[config.mongo_ratings_collection].create_index(
        [("musicianId", ASCENDING), ("userId", ASCENDING)],
    )


def create_container(config: Settings = settings) -> Container:
    container = Container()

    # MongoClient connects lazily, so building the container never blocks
    mongo_client = MongoClient(config.mongo_uri, tz_aware=True)
    database = mongo_client[config.mongo_db]
    container[MongoClient] = mongo_client
    container[Database] = database
    container[Settings] = config

    # Blob storage
    container[BlobStore] = create_blob_store(database, config)

    # Repositories, one document store per collection
    container[ProfileRepository] = lambda _: ProfileRepository(
        document_store=MongoDocumentStore(database[config.mongo_profiles_collection]),
    )
    container[ProfileAggregateUpdater] = lambda c: ProfileAggregateUpdater(
        rating_store=MongoDocumentStore(database[config.mongo_ratings_collection]),
        profile_repository=c[ProfileRepository],
    )
    container[RatingRepository] = lambda c: RatingRepository(
        document_store=MongoDocumentStore(database[config.mongo_ratings_collection]),
        aggregate_updater=c[ProfileAggregateUpdater],
    )
    container[MultimediaRepository] = lambda c: MultimediaRepository(
        document_store=MongoDocumentStore(database[config.mongo_multimedia_collection]),
        blob_store=c[BlobStore],
    )

    logger.debug("container_created", mongo_db=config.mongo_db, blob_backend=config.blob_backend)
    return container
