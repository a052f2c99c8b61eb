"""Shared test fixtures and configuration."""

from __future__ import annotations

import pytest

from application.dtos.multimedia_dtos import UploadMultimediaRequest
from application.dtos.profile_dtos import CreateProfileRequest
from application.repositories.multimedia_repository import MultimediaRepository
from application.repositories.profile_aggregate_updater import ProfileAggregateUpdater
from application.repositories.profile_repository import ProfileRepository
from application.repositories.rating_repository import RatingRepository
from domain.aggregates.profile import ProfileRecord
from tests.mocks import InMemoryBlobStore, InMemoryDocumentStore


@pytest.fixture
def profile_store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def rating_store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def multimedia_store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def blob_store() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture
def profile_repository(profile_store: InMemoryDocumentStore) -> ProfileRepository:
    return ProfileRepository(profile_store)


@pytest.fixture
def aggregate_updater(
    rating_store: InMemoryDocumentStore,
    profile_repository: ProfileRepository,
) -> ProfileAggregateUpdater:
    return ProfileAggregateUpdater(rating_store, profile_repository)


@pytest.fixture
def rating_repository(
    rating_store: InMemoryDocumentStore,
    aggregate_updater: ProfileAggregateUpdater,
) -> RatingRepository:
    return RatingRepository(rating_store, aggregate_updater)


@pytest.fixture
def multimedia_repository(
    multimedia_store: InMemoryDocumentStore,
    blob_store: InMemoryBlobStore,
) -> MultimediaRepository:
    return MultimediaRepository(multimedia_store, blob_store)


@pytest.fixture
def musician(profile_repository: ProfileRepository) -> ProfileRecord:
    """Create a stored musician profile."""
    return profile_repository.create(
        CreateProfileRequest(
            user_id="user-ana",
            name="Ana Lima",
            biography="Bossa nova guitarist",
            genres=["bossa nova", "jazz"],
            instruments=["guitar"],
        ),
    ).unwrap()


@pytest.fixture
def image_upload_request(musician: ProfileRecord) -> UploadMultimediaRequest:
    return UploadMultimediaRequest(
        filename="cover.png",
        content_type="image/png",
        owner_id=musician.id,
        title="Album cover",
        file_size=10,
    )
