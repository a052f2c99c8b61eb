from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import structlog
from returns.result import Failure, Result, Success

from application.dtos.errors import NOT_FOUND, STORE_UNAVAILABLE, AppError
from domain.aggregates.profile import ProfileRecord, normalize_tags
from domain.exceptions import InfrastructureError

if TYPE_CHECKING:
    from application.dtos.profile_dtos import CreateProfileRequest, UpdateProfileRequest
    from application.ports.document_store import DocumentStore
    from domain.value_objects.rating_stats import RatingStats

logger = structlog.get_logger()

# fields that may not be cleared by an update
_REQUIRED_ON_UPDATE = ("name", "genres", "instruments")


def _profile_not_found(profile_id: str) -> Failure[AppError]:
    return Failure(AppError(NOT_FOUND, f"Profile {profile_id} not found"))


class ProfileRepository:
    """CRUD over musician profiles."""

    def __init__(self, document_store: DocumentStore) -> None:
        self.document_store = document_store

    def create(self, request: CreateProfileRequest) -> Result[ProfileRecord, AppError]:
        now = datetime.now(tz=UTC)
        profile = ProfileRecord(
            user_id=request.user_id,
            name=request.name,
            biography=request.biography,
            genres=request.genres,
            instruments=request.instruments,
            created_at=now,
            updated_at=now,
        )
        try:
            profile.id = self.document_store.insert(profile.to_document())
        except InfrastructureError as e:
            return Failure(AppError(STORE_UNAVAILABLE, f"Failed to create profile: {e!s}"))

        logger.info("profile_created", profile_id=profile.id, user_id=profile.user_id)
        return Success(profile)

    def get(self, profile_id: str) -> Result[ProfileRecord, AppError]:
        try:
            doc = self.document_store.find_by_id(profile_id)
        except InfrastructureError as e:
            return Failure(AppError(STORE_UNAVAILABLE, f"Failed to load profile: {e!s}"))

        if doc is None:
            return _profile_not_found(profile_id)
        return Success(ProfileRecord.from_document(doc))

    def get_by_user_id(self, user_id: str) -> Result[ProfileRecord, AppError]:
        try:
            docs = self.document_store.find_by({"userId": user_id})
        except InfrastructureError as e:
            return Failure(AppError(STORE_UNAVAILABLE, f"Failed to load profile: {e!s}"))

        if not docs:
            return Failure(AppError(NOT_FOUND, f"No profile for user {user_id}"))
        return Success(ProfileRecord.from_document(docs[0]))

    def list_all(self) -> Result[list[ProfileRecord], AppError]:
        try:
            docs = self.document_store.find_by()
        except InfrastructureError as e:
            return Failure(AppError(STORE_UNAVAILABLE, f"Failed to list profiles: {e!s}"))
        return Success([ProfileRecord.from_document(doc) for doc in docs])

    def update(
        self,
        profile_id: str,
        request: UpdateProfileRequest,
    ) -> Result[ProfileRecord, AppError]:
        """Apply the fields set on ``request`` and bump ``updated_at``.

        List fields replace the stored lists; callers wanting to append must
        send the complete list. Rating statistics are never touched here.
        """
        fields = request.model_dump(exclude_unset=True, by_alias=True)
        for name in _REQUIRED_ON_UPDATE:
            if name in fields and fields[name] is None:
                del fields[name]
        for name in ("genres", "instruments"):
            if name in fields:
                fields[name] = normalize_tags(fields[name])
        fields["updatedAt"] = datetime.now(tz=UTC)

        try:
            doc = self.document_store.update_partial(profile_id, fields)
        except InfrastructureError as e:
            return Failure(AppError(STORE_UNAVAILABLE, f"Failed to update profile: {e!s}"))

        if doc is None:
            return _profile_not_found(profile_id)

        logger.info("profile_updated", profile_id=profile_id, fields=sorted(fields))
        return Success(ProfileRecord.from_document(doc))

    def delete(self, profile_id: str) -> Result[bool, AppError]:
        """Delete a profile. Ratings and files referring to it are left in place."""
        try:
            deleted = self.document_store.delete_by_id(profile_id)
        except InfrastructureError as e:
            return Failure(AppError(STORE_UNAVAILABLE, f"Failed to delete profile: {e!s}"))

        if deleted:
            logger.info("profile_deleted", profile_id=profile_id)
        return Success(deleted)

    def update_rating_stats(
        self,
        profile_id: str,
        stats: RatingStats,
    ) -> Result[ProfileRecord, AppError]:
        """Write only ``averageRating`` and ``totalRatings`` on the profile."""
        try:
            doc = self.document_store.update_partial(
                profile_id,
                {"averageRating": stats.average_rating, "totalRatings": stats.total_ratings},
            )
        except InfrastructureError as e:
            return Failure(AppError(STORE_UNAVAILABLE, f"Failed to update rating stats: {e!s}"))

        if doc is None:
            return _profile_not_found(profile_id)
        return Success(ProfileRecord.from_document(doc))
