from collections.abc import Container
from typing import Annotated

from fastapi import APIRouter, Depends, status

from application.dtos.profile_dtos import CreateProfileRequest, UpdateProfileRequest
from application.repositories.profile_repository import ProfileRepository
from domain.aggregates.profile import ProfileRecord
from interfaces.api.middleware import handle_repository_errors
from interfaces.api.routes.helpers import deleted_or_not_found
from interfaces.dependencies import get_container

router = APIRouter(prefix="/profiles", tags=["profiles"])


@router.post("", status_code=status.HTTP_201_CREATED)
@handle_repository_errors
def create_profile(
    request: CreateProfileRequest,
    container: Annotated[Container, Depends(get_container)],
) -> ProfileRecord:
    return container[ProfileRepository].create(request)


@router.get("", status_code=status.HTTP_200_OK)
@handle_repository_errors
def list_profiles(
    container: Annotated[Container, Depends(get_container)],
) -> list[ProfileRecord]:
    return container[ProfileRepository].list_all()


@router.get("/user/{user_id}", status_code=status.HTTP_200_OK)
@handle_repository_errors
def get_profile_by_user(
    user_id: str,
    container: Annotated[Container, Depends(get_container)],
) -> ProfileRecord:
    return container[ProfileRepository].get_by_user_id(user_id)


@router.get("/{profile_id}", status_code=status.HTTP_200_OK)
@handle_repository_errors
def get_profile(
    profile_id: str,
    container: Annotated[Container, Depends(get_container)],
) -> ProfileRecord:
    return container[ProfileRepository].get(profile_id)


@router.put("/{profile_id}", status_code=status.HTTP_200_OK)
@handle_repository_errors
def update_profile(
    profile_id: str,
    request: UpdateProfileRequest,
    container: Annotated[Container, Depends(get_container)],
) -> ProfileRecord:
    """Update profile fields. Genre and instrument lists are replaced, not merged."""
    return container[ProfileRepository].update(profile_id, request)


@router.delete("/{profile_id}", status_code=status.HTTP_200_OK)
@handle_repository_errors
def delete_profile(
    profile_id: str,
    container: Annotated[Container, Depends(get_container)],
) -> dict[str, object]:
    """Delete a profile. Its ratings and files are not deleted."""
    return (
        container[ProfileRepository]
        .delete(profile_id)
        .bind(lambda deleted: deleted_or_not_found(deleted, "Profile", profile_id))
    )
