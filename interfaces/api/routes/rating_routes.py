from collections.abc import Container
from typing import Annotated

from fastapi import APIRouter, Depends, status

from application.dtos.rating_dtos import SubmitRatingRequest
from application.repositories.profile_repository import ProfileRepository
from application.repositories.rating_repository import RatingRepository
from domain.aggregates.rating import RatingRecord
from interfaces.api.middleware import handle_repository_errors
from interfaces.api.routes.helpers import deleted_or_not_found
from interfaces.dependencies import get_container

router = APIRouter(prefix="/ratings", tags=["ratings"])


@router.post("", status_code=status.HTTP_201_CREATED)
@handle_repository_errors
def add_rating(
    request: SubmitRatingRequest,
    container: Annotated[Container, Depends(get_container)],
) -> RatingRecord:
    """Rate a musician.

    Returns:
        201 Created: Rating stored and musician stats recomputed
        400 Bad Request: Rating outside 1..5
        404 Not Found: Musician profile does not exist
        409 Conflict: This user already rated this musician

    """
    repository = container[RatingRepository]
    return container[ProfileRepository].get(request.musician_id).bind(
        lambda _: repository.add(
            request.musician_id,
            request.user_id,
            request.rating,
            request.comment,
        ),
    )


@router.put("", status_code=status.HTTP_200_OK)
@handle_repository_errors
def replace_rating(
    request: SubmitRatingRequest,
    container: Annotated[Container, Depends(get_container)],
) -> RatingRecord:
    """Add or replace this user's rating. The returned rating always has a new id."""
    repository = container[RatingRepository]
    return container[ProfileRepository].get(request.musician_id).bind(
        lambda _: repository.upsert(
            request.musician_id,
            request.user_id,
            request.rating,
            request.comment,
        ),
    )


@router.get("", status_code=status.HTTP_200_OK)
@handle_repository_errors
def list_ratings(
    container: Annotated[Container, Depends(get_container)],
) -> list[RatingRecord]:
    return container[RatingRepository].list_all()


@router.get("/musician/{musician_id}", status_code=status.HTTP_200_OK)
@handle_repository_errors
def list_ratings_for_musician(
    musician_id: str,
    container: Annotated[Container, Depends(get_container)],
) -> list[RatingRecord]:
    return container[RatingRepository].list_by_musician(musician_id)


@router.get("/musician/{musician_id}/user/{user_id}", status_code=status.HTTP_200_OK)
@handle_repository_errors
def get_user_rating_for_musician(
    musician_id: str,
    user_id: str,
    container: Annotated[Container, Depends(get_container)],
) -> RatingRecord:
    return container[RatingRepository].find_by_user_and_musician(musician_id, user_id)


@router.get("/{rating_id}", status_code=status.HTTP_200_OK)
@handle_repository_errors
def get_rating(
    rating_id: str,
    container: Annotated[Container, Depends(get_container)],
) -> RatingRecord:
    return container[RatingRepository].get(rating_id)


@router.delete("/{rating_id}", status_code=status.HTTP_200_OK)
@handle_repository_errors
def delete_rating(
    rating_id: str,
    container: Annotated[Container, Depends(get_container)],
) -> dict[str, object]:
    return (
        container[RatingRepository]
        .delete(rating_id)
        .bind(lambda deleted: deleted_or_not_found(deleted, "Rating", rating_id))
    )
