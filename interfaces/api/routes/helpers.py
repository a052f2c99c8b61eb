from fastapi import HTTPException, status
from returns.result import Failure, Result, Success

from application.dtos.errors import (
    CONFLICT,
    CONTENT_MISSING,
    NOT_FOUND,
    STORE_UNAVAILABLE,
    VALIDATION,
    AppError,
)

_STATUS_BY_CATEGORY = {
    VALIDATION: status.HTTP_400_BAD_REQUEST,
    NOT_FOUND: status.HTTP_404_NOT_FOUND,
    CONFLICT: status.HTTP_409_CONFLICT,
    # metadata exists but its content is gone
    CONTENT_MISSING: status.HTTP_410_GONE,
    STORE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def _map_app_error_to_http_exception(error: AppError) -> HTTPException:
    """Map application layer errors to appropriate HTTP exceptions."""
    status_code = _STATUS_BY_CATEGORY.get(error.category)
    if status_code is None:
        # Unknown error category
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        )
    if status_code == status.HTTP_503_SERVICE_UNAVAILABLE:
        return HTTPException(status_code=status_code, detail="Service temporarily unavailable")
    return HTTPException(status_code=status_code, detail=error.message)


def deleted_or_not_found(
    deleted: bool,  # noqa: FBT001
    entity: str,
    entity_id: str,
) -> Result[dict[str, object], AppError]:
    """Turn a repository's delete flag into a response body or a 404."""
    if not deleted:
        return Failure(AppError(NOT_FOUND, f"{entity} {entity_id} not found"))
    return Success({"deleted": True, "id": entity_id})
