"""API middleware for error handling and cross-cutting concerns."""

from interfaces.api.middleware.error_handler import handle_repository_errors

__all__ = ["handle_repository_errors"]
