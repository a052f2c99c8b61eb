"""Domain exceptions for business rule violations and store failures."""


class DomainError(Exception):
    """Base exception for domain layer."""


class ConflictError(DomainError):
    """Raised when a write would break a uniqueness rule (e.g. one rating per user)."""


class BlobNotFoundError(DomainError):
    """Raised when a blob id does not resolve to stored content."""


class InfrastructureError(DomainError):
    """Raised when infrastructure operations fail (DB, network, etc.)."""
