NOT_FOUND = "not_found"
CONTENT_MISSING = "content_missing"
CONFLICT = "conflict"
VALIDATION = "validation"
STORE_UNAVAILABLE = "store_unavailable"


class AppError:
    """Represents different categories of application errors."""

    def __init__(self, category: str, message: str) -> None:
        # one of the module-level category constants
        self.category = category
        self.message = message

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"AppError({self.category!r}, {self.message!r})"
