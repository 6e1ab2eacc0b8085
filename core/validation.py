TITLE_MIN_LENGTH = 3
TITLE_MAX_LENGTH = 50


class TaskValidationError(ValueError):
    pass


def validate_title(title: str) -> str:
    """Return the stripped title or raise ``TaskValidationError``."""
    value = (title or "").strip()
    if not value:
        raise TaskValidationError("Title is required")
    if len(value) < TITLE_MIN_LENGTH:
        raise TaskValidationError(f"Title must be at least {TITLE_MIN_LENGTH} characters")
    if len(value) > TITLE_MAX_LENGTH:
        raise TaskValidationError(f"Title must be at most {TITLE_MAX_LENGTH} characters")
    return value


__all__ = ["TaskValidationError", "validate_title", "TITLE_MIN_LENGTH", "TITLE_MAX_LENGTH"]
