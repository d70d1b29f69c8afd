"""Pagination bounds shared by every listing operation."""

from coachtrack.core.errors import InputValidationError


DEFAULT_PAGE_SIZE: int = 20
MAX_PAGE_SIZE: int = 100


def validate_page(page: int, page_size: int) -> int:
    """Validate bounds and return the row offset."""
    if page < 1:
        raise InputValidationError("page must be >= 1", field="page")
    if not 1 <= page_size <= MAX_PAGE_SIZE:
        raise InputValidationError(
            f"page_size must be between 1 and {MAX_PAGE_SIZE}", field="page_size",
        )
    return (page - 1) * page_size
