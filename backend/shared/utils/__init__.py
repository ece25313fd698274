"""
Utilities module: Exceptions, validators, health helpers.
"""

from shared.utils.exceptions import (
    DatabaseError,
    MissingKeyFieldError,
    NotFoundError,
    ValidationError,
)
from shared.utils.validators import (
    contains_pattern,
    escape_like_pattern,
    sanitize_search_term,
)

__all__ = [
    # exceptions
    "DatabaseError",
    "MissingKeyFieldError",
    "NotFoundError",
    "ValidationError",
    # validators
    "contains_pattern",
    "escape_like_pattern",
    "sanitize_search_term",
]
