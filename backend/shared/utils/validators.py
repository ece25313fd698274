"""
Shared validators for input sanitization.
"""

import re

from shared.config.constants import ErrorMessages, Limits


def escape_like_pattern(value: str) -> str:
    """
    Escape special characters in LIKE patterns.

    SQL LIKE uses % and _ as wildcards. Escaping them (with backslash as the
    escape character) makes user input match literally.

    Args:
        value: The search string to escape

    Returns:
        The escaped string safe for use in LIKE patterns
    """
    if not value:
        return value

    # Escape the escape character first, then the wildcards
    value = value.replace("\\", "\\\\")
    value = value.replace("%", "\\%")
    value = value.replace("_", "\\_")
    return value


def contains_pattern(value: str) -> str:
    """Escaped ``%value%`` for substring matching."""
    return f"%{escape_like_pattern(value)}%"


def is_valid_code(code: object, pattern: str, max_length: int) -> bool:
    """Non-blank string of allowed characters no longer than ``max_length``."""
    if not isinstance(code, str):
        return False
    code = code.strip()
    return 0 < len(code) <= max_length and re.match(pattern, code) is not None


def sanitize_search_term(term: str | None, label: str = "search term",
                         max_length: int = Limits.MAX_SEARCH_TERM_LENGTH) -> tuple[str, str | None]:
    """
    Trim a search term and check it.

    Returns:
        (trimmed_term, error_message_or_None). Blank or over-long terms are
        errors rather than being truncated.
    """
    # Remove control characters before measuring
    term = re.sub(r"[\x00-\x1f\x7f-\x9f]", "", term or "").strip()
    if not term:
        return term, ErrorMessages.SEARCH_TERM_REQUIRED.format(term=label)
    if len(term) > max_length:
        return term, ErrorMessages.SEARCH_TERM_TOO_LONG.format(term=label, limit=max_length)
    return term, None
