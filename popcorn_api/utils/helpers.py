# popcorn_api/utils/helpers.py

import logging
from typing import Any, List, Optional

logger = logging.getLogger(__name__)

# --- Text Processing ---

def normalize_text(text: Optional[str]) -> str:
    """
    Strips surrounding whitespace from a string.
    Returns an empty string for None or whitespace-only input.

    Args:
        text: The input string or None.

    Returns:
        The stripped string, possibly empty.
    """
    if text is None:
        return ""
    return text.strip()

def split_names(value: Optional[str], separator: str = ",") -> List[str]:
    """
    Splits a delimited list of names, dropping blanks.

    Args:
        value: e.g. "Action, Drama" or None.
        separator: The delimiter between names.

    Returns:
        The list of stripped, non-empty names.
    """
    if not value:
        return []
    return [part.strip() for part in value.split(separator) if part.strip()]

# --- Lenient Parsing ---

def parse_int(value: Any, default: int) -> int:
    """
    Converts a query-string value to int, falling back to a default.

    Integer text is parsed exactly. Decimal text is truncated ("7.5" -> 7).
    Anything unparseable or non-finite yields `default`.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return int(float(text))
    except (ValueError, OverflowError):
        logger.debug(f"Could not parse {value!r} as int, using {default}.")
        return default

# --- Pagination Helpers ---

def calculate_skip(page: int, limit: int) -> int:
    """
    Calculates the number of rows to skip for pagination.

    Args:
        page: The current page number (1-based).
        limit: The number of items per page.

    Returns:
        The number of rows to skip.

    Raises:
        ValueError: If page or limit are not positive integers.
    """
    if not isinstance(page, int) or page < 1:
        raise ValueError("Page number must be a positive integer.")
    if not isinstance(limit, int) or limit < 1:
        raise ValueError("Page limit must be a positive integer.")
    return (page - 1) * limit
