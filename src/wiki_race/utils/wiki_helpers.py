"""
Helper functions for Wikipedia page title normalization and validation.
"""

import re

_WHITESPACE_RE = re.compile(r"[\s_]+")


def normalize_page_title(page_title: str) -> str:
    """Returns the canonical display form of a page title.

    Underscores and runs of whitespace collapse to single spaces and the first
    character is upper-cased, matching how MediaWiki stores article titles.

    Args:
      page_title: The page title to normalize.

    Returns:
      The normalized page title.

    Examples:
      "notre_Dame  Fighting_Irish"  =>   "Notre Dame Fighting Irish"
      " iPhone "                    =>   "IPhone"

    Raises:
      ValueError: If the provided page title is invalid.
    """
    validate_page_title(page_title)
    title = _WHITESPACE_RE.sub(" ", page_title).strip()
    if not title:
        raise ValueError(f'Invalid page title "{page_title}" provided. Page title must not be blank.')
    return title[0].upper() + title[1:]


def split_namespace(page_title: str) -> tuple:
    """Splits "Namespace:Rest" into ("namespace", "Rest").

    Titles without a colon return ("", page_title). The namespace is returned
    lower-cased with surrounding whitespace removed.
    """
    if ":" not in page_title:
        return "", page_title
    prefix, rest = page_title.split(":", 1)
    return prefix.strip().lower(), rest


def is_str(val) -> bool:
    """Returns whether or not the provided value is a string type."""
    return isinstance(val, str)


def validate_page_title(page_title: str):
    """Validates the provided value is a valid page title.

    Args:
      page_title: The page title to validate.

    Returns:
      None

    Raises:
      ValueError: If the provided page title is invalid.
    """
    if not page_title or not is_str(page_title):
        raise ValueError(
            f'Invalid page title "{page_title}" provided. Page title must be a non-empty string.'
        )
