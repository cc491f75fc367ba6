"""
Community slug generation.

Slugs appear in every community URL (``/communities/{slug}``), so they are
lowercase ASCII words joined by single hyphens.
"""

import re
import unicodedata

MAX_SLUG_LENGTH = 80

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(value: str) -> str:
    """
    Turn a community name into a URL-safe slug.

    >>> slugify("Test City")
    'test-city'
    >>> slugify("  Côte-des-Neiges / Notre-Dame  ")
    'cote-des-neiges-notre-dame'
    """
    normalized = (
        unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    )
    slug = _NON_ALNUM.sub("-", normalized.lower()).strip("-")
    return slug[:MAX_SLUG_LENGTH].rstrip("-")


def with_suffix(slug: str, n: int) -> str:
    """Append a numeric suffix, trimming so the result stays within bounds."""
    suffix = f"-{n}"
    return slug[: MAX_SLUG_LENGTH - len(suffix)].rstrip("-") + suffix
