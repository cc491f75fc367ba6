"""
Sanitization of user-submitted text and links.

Report titles, descriptions, addresses and community names are rendered by
the frontend in cards, popups and the admin table, so they are stored as
plain text with all markup stripped. Image, icon and banner links come from
the upload service and must be http(s) or site-relative.
"""

import html
from typing import Optional

import bleach

ALLOWED_URL_SCHEMES = ("http://", "https://")


def sanitize_plain_text(content: Optional[str]) -> Optional[str]:
    """
    Strip all HTML tags and surrounding whitespace.

    Args:
        content: Raw content from user input

    Returns:
        Plain text with all HTML removed, or None if input is None

    Examples:
        >>> sanitize_plain_text('<script>alert(1)</script>Pothole')
        'alert(1)Pothole'
        >>> sanitize_plain_text('  <b>Main</b> St  ')
        'Main St'
        >>> sanitize_plain_text('Rock & Roll')
        'Rock & Roll'
    """
    if content is None:
        return None

    # bleach escapes bare "&" and "<"; stored values are text, not HTML
    text = html.unescape(bleach.clean(content, tags=[], strip=True))
    # Entity-encoded tags only surface after unescaping
    while True:
        cleaned = html.unescape(bleach.clean(text, tags=[], strip=True))
        if cleaned == text:
            break
        text = cleaned
    return text.strip()


def sanitize_url(url: Optional[str]) -> Optional[str]:
    """
    Keep only http(s) and site-relative URLs.

    Args:
        url: URL from user input

    Returns:
        The trimmed URL, None for empty input, or "" when the scheme is not
        allowed (javascript:, data:, ...).

    Examples:
        >>> sanitize_url('javascript:alert(1)')
        ''
        >>> sanitize_url('https://cdn.example.com/photo.jpg')
        'https://cdn.example.com/photo.jpg'
    """
    if url is None:
        return None

    url = url.strip()
    if not url:
        return None

    if url.lower().startswith(ALLOWED_URL_SCHEMES):
        return url

    # Protocol-relative URLs can point anywhere
    if url.startswith("//"):
        return ""

    # Relative paths (no scheme before the first slash) are allowed
    if ":" not in url.split("/")[0]:
        return url

    return ""


def sanitize_fields(data: dict, text_fields: set[str], url_fields: set[str]) -> dict:
    """
    Sanitize a payload dict in place of the known text and URL fields.

    Fields absent from ``data`` are left absent; explicit ``None`` values are
    kept so callers can clear optional columns. Rejected URLs become None.

    Returns:
        A new dict with sanitized values.
    """
    cleaned = dict(data)
    for field in text_fields & cleaned.keys():
        if isinstance(cleaned[field], str):
            cleaned[field] = sanitize_plain_text(cleaned[field])
    for field in url_fields & cleaned.keys():
        if isinstance(cleaned[field], str):
            cleaned[field] = sanitize_url(cleaned[field]) or None
    return cleaned
