"""
Utility functions for vinime-bot.

Provides helpers for URL normalization, slug handling, text formatting and
pagination.
"""
import html
import math
import re
import unicodedata
from typing import List, Sequence, Tuple, TypeVar
from urllib.parse import urlparse

T = TypeVar("T")

GENRE_SLUG_RE = re.compile(r"/genres/([^/?#]+)")


def to_abs_url(href: str, origin: str) -> str:
    """Normalize an href to an absolute URL on ``origin``.

    Args:
        href: The raw href attribute (may be empty, relative or absolute).
        origin: Site origin without trailing slash, e.g. ``https://otakudesu.cloud``.

    Returns:
        ``href`` unchanged when already absolute, otherwise ``origin`` joined
        with ``href`` by exactly one ``/``. Empty input gives an empty string.
    """
    if not href:
        return ""
    href = href.strip()
    if href.startswith("http"):
        return href
    return origin + (href if href.startswith("/") else "/" + href)


def origin_of(url: str) -> str:
    """Return ``scheme://host`` of ``url``."""
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}"


def slug_from_url(url: str) -> str:
    """Last non-empty path segment of ``url``."""
    return urlparse(url).path.strip("/").split("/")[-1]


def genre_slug(href: str) -> str:
    match = GENRE_SLUG_RE.search(href or "")
    return match.group(1) if match else ""


def collation_key(text: str) -> str:
    """Accent- and case-insensitive sort key for catalog titles."""
    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.casefold().strip()


def escape_html(text: str) -> str:
    """Escape text for Telegram HTML parse mode."""
    if not text:
        return ""
    return html.escape(text, quote=True)


def truncate(text: str, max_len: int = 300) -> str:
    if not text:
        return ""
    if len(text) <= max_len:
        return text
    return text[:max_len] + "..."


def format_size(num_bytes: int) -> str:
    """Format a byte count in human-readable form.

    Args:
        num_bytes: Size in bytes.

    Returns:
        Formatted string like "12.5 MB".
    """
    if num_bytes < 1024:
        return f"{num_bytes} B"
    if num_bytes < 1024 * 1024:
        return f"{num_bytes / 1024:.1f} KB"
    if num_bytes < 1024 * 1024 * 1024:
        return f"{num_bytes / (1024 * 1024):.1f} MB"
    return f"{num_bytes / (1024 * 1024 * 1024):.2f} GB"


def paginate(items: Sequence[T], page: int, per_page: int) -> Tuple[List[T], int, int]:
    """Slice ``items`` for a zero-based ``page``.

    Returns:
        Tuple of (page items, clamped page index, total pages).
    """
    total_pages = max(1, math.ceil(len(items) / per_page))
    page = max(0, min(page, total_pages - 1))
    start = page * per_page
    return list(items[start:start + per_page]), page, total_pages


def safe_filename(name: str) -> str:
    return re.sub(r"[^a-zA-Z0-9._-]", "_", name)
