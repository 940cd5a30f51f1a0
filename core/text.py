"""
core/text.py -- Pure text helpers: slugs, read time, pagination metadata.

No I/O and no project imports, so every function here is trivially unit
testable and safe to call from any layer.
"""

from __future__ import annotations

import math
import re
import time

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")

_HTML_TAG = re.compile(r"<[^>]*>")
_MARKDOWN_MARKERS = re.compile(r"[#*_`]")

WORDS_PER_MINUTE = 200


def slugify(text: str) -> str:
    """Turn a human-readable name into a URL-safe slug.

    Lowercase, drop everything outside [a-z0-9 whitespace -], turn whitespace
    runs into one hyphen, collapse repeated hyphens, trim edge hyphens.

        >>> slugify("Hello, World!  Test")
        'hello-world-test'
    """
    slug = _NON_SLUG_CHARS.sub("", text.lower())
    slug = _WHITESPACE.sub("-", slug)
    slug = _HYPHENS.sub("-", slug)
    return slug.strip("-")


def timestamped_slug(slug: str) -> str:
    """Append the current epoch milliseconds to a colliding slug.

    Not idempotent: two calls produce different suffixes. Uniqueness is only
    as strong as the millisecond clock.
    """
    return f"{slug}-{int(time.time() * 1000)}"


def calculate_read_time(content: str) -> int:
    """Estimated reading time in whole minutes (200 wpm, minimum 1)."""
    plain = _MARKDOWN_MARKERS.sub("", _HTML_TAG.sub("", content))
    words = len(plain.split())
    return max(1, math.ceil(words / WORDS_PER_MINUTE))


def pagination_meta(total: int, limit: int, offset: int) -> dict:
    return {
        "total": total,
        "limit": limit,
        "offset": offset,
        "has_more": offset + limit < total,
        "page": offset // limit + 1 if limit else 1,
        "total_pages": math.ceil(total / limit) if limit else 0,
    }
