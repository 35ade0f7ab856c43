"""Identifier generation for publish items and heading anchors."""

import re
from typing import Optional

import inflection

from blog_publisher.transforms.transliterate import Transliterator, pinyin_tokens

FALLBACK_SLUG = "untitled"

# Taken by pages the site renderer always writes
RESERVED_SLUGS = frozenset({"index"})

# Runs of ASCII letters/digits versus everything else
SEGMENT_PATTERN = re.compile(r'[A-Za-z0-9]+|[^A-Za-z0-9]+')
LATIN_PATTERN = re.compile(r'^[A-Za-z0-9]+$')
NON_SLUG_PATTERN = re.compile(r'[^a-z0-9]+')
SLUG_PATTERN = re.compile(r'^[a-z0-9]+(?:-[a-z0-9]+)*$')


def _fold_latin(ch: str) -> str:
    """Replace an accented Latin letter by its base letter (é -> e)."""
    if ch.isascii():
        return ch
    return inflection.transliterate(ch) or ch


def _needs_transliteration(segment: str) -> bool:
    return any(not ch.isascii() and ch.isalpha() for ch in segment)


def slugify(
    title: str,
    transliterate: Optional[Transliterator] = None,
    fallback: str = FALLBACK_SLUG,
) -> str:
    """Derive a URL-safe identifier from a mixed-script title.

    Args:
        title: Arbitrary Unicode title, possibly empty
        transliterate: Maps non-Latin text to Latin tokens (default: pinyin)
        fallback: Returned when nothing slug-worthy remains

    Returns:
        Slug matching [a-z0-9]+(-[a-z0-9]+)*, or the fallback
    """
    transliterate = transliterate or pinyin_tokens
    folded = "".join(_fold_latin(ch) for ch in title or "")

    parts = []
    for segment in SEGMENT_PATTERN.findall(folded):
        if LATIN_PATTERN.match(segment):
            parts.append(segment)
        elif _needs_transliteration(segment):
            parts.append("-".join(transliterate(segment)))
        else:
            parts.append("-")

    slug = NON_SLUG_PATTERN.sub("-", "-".join(parts).lower()).strip("-")
    return slug or fallback


def is_valid_slug(value: str) -> bool:
    """Check the identifier invariant: non-empty, [a-z0-9-], no stray hyphens."""
    return bool(SLUG_PATTERN.match(value or ""))
