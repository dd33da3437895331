"""Utilities for cleaning and trimming text safely."""

from __future__ import annotations

import re
import unicodedata

_whitespace = re.compile(r"\s+")
_non_slug = re.compile(r"[^a-z0-9\s]")


def clean_text(text: str) -> str:
    """Collapse runs of whitespace (spaces, tabs, newlines) into single spaces."""
    if not text:
        return ""
    return _whitespace.sub(" ", text).strip()


def strip_accents(text: str) -> str:
    """Remove combining marks after NFD decomposition."""
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def slugify(text: str, max_length: int = 50) -> str:
    """
    Build a filesystem-safe slug.

    Lower-cases, strips accents and anything that is not ``[a-z0-9]`` or
    whitespace, then joins words with underscores and caps the length.
    """
    slug = strip_accents(text.lower())
    slug = _non_slug.sub("", slug)
    slug = _whitespace.sub("_", slug)
    return slug[:max_length]


def title_from_query(query: str, max_words: int = 8) -> str:
    """Capitalize the first ``max_words`` words of a query."""
    words = query.split(" ")[:max_words]
    return " ".join(word[:1].upper() + word[1:].lower() for word in words)
