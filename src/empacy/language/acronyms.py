"""Short-name derivation and acronym tests."""

from __future__ import annotations

import re

_WHITESPACE_RE = re.compile(r"\s+")


def _words(name: str) -> list[str]:
    return [word for word in _WHITESPACE_RE.split(name.strip()) if word]


def initials(name: str) -> str:
    """Uppercase first letter of every whitespace-separated word."""
    return "".join(word[0] for word in _words(name)).upper()


def derive_short_name(name: str, *, single_word_length: int = 4) -> str:
    """Derive a short name for *name*.

    Multi-word names use their initials; single words are truncated to
    ``single_word_length`` characters.
    """
    words = _words(name)
    if len(words) > 1:
        return initials(name)
    return name.strip()[:single_word_length].upper()


def is_acronym(
    short_name: str, name: str, *, min_length: int = 2, max_length: int = 5
) -> bool:
    """True when *short_name* is within the length bounds and equals the initials."""
    if not min_length <= len(short_name) <= max_length:
        return False
    return short_name == initials(name)
