"""Content type detection and size formatting for context files."""

from __future__ import annotations

from empacy.context.schemas import ContentType

# Checked in order; the first matching suffix wins.
_SUFFIX_TYPES: tuple[tuple[tuple[str, ...], ContentType], ...] = (
    ((".yaml", ".yml"), ContentType.yaml),
    ((".json",), ContentType.json),
    ((".md",), ContentType.markdown),
    ((".txt",), ContentType.text),
)

_BYTE_UNITS = ("Bytes", "KB", "MB", "GB")


def detect_content_type(filename: str, content: str) -> ContentType:
    """Classify a context file by name, falling back to content sniffing.

    This is a first-match-wins cascade, not a best-match classifier: a
    ``.md`` file full of JSON is still markdown, and sniffed content that
    starts with ``{`` is JSON even if it also contains ``---`` and ``:``.
    """
    for suffixes, content_type in _SUFFIX_TYPES:
        if filename.endswith(suffixes):
            return content_type

    stripped = content.strip()
    if stripped.startswith(("{", "[")):
        return ContentType.json
    if "---" in content and ":" in content:
        return ContentType.yaml
    if "#" in content:
        return ContentType.markdown
    return ContentType.text


def format_bytes(size: int) -> str:
    """Render *size* with a binary unit, e.g. ``1536`` → ``"1.5 KB"``."""
    if size <= 0:
        return "0 Bytes"
    exponent = 0
    while size >= 1024 ** (exponent + 1) and exponent < len(_BYTE_UNITS) - 1:
        exponent += 1
    value = round(size / 1024**exponent, 2)
    return f"{value:g} {_BYTE_UNITS[exponent]}"
