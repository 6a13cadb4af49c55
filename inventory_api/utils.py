"""Text helpers for request sanitizing, catalog content and cache keys.

Search text arrives straight from a query string and descriptions are stored
as editor HTML, so both pass through BeautifulSoup before they are used:
search text is reduced to plain text, descriptions keep their markup but lose
executable elements and get paragraph wrapping for bare text blocks.
"""
from __future__ import annotations

import hashlib
import re
import warnings
from typing import Any

from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning

CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f-\x9f]")
WHITESPACE_RE = re.compile(r"\s+")
LEADING_INT_RE = re.compile(r"^\s*[-+]?\d+")
PARAGRAPH_SPLIT_RE = re.compile(r"\n\s*\n")
LIKE_SPECIAL_RE = re.compile(r"([\\%_])")

UNSAFE_TAGS = ("script", "style", "iframe", "object", "embed")
BLOCK_TAG_RE = re.compile(
    r"^<(?:p|div|ul|ol|li|table|thead|tbody|tr|td|th|h[1-6]|blockquote|pre|hr|figure|section)\b",
    re.IGNORECASE,
)


def _soup(markup: str) -> BeautifulSoup:
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", MarkupResemblesLocatorWarning)
        return BeautifulSoup(markup, "html.parser")


def sanitize_text_field(value: Any) -> str:
    """Reduce user input to a single trimmed line of plain text."""
    if value is None:
        return ""
    text = str(value)
    if "<" in text:
        soup = _soup(text)
        for tag in soup(["script", "style"]):
            tag.decompose()
        text = soup.get_text()
    text = CONTROL_CHARS_RE.sub(" ", text)
    return WHITESPACE_RE.sub(" ", text).strip()


def absint(value: Any) -> int:
    """Coerce a request value to a non-negative integer (``0`` when unparsable)."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return abs(value)
    match = LEADING_INT_RE.match(str(value))
    if not match:
        return 0
    return abs(int(match.group(0)))


def escape_like(text: str) -> str:
    r"""Escape ``%``, ``_`` and ``\`` so the text is matched literally in a LIKE pattern."""
    return LIKE_SPECIAL_RE.sub(r"\\\1", text)


def hash_query(*parts: object) -> str:
    joined = "|".join("" if part is None else str(part) for part in parts)
    return hashlib.md5(joined.encode("utf-8")).hexdigest()


def filter_content(html: str | None) -> str:
    """Prepare stored description HTML for display."""
    if not html:
        return ""
    soup = _soup(html)
    for tag in soup(list(UNSAFE_TAGS)):
        tag.decompose()
    cleaned = str(soup).replace("\r\n", "\n").strip()

    blocks = []
    for block in PARAGRAPH_SPLIT_RE.split(cleaned):
        block = block.strip()
        if not block:
            continue
        if BLOCK_TAG_RE.match(block):
            blocks.append(block)
        else:
            blocks.append("<p>" + block.replace("\n", "<br />\n") + "</p>")
    return "\n".join(blocks)
