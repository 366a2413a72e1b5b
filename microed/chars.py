"""Character handling where a character is a code point plus its combining marks."""

from __future__ import annotations

import unicodedata
from collections.abc import Iterator


def is_mark(c: str) -> bool:
    """Return True if the code point ``c`` is a combining mark (category M*)."""
    return unicodedata.category(c).startswith("M")


def iter_characters(text: str) -> Iterator[str]:
    """Yield each character of ``text`` together with its combining marks.

    A mark at the very start of the text is taken as a character of its own.
    """
    cluster = ""
    for c in text:
        if cluster and is_mark(c):
            cluster += c
        else:
            if cluster:
                yield cluster
            cluster = c
    if cluster:
        yield cluster


def decode_character(text: str) -> tuple[str, tuple[str, ...], int]:
    """Decode the first character of ``text``.

    Returns the base code point, the combining code points that follow it and
    the number of code points consumed. Raises ValueError on empty text.
    """
    if not text:
        raise ValueError("cannot decode a character from empty text")
    cluster = next(iter_characters(text))
    return cluster[0], tuple(cluster[1:]), len(cluster)


def character_count(text: str | bytes) -> int:
    """Count the characters in ``text``, not counting combining marks.

    UTF-8 encoded bytes are accepted as well as strings.
    """
    if isinstance(text, (bytes, bytearray)):
        text = bytes(text).decode("utf-8", errors="replace")
    return sum(1 for c in text if not is_mark(c))