"""Line tokenizing helpers for the script compiler."""

from __future__ import annotations

import re

_WHITESPACE = " \t"
_DIMENSION = re.compile(r"[0-9]+")


def split_one_field(text: str) -> tuple[str, str]:
    """Split text at the first space or tab.

    Returns the first field and the remaining text with leading
    whitespace removed.
    """
    for i, ch in enumerate(text):
        if ch in _WHITESPACE:
            return text[:i], text[i:].lstrip(_WHITESPACE)
    return text, ""


def split_dimensions(text: str) -> tuple[int, int]:
    """Parse ``WIDTHxHEIGHT`` into two ints. Raises ValueError."""
    fields = text.split("x")
    if len(fields) != 2:
        raise ValueError(f"syntax error: windowsize {text}")
    for field in fields:
        if not _DIMENSION.fullmatch(field):
            raise ValueError(f"syntax error: invalid dimension {field!r} in {text}")
    return int(fields[0]), int(fields[1])
