"""Shared URL and filename utilities."""

from __future__ import annotations

import re
from urllib.parse import urlsplit

_UNSAFE_FILENAME_CHARS = re.compile(r"[.*<>?`'|/\\: ]")
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")
_CONTROL_OR_SPACE = re.compile(r"[\x00-\x20\x7f]")


def sanitized(text: str) -> str:
    """Transform text into a string suitable for use in a filename part."""
    return _UNSAFE_FILENAME_CHARS.sub("-", text)


def parse_url(url: str) -> str:
    """Check that ``url`` parses, returning it unchanged. Raises ValueError.

    Rejects control characters, whitespace, malformed percent escapes and
    non-numeric ports, none of which ``urlsplit`` checks on its own.
    """
    if match := _CONTROL_OR_SPACE.search(url):
        raise ValueError(f"invalid character {match.group()!r} in URL")
    if _BAD_ESCAPE.search(url):
        raise ValueError(f"invalid percent escape in {url!r}")
    parts = urlsplit(url)
    parts.port  # raises ValueError for a bad port
    return url


def parse_origin(origin: str) -> str:
    """Check that ``origin`` is an absolute URL with a scheme and host."""
    parse_url(origin)
    parts = urlsplit(origin)
    if not parts.scheme or not parts.netloc:
        raise ValueError(f"origin {origin!r} must include a scheme and host")
    return origin


def artifact_host(url: str) -> str:
    """Host (and port) of a URL, sanitized for use in an artifact filename."""
    return sanitized(urlsplit(url).netloc)
