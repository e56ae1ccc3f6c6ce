"""Scope paths and generated identifiers."""

from __future__ import annotations

import re
from typing import Iterable, Tuple

IDENTIFIER_PREFIX = "p3_"
SEGMENT_SEPARATOR = "__"

# Underscore is escaped too, so "__" only ever appears as the separator.
_ESCAPED_CHARS = re.compile(r"[^A-Za-z0-9]")

ScopePath = Tuple[str, ...]


def _escape_char(match: "re.Match[str]") -> str:
    return "".join(f"_{byte:02x}" for byte in match.group(0).encode("utf-8"))


def encode_segment(segment: str) -> str:
    """Escape one path segment as ``_xx`` hex bytes outside ``[A-Za-z0-9]``."""
    return _ESCAPED_CHARS.sub(_escape_char, segment)


def generated_identifier(path: Iterable[str]) -> str:
    """Derive the identifier for a scope path.

    The same path always yields the same identifier, distinct paths never
    share one, and the result is a valid Python identifier.

    >>> generated_identifier(["names", "first-name"])
    'p3_names__first_2dname'
    """
    return IDENTIFIER_PREFIX + SEGMENT_SEPARATOR.join(encode_segment(segment) for segment in path)


def extend(context: ScopePath, name: str) -> ScopePath:
    return context + (name,)


__all__ = [
    "IDENTIFIER_PREFIX",
    "SEGMENT_SEPARATOR",
    "ScopePath",
    "encode_segment",
    "extend",
    "generated_identifier",
]
