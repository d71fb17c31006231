"""
URL helpers for building Rabbit API request paths.
"""

from __future__ import annotations
from typing import Any
from urllib.parse import quote


def url_encode(value: str) -> str:
    """
    Encode a string for use as a single path segment.

    Form encoding turns spaces into ``+``, but for arguments that are part of
    the path the server expects ``%20``. Slashes are escaped as well so that
    a value can never introduce extra path segments.

    Args:
        value: The string to encode

    Returns:
        The percent-encoded string
    """
    return quote(value, safe="")


def join_path(*segments: Any) -> str:
    """Join path segments (strings or identifiers) with ``/``."""
    return "/".join(str(segment).strip("/") for segment in segments)


__all__ = ["url_encode", "join_path"]
