"""Test helpers for faking HTTP exchanges."""

from .http import (
    BASE_URL,
    HOST_URL,
    TOKEN,
    form_of,
    make_response,
    paged_responder,
    query_of,
)

__all__ = [
    "BASE_URL",
    "HOST_URL",
    "TOKEN",
    "form_of",
    "make_response",
    "paged_responder",
    "query_of",
]
