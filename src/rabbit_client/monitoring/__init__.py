"""Logging of HTTP exchanges for the Rabbit client."""

from .request_logging import (
    RequestResponseLogger,
    DEFAULT_MASKED_HEADER_NAMES,
)

__all__ = [
    "RequestResponseLogger",
    "DEFAULT_MASKED_HEADER_NAMES",
]
