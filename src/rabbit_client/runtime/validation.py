"""Argument checks performed before a request is built."""

from __future__ import annotations
import re
from typing import Any, Optional

from .errors import InvalidArgumentError

_EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9_+&*-]+(?:\.[a-zA-Z0-9_+&*-]+)*@(?:[a-zA-Z0-9-]+\.)+[a-zA-Z]{2,}$"
)


def is_valid_email(email: Optional[str]) -> bool:
    """Check that ``email`` looks like a single email address."""
    if not email:
        return False
    return _EMAIL_PATTERN.match(email.strip()) is not None


def require(value: Any, name: str) -> Any:
    """
    Reject ``None`` and blank strings.

    Args:
        value: The argument value
        name: The argument name, used in the error message

    Returns:
        The value, unchanged

    Raises:
        InvalidArgumentError: If the value is None or a blank string
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise InvalidArgumentError(f"{name} cannot be empty or None")
    return value


def require_positive(value: Any, name: str) -> int:
    """Reject anything that is not an int greater than zero."""
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise InvalidArgumentError(f"{name} must be a positive integer, got {value!r}")
    return value


__all__ = ["is_valid_email", "require", "require_positive"]
