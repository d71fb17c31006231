"""
Query and form parameter builder.

ApiForm collects name/value pairs for both query strings (GET, DELETE) and
``application/x-www-form-urlencoded`` bodies (POST, PUT). Values are
converted to the string forms the server expects:

- ``bool`` -> ``"true"`` / ``"false"``
- ``datetime`` -> ISO 8601, UTC rendered with a ``Z`` suffix
- ``date`` -> ``YYYY-MM-DD``
- ``Enum`` -> its value
- ``list`` / ``tuple`` -> one ``name[]`` entry per element
"""

from __future__ import annotations
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .errors import InvalidArgumentError

PAGE_PARAM = "page"
PER_PAGE_PARAM = "per_page"


def to_param_value(value: Any) -> str:
    """Convert a single parameter value to its wire form."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return to_param_value(value.value)
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
            return value.strftime("%Y-%m-%dT%H:%M:%SZ")
        return value.strftime("%Y-%m-%dT%H:%M:%S")
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


class ApiForm:
    """Ordered multi-valued parameter set."""

    def __init__(self, params: Optional[Dict[str, Any]] = None):
        self._params: List[Tuple[str, str]] = []
        for name, value in (params or {}).items():
            self.with_param(name, value)

    def with_param(self, name: str, value: Any, required: bool = False) -> ApiForm:
        """
        Add a parameter, skipping it when the value is None.

        Args:
            name: Parameter name
            value: Parameter value
            required: Reject None or blank values instead of skipping them

        Returns:
            This form, for chaining

        Raises:
            InvalidArgumentError: If required and the value is None or blank
        """
        if value is None:
            if required:
                raise InvalidArgumentError(f"{name} cannot be empty or None")
            return self

        if isinstance(value, (list, tuple)):
            if required and not value:
                raise InvalidArgumentError(f"{name} cannot be empty or None")
            array_name = name if name.endswith("[]") else f"{name}[]"
            for item in value:
                self._params.append((array_name, to_param_value(item)))
            return self

        string_value = to_param_value(value)
        if required and not string_value.strip():
            raise InvalidArgumentError(f"{name} cannot be empty or None")

        self._params.append((name, string_value))
        return self

    def get(self, name: str) -> Optional[str]:
        """Return the first value recorded for ``name``."""
        for key, value in self._params:
            if key == name:
                return value
        return None

    def get_all(self, name: str) -> List[str]:
        """Return every value recorded for ``name``."""
        return [value for key, value in self._params if key == name]

    def as_params(self) -> List[Tuple[str, str]]:
        """Return the parameters as a list of pairs, suitable for requests."""
        return list(self._params)

    def __contains__(self, name: object) -> bool:
        return any(key == name for key, _ in self._params)

    def __len__(self) -> int:
        return len(self._params)

    def __repr__(self) -> str:
        return f"ApiForm({self._params!r})"


__all__ = ["ApiForm", "PAGE_PARAM", "PER_PAGE_PARAM", "to_param_value"]
