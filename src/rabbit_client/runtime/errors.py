"""
Rabbit Error Model

This module provides the error handling framework for the Rabbit Python client.
Every failure of a remote call (transport, unexpected status, secret token
mismatch, undecodable body) surfaces as a RabbitApiError; bad arguments are
rejected up front with InvalidArgumentError.
"""

from __future__ import annotations
from typing import Optional, Dict, Any, List
from enum import IntEnum

import requests


class ErrorCode(IntEnum):
    """Categories of RabbitApiError."""

    UNKNOWN = 1

    # Network errors
    TRANSPORT_FAILED = 200

    # Response errors
    STATUS_MISMATCH = 300
    UNAUTHORIZED = 301

    # Encoding errors
    DECODE_FAILED = 400


class InvalidArgumentError(ValueError):
    """Raised synchronously, before any request is sent, for bad arguments."""


class EmptyResultError(LookupError):
    """Raised when the value of an empty Result is requested."""


class RabbitApiError(Exception):
    """
    The standardized error raised by all Rabbit API calls.

    Carries the category of the failure, the HTTP status and the response
    when one was received, and the underlying exception when the failure
    originated below the client (socket errors, JSON decoding, ...).
    """

    def __init__(self, message: str, code: ErrorCode = ErrorCode.UNKNOWN,
                 http_status: Optional[int] = None, response: Optional[requests.Response] = None,
                 details: Optional[Dict[str, Any]] = None, cause: Optional[BaseException] = None):
        """
        Initialize a Rabbit API error.

        Args:
            message: Error message
            code: Error category
            http_status: HTTP status returned by the server, if any
            response: The response that triggered the error, if any
            details: Additional error details (e.g. field validation errors)
            cause: Underlying exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.http_status = http_status
        self.response = response
        self.details = details or {}
        self.cause = cause

    @classmethod
    def from_response(cls, response: requests.Response,
                      code: ErrorCode = ErrorCode.STATUS_MISMATCH) -> RabbitApiError:
        """
        Create an error from a response with an unexpected status.

        The server usually describes the failure in a JSON body of the form
        ``{"message": ...}`` or ``{"error": ...}``. When ``message`` is a
        mapping of field names to lists of complaints it is flattened and
        also kept as ``details["validation_errors"]``.
        """
        reason = response.reason or ""
        message = f"HTTP {response.status_code}" + (f": {reason}" if reason else "")
        details: Dict[str, Any] = {}

        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict):
            raw = body.get("message", body.get("error"))
            if isinstance(raw, dict):
                validation_errors = {
                    str(field): _as_list(problems) for field, problems in raw.items()
                }
                details["validation_errors"] = validation_errors
                message = ", ".join(
                    f"{field} {' '.join(str(p) for p in problems)}".strip()
                    for field, problems in validation_errors.items()
                )
            elif isinstance(raw, list):
                message = ", ".join(str(item) for item in raw)
            elif raw is not None:
                message = str(raw)
        elif response.text:
            details["body"] = response.text

        return cls(message, code, http_status=response.status_code, response=response, details=details)

    @property
    def reason(self) -> Optional[str]:
        """HTTP reason phrase of the response, if any."""
        return self.response.reason if self.response is not None else None

    @property
    def validation_errors(self) -> Optional[Dict[str, List[str]]]:
        """Field validation errors reported by the server, if any."""
        return self.details.get("validation_errors")

    @property
    def is_not_found(self) -> bool:
        """True when the server answered 404."""
        return self.http_status == 404

    def __str__(self) -> str:
        """String representation of the error."""
        parts = [f"[{self.code.name}] {self.message}"]
        if self.http_status is not None:
            parts.append(f"HTTP status: {self.http_status}")
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RabbitApiError):
            return NotImplemented
        return (type(self) is type(other) and self.code == other.code
                and self.message == other.message and self.http_status == other.http_status)

    __hash__ = Exception.__hash__

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        result: Dict[str, Any] = {
            "code": self.code.value,
            "message": self.message,
        }
        if self.http_status is not None:
            result["http_status"] = self.http_status
        if self.details:
            result["details"] = self.details
        if self.cause:
            result["cause"] = str(self.cause)
        return result


def _as_list(value: Any) -> List[str]:
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    return [str(value)]


__all__ = [
    "ErrorCode",
    "RabbitApiError",
    "InvalidArgumentError",
    "EmptyResultError",
]
