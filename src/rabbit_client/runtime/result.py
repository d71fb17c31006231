"""
Result envelope for lookups that must not raise.

A lookup either found something (Ok), found nothing (Empty), or failed
(Failed). The failure is kept inside the envelope so callers can ignore it,
inspect it, or re-raise it with get().
"""

from __future__ import annotations
from typing import Any, Callable, Generic, Optional, TypeVar

from .errors import EmptyResultError, RabbitApiError

T = TypeVar("T")
U = TypeVar("U")


class Result(Generic[T]):
    """Base class of Ok, Empty and Failed."""

    __slots__ = ()

    @staticmethod
    def of(value: Optional[T]) -> Result[T]:
        """Wrap a value: None becomes Empty, anything else Ok."""
        return Empty() if value is None else Ok(value)

    @staticmethod
    def capture(func: Callable[..., Optional[T]], *args: Any, **kwargs: Any) -> Result[T]:
        """
        Run a lookup, turning a RabbitApiError into a Failed result.

        Args:
            func: The lookup to call
            *args: Positional arguments for func
            **kwargs: Keyword arguments for func

        Returns:
            Ok, Empty, or Failed carrying the raised error
        """
        try:
            return Result.of(func(*args, **kwargs))
        except RabbitApiError as e:
            return Failed(e)

    @property
    def is_present(self) -> bool:
        return False

    @property
    def error(self) -> Optional[RabbitApiError]:
        return None

    def get(self) -> T:
        """Return the value, or raise the retained error / EmptyResultError."""
        raise NotImplementedError

    def or_else(self, default: U) -> T | U:
        return default

    def map(self, func: Callable[[T], Optional[U]]) -> Result[U]:
        return self  # type: ignore[return-value]

    def __bool__(self) -> bool:
        return self.is_present


class Ok(Result[T]):
    """A lookup that produced a value."""

    __slots__ = ("value",)

    def __init__(self, value: T):
        if value is None:
            raise ValueError("Ok cannot hold None, use Empty")
        self.value = value

    @property
    def is_present(self) -> bool:
        return True

    def get(self) -> T:
        return self.value

    def or_else(self, default: U) -> T | U:
        return self.value

    def map(self, func: Callable[[T], Optional[U]]) -> Result[U]:
        return Result.of(func(self.value))

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Ok) and other.value == self.value

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


class Empty(Result[T]):
    """A lookup that found nothing."""

    __slots__ = ()

    def get(self) -> T:
        raise EmptyResultError("No value present")

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Empty)

    def __repr__(self) -> str:
        return "Empty()"


class Failed(Result[T]):
    """A lookup that raised; the error is kept for the caller."""

    __slots__ = ("_error", "_traceback")

    def __init__(self, error: RabbitApiError):
        self._error = error
        self._traceback = error.__traceback__

    @property
    def error(self) -> RabbitApiError:
        return self._error

    def get(self) -> T:
        # Restart from the captured traceback so repeated calls do not grow it
        raise self._error.with_traceback(self._traceback)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Failed) and other.error == self._error

    def __repr__(self) -> str:
        return f"Failed({self._error!r})"


__all__ = ["Result", "Ok", "Empty", "Failed"]
