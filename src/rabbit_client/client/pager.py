"""
Pagination over Rabbit API collection endpoints.

A Pager walks the ``page`` / ``per_page`` query parameters of a collection
endpoint one request at a time, holding only the current page in memory.
Totals are learned from the pagination headers of the first response.

Example:
    ```python
    pager = api.users.get_users_pager(items_per_page=50)
    for user in pager:
        print(user.username)
    ```
"""

from __future__ import annotations
import logging
import math
from enum import Enum
from http import HTTPStatus
from typing import Any, Generic, Iterator, List, Optional, Sequence, Tuple, Type, TypeVar

import requests
from pydantic import BaseModel

from ..runtime.errors import InvalidArgumentError
from ..runtime.form import ApiForm, PAGE_PARAM, PER_PAGE_PARAM
from ..runtime.validation import require_positive
from .executor import RequestExecutor

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

TOTAL_HEADER = "X-Total"
TOTAL_PAGES_HEADER = "X-Total-Pages"


class PagerState(Enum):
    """Lifecycle of a Pager."""

    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    EXHAUSTED = "exhausted"


def _int_header(response: requests.Response, name: str) -> Optional[int]:
    value = response.headers.get(name)
    if value is None or not value.strip():
        return None
    try:
        return int(value)
    except ValueError:
        logger.warning("Ignoring non-numeric %s header: %r", name, value)
        return None


class Pager(Generic[T]):
    """
    Walks a paginated collection.

    A pager is owned by a single caller; it mutates its own cursor and must
    not be advanced concurrently. Iteration consumes it: once exhausted it
    yields nothing, create a new pager to walk the collection again.

    When the server does not send ``X-Total`` / ``X-Total-Pages`` the totals
    stay ``None`` and the pager keeps requesting pages until one comes back
    empty.
    """

    def __init__(
        self,
        executor: RequestExecutor,
        model: Type[T],
        items_per_page: int,
        query_params: Optional[ApiForm] = None,
        *path_args: Any,
    ):
        """
        Initialize the pager. No request is sent until the first page is needed.

        Args:
            executor: Executor used for every page request
            model: Model type of the collection items
            items_per_page: Number of items to request per page
            query_params: Query parameters sent with every page request
            *path_args: Path segments of the collection endpoint

        Raises:
            InvalidArgumentError: If items_per_page is less than 1
        """
        self._executor = executor
        self._model = model
        self._items_per_page = require_positive(items_per_page, "items_per_page")
        self._query_params: List[Tuple[str, str]] = [
            (name, value) for name, value in (query_params.as_params() if query_params else [])
            if name not in (PAGE_PARAM, PER_PAGE_PARAM)
        ]
        self._path_args: Sequence[Any] = path_args

        self._state = PagerState.UNINITIALIZED
        self._current_page = 0
        self._current_items: List[T] = []
        self._total_items: Optional[int] = None
        self._total_pages: Optional[int] = None

    # =========================================================================
    # Cursor state
    # =========================================================================

    @property
    def state(self) -> PagerState:
        return self._state

    @property
    def is_exhausted(self) -> bool:
        return self._state is PagerState.EXHAUSTED

    @property
    def items_per_page(self) -> int:
        return self._items_per_page

    @property
    def current_page(self) -> int:
        """Number of the page last fetched, 0 before the first fetch."""
        return self._current_page

    @property
    def current_items(self) -> List[T]:
        """Items of the page last fetched."""
        return list(self._current_items)

    @property
    def total_items(self) -> Optional[int]:
        """Total number of items reported by the server, None if unknown."""
        return self._total_items

    @property
    def total_pages(self) -> Optional[int]:
        """Total number of pages reported by the server, None if unknown."""
        return self._total_pages

    def has_next(self) -> bool:
        """True if another page may be fetched."""
        if self._state is PagerState.UNINITIALIZED:
            return True
        if self._state is PagerState.EXHAUSTED:
            return False
        if self._total_pages is not None:
            return self._current_page < self._total_pages
        if self._total_items is not None:
            return self._current_page < math.ceil(self._total_items / self._items_per_page)
        # Totals unknown: keep going until an empty page is seen
        return bool(self._current_items)

    # =========================================================================
    # Navigation
    # =========================================================================

    def next(self) -> List[T]:
        """
        Fetch the next page.

        Returns:
            The items of the next page, or an empty list once the pager is
            exhausted
        """
        if not self.has_next():
            self._state = PagerState.EXHAUSTED
            self._current_items = []
            return []

        return self._fetch(self._current_page + 1)

    def page(self, page_number: int) -> List[T]:
        """
        Fetch a specific page.

        Args:
            page_number: The page to fetch, starting at 1

        Returns:
            The items of the page

        Raises:
            InvalidArgumentError: If page_number is less than 1
        """
        if isinstance(page_number, bool) or not isinstance(page_number, int) or page_number < 1:
            raise InvalidArgumentError(f"page_number must be a positive integer, got {page_number!r}")
        return self._fetch(page_number)

    def first(self) -> List[T]:
        """Fetch the first page."""
        return self.page(1)

    def all(self) -> List[T]:
        """
        Fetch every remaining page and return their items in server order.

        On a fresh pager this is the whole collection.
        """
        return list(self._walk())

    def stream(self) -> Iterator[T]:
        """Lazily yield the remaining items, one page in memory at a time."""
        return self._walk()

    def __iter__(self) -> Iterator[T]:
        return self._walk()

    def _walk(self) -> Iterator[T]:
        yielded = 0
        while True:
            items = self.next()
            if not items:
                if self._state is PagerState.EXHAUSTED:
                    return
                # Empty page while totals say more pages remain
                continue

            for item in items:
                if self._total_items is not None and yielded >= self._total_items:
                    logger.debug("Server returned more items than X-Total=%s, ignoring the rest",
                                 self._total_items)
                    self._state = PagerState.EXHAUSTED
                    return
                yielded += 1
                yield item

    def _fetch(self, page_number: int) -> List[T]:
        form = ApiForm()
        for name, value in self._query_params:
            form.with_param(name, value)
        form.with_param(PAGE_PARAM, page_number).with_param(PER_PAGE_PARAM, self._items_per_page)

        response = self._executor.get(HTTPStatus.OK, form, *self._path_args)
        items = self._executor.read_entities(response, self._model)

        # Totals are fixed by the first response that reports them
        if self._total_items is None:
            self._total_items = _int_header(response, TOTAL_HEADER)
        if self._total_pages is None:
            self._total_pages = _int_header(response, TOTAL_PAGES_HEADER)

        self._current_page = page_number
        self._current_items = items

        if self._total_items == 0 or (self._total_items is None and self._total_pages is None and not items):
            self._state = PagerState.EXHAUSTED
        else:
            self._state = PagerState.ACTIVE

        logger.debug("Fetched page %d/%s of %s (%d items)", page_number,
                     self._total_pages if self._total_pages is not None else "?",
                     "/".join(str(a) for a in self._path_args), len(items))
        return items

    def __repr__(self) -> str:
        return (f"Pager({self._model.__name__}, state={self._state.value}, page={self._current_page}, "
                f"total_pages={self._total_pages}, total_items={self._total_items})")


__all__ = ["Pager", "PagerState"]
