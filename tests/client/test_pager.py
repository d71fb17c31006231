"""
Tests for Pager.
"""

import math

import pytest

from helpers import HOST_URL, TOKEN, make_response, paged_responder, query_of

from rabbit_client.client.executor import RequestExecutor
from rabbit_client.client.pager import Pager, PagerState
from rabbit_client.client.transport import HttpTransport
from rabbit_client.models import User
from rabbit_client.runtime.errors import ErrorCode, InvalidArgumentError, RabbitApiError
from rabbit_client.runtime.form import ApiForm


def _users(n):
    return [{"id": i, "username": f"user{i}"} for i in range(1, n + 1)]


@pytest.fixture
def executor(session):
    return RequestExecutor(HttpTransport(HOST_URL, TOKEN, session=session))


class TestPagerConstruction:

    def test_no_request_on_construction(self, executor, session):
        pager = Pager(executor, User, 10, None, "users")
        assert pager.state is PagerState.UNINITIALIZED
        assert pager.current_page == 0
        assert pager.total_items is None
        assert pager.has_next()
        session.request.assert_not_called()

    @pytest.mark.parametrize("per_page", [0, -1])
    def test_invalid_page_size(self, executor, session, per_page):
        with pytest.raises(InvalidArgumentError):
            Pager(executor, User, per_page, None, "users")
        session.request.assert_not_called()

    def test_invalid_page_number(self, executor, session):
        pager = Pager(executor, User, 10, None, "users")
        with pytest.raises(InvalidArgumentError):
            pager.page(0)
        session.request.assert_not_called()


class TestPagerWalk:
    """Tests for walking a collection with pagination headers."""

    @pytest.mark.parametrize("total,per_page", [(5, 2), (4, 2), (1, 20), (20, 20), (21, 20)])
    def test_all_in_server_order(self, executor, session, total, per_page):
        """Test every item is returned once, in order, with one request per page."""
        session.request.side_effect = paged_responder(_users(total), per_page)
        pager = Pager(executor, User, per_page, None, "users")

        users = pager.all()

        assert [u.id for u in users] == list(range(1, total + 1))
        assert session.request.call_count == math.ceil(total / per_page)
        assert pager.state is PagerState.EXHAUSTED
        assert pager.total_items == total
        assert pager.total_pages == math.ceil(total / per_page)

    def test_page_requests_carry_page_and_size(self, executor, session):
        session.request.side_effect = paged_responder(_users(5), 2)
        Pager(executor, User, 2, ApiForm().with_param("active", True), "users").all()

        queries = [query_of(c) for c in session.request.call_args_list]
        assert [q["page"] for q in queries] == ["1", "2", "3"]
        assert all(q["per_page"] == "2" and q["active"] == "true" for q in queries)

    def test_caller_page_params_are_replaced(self, executor, session):
        session.request.side_effect = paged_responder(_users(3), 3)
        base = ApiForm().with_param("page", 9).with_param("per_page", 100)
        Pager(executor, User, 3, base, "users").all()

        query = query_of(session.request.call_args)
        assert query["page"] == "1"
        assert query["per_page"] == "3"

    def test_empty_collection(self, executor, session):
        """Test an empty collection takes one request and exhausts the pager."""
        session.request.side_effect = paged_responder([], 10)
        pager = Pager(executor, User, 10, None, "users")

        assert pager.all() == []
        assert session.request.call_count == 1
        assert pager.state is PagerState.EXHAUSTED
        assert not pager.has_next()
        assert pager.next() == []
        assert session.request.call_count == 1

    def test_next_page_by_page(self, executor, session):
        session.request.side_effect = paged_responder(_users(3), 2)
        pager = Pager(executor, User, 2, None, "users")

        assert [u.id for u in pager.next()] == [1, 2]
        assert pager.state is PagerState.ACTIVE
        assert pager.current_page == 1
        assert pager.has_next()
        assert [u.id for u in pager.next()] == [3]
        assert not pager.has_next()
        assert pager.next() == []
        assert pager.is_exhausted
        assert session.request.call_count == 2

    def test_items_beyond_total_are_dropped(self, executor, session):
        session.request.return_value = make_response(
            200, _users(3), headers={"X-Total": "2", "X-Total-Pages": "1"})
        assert [u.id for u in Pager(executor, User, 5, None, "users").all()] == [1, 2]


class TestPagerWithoutTotals:
    """Tests for servers that omit X-Total and X-Total-Pages."""

    def test_walks_until_empty_page(self, executor, session):
        session.request.side_effect = paged_responder(_users(5), 2, with_totals=False)
        pager = Pager(executor, User, 2, None, "users")

        users = pager.all()

        assert [u.id for u in users] == [1, 2, 3, 4, 5]
        # Three pages with items, then one empty page
        assert session.request.call_count == 4
        assert pager.total_items is None
        assert pager.state is PagerState.EXHAUSTED

    def test_non_numeric_header_is_ignored(self, executor, session):
        session.request.side_effect = [
            make_response(200, _users(2), headers={"X-Total": "lots"}),
            make_response(200, []),
        ]
        pager = Pager(executor, User, 2, None, "users")
        assert len(pager.all()) == 2
        assert pager.total_items is None


class TestPagerStream:

    def test_stream_is_lazy(self, executor, session):
        session.request.side_effect = paged_responder(_users(6), 2)
        stream = Pager(executor, User, 2, None, "users").stream()
        session.request.assert_not_called()

        assert next(stream).id == 1
        assert session.request.call_count == 1
        assert [next(stream).id for _ in range(2)] == [2, 3]
        assert session.request.call_count == 2

    def test_stream_is_consumed_once(self, executor, session):
        session.request.side_effect = paged_responder(_users(3), 2)
        pager = Pager(executor, User, 2, None, "users")

        assert len(list(pager.stream())) == 3
        assert list(pager.stream()) == []
        assert list(pager) == []
        assert session.request.call_count == 2

    def test_error_mid_walk_propagates(self, executor, session):
        session.request.side_effect = [
            make_response(200, _users(2), headers={"X-Total": "4", "X-Total-Pages": "2"}),
            make_response(500, {"message": "500 Internal Server Error"}),
        ]
        stream = Pager(executor, User, 2, None, "users").stream()

        assert [next(stream).id for _ in range(2)] == [1, 2]
        with pytest.raises(RabbitApiError) as exc_info:
            next(stream)
        assert exc_info.value.code is ErrorCode.STATUS_MISMATCH
        assert exc_info.value.http_status == 500


class TestPagerTotals:
    """Tests for how reported totals bound the walk."""

    def test_totals_fixed_by_first_page(self, executor, session):
        """Test totals reported after the first page do not extend the walk."""
        session.request.side_effect = [
            make_response(200, _users(2), headers={"X-Total": "4", "X-Total-Pages": "2"}),
            make_response(200, _users(4)[2:], headers={"X-Total": "6", "X-Total-Pages": "3"}),
            make_response(200, _users(6)[4:], headers={"X-Total": "6", "X-Total-Pages": "3"}),
        ]
        pager = Pager(executor, User, 2, None, "users")

        assert [u.id for u in pager.all()] == [1, 2, 3, 4]
        assert session.request.call_count == 2
        assert pager.total_items == 4
        assert pager.total_pages == 2
        assert pager.is_exhausted

    def test_item_total_without_page_total(self, executor, session):
        """Test the page count is derived from X-Total when X-Total-Pages is missing."""
        session.request.side_effect = [
            make_response(200, _users(2), headers={"X-Total": "3"}),
            make_response(200, _users(3)[2:], headers={"X-Total": "3"}),
        ]
        pager = Pager(executor, User, 2, None, "users")

        assert [u.id for u in pager.all()] == [1, 2, 3]
        assert session.request.call_count == 2
        assert pager.total_pages is None
        assert pager.state is PagerState.EXHAUSTED


class TestPagerRandomAccess:

    def test_page_then_next(self, executor, session):
        session.request.side_effect = paged_responder(_users(5), 2)
        pager = Pager(executor, User, 2, None, "users")

        assert [u.id for u in pager.page(2)] == [3, 4]
        assert pager.current_page == 2
        assert query_of(session.request.call_args)["page"] == "2"
        assert [u.id for u in pager.next()] == [5]
        assert pager.next() == []
        assert pager.state is PagerState.EXHAUSTED
        assert session.request.call_count == 2

    def test_first(self, executor, session):
        session.request.side_effect = paged_responder(_users(5), 2)
        pager = Pager(executor, User, 2, None, "users")

        assert [u.id for u in pager.first()] == [1, 2]
        assert pager.current_page == 1
        assert pager.current_items[0].username == "user1"
        assert pager.state is PagerState.ACTIVE
        assert pager.total_items == 5
