"""
Tests for request/response logging.
"""

import logging

import pytest

from helpers import BASE_URL, TOKEN, make_response

from rabbit_client.monitoring.request_logging import (
    MASK,
    TRUNCATION_MARKER,
    RequestResponseLogger,
)
from rabbit_client.runtime.errors import InvalidArgumentError


def _exchange(body=None, request_headers=None):
    response = make_response(200, body, headers={"X-Total": "1"}, url=BASE_URL + "/users")
    response.request.headers.update(request_headers or {})
    return response


class TestMasking:

    def test_credentials_are_masked(self):
        hook = RequestResponseLogger()
        masked = hook.mask_headers({"PRIVATE-TOKEN": TOKEN, "Accept": "application/json"})
        assert masked == {"PRIVATE-TOKEN": MASK, "Accept": "application/json"}

    def test_masking_ignores_case(self):
        hook = RequestResponseLogger()
        assert hook.mask_headers({"authorization": "Bearer x"}) == {"authorization": MASK}

    def test_custom_masked_headers(self):
        hook = RequestResponseLogger(masked_header_names=["X-Api-Key"])
        masked = hook.mask_headers({"X-Api-Key": "k", "PRIVATE-TOKEN": TOKEN})
        assert masked == {"X-Api-Key": MASK, "PRIVATE-TOKEN": TOKEN}


class TestTruncation:

    def test_no_limit(self):
        assert RequestResponseLogger().truncate("x" * 500) == "x" * 500

    def test_truncated_with_marker(self):
        hook = RequestResponseLogger(max_entity_size=10)
        assert hook.truncate("abcdefghijklmnop") == "abcdefghij" + TRUNCATION_MARKER

    def test_bytes_are_decoded(self):
        assert RequestResponseLogger().truncate(b"hello") == "hello"

    def test_negative_limit_rejected(self):
        with pytest.raises(InvalidArgumentError):
            RequestResponseLogger(max_entity_size=-1)


class TestHook:
    """Tests for the logged records."""

    def test_logs_request_and_response(self, caplog):
        hook = RequestResponseLogger(level=logging.INFO)
        response = _exchange([{"id": 1}], {"PRIVATE-TOKEN": TOKEN})

        with caplog.at_level(logging.INFO, logger="rabbit_client"):
            assert hook(response) is response

        request_record, response_record = caplog.records
        assert request_record.getMessage().startswith(f"> GET {BASE_URL}/users")
        assert f"> PRIVATE-TOKEN: {MASK}" in request_record.getMessage()
        assert TOKEN not in request_record.getMessage()
        assert response_record.getMessage().startswith("< 200 OK")
        assert "< X-Total: 1" in response_record.getMessage()
        assert '[{"id": 1}]' in response_record.getMessage()

    def test_silent_below_level(self, caplog):
        hook = RequestResponseLogger(level=logging.DEBUG)
        with caplog.at_level(logging.WARNING, logger="rabbit_client"):
            hook(_exchange({"id": 1}))
        assert caplog.records == []

    def test_custom_logger(self, caplog):
        custom = logging.getLogger("audit.http")
        hook = RequestResponseLogger(logger=custom, level=logging.WARNING, max_entity_size=4)
        with caplog.at_level(logging.WARNING, logger="audit.http"):
            hook(_exchange({"username": "jane"}))
        assert all(r.name == "audit.http" for r in caplog.records)
        assert caplog.records[1].getMessage().endswith('{"us' + TRUNCATION_MARKER)
