"""
Tests for path encoding and argument checks.
"""

import pytest

from rabbit_client.runtime.errors import InvalidArgumentError
from rabbit_client.runtime.url import join_path, url_encode
from rabbit_client.runtime.validation import is_valid_email, require, require_positive


class TestUrlEncode:

    def test_space_is_percent_20(self):
        """Test spaces are encoded as %20, not +."""
        assert url_encode("john smith") == "john%20smith"

    def test_slash_is_escaped(self):
        assert url_encode("group/user") == "group%2Fuser"

    def test_plain_username_unchanged(self):
        assert url_encode("jane.doe-1_x") == "jane.doe-1_x"

    def test_join_path(self):
        assert join_path("users", 7, "keys") == "users/7/keys"


class TestValidation:

    @pytest.mark.parametrize("email", ["jane@example.com", "jane.doe+tag@mail.example.org"])
    def test_valid_email(self, email):
        assert is_valid_email(email)

    @pytest.mark.parametrize("email", [None, "", "jane", "jane@", "@example.com", "jane@example"])
    def test_invalid_email(self, email):
        assert not is_valid_email(email)

    def test_require(self):
        assert require("x", "key") == "x"
        with pytest.raises(InvalidArgumentError, match="key cannot be empty or None"):
            require("  ", "key")
        with pytest.raises(InvalidArgumentError):
            require(None, "key")

    @pytest.mark.parametrize("value", [0, -1, True, "3", None])
    def test_require_positive_rejects(self, value):
        with pytest.raises(InvalidArgumentError):
            require_positive(value, "per_page")

    def test_require_positive_accepts(self):
        assert require_positive(3, "per_page") == 3
