"""
Unit tests for response helpers.
"""
import pytest

from stubborn.shared.responses import get_header, get_status_code, parse_retry_after

from tests.support import make_response


class TestParseRetryAfter:
    """Test cases for Retry-After parsing."""

    @pytest.mark.parametrize("value, expected", [
        ("2", 2),
        (" 360 ", 360),
        ("0", 0),
        ("2.5", 2),
        ("3.0", 3),
        ("7s", 7),
    ])
    def test_leading_integer(self, value, expected):
        """Test the leading integer is used as the number of seconds."""
        assert parse_retry_after(value) == expected

    @pytest.mark.parametrize("value", [
        None,
        "",
        "-5",
        "soon",
        "Wed, 21 Oct 2015 07:28:00 GMT",
    ])
    def test_unparseable(self, value):
        """Test dates, negatives and garbage yield None."""
        assert parse_retry_after(value) is None


class TestResponseAccess:
    """Test cases for duck-typed status and header access."""

    def test_httpx_response(self):
        """Test status and headers of an httpx response."""
        response = make_response(429, headers={"Retry-After": "2"})

        assert get_status_code(response) == 429
        assert get_header(response, "retry-after") == "2"

    def test_aiohttp_style_response(self):
        """Test ``status`` and plain dict headers are read case-insensitively."""
        class Response:
            status = 503
            headers = {"retry-after": "4"}

        assert get_status_code(Response()) == 503
        assert get_header(Response(), "Retry-After") == "4"

    def test_missing_status(self):
        """Test objects without a numeric status yield None."""
        class Response:
            status_code = "500"
            headers = None

        assert get_status_code(Response()) is None
        assert get_status_code(object()) is None
        assert get_header(Response(), "Retry-After") is None
