"""
Unit tests for the retry policy.
"""
import httpx
import pytest

from stubborn.core.options import RequestOptions
from stubborn.core.policy import RetryPolicy
from stubborn.shared.exceptions import ErrorFactory

from tests.support import make_response

URL = "https://api.example.com/items"


def http_error(status):
    return ErrorFactory.http_error(URL, {}, make_response(status))


def network_error():
    return ErrorFactory.network_error(URL, {}, httpx.ConnectError("down"))


class TestRetryPolicy:
    """Test cases for RetryPolicy.can_retry."""

    def test_retryable_http_status(self):
        """Test a 500 is retried while attempts remain."""
        policy = RetryPolicy(RequestOptions(retries=3))

        assert policy.can_retry(http_error(500), 1) is True
        assert policy.can_retry(http_error(500), 2) is True
        assert policy.can_retry(http_error(500), 3) is False

    @pytest.mark.parametrize("status", [401, 403, 422])
    def test_unretryable_statuses(self, status):
        """Test default never-retryable statuses."""
        policy = RetryPolicy(RequestOptions(retries=3))
        assert policy.can_retry(http_error(status), 1) is False

    def test_unretryable_wins_over_threshold(self):
        """Test an explicit unretryable status beats the minimum threshold."""
        policy = RetryPolicy(RequestOptions(retries=3, minimum_status_code_for_retry=400, unretryable_status_codes=(503,)))

        assert policy.can_retry(http_error(503), 1) is False
        assert policy.can_retry(http_error(401), 1) is True

    def test_minimum_status_threshold(self):
        """Test statuses below the threshold are not retried."""
        policy = RetryPolicy(RequestOptions(retries=3, minimum_status_code_for_retry=505))

        assert policy.can_retry(http_error(402), 1) is False
        assert policy.can_retry(http_error(505), 1) is True

    def test_network_errors(self):
        """Test network failures follow retry_on_network_failure."""
        assert RetryPolicy(RequestOptions(retries=3)).can_retry(network_error(), 1) is False
        assert RetryPolicy(RequestOptions(retries=3, retry_on_network_failure=True)).can_retry(network_error(), 1) is True

    def test_non_numeric_status(self):
        """Test a response without a numeric status is not retried."""
        error = ErrorFactory.http_error(URL, {}, object())
        assert RetryPolicy(RequestOptions(retries=3)).can_retry(error, 1) is False

    @pytest.mark.parametrize("factory", [ErrorFactory.timeout, ErrorFactory.disabled])
    def test_other_kinds_never_retried(self, factory):
        """Test kinds other than HTTP and network are never retried."""
        policy = RetryPolicy(RequestOptions(retries=-1))
        assert policy.can_retry(factory(URL, {}), 1) is False

    def test_unlimited_retries(self):
        """Test -1 removes the attempt limit."""
        policy = RetryPolicy(RequestOptions(retries=-1))
        assert policy.can_retry(http_error(500), 10_000) is True

    def test_terminal_error_refuses(self):
        """Test a held terminal error refuses retry unconditionally."""
        policy = RetryPolicy(RequestOptions(retries=-1, should_retry=lambda error, attempts: True))
        terminal = ErrorFactory.timeout(URL, {})

        assert policy.can_retry(http_error(500), 1, terminal) is False

    def test_should_retry_is_authoritative(self):
        """Test a custom decision overrides every other rule."""
        seen = []

        def should_retry(error, attempts):
            seen.append((error.kind, attempts))
            return attempts < 10

        policy = RetryPolicy(RequestOptions(retries=1, should_retry=should_retry))

        assert policy.can_retry(http_error(401), 5) is True
        assert policy.can_retry(network_error(), 10) is False
        assert [attempts for _, attempts in seen] == [5, 10]
