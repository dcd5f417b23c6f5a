"""Retry eligibility rules."""

from typing import Optional

from stubborn.core.options import RequestOptions
from stubborn.shared.exceptions import RequestError
from stubborn.shared.types import ErrorKind


class RetryPolicy:
    """Decides whether a failed attempt may be followed by another one."""

    def __init__(self, options: RequestOptions):
        self.options = options

    def can_retry(
        self,
        error: RequestError,
        attempt_count: int,
        terminal_error: Optional[RequestError] = None
    ) -> bool:
        """
        Check if another attempt is permitted.

        Args:
            error: The error the last attempt failed with
            attempt_count: Number of attempts made so far
            terminal_error: Error that already ended the request, if any

        Returns:
            True if the request should be attempted again
        """
        if terminal_error is not None:
            return False

        if self.options.should_retry is not None:
            return bool(self.options.should_retry(error, attempt_count))

        if not self.is_retryable(error):
            return False

        return self.options.unlimited_retries or attempt_count < self.options.retries

    def is_retryable(self, error: RequestError) -> bool:
        """Classify an error by kind, ignoring attempt limits."""
        if error.kind == ErrorKind.NETWORK_ERROR:
            return self.options.retry_on_network_failure

        if error.kind == ErrorKind.HTTP_ERROR:
            status = error.data.status_code
            return (
                status is not None
                and status not in self.options.unretryable_status_codes
                and status >= self.options.minimum_status_code_for_retry
            )

        return False
