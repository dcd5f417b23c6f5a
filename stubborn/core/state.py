"""
Shared state coupling concurrently running requests.

A ``RetryContext`` holds the global error counter, the enable/disable flag
and the rate-limit expiry. Every request reads and mutates the context it
was given; a module-level default context backs the process-wide helpers.
Mutations are synchronous and lock-free: requests run as tasks on a single
event loop and only yield at the transport call and the delay sleep.
"""

import asyncio
import time
from typing import Any, Awaitable, Callable, Dict, Optional
import structlog

from stubborn.shared.types import Milliseconds, RATE_LIMIT_PADDING_MS

logger = structlog.get_logger(__name__)


class RetryContext:
    """Process-wide circuit state, error budget counter and rate-limit coordinator."""

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep
    ):
        """
        Initialize context.

        Args:
            clock: Time source in seconds, shared by every request using this context
            sleep: Coroutine function suspending for a number of seconds
        """
        self.clock = clock
        self.sleep = sleep
        self.global_error_count = 0
        self.enabled = True
        self.rate_limited_until: Optional[float] = None

    def now(self) -> Milliseconds:
        """Current time in milliseconds."""
        return Milliseconds(self.clock() * 1000)

    def disable(self) -> None:
        """Stop every request using this context before its next attempt."""
        if self.enabled:
            logger.warning("Requests disabled")
        self.enabled = False

    def enable(self) -> None:
        if not self.enabled:
            logger.info("Requests enabled")
        self.enabled = True

    def record_error(self) -> int:
        """Count one failed attempt and return the new total."""
        self.global_error_count += 1
        return self.global_error_count

    def budget_exhausted(self, max_errors: Optional[int]) -> bool:
        """Whether the global error count has reached ``max_errors``."""
        return max_errors is not None and self.global_error_count >= max_errors

    def note_retry_after(self, seconds: int) -> float:
        """
        Record a server-issued ``Retry-After`` hint.

        The expiry only ever moves forward.

        Returns:
            The shared expiry timestamp in milliseconds
        """
        until = self.now() + seconds * 1000
        if self.rate_limited_until is None or until > self.rate_limited_until:
            self.rate_limited_until = until
        return self.rate_limited_until

    def rate_limit_delay(self) -> Milliseconds:
        """Extra wait any request must observe before its next attempt."""
        if self.rate_limited_until is None:
            return Milliseconds(0)
        return Milliseconds(max(0, self.rate_limited_until - self.now() + RATE_LIMIT_PADDING_MS))

    def reset(self) -> None:
        """Reset counter, flag and rate-limit expiry."""
        self.global_error_count = 0
        self.enabled = True
        self.rate_limited_until = None

    def get_status(self) -> Dict[str, Any]:
        """Get current shared state."""
        return {
            "enabled": self.enabled,
            "global_error_count": self.global_error_count,
            "rate_limited_until": self.rate_limited_until,
            "rate_limit_delay_ms": self.rate_limit_delay(),
        }


# Global context instance
default_context = RetryContext()


def disable() -> None:
    """Disable every request using the default context."""
    default_context.disable()


def enable() -> None:
    """Re-enable requests using the default context."""
    default_context.enable()


def is_enabled() -> bool:
    return default_context.enabled


def global_error_count() -> int:
    return default_context.global_error_count


def reset() -> None:
    """Reset the default context."""
    default_context.reset()
