"""
Type definitions for stubborn.

This module contains the shared type aliases, enums and the narrow
protocols used at the boundaries of the library (transport and logging).
"""

from enum import Enum
from typing import Any, Awaitable, Callable, Dict, NewType, Protocol, runtime_checkable

# Time-related types
Milliseconds = NewType('Milliseconds', float)

# Opaque description of an outbound call (method, headers, body, ...)
RequestDescription = Dict[str, Any]

# Sentinel for unlimited retries
UNLIMITED_RETRIES = -1

# Safety pad added on top of any server-issued rate-limit wait
RATE_LIMIT_PADDING_MS = 100


class ErrorKind(str, Enum):
    """Closed set of failure kinds a request can settle with."""
    TIMEOUT = "timeout"
    MAX_ERRORS_EXCEEDED = "max_errors_exceeded"
    NETWORK_ERROR = "network_error"
    DISABLED = "disabled"
    HTTP_ERROR = "http_error"
    RATE_LIMITED = "rate_limited"


class TimingFunctionName(str, Enum):
    """Backoff strategies available to requests."""
    EXPONENTIAL = "exponential"
    CONSTANT = "constant"


# Levels every logger handed to a request must provide
LOG_LEVELS = ("debug", "info", "warning", "error")


@runtime_checkable
class Logger(Protocol):
    """Leveled logging capability consumed by the orchestrator."""

    def debug(self, event: str, **kwargs: Any) -> Any: ...

    def info(self, event: str, **kwargs: Any) -> Any: ...

    def warning(self, event: str, **kwargs: Any) -> Any: ...

    def error(self, event: str, **kwargs: Any) -> Any: ...


class NullLogger:
    """Logger that drops every event."""

    def debug(self, event: str, **kwargs: Any) -> None:
        pass

    def info(self, event: str, **kwargs: Any) -> None:
        pass

    def warning(self, event: str, **kwargs: Any) -> None:
        pass

    def error(self, event: str, **kwargs: Any) -> None:
        pass


# An async operation performing one HTTP call
Transport = Callable[[str, RequestDescription], Awaitable[Any]]
