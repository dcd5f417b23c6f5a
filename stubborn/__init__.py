"""
stubborn: a resilience layer for outbound HTTP calls.

Retries failed attempts with backoff, honors ``Retry-After`` hints, enforces
a global error budget, bounds total request time and can be switched off at
runtime.
"""

from stubborn.application.client import StubbornClient, resilient
from stubborn.core.backoff import TIMING_FUNCTIONS, calculate_backoff
from stubborn.core.options import RequestOptions, options_from_env
from stubborn.core.policy import RetryPolicy
from stubborn.core.request import StubbornRequest
from stubborn.core.state import (
    RetryContext,
    default_context,
    disable,
    enable,
    global_error_count,
    is_enabled,
    reset
)
from stubborn.infrastructure.logging.config import configure_logging
from stubborn.infrastructure.transport.http_client import HttpxTransport, httpx_transport
from stubborn.shared.exceptions import (
    ConfigurationError,
    ErrorData,
    ErrorFactory,
    RequestError,
    StubbornError
)
from stubborn.shared.types import ErrorKind, NullLogger, TimingFunctionName

__version__ = "0.1.0"

__all__ = [
    "StubbornClient",
    "resilient",
    "TIMING_FUNCTIONS",
    "calculate_backoff",
    "RequestOptions",
    "options_from_env",
    "RetryPolicy",
    "StubbornRequest",
    "RetryContext",
    "default_context",
    "disable",
    "enable",
    "global_error_count",
    "is_enabled",
    "reset",
    "configure_logging",
    "HttpxTransport",
    "httpx_transport",
    "ConfigurationError",
    "ErrorData",
    "ErrorFactory",
    "RequestError",
    "StubbornError",
    "ErrorKind",
    "NullLogger",
    "TimingFunctionName",
]
