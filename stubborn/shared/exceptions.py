"""
Custom exceptions for stubborn.

This module defines the error hierarchy of the library and the factory
used to build the immutable error records a request settles with.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from stubborn.shared.responses import get_status_code
from stubborn.shared.types import ErrorKind, RequestDescription


class StubbornError(Exception):
    """Base exception for all stubborn errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, error_code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.error_code = error_code


class ConfigurationError(StubbornError):
    """Raised when request options are invalid."""
    pass


@dataclass(frozen=True)
class ErrorData:
    """Payload carried by a RequestError."""
    target: str
    request: RequestDescription
    response: Any = None
    underlying_error: Optional[BaseException] = None
    error_limit: Optional[int] = None

    @property
    def status_code(self) -> Optional[int]:
        """Status of the attached response, if any."""
        if self.response is None:
            return None
        return get_status_code(self.response)


class RequestError(StubbornError):
    """
    Terminal or per-attempt failure of a request.

    ``kind`` and ``data`` are fixed at construction.
    """

    def __init__(self, kind: ErrorKind, data: ErrorData, message: Optional[str] = None):
        self._kind = ErrorKind(kind)
        self._data = data
        super().__init__(
            message or _default_message(self._kind, data),
            details=_summarize(data),
            error_code=self._kind.value
        )

    @property
    def kind(self) -> ErrorKind:
        return self._kind

    @property
    def data(self) -> ErrorData:
        return self._data

    @property
    def target(self) -> str:
        return self._data.target

    @property
    def is_terminal(self) -> bool:
        """Whether this error supersedes ordinary retry logic."""
        return is_terminal_kind(self._kind)

    def __repr__(self) -> str:
        return f"RequestError(kind={self._kind.value!r}, target={self._data.target!r})"

    def __reduce__(self):
        return (type(self), (self._kind, self._data, self.message))


def _default_message(kind: ErrorKind, data: ErrorData) -> str:
    method = str((data.request or {}).get("method", "GET")).upper()
    prefix = f"{method} {data.target}"
    if kind == ErrorKind.HTTP_ERROR:
        return f"{prefix} failed with HTTP {data.status_code}"
    if kind == ErrorKind.NETWORK_ERROR:
        return f"{prefix} failed with network error: {data.underlying_error!r}"
    if kind == ErrorKind.MAX_ERRORS_EXCEEDED:
        return f"{prefix} aborted: global error limit of {data.error_limit} reached"
    if kind == ErrorKind.TIMEOUT:
        return f"{prefix} exceeded its total time limit"
    if kind == ErrorKind.RATE_LIMITED:
        return f"{prefix} rate limited beyond its total time limit"
    return f"{prefix} not sent: requests are disabled"


def _summarize(data: ErrorData) -> Dict[str, Any]:
    details: Dict[str, Any] = {}
    if data.response is not None:
        details["status"] = data.status_code
    if data.underlying_error is not None:
        details["underlying_error"] = type(data.underlying_error).__name__
    if data.error_limit is not None:
        details["error_limit"] = data.error_limit
    return details


class ErrorFactory:
    """One constructor per error kind."""

    @staticmethod
    def timeout(target: str, request: RequestDescription) -> RequestError:
        return RequestError(ErrorKind.TIMEOUT, ErrorData(target, request))

    @staticmethod
    def max_errors_exceeded(target: str, request: RequestDescription, error_limit: int) -> RequestError:
        return RequestError(ErrorKind.MAX_ERRORS_EXCEEDED, ErrorData(target, request, error_limit=error_limit))

    @staticmethod
    def network_error(target: str, request: RequestDescription, underlying_error: BaseException) -> RequestError:
        return RequestError(ErrorKind.NETWORK_ERROR, ErrorData(target, request, underlying_error=underlying_error))

    @staticmethod
    def disabled(target: str, request: RequestDescription) -> RequestError:
        return RequestError(ErrorKind.DISABLED, ErrorData(target, request))

    @staticmethod
    def http_error(target: str, request: RequestDescription, response: Any) -> RequestError:
        return RequestError(ErrorKind.HTTP_ERROR, ErrorData(target, request, response=response))

    @staticmethod
    def rate_limited(target: str, request: RequestDescription, response: Any) -> RequestError:
        return RequestError(ErrorKind.RATE_LIMITED, ErrorData(target, request, response=response))


TERMINAL_KINDS = frozenset({
    ErrorKind.TIMEOUT,
    ErrorKind.MAX_ERRORS_EXCEEDED,
    ErrorKind.DISABLED,
    ErrorKind.RATE_LIMITED,
})


def is_terminal_kind(kind: ErrorKind) -> bool:
    """Determine if an error kind ends a request regardless of retry policy."""
    return kind in TERMINAL_KINDS
