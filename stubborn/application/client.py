"""
Client facade and decorator over ``StubbornRequest``.

``StubbornClient`` holds default options, a transport and a shared context
so callers can issue many requests without repeating configuration.
"""

from functools import wraps
from typing import Any, Dict, Mapping, Optional

from stubborn.core.options import RequestOptions
from stubborn.core.request import StubbornRequest
from stubborn.core.state import RetryContext, default_context
from stubborn.shared.types import RequestDescription, Transport


class StubbornClient:
    """Client issuing retrying requests with shared defaults."""

    def __init__(
        self,
        transport: Optional[Transport] = None,
        context: Optional[RetryContext] = None,
        **default_options: Any
    ):
        """
        Initialize client.

        Args:
            transport: Async callable performing one HTTP call
            context: Shared state for every request of this client
            **default_options: Request options applied to every request
        """
        self.transport = transport
        self.context = context if context is not None else default_context
        self.options = RequestOptions.resolve(default_options)

    def build(
        self,
        url: str,
        request: Optional[RequestDescription] = None,
        options: Optional[Mapping[str, Any]] = None
    ) -> StubbornRequest:
        """Create a request using this client's defaults."""
        return StubbornRequest(
            url,
            request,
            self.options.merged(options),
            transport=self.transport,
            context=self.context
        )

    async def request(
        self,
        method: str,
        url: str,
        options: Optional[Mapping[str, Any]] = None,
        **request_kwargs: Any
    ) -> Any:
        """
        Send a request, retrying as configured.

        Args:
            method: HTTP method
            url: Target URL
            options: Per-request option overrides
            **request_kwargs: Passed to the transport (headers, json, params, ...)

        Returns:
            Transport response

        Raises:
            RequestError: When the request settles with a failure
        """
        description = dict(request_kwargs, method=method.upper())
        return await self.build(url, description, options).send()

    async def get(self, url: str, **kwargs: Any) -> Any:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> Any:
        return await self.request("POST", url, **kwargs)

    async def put(self, url: str, **kwargs: Any) -> Any:
        return await self.request("PUT", url, **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> Any:
        return await self.request("DELETE", url, **kwargs)

    def get_status(self) -> Dict[str, Any]:
        """Get client status including shared state."""
        return {
            "options": {
                "timing_function": self.options.timing_function,
                "retries": self.options.retries,
                "max_errors": self.options.max_errors,
                "total_request_time_limit": self.options.total_request_time_limit,
            },
            "context": self.context.get_status(),
        }


def resilient(context: Optional[RetryContext] = None, **options: Any):
    """
    Decorator routing an async transport function through ``StubbornRequest``.

    Args:
        context: Shared state, defaults to the process-wide context
        **options: Request options

    Returns:
        Decorator producing ``async (target, request=None) -> response``
    """
    resolved = RequestOptions.resolve(options)

    def decorator(func: Transport):
        @wraps(func)
        async def wrapper(target: str, request: Optional[RequestDescription] = None) -> Any:
            return await StubbornRequest(
                target,
                request,
                resolved,
                transport=func,
                context=context
            ).send()

        return wrapper
    return decorator
