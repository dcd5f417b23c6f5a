"""
httpx transports.

A transport performs exactly one HTTP call and never retries; retrying is
the orchestrator's job. Request descriptions are dicts holding ``method``
plus any keyword accepted by ``httpx.AsyncClient.request``.
"""

from typing import Any, Optional
import httpx
import structlog

from stubborn.shared.types import RequestDescription

logger = structlog.get_logger(__name__)


def _split_request(request: Optional[RequestDescription]):
    kwargs = dict(request or {})
    method = str(kwargs.pop("method", None) or "GET").upper()
    return method, kwargs


async def httpx_transport(target: str, request: Optional[RequestDescription] = None) -> httpx.Response:
    """Send one request with a short-lived client."""
    method, kwargs = _split_request(request)
    async with httpx.AsyncClient() as client:
        return await client.request(method, target, **kwargs)


class HttpxTransport:
    """Transport bound to a caller-owned ``httpx.AsyncClient``."""

    def __init__(self, client: Optional[httpx.AsyncClient] = None, **client_kwargs: Any):
        """
        Initialize transport.

        Args:
            client: Client to send through; one is created from ``client_kwargs`` if omitted
            **client_kwargs: Arguments for ``httpx.AsyncClient``
        """
        self.client = client or httpx.AsyncClient(**client_kwargs)

    async def __call__(self, target: str, request: Optional[RequestDescription] = None) -> httpx.Response:
        method, kwargs = _split_request(request)
        return await self.client.request(method, target, **kwargs)

    async def aclose(self) -> None:
        await self.client.aclose()
        logger.debug("HTTP transport closed")

    async def __aenter__(self) -> "HttpxTransport":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
