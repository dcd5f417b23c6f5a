"""
Transports performing a single HTTP call.
"""

from .http_client import HttpxTransport, httpx_transport

__all__ = [
    "HttpxTransport",
    "httpx_transport"
]
