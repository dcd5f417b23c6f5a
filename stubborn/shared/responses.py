"""
Helpers for reading response-like objects returned by transports.

Transports are not tied to one HTTP library: httpx responses expose
``status_code``, aiohttp responses expose ``status``, and headers may be a
case-insensitive mapping or a plain dict.
"""

import re
from typing import Any, Optional

LEADING_SECONDS = re.compile(r"\s*\+?(\d+)")


def get_status_code(response: Any) -> Optional[int]:
    """Return the numeric status of a response, or None if it has none."""
    for attr in ("status_code", "status"):
        status = getattr(response, attr, None)
        if isinstance(status, int) and not isinstance(status, bool):
            return status
    return None


def get_header(response: Any, name: str) -> Optional[str]:
    """Case-insensitive header lookup on a response-like object."""
    headers = getattr(response, "headers", None)
    if not headers:
        return None

    value = headers.get(name)
    if value is None and isinstance(headers, dict):
        lowered = name.lower()
        for key, candidate in headers.items():
            if str(key).lower() == lowered:
                value = candidate
                break

    return None if value is None else str(value)


def parse_retry_after(value: Optional[str]) -> Optional[int]:
    """
    Parse a ``Retry-After`` header holding a number of seconds.

    Only the leading integer counts, so ``"2.5"`` waits 2 seconds. HTTP-date
    values, negative numbers and garbage yield None.
    """
    if value is None:
        return None
    match = LEADING_SECONDS.match(str(value))
    return int(match.group(1)) if match else None
