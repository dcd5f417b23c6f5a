"""
Test doubles shared by the stubborn test suite.
"""
import asyncio
from typing import Any, Dict, List, Tuple

import httpx


class FrozenClock:
    """Clock that only moves when told to."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.current = start

    def __call__(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


class RecordingSleep:
    """Sleep that records the requested duration and only yields."""

    def __init__(self):
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        await asyncio.sleep(0)

    @property
    def delays_ms(self) -> List[int]:
        return [round(seconds * 1000) for seconds in self.calls]


class ScriptedTransport:
    """Transport answering from a script; the last entry repeats forever."""

    def __init__(self, *outcomes: Any):
        self.outcomes = list(outcomes)
        self.calls: List[Tuple[str, Dict[str, Any]]] = []

    async def __call__(self, target: str, request: Dict[str, Any]) -> Any:
        self.calls.append((target, request))
        outcome = self.outcomes[min(len(self.calls), len(self.outcomes)) - 1]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    @property
    def call_count(self) -> int:
        return len(self.calls)


class RecordingLogger:
    """Logger keeping every event for assertions."""

    def __init__(self):
        self.events: List[Tuple[str, str, Dict[str, Any]]] = []

    def _record(self, level: str, event: str, **kwargs: Any) -> None:
        self.events.append((level, event, kwargs))

    def debug(self, event: str, **kwargs: Any) -> None:
        self._record("debug", event, **kwargs)

    def info(self, event: str, **kwargs: Any) -> None:
        self._record("info", event, **kwargs)

    def warning(self, event: str, **kwargs: Any) -> None:
        self._record("warning", event, **kwargs)

    def error(self, event: str, **kwargs: Any) -> None:
        self._record("error", event, **kwargs)

    def levels(self, level: str) -> List[Tuple[str, Dict[str, Any]]]:
        return [(event, kwargs) for lvl, event, kwargs in self.events if lvl == level]


def make_response(status: int, headers: Dict[str, str] = None, json: Any = None) -> httpx.Response:
    """Build an httpx response without a network round trip."""
    return httpx.Response(status, headers=headers, json=json)
