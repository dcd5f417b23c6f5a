"""
Global pytest configuration and fixtures for stubborn tests.
"""
import pytest

from stubborn.core.state import RetryContext

from tests.support import FrozenClock, RecordingLogger, RecordingSleep


@pytest.fixture
def clock() -> FrozenClock:
    """Frozen clock so no time passes during a test."""
    return FrozenClock()


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def context(clock: FrozenClock, sleep: RecordingSleep) -> RetryContext:
    """Isolated shared state for one test."""
    return RetryContext(clock=clock, sleep=sleep)


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()

