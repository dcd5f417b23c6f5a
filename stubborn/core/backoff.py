"""Backoff timing functions, keyed by the ``timing_function`` option."""

from typing import Callable, Dict

from stubborn.shared.exceptions import ConfigurationError
from stubborn.shared.types import Milliseconds, TimingFunctionName


def exponential(attempt: int) -> Milliseconds:
    """((n^2 - 1) / 2) seconds: 0ms, 1500ms, 4000ms, 7500ms, ..."""
    return Milliseconds((attempt ** 2 - 1) / 2 * 1000)


def constant(attempt: int) -> Milliseconds:
    return Milliseconds(1000)


TIMING_FUNCTIONS: Dict[str, Callable[[int], Milliseconds]] = {
    TimingFunctionName.EXPONENTIAL.value: exponential,
    TimingFunctionName.CONSTANT.value: constant,
}


def get_timing_function(name: str) -> Callable[[int], Milliseconds]:
    """
    Look up a timing function by name.

    Raises:
        ConfigurationError: If no timing function is registered under ``name``
    """
    key = name.value if isinstance(name, TimingFunctionName) else name
    try:
        return TIMING_FUNCTIONS[key]
    except KeyError:
        raise ConfigurationError(
            f"Unknown timing function: {name}",
            details={"available": sorted(TIMING_FUNCTIONS)}
        )


def calculate_backoff(name: str, attempt: int, max_delay: float) -> Milliseconds:
    """Backoff delay for ``attempt``, clamped to [0, max_delay]."""
    delay = get_timing_function(name)(attempt)
    return Milliseconds(max(0, min(delay, max_delay)))
