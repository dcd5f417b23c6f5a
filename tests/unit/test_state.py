"""
Unit tests for the shared retry context.
"""
import pytest

from stubborn.core import state
from stubborn.core.state import RetryContext


class TestRetryContext:
    """Test cases for RetryContext."""

    def test_initial_state(self, context):
        """Test a fresh context is enabled with no errors."""
        assert context.enabled is True
        assert context.global_error_count == 0
        assert context.rate_limited_until is None
        assert context.rate_limit_delay() == 0

    def test_disable_enable(self, context):
        """Test the circuit flag toggles."""
        context.disable()
        assert context.enabled is False
        context.disable()
        assert context.enabled is False
        context.enable()
        assert context.enabled is True

    def test_error_budget(self, context):
        """Test the budget trips when the count reaches the limit."""
        assert context.budget_exhausted(None) is False
        assert context.budget_exhausted(0) is True

        assert context.record_error() == 1
        assert context.budget_exhausted(2) is False
        assert context.record_error() == 2
        assert context.budget_exhausted(2) is True
        assert context.budget_exhausted(None) is False

    def test_rate_limit_delay(self, context, clock):
        """Test the padded rate-limit wait and its decay over time."""
        until = context.note_retry_after(2)

        assert until == clock() * 1000 + 2000
        assert context.rate_limit_delay() == 2100

        clock.advance(1.5)
        assert context.rate_limit_delay() == pytest.approx(600)

        clock.advance(10)
        assert context.rate_limit_delay() == 0

    def test_rate_limit_only_moves_forward(self, context):
        """Test a shorter hint does not shorten an existing wait."""
        context.note_retry_after(10)
        context.note_retry_after(1)

        assert context.rate_limit_delay() == 10100

        context.note_retry_after(20)
        assert context.rate_limit_delay() == 20100

    def test_reset(self, context):
        """Test reset restores the initial state."""
        context.record_error()
        context.disable()
        context.note_retry_after(5)

        context.reset()

        assert context.get_status() == {
            "enabled": True,
            "global_error_count": 0,
            "rate_limited_until": None,
            "rate_limit_delay_ms": 0,
        }

    def test_contexts_are_isolated(self):
        """Test two contexts share nothing."""
        first, second = RetryContext(), RetryContext()
        first.record_error()
        first.disable()

        assert second.global_error_count == 0
        assert second.enabled is True


class TestDefaultContext:
    """Test cases for the process-wide helpers."""

    @pytest.fixture(autouse=True)
    def reset_default(self):
        state.reset()
        yield
        state.reset()

    def test_module_helpers(self):
        """Test helpers act on the default context."""
        state.disable()
        assert state.is_enabled() is False
        assert state.default_context.enabled is False

        state.enable()
        assert state.is_enabled() is True

        state.default_context.record_error()
        assert state.global_error_count() == 1

        state.reset()
        assert state.global_error_count() == 0
