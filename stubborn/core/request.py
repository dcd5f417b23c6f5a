"""
Request orchestration.

A ``StubbornRequest`` drives one logical request through guard checks,
backoff, the transport call, outcome classification and the retry decision,
until it succeeds or settles with a ``RequestError``.
"""

import asyncio
from typing import Any, Mapping, Optional, Union

from stubborn.core.backoff import calculate_backoff
from stubborn.core.options import RequestOptions
from stubborn.core.policy import RetryPolicy
from stubborn.core.state import RetryContext, default_context
from stubborn.infrastructure.logging.sanitization import LogSanitizer
from stubborn.infrastructure.transport.http_client import httpx_transport
from stubborn.shared.exceptions import ErrorFactory, RequestError, StubbornError
from stubborn.shared.responses import get_header, get_status_code, parse_retry_after
from stubborn.shared.types import ErrorKind, RequestDescription, Transport


def _consume_outcome(future: "asyncio.Future[Any]") -> None:
    """Retrieve the outcome of a transport call nobody awaits anymore."""
    if not future.cancelled():
        future.exception()


class StubbornRequest:
    """
    A retry wrapper around a single outbound HTTP call.

    Per-request state (attempt counter, terminal error, timer) lives on the
    instance; cross-request state lives on the shared ``RetryContext``.
    """

    def __init__(
        self,
        target: str,
        request: Optional[RequestDescription] = None,
        options: Union[RequestOptions, Mapping[str, Any], None] = None,
        *,
        transport: Optional[Transport] = None,
        context: Optional[RetryContext] = None
    ):
        """
        Initialize request.

        Args:
            target: URL to call
            request: Description of the call passed untouched to the transport
            options: Options instance or mapping of overrides over the defaults
            transport: Async callable performing one HTTP call
            context: Shared state, defaults to the process-wide context

        Raises:
            ConfigurationError: If options are invalid
        """
        self.options = RequestOptions.resolve(options)
        self.logger = self.options.logger
        self.target = target
        self.request = request if request is not None else {}
        self.transport = transport or httpx_transport
        self.context = context if context is not None else default_context
        self.policy = RetryPolicy(self.options)

        self.attempt_count = 0
        self.start_time: Optional[float] = None
        self.error: Optional[RequestError] = None
        if self.context.budget_exhausted(self.options.max_errors):
            self.error = self._max_errors_exceeded()

        self._request_timer: Optional[asyncio.TimerHandle] = None
        self._outcome: Optional["asyncio.Future[Any]"] = None
        self._loop_task: Optional["asyncio.Task[Any]"] = None

    @property
    def method(self) -> str:
        return str(self.request.get("method") or "GET").upper()

    async def send(self) -> Any:
        """
        Send the request, retrying as configured.

        Returns:
            The transport response, unchanged

        Raises:
            RequestError: When the request settles with a failure
            StubbornError: If the request was already sent
        """
        if self._outcome is not None:
            raise StubbornError("Request has already been sent", details={"url": LogSanitizer.sanitize_url(self.target)})

        loop = asyncio.get_running_loop()
        self.start_time = self.context.now()
        self._outcome = loop.create_future()
        self._start_request_timer(loop)

        self._loop_task = loop.create_task(self._run_request_loop())
        self._loop_task.add_done_callback(self._settle)

        try:
            return await self._outcome
        except RequestError as error:
            self._log(
                "error",
                "Request failed",
                kind=error.kind.value,
                attempts=self.attempt_count,
                status=error.data.status_code
            )
            raise
        finally:
            self._clear_request_timer()
            if not self._loop_task.done():
                self._loop_task.cancel()

    async def _run_request_loop(self) -> Any:
        while True:
            try:
                return await self._do_attempt()
            except RequestError as error:
                if self.options.on_error is not None:
                    self.options.on_error(error)

                if not self.policy.can_retry(error, self.attempt_count, self.error):
                    raise

    async def _do_attempt(self) -> Any:
        self._guard()

        self.attempt_count += 1
        await self._delay_if_needed()

        # Conditions may have changed while delaying
        self._guard()

        call = self._start_transport_call()
        try:
            # Pre-emption cancels the loop, not the call in flight
            response = await asyncio.shield(call)
        except asyncio.CancelledError as exc:
            if not call.cancelled():
                raise
            # The transport cancelled itself; that is a failed call, not a cancelled request
            self._raise_network_error(exc)
        except Exception as exc:
            self._raise_network_error(exc)

        status = get_status_code(response)
        if status is not None and status < 400:
            return response

        error = ErrorFactory.http_error(self.target, self.request, response)
        self._handle_error(error)

        # A terminal error (timeout, budget, rate limit) is more informative than the response
        raise self.error or error

    def _guard(self) -> None:
        if not self.context.enabled:
            disabled = ErrorFactory.disabled(self.target, self.request)
            if self.error is None:
                self.error = disabled
            raise disabled

        if self.error is None and self.context.budget_exhausted(self.options.max_errors):
            self.error = self._max_errors_exceeded()

        if self.error is not None:
            raise self.error

    async def _delay_if_needed(self) -> None:
        # The rate-limit wait is not capped by max_delay
        rate_limit_delay = self.context.rate_limit_delay()
        backoff_delay = calculate_backoff(self.options.timing_function, self.attempt_count, self.options.max_delay)
        delay = max(rate_limit_delay, backoff_delay)

        if delay > 0:
            self._log("debug", "Delaying attempt", attempt=self.attempt_count, delay_ms=delay)

        # Always yield so a pending timeout can pre-empt
        await self.context.sleep(delay / 1000)

    def _start_transport_call(self) -> "asyncio.Future[Any]":
        call = asyncio.ensure_future(self.transport(self.target, self.request))
        call.add_done_callback(_consume_outcome)
        return call

    def _raise_network_error(self, exc: BaseException) -> None:
        error = ErrorFactory.network_error(self.target, self.request, exc)
        self._handle_error(error)
        raise (self.error or error) from exc

    def _handle_error(self, error: RequestError) -> None:
        """Update shared state for a failed attempt. Must not yield."""
        count = self.context.record_error()
        if self.error is None and self.context.budget_exhausted(self.options.max_errors):
            self.error = self._max_errors_exceeded()
            self._log("warning", "Global error limit reached", error_limit=self.options.max_errors, global_error_count=count)

        if error.kind != ErrorKind.HTTP_ERROR:
            return

        status = error.data.status_code
        if status == 401:
            self._log("warning", "Unauthorized response received", status=status)
        elif status == 429:
            self._log("warning", "Rate limited", status=status)
            retry_after = parse_retry_after(get_header(error.data.response, "Retry-After"))
            if retry_after is None:
                return

            until = self.context.note_retry_after(retry_after)
            limit = self.options.total_request_time_limit
            if limit and until - self.start_time > limit and self.error is None:
                self.error = ErrorFactory.rate_limited(self.target, self.request, error.data.response)

    def _max_errors_exceeded(self) -> RequestError:
        return ErrorFactory.max_errors_exceeded(self.target, self.request, self.options.max_errors)

    def _start_request_timer(self, loop: asyncio.AbstractEventLoop) -> None:
        limit = self.options.total_request_time_limit
        if limit:
            self._request_timer = loop.call_later(limit / 1000, self._on_request_timeout)

    def _clear_request_timer(self) -> None:
        if self._request_timer is not None:
            self._request_timer.cancel()
            self._request_timer = None

    def _on_request_timeout(self) -> None:
        self._request_timer = None
        self.error = ErrorFactory.timeout(self.target, self.request)
        self._reject_immediately(self.error)

    def _reject_immediately(self, error: RequestError) -> None:
        if self._outcome is not None and not self._outcome.done():
            self._outcome.set_exception(error)

    def _settle(self, task: "asyncio.Task[Any]") -> None:
        if self._outcome.done():
            # Already pre-empted; this outcome is discarded
            if not task.cancelled():
                task.exception()
            return
        if task.cancelled():
            # Cancelled from outside send(); the caller must still hear back
            self._outcome.cancel()
            return
        exc = task.exception()
        if exc is not None:
            self._outcome.set_exception(exc)
        else:
            self._outcome.set_result(task.result())

    def _log(self, level: str, message: str, **data: Any) -> None:
        getattr(self.logger, level)(message, method=self.method, url=LogSanitizer.sanitize_url(self.target), **data)
