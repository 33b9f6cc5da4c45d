"""
Poll loop for assessment requests.

This module repeats fetch -> decode -> reconcile until the poll state is
ready or the attempt ceiling is exceeded, pausing a fixed interval between
attempts. Transport and decode failures are not retried: they propagate to
the caller, which alone decides how the process ends.
"""

import asyncio
from dataclasses import replace
from typing import Awaitable, Callable, Optional

from .audit_logger import AuditLogger
from .models import AssessmentRequest, FetchedResponse, PollState
from .response_decoder import ResponseDecoder
from .status_reconciler import StatusReconciler

FetchFn = Callable[[AssessmentRequest], Awaitable[FetchedResponse]]
SleepFn = Callable[[float], Awaitable[None]]
AttemptHook = Callable[[PollState], None]


class PollLoop:
    """
    Drives one polling session.

    States are Polling and Done. Each cycle increments the attempt counter,
    fetches, decodes and reconciles; the session is Done once the state is
    ready or the counter exceeds max_attempts. The interval is fixed.
    """

    COMPONENT = "PollLoop"

    def __init__(
        self,
        fetch: FetchFn,
        decoder: Optional[ResponseDecoder] = None,
        reconciler: Optional[StatusReconciler] = None,
        interval_seconds: float = 15.0,
        max_attempts: int = 10,
        sleep: SleepFn = asyncio.sleep,
        on_attempt: Optional[AttemptHook] = None,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        """
        Initialize the poll loop.

        Args:
            fetch: Async callable returning the raw response for a request
            decoder: Response decoder (default: ResponseDecoder())
            reconciler: Status reconciler (default: StatusReconciler())
            interval_seconds: Pause between attempts
            max_attempts: Attempt ceiling; polling stops once it is exceeded
            sleep: Async sleep function (injectable for tests)
            on_attempt: Called with the new state after every attempt
            logger: Optional audit logger
        """
        if interval_seconds < 0:
            raise ValueError("interval_seconds must not be negative")
        if max_attempts < 0:
            raise ValueError("max_attempts must not be negative")

        self._fetch = fetch
        self._decoder = decoder or ResponseDecoder()
        self._reconciler = reconciler or StatusReconciler()
        self._interval = interval_seconds
        self._max_attempts = max_attempts
        self._sleep = sleep
        self._on_attempt = on_attempt
        self._logger = logger

    async def run(self, request: AssessmentRequest) -> PollState:
        """
        Poll until the assessment is done or the attempt ceiling is exceeded.

        Args:
            request: The validated assessment request

        Returns:
            The last computed PollState

        Raises:
            TransportError: If a request fails
            DecodeError: If a response cannot be decoded
        """
        state = PollState.initial()

        while True:
            attempt = state.attempt + 1
            fetched = await self._fetch(request)
            snapshot = self._decoder.decode(fetched.body, fetched.content_type)
            state = self._reconciler.reconcile(
                replace(state, attempt=attempt),
                snapshot,
            )

            self._log_attempt(request, state)
            if self._on_attempt:
                self._on_attempt(state)

            if self.is_done(state):
                break

            await self._sleep(self._interval)

        return state

    def is_done(self, state: PollState) -> bool:
        """Whether the session ends after the given state."""
        return state.ready or state.attempt > self._max_attempts

    def _log_attempt(self, request: AssessmentRequest, state: PollState) -> None:
        if not self._logger:
            return
        self._logger.info(
            self.COMPONENT,
            f"Attempt {state.attempt} for {request.domain_name}: {state.overall_status.value}",
            state.to_dict(),
        )
        if not state.ready and state.attempt > self._max_attempts:
            self._logger.warn(
                self.COMPONENT,
                f"Giving up after {state.attempt} attempts",
                {"domain": request.domain_name, "max_attempts": self._max_attempts},
            )
