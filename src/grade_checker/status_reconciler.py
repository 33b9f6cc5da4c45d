"""
Status reconciler for assessment polling.

This module holds the state transition applied after every poll. It folds
one decoded snapshot into the current PollState and decides whether the
session is over and which exit code it carries.

Rules:
- ERROR overall status: terminal, exit code 3
- Unrecognized overall status: terminal, exit code 3
- DNS, IN_PROGRESS, READY: not terminal at the overall level; the first
  endpoint decides
- No endpoints: terminal, exit code 3, status forced to ERROR
- First endpoint reporting "Ready": terminal; its grade sets the exit code
- Failed outcomes carry no grade, whatever earlier polls reported
"""

from dataclasses import replace
from typing import Optional

from .enums import AssessmentStatus, Grade
from .exit_codes import EXIT_ASSESSMENT_ERROR, ExitCodeMapper
from .models import AssessmentSnapshot, EndpointResult, PollState

NO_ENDPOINT = "no endpoint"
ENDPOINT_NOT_READY = "endpoint not ready"

PENDING_STATUSES = frozenset({
    AssessmentStatus.DNS,
    AssessmentStatus.IN_PROGRESS,
    AssessmentStatus.READY,
})


class StatusReconciler:
    """
    Pure transition function (PollState, AssessmentSnapshot) -> PollState.

    The endpoint's own status message is the authoritative completion
    signal: an overall READY does not end the session by itself.
    """

    def __init__(self, exit_code_mapper: Optional[ExitCodeMapper] = None) -> None:
        self._exit_codes = exit_code_mapper or ExitCodeMapper()

    def reconcile(self, state: PollState, snapshot: AssessmentSnapshot) -> PollState:
        """
        Fold a snapshot into the poll state.

        Args:
            state: State after the previous poll
            snapshot: Decoded response of the current poll

        Returns:
            New PollState; the input state is left untouched

        Raises:
            DecodeError: If the first endpoint carries an unrecognized grade
        """
        status = AssessmentStatus.parse(snapshot.overall_status)

        if status not in PENDING_STATUSES:
            # ERROR, or a status string the service is not documented to send
            return replace(
                state,
                overall_status=status,
                message=snapshot.overall_message,
                grade=None,
                exit_code=EXIT_ASSESSMENT_ERROR,
                ready=True,
            )

        state = replace(
            state,
            overall_status=status,
            exit_code=0,
            ready=False,
        )
        return self._inspect_endpoints(state, snapshot)

    def _inspect_endpoints(self, state: PollState, snapshot: AssessmentSnapshot) -> PollState:
        if not snapshot.endpoints:
            return self._fail(state, NO_ENDPOINT)

        endpoint: Optional[EndpointResult] = snapshot.endpoints[0]
        if endpoint is None:
            return self._fail(state, ENDPOINT_NOT_READY)

        ready = endpoint.is_ready
        grade = Grade.parse(endpoint.grade) if endpoint.grade else None

        exit_code = state.exit_code
        if grade is not None or ready:
            exit_code = self._exit_codes.for_grade(grade)

        return replace(
            state,
            ready=ready,
            grade=grade,
            exit_code=exit_code,
            message=snapshot.rating_text,
        )

    def _fail(self, state: PollState, detail: str) -> PollState:
        return replace(
            state,
            overall_status=AssessmentStatus.ERROR,
            error_detail=detail,
            grade=None,
            message=None,
            exit_code=EXIT_ASSESSMENT_ERROR,
            ready=True,
        )
