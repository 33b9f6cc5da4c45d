"""Printing of the final poll state."""

import json
import sys
from typing import Optional, TextIO

from .exit_codes import EXIT_ASSESSMENT_ERROR
from .models import PollState


class ResultPresenter:
    """Prints the grade (or the legacy rating text) of a finished session."""

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        error_stream: Optional[TextIO] = None,
        verbose: bool = False,
    ) -> None:
        self._stream = stream or sys.stdout
        self._error_stream = error_stream or sys.stderr
        self._verbose = verbose

    def render(self, state: PollState) -> None:
        if state.grade is not None:
            print(state.grade.label, file=self._stream)
        elif state.message and state.exit_code != EXIT_ASSESSMENT_ERROR:
            print(state.message, file=self._stream)

        if state.exit_code == EXIT_ASSESSMENT_ERROR:
            reason = state.message or state.error_detail or state.overall_status.value
            print(f"Assessment failed: {reason}", file=self._error_stream)
        elif not state.ready:
            print(
                f"Assessment not finished after {state.attempt} attempt(s)",
                file=self._error_stream,
            )

        if self._verbose:
            print(json.dumps(state.to_dict(), indent=2), file=self._stream)
