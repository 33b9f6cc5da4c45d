"""
Exit code mapping for assessment outcomes.

Grades map to 0 (A+, A), 1 (A-) and 2 (everything lower, or no grade).
The 3 for an errored or unknown assessment is set by the status reconciler
and never recomputed here. Codes above 3 are diagnostics for failures that
stop the run before an outcome exists.
"""

from typing import Optional

from .enums import Grade

EXIT_GRADE_TOP = 0
EXIT_GRADE_A_MINUS = 1
EXIT_GRADE_LOWER = 2
EXIT_ASSESSMENT_ERROR = 3

EXIT_INVALID_DOMAIN = 4
EXIT_TRANSPORT_ERROR = 5
EXIT_DECODE_ERROR = 6
EXIT_CONFIG_ERROR = 7


class ExitCodeMapper:
    """Maps grades to process exit codes."""

    GRADE_EXIT_CODES: dict[Grade, int] = {
        Grade.A_PLUS: EXIT_GRADE_TOP,
        Grade.A: EXIT_GRADE_TOP,
        Grade.A_MINUS: EXIT_GRADE_A_MINUS,
        Grade.B: EXIT_GRADE_LOWER,
        Grade.C: EXIT_GRADE_LOWER,
        Grade.D: EXIT_GRADE_LOWER,
        Grade.E: EXIT_GRADE_LOWER,
        Grade.F: EXIT_GRADE_LOWER,
        Grade.M: EXIT_GRADE_LOWER,
        Grade.T: EXIT_GRADE_LOWER,
    }

    def for_grade(self, grade: Optional[Grade]) -> int:
        """Return the exit code for a grade; an absent grade yields 2."""
        if grade is None:
            return EXIT_GRADE_LOWER
        return self.GRADE_EXIT_CODES.get(grade, EXIT_GRADE_LOWER)

    def for_token(self, raw: Optional[str]) -> int:
        """Return the exit code for a raw grade string; unrecognized tokens yield 2."""
        return self.for_grade(Grade.try_parse(raw))
