"""
Property-based tests for the grade to exit code mapping.
"""

import pytest
from hypothesis import given, settings, assume
from hypothesis import strategies as st

from grade_checker.enums import Grade
from grade_checker.exit_codes import ExitCodeMapper


class TestExitCodeMapping:
    """Every grade maps to 0, 1 or 2 and nothing else."""

    @pytest.mark.parametrize(
        "grade, expected",
        [
            (Grade.A_PLUS, 0),
            (Grade.A, 0),
            (Grade.A_MINUS, 1),
            (Grade.B, 2),
            (Grade.C, 2),
            (Grade.D, 2),
            (Grade.E, 2),
            (Grade.F, 2),
            (Grade.M, 2),
            (Grade.T, 2),
        ],
    )
    def test_grade_table(self, grade: Grade, expected: int) -> None:
        assert ExitCodeMapper().for_grade(grade) == expected

    def test_absent_grade_maps_to_two(self) -> None:
        assert ExitCodeMapper().for_grade(None) == 2

    @given(grade=st.sampled_from(list(Grade)))
    def test_token_and_grade_agree(self, grade: Grade) -> None:
        """*For any* grade, mapping its label SHALL equal mapping the member."""
        mapper = ExitCodeMapper()
        assert mapper.for_token(grade.label) == mapper.for_grade(grade)

    @given(raw=st.one_of(st.none(), st.text(max_size=4)))
    @settings(max_examples=200)
    def test_unrecognized_token_maps_to_two(self, raw) -> None:
        assume(raw is None or raw.strip() not in {g.value for g in Grade})
        assert ExitCodeMapper().for_token(raw) == 2

    @given(grade=st.sampled_from(list(Grade)))
    def test_grade_never_maps_to_assessment_error(self, grade: Grade) -> None:
        assert ExitCodeMapper().for_grade(grade) in (0, 1, 2)
