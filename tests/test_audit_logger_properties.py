"""
Property-based tests for the audit logger.

Covers the JSON and text output formats, the level threshold, error context
and masking of sensitive values.
"""

import json
from io import StringIO

import pytest
from hypothesis import given, settings, assume
from hypothesis import strategies as st

from grade_checker.audit_logger import AuditLogger
from grade_checker.enums import LogLevel
from grade_checker.exceptions import TransportError


SENSITIVE_PATTERNS = [
    'token', 'secret', 'password', 'api_key', 'auth', 'authorization',
    'credential', 'cookie', 'private_key',
]


@st.composite
def component_name_strategy(draw) -> str:
    return draw(st.text(
        alphabet=st.sampled_from("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_-"),
        min_size=1,
        max_size=30,
    ))


@st.composite
def message_strategy(draw) -> str:
    return draw(st.text(
        alphabet=st.characters(
            whitelist_categories=('L', 'N', 'P', 'S', 'Z'),
            blacklist_characters='\x00\n\r',
        ),
        min_size=1,
        max_size=100,
    ))


@st.composite
def non_sensitive_key_strategy(draw) -> str:
    key = draw(st.text(alphabet=st.sampled_from("abcdefghijklmnopqrstuvwxyz_"), min_size=1, max_size=20))
    for pattern in SENSITIVE_PATTERNS:
        assume(pattern not in key)
    return key


@st.composite
def sensitive_key_strategy(draw) -> str:
    base = draw(st.sampled_from(SENSITIVE_PATTERNS + ['access_token', 'Set-Cookie', 'Authorization']))
    prefix = draw(st.sampled_from(['', 'my_', 'upstream_']))
    return f"{prefix}{base}"


@st.composite
def non_sensitive_data_strategy(draw) -> dict:
    return draw(st.dictionaries(
        non_sensitive_key_strategy(),
        st.one_of(
            st.text(max_size=30),
            st.integers(min_value=-1000, max_value=1000),
            st.booleans(),
            st.none(),
        ),
        max_size=5,
    ))


class TestOutputFormatProperty:
    """Entries are written as JSON, text, or both."""

    @given(
        level=st.sampled_from(list(LogLevel)),
        component=component_name_strategy(),
        message=message_strategy(),
        data=non_sensitive_data_strategy(),
    )
    @settings(max_examples=100)
    def test_both_formats(self, level: LogLevel, component: str, message: str, data: dict) -> None:
        """*For any* entry with format 'both', one JSON line and one text line SHALL be written."""
        output = StringIO()
        logger = AuditLogger(output_format="both", output_stream=output, level=LogLevel.DEBUG)

        logger.log(level, component, message, data)

        lines = output.getvalue().rstrip("\n").split("\n")
        assert len(lines) == 2

        parsed = json.loads(lines[0])
        assert parsed["level"] == level.value
        assert parsed["component"] == component
        assert parsed["message"] == message
        assert parsed["data"] == data

        assert lines[1].startswith("[")
        assert level.value.upper() in lines[1]
        assert f"[{component}]" in lines[1]

    def test_invalid_format_rejected(self) -> None:
        with pytest.raises(ValueError):
            AuditLogger(output_format="xml")

    def test_non_json_values_are_stringified(self) -> None:
        output = StringIO()
        logger = AuditLogger(output_format="json", output_stream=output)

        logger.info("PollLoop", "state", {"status": LogLevel.INFO})

        assert json.loads(output.getvalue())["data"]["status"] == "LogLevel.INFO"


class TestLevelThresholdProperty:
    """Entries below the configured level are dropped."""

    ORDER = [LogLevel.DEBUG, LogLevel.INFO, LogLevel.WARN, LogLevel.ERROR]

    @given(threshold=st.sampled_from(ORDER), level=st.sampled_from(ORDER))
    @settings(max_examples=50)
    def test_threshold(self, threshold: LogLevel, level: LogLevel) -> None:
        """*For any* threshold, an entry SHALL be recorded iff its level is at or above it."""
        output = StringIO()
        logger = AuditLogger(output_stream=output, level=threshold)

        entry = logger.log(level, "CLI", "message")

        expected = self.ORDER.index(level) >= self.ORDER.index(threshold)
        assert (entry is not None) == expected
        assert bool(output.getvalue()) == expected
        assert len(logger.entries) == (1 if expected else 0)

    @pytest.mark.parametrize(
        "name, expected",
        [("debug", LogLevel.DEBUG), ("WARN", LogLevel.WARN), ("verbose", LogLevel.INFO)],
    )
    def test_from_names(self, name: str, expected: LogLevel) -> None:
        assert AuditLogger.from_names(level=name).level == expected


class TestErrorContextProperty:
    """Errors are logged with their type, message and code."""

    @given(
        message=message_strategy(),
        url=st.one_of(st.none(), st.just("https://api.ssllabs.com/api/v3/analyze?host=example.com")),
        status=st.one_of(st.none(), st.sampled_from([400, 429, 500, 529])),
    )
    @settings(max_examples=50)
    def test_error_fields(self, message: str, url, status) -> None:
        logger = AuditLogger(output_stream=StringIO())
        error = TransportError(code="rate_limited", message=message)

        entry = logger.log_error(
            "CLI",
            "request failed",
            error=error,
            request_url=url,
            response_status_code=status,
            additional_data={"attempt": 3},
        )

        assert entry.level == LogLevel.ERROR
        assert entry.data["error_type"] == "TransportError"
        assert entry.data["error_code"] == "rate_limited"
        assert entry.data["attempt"] == 3
        assert ("request_url" in entry.data) == (url is not None)
        assert ("response_status_code" in entry.data) == (status is not None)

    def test_plain_exception_has_no_code(self) -> None:
        logger = AuditLogger(output_stream=StringIO())
        entry = logger.log_error("CLI", "boom", error=RuntimeError("boom"))

        assert entry.data["error_message"] == "boom"
        assert "error_code" not in entry.data


class TestSensitiveDataMaskingProperty:
    """Sensitive values never reach the output."""

    @given(key=sensitive_key_strategy(), value=st.text(min_size=8, max_size=30, alphabet="abcdef0123456789"))
    @settings(max_examples=100)
    def test_sensitive_values_masked(self, key: str, value: str) -> None:
        """*For any* key naming a secret, its value SHALL be masked at any nesting depth."""
        output = StringIO()
        logger = AuditLogger(output_format="both", output_stream=output)

        entry = logger.info("AssessmentApiClient", "headers", {
            key: value,
            "nested": {key: value},
            "items": [{key: value}],
        })

        assert entry.data[key] == AuditLogger.MASK_VALUE
        assert entry.data["nested"][key] == AuditLogger.MASK_VALUE
        assert entry.data["items"][0][key] == AuditLogger.MASK_VALUE
        assert value not in output.getvalue()

    @given(data=non_sensitive_data_strategy())
    @settings(max_examples=100)
    def test_other_values_untouched(self, data: dict) -> None:
        logger = AuditLogger(output_stream=StringIO())
        assert logger.mask_sensitive_data(data) == data

    def test_clear_entries(self) -> None:
        logger = AuditLogger(output_stream=StringIO())
        logger.warn("PollLoop", "giving up")
        logger.clear_entries()
        assert logger.entries == []
