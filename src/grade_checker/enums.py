"""
Enumeration types for the grade checker system.

These enums provide type-safe constants for assessment states, grades,
request toggles, and error codes. Parsing of the loosely-typed strings the
assessment service returns happens here and nowhere else.
"""

from enum import Enum
from typing import Optional

from .exceptions import DecodeError


class AssessmentStatus(Enum):
    """Overall status of a submitted assessment."""

    DNS = "DNS"
    IN_PROGRESS = "IN_PROGRESS"
    READY = "READY"
    ERROR = "ERROR"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, raw: Optional[str]) -> "AssessmentStatus":
        """
        Map a raw status string to its canonical member.

        Matching is case-insensitive and accepts the spellings IN_PROGRESS,
        INPROGRESS and IN PROGRESS. Anything unrecognized becomes UNKNOWN.

        Args:
            raw: Status string as sent by the service (may be None)

        Returns:
            The matching AssessmentStatus, never raises
        """
        if raw is None:
            return cls.UNKNOWN
        key = " ".join(raw.split()).upper()
        return _STATUS_ALIASES.get(key, cls.UNKNOWN)


_STATUS_ALIASES: dict[str, AssessmentStatus] = {
    "DNS": AssessmentStatus.DNS,
    "IN_PROGRESS": AssessmentStatus.IN_PROGRESS,
    "INPROGRESS": AssessmentStatus.IN_PROGRESS,
    "IN PROGRESS": AssessmentStatus.IN_PROGRESS,
    "READY": AssessmentStatus.READY,
    "ERROR": AssessmentStatus.ERROR,
}


class Grade(Enum):
    """Letter rating of an assessed endpoint."""

    A_PLUS = "A+"
    A = "A"
    A_MINUS = "A-"
    B = "B"
    C = "C"
    D = "D"
    E = "E"
    F = "F"
    M = "M"
    T = "T"

    @property
    def label(self) -> str:
        """Canonical string form, as the service prints it."""
        return self.value

    @classmethod
    def parse(cls, raw: str) -> "Grade":
        """
        Parse a grade token.

        Raises:
            DecodeError: If the token is not a known grade
        """
        token = raw.strip() if isinstance(raw, str) else raw
        try:
            return cls(token)
        except ValueError:
            raise DecodeError(
                code=DecodeErrorCode.UNKNOWN_GRADE.value,
                message=f"Unrecognized grade: {raw!r}",
                details={"grade": raw},
            )

    @classmethod
    def try_parse(cls, raw: Optional[str]) -> Optional["Grade"]:
        """Parse a grade token, returning None instead of raising."""
        if raw is None:
            return None
        try:
            return cls.parse(raw)
        except DecodeError:
            return None


class Toggle(Enum):
    """On/off switch as used in the analyze query string."""

    ON = "on"
    OFF = "off"

    @classmethod
    def from_bool(cls, value: bool) -> "Toggle":
        return cls.ON if value else cls.OFF


class ContentType(Enum):
    """Declared type of a response body."""

    JSON = "json"
    HTML = "html"

    @classmethod
    def from_header(cls, header: Optional[str]) -> "ContentType":
        """Pick the decoder for a Content-Type header value (JSON unless it says HTML)."""
        if header and "html" in header.lower():
            return cls.HTML
        return cls.JSON


class LogLevel(Enum):
    """Logging severity levels."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class DomainValidationErrorCode(Enum):
    """Error codes for domain validation failures."""

    EMPTY_INPUT = "empty_input"
    FORBIDDEN_CHARS = "forbidden_chars"
    IDNA_ERROR = "idna_error"
    TOO_LONG = "too_long"
    INVALID_LABEL = "invalid_label"
    INVALID_TLD = "invalid_tld"


class TransportErrorCode(Enum):
    """Error codes for assessment API transport failures."""

    NETWORK_ERROR = "network_error"
    TLS_ERROR = "tls_error"
    TIMEOUT = "timeout"
    HTTP_ERROR = "http_error"
    RATE_LIMITED = "rate_limited"
    SERVICE_OVERLOADED = "service_overloaded"


class DecodeErrorCode(Enum):
    """Error codes for response decoding failures."""

    MALFORMED_JSON = "malformed_json"
    SCHEMA_MISMATCH = "schema_mismatch"
    UNKNOWN_GRADE = "unknown_grade"
    NO_RATING = "no_rating"
