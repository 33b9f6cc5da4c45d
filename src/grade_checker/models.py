"""
Data models for the grade checker system.

This module defines the request sent to the assessment service, the
normalized snapshot decoded from each poll response, and the poll state
threaded through the polling loop.
"""

from dataclasses import dataclass, field
from typing import Optional

from .domain_validator import DomainValidator
from .enums import AssessmentStatus, ContentType, Grade, Toggle

# Endpoint status messages the service sends while and after grading
READY_MARKER = "Ready"
IN_PROGRESS_MARKER = "In progress"


@dataclass(frozen=True)
class AssessmentRequest:
    """Parameters of one analyze call."""

    domain_name: str  # Canonical, validated
    cache_policy: Toggle = Toggle.OFF
    publish_policy: Toggle = Toggle.OFF

    @classmethod
    def create(
        cls,
        raw_domain: str,
        from_cache: bool = False,
        publish: bool = False,
        validator: Optional[DomainValidator] = None,
    ) -> "AssessmentRequest":
        """
        Build a request for a raw domain string.

        Raises:
            DomainValidationError: If raw_domain is not a valid DNS name
        """
        validator = validator or DomainValidator()
        return cls(
            domain_name=validator.require_valid(raw_domain),
            cache_policy=Toggle.from_bool(from_cache),
            publish_policy=Toggle.from_bool(publish),
        )

    def query_params(self) -> dict[str, str]:
        """Query string parameters of the analyze endpoint."""
        return {
            "host": self.domain_name,
            "publish": self.publish_policy.value,
            "fromCache": self.cache_policy.value,
        }


@dataclass(frozen=True)
class FetchedResponse:
    """Raw body returned by the assessment service for one poll."""

    body: str
    content_type: ContentType = ContentType.JSON
    http_status_code: int = 200
    url: Optional[str] = None


@dataclass(frozen=True)
class EndpointResult:
    """Assessment result of one endpoint (IP address) of the host."""

    status_message: Optional[str] = None
    grade: Optional[str] = None

    @property
    def is_ready(self) -> bool:
        """Whether the status message is the completion marker (case and padding ignored)."""
        return (self.status_message or "").strip().lower() == READY_MARKER.lower()


@dataclass(frozen=True)
class AssessmentSnapshot:
    """Normalized view of one poll response."""

    host: str
    overall_status: str
    overall_message: Optional[str] = None
    # None: field absent or null. A None entry: the service sent null in its place.
    endpoints: Optional[tuple[Optional[EndpointResult], ...]] = None
    rating_text: Optional[str] = None  # Legacy HTML page only
    source: ContentType = ContentType.JSON


@dataclass(frozen=True)
class PollState:
    """
    State of one polling session.

    Replaced, never mutated, on every poll. Once ready is True the session
    is over and no further request may be issued.
    """

    attempt: int = 0
    ready: bool = False
    overall_status: AssessmentStatus = AssessmentStatus.UNKNOWN
    grade: Optional[Grade] = None
    message: Optional[str] = None
    error_detail: Optional[str] = None
    exit_code: int = 0

    @classmethod
    def initial(cls) -> "PollState":
        return cls()

    def to_dict(self) -> dict:
        """Convert the state to a JSON-serializable dictionary."""
        return {
            "attempt": self.attempt,
            "ready": self.ready,
            "overall_status": self.overall_status.value,
            "grade": self.grade.label if self.grade else None,
            "message": self.message,
            "error_detail": self.error_detail,
            "exit_code": self.exit_code,
        }


@dataclass
class ApiInfo:
    """Service information returned by the info endpoint."""

    engine_version: Optional[str] = None
    criteria_version: Optional[str] = None
    max_assessments: Optional[int] = None
    current_assessments: Optional[int] = None
    new_assessment_cool_off_ms: Optional[int] = None
    messages: list[str] = field(default_factory=list)
