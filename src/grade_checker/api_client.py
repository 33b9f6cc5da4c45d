"""
Assessment API client.

This module provides the async HTTP client that submits analyze requests to
the assessment service and returns raw response bodies, with TLS
enforcement and transport failures raised as TransportError.
"""

import json
import time
from typing import Optional
from urllib.parse import urlparse

import httpx

from .audit_logger import AuditLogger
from .config import DEFAULT_API_URL, DEFAULT_USER_AGENT
from .enums import ContentType, TransportErrorCode
from .exceptions import TransportError
from .models import ApiInfo, AssessmentRequest, FetchedResponse

ANALYZE_PATH = "/analyze"
INFO_PATH = "/info"

# 529: the service is overloaded and asks clients to back off
STATUS_ERROR_CODES = {
    429: TransportErrorCode.RATE_LIMITED,
    503: TransportErrorCode.SERVICE_OVERLOADED,
    529: TransportErrorCode.SERVICE_OVERLOADED,
}


class AssessmentApiClient:
    """
    Async client for the assessment API with TLS enforcement.

    Use as an async context manager; fetch() is the fetch collaborator the
    poll loop consumes.
    """

    COMPONENT = "AssessmentApiClient"

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
        user_agent: str = DEFAULT_USER_AGENT,
        simulation_mode: bool = False,
        logger: Optional[AuditLogger] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the API client.

        Args:
            base_url: API root, e.g. 'https://api.ssllabs.com/api/v3'
            timeout: Request timeout in seconds
            user_agent: User-Agent header value
            simulation_mode: If True, no real network requests are made
            logger: Optional audit logger for request/response logging
            transport: Optional httpx transport (tests)
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._user_agent = user_agent
        self._simulation_mode = simulation_mode
        self._logger = logger
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "AssessmentApiClient":
        """Async context manager entry."""
        self._validate_base_url()
        self._client = self._create_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    @property
    def base_url(self) -> str:
        return self._base_url

    def build_analyze_url(self, request: AssessmentRequest) -> str:
        """Full analyze URL for a request."""
        return str(httpx.URL(self._base_url + ANALYZE_PATH, params=request.query_params()))

    async def fetch(self, request: AssessmentRequest) -> FetchedResponse:
        """
        Submit (or poll) an assessment and return the raw response.

        Args:
            request: The validated assessment request

        Returns:
            FetchedResponse with the body and its declared content type

        Raises:
            TransportError: On connection, TLS or timeout failures and on
                non-2xx HTTP statuses
        """
        url = self.build_analyze_url(request)

        if self._simulation_mode:
            return self._create_simulation_response(request, url)

        self._log_debug("API request", {"url": url})
        response = await self._get(url)

        fetched = FetchedResponse(
            body=response.text,
            content_type=ContentType.from_header(response.headers.get("content-type")),
            http_status_code=response.status_code,
            url=url,
        )
        self._log_debug(
            "API response",
            {"url": url, "http_status": response.status_code, "body": fetched.body},
        )
        return fetched

    async def info(self) -> ApiInfo:
        """
        Query the info endpoint (service availability and engine version).

        Raises:
            TransportError: If the service cannot be reached
        """
        url = self._base_url + INFO_PATH

        if self._simulation_mode:
            return ApiInfo(engine_version="simulated", criteria_version="simulated")

        response = await self._get(url)
        try:
            data = response.json()
        except (json.JSONDecodeError, ValueError) as e:
            raise TransportError(
                code=TransportErrorCode.HTTP_ERROR.value,
                message=f"Info endpoint returned a non-JSON body: {e}",
                details={"url": url},
            )
        if not isinstance(data, dict):
            data = {}

        messages = data.get("messages") or []
        return ApiInfo(
            engine_version=data.get("engineVersion"),
            criteria_version=data.get("criteriaVersion"),
            max_assessments=data.get("maxAssessments"),
            current_assessments=data.get("currentAssessments"),
            new_assessment_cool_off_ms=data.get("newAssessmentCoolOff"),
            messages=[str(m) for m in messages] if isinstance(messages, list) else [],
        )

    async def _get(self, url: str) -> httpx.Response:
        self._validate_base_url()
        if self._client is None:
            self._client = self._create_client()

        start_time = time.perf_counter()
        try:
            response = await self._client.get(url)
        except httpx.TimeoutException as e:
            raise TransportError(
                code=TransportErrorCode.TIMEOUT.value,
                message=f"Request timed out after {self._timeout}s",
                details={"url": url, "error": str(e)},
            )
        except httpx.ConnectError as e:
            error_msg = str(e)
            if "ssl" in error_msg.lower() or "certificate" in error_msg.lower():
                raise TransportError(
                    code=TransportErrorCode.TLS_ERROR.value,
                    message=f"TLS connection error: {error_msg}",
                    details={"url": url},
                )
            raise TransportError(
                code=TransportErrorCode.NETWORK_ERROR.value,
                message=f"Connection error: {error_msg}",
                details={"url": url},
            )
        except httpx.HTTPError as e:
            raise TransportError(
                code=TransportErrorCode.NETWORK_ERROR.value,
                message=f"HTTP transport error: {e}",
                details={"url": url},
            )

        if not response.is_success:
            code = STATUS_ERROR_CODES.get(response.status_code, TransportErrorCode.HTTP_ERROR)
            raise TransportError(
                code=code.value,
                message=f"Assessment API returned HTTP {response.status_code}",
                details={
                    "url": url,
                    "http_status": response.status_code,
                    "errors": self._error_messages(response),
                    "response_time_ms": self._elapsed_ms(start_time),
                },
            )

        return response

    def _error_messages(self, response: httpx.Response) -> list[str]:
        """Extract the 'errors' list the service attaches to 4xx responses."""
        try:
            data = response.json()
        except (json.JSONDecodeError, ValueError):
            return []
        if not isinstance(data, dict) or not isinstance(data.get("errors"), list):
            return []
        return [
            str(err.get("message", err)) if isinstance(err, dict) else str(err)
            for err in data["errors"]
        ]

    def _validate_base_url(self) -> None:
        """
        Validate that the API uses HTTPS (TLS).

        Raises:
            TransportError: If the base URL does not use HTTPS
        """
        parsed = urlparse(self._base_url)
        if parsed.scheme.lower() != "https":
            raise TransportError(
                code=TransportErrorCode.TLS_ERROR.value,
                message=f"Assessment API must use HTTPS: {self._base_url}",
                details={"base_url": self._base_url, "scheme": parsed.scheme},
            )

    def _create_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            verify=True,  # TLS certificate verification enforced
            timeout=httpx.Timeout(self._timeout),
            follow_redirects=True,
            headers={"User-Agent": self._user_agent, "Accept": "application/json"},
            transport=self._transport,
        )

    def _create_simulation_response(self, request: AssessmentRequest, url: str) -> FetchedResponse:
        """Create a completed assessment without network access."""
        body = json.dumps({
            "host": request.domain_name,
            "status": "READY",
            "endpoints": [{"statusMessage": "Ready", "grade": "A"}],
        })
        return FetchedResponse(body=body, content_type=ContentType.JSON, url=url)

    def _log_debug(self, message: str, data: dict) -> None:
        if self._logger:
            self._logger.debug(self.COMPONENT, message, data)

    def _elapsed_ms(self, start_time: float) -> float:
        """Calculate elapsed time in milliseconds."""
        return (time.perf_counter() - start_time) * 1000

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
