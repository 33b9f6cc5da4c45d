"""
Response decoder for assessment poll responses.

Turns a raw response body into an AssessmentSnapshot. JSON bodies from the
v3 API are checked against the documented fields only; everything else in
the document is ignored. HTML bodies from the legacy results page are a
degraded fallback that only yields a coarse ready/not-ready signal and the
rating text.
"""

import json
import re
from typing import Any, Optional

from bs4 import BeautifulSoup

from .enums import ContentType, DecodeErrorCode, Grade
from .exceptions import DecodeError
from .models import IN_PROGRESS_MARKER, READY_MARKER, AssessmentSnapshot, EndpointResult

RATING_CLASS_PATTERN = re.compile(r"^rating_")


class ResponseDecoder:
    """Decodes JSON (and legacy HTML) poll responses into snapshots."""

    def decode(self, body: str, content_type: ContentType = ContentType.JSON) -> AssessmentSnapshot:
        """
        Decode a response body.

        Args:
            body: Raw response body
            content_type: Declared type of the body

        Returns:
            AssessmentSnapshot for this poll

        Raises:
            DecodeError: If the body does not match the expected format
        """
        if content_type == ContentType.HTML:
            return self.decode_html(body)
        return self.decode_json(body)

    def decode_json(self, body: str) -> AssessmentSnapshot:
        """Decode a v3 API analyze response."""
        try:
            document = json.loads(body)
        except (json.JSONDecodeError, TypeError) as e:
            raise DecodeError(
                code=DecodeErrorCode.MALFORMED_JSON.value,
                message=f"Response is not valid JSON: {e}",
                details={"body": _snippet(body)},
            )

        if not isinstance(document, dict):
            raise self._schema_error("Response is not a JSON object", document)

        host = self._required_str(document, "host")
        status = self._required_str(document, "status")
        status_message = self._optional_str(document, "statusMessage")

        raw_endpoints = document.get("endpoints")
        endpoints: Optional[tuple[Optional[EndpointResult], ...]] = None
        if raw_endpoints is not None:
            if not isinstance(raw_endpoints, list):
                raise self._schema_error("'endpoints' is not a list", raw_endpoints)
            endpoints = tuple(self._parse_endpoint(item) for item in raw_endpoints)

        return AssessmentSnapshot(
            host=host,
            overall_status=status,
            overall_message=status_message,
            endpoints=endpoints,
            source=ContentType.JSON,
        )

    def decode_html(self, body: str) -> AssessmentSnapshot:
        """
        Decode the legacy HTML results page.

        The multi-server (CDN) results table is searched first, then the
        single-IP rating block. Only the first server row counts.
        """
        soup = BeautifulSoup(body or "", "html.parser")

        host = self._html_host(soup)
        rating_text: Optional[str] = None

        table = soup.find("table", id="multiTable")
        if table is not None:
            rating_text = self._first_row_rating(table)
        else:
            block = soup.find("div", id="rating")
            if block is None:
                raise DecodeError(
                    code=DecodeErrorCode.NO_RATING.value,
                    message="HTML response has neither a results table nor a rating block",
                    details={"body": _snippet(body)},
                )
            rating = block.find(class_=RATING_CLASS_PATTERN)
            if rating is not None:
                rating_text = _text(rating)

        if rating_text:
            endpoint = EndpointResult(
                status_message=READY_MARKER,
                grade=rating_text if Grade.try_parse(rating_text) else None,
            )
            status = "READY"
        else:
            endpoint = EndpointResult(status_message=IN_PROGRESS_MARKER)
            status = "IN_PROGRESS"

        return AssessmentSnapshot(
            host=host,
            overall_status=status,
            endpoints=(endpoint,),
            rating_text=rating_text or None,
            source=ContentType.HTML,
        )

    def _parse_endpoint(self, item: Any) -> Optional[EndpointResult]:
        if item is None:
            return None
        if not isinstance(item, dict):
            raise self._schema_error("Endpoint entry is not an object", item)
        return EndpointResult(
            status_message=self._optional_str(item, "statusMessage"),
            grade=self._optional_str(item, "grade"),
        )

    def _first_row_rating(self, table) -> Optional[str]:
        for row in table.find_all("tr"):
            if row.find("td") is None:
                continue  # header row
            rating = row.find(class_=RATING_CLASS_PATTERN)
            return _text(rating) if rating is not None else None
        return None

    def _html_host(self, soup: BeautifulSoup) -> str:
        title = soup.find("title")
        if title is None:
            return ""
        # "SSL Server Test: example.com (Powered by Qualys SSL Labs)"
        match = re.search(r":\s*(\S+)", _text(title))
        return match.group(1) if match else ""

    def _required_str(self, document: dict, key: str) -> str:
        value = document.get(key)
        if not isinstance(value, str):
            raise self._schema_error(f"Missing or invalid '{key}'", value)
        return value

    def _optional_str(self, document: dict, key: str) -> Optional[str]:
        value = document.get(key)
        if value is None:
            return None
        if not isinstance(value, str):
            raise self._schema_error(f"'{key}' is not a string", value)
        return value or None

    def _schema_error(self, message: str, value: Any) -> DecodeError:
        return DecodeError(
            code=DecodeErrorCode.SCHEMA_MISMATCH.value,
            message=message,
            details={"value": _snippet(repr(value))},
        )


def _text(element) -> str:
    return " ".join(element.get_text(" ").split())


def _snippet(text: Optional[str], limit: int = 200) -> str:
    if not text:
        return ""
    return text if len(text) <= limit else text[:limit] + "..."
