"""
Domain validation and normalization module.

Checks that the host submitted for assessment is a syntactically valid DNS
name and converts it to the canonical form sent to the assessment service.
"""

import re
from dataclasses import dataclass
from typing import Optional

import idna

from .enums import DomainValidationErrorCode
from .exceptions import DomainValidationError


# Forbidden characters in domain names (control chars, spaces, special symbols)
# Based on RFC 1035 and RFC 5891 (IDNA2008)
FORBIDDEN_CHARS_PATTERN = re.compile(
    r'[\x00-\x1f\x7f'           # Control characters
    r'\s'                        # Whitespace
    r'!@#$%^&*()+=\[\]{}|\\:;"\'<>,?/`~_]'
)

# LDH rule: letters, digits, hyphen; no leading or trailing hyphen
LABEL_PATTERN = re.compile(r"^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$")

MAX_DOMAIN_LENGTH = 253
MAX_LABEL_LENGTH = 63


@dataclass
class DomainValidationFailure:
    """Structured error information for domain validation failures."""

    code: DomainValidationErrorCode
    message: str
    details: dict


@dataclass
class DomainValidationResult:
    """Result of domain validation operation."""

    valid: bool
    canonical_domain: Optional[str]
    error: Optional[DomainValidationFailure]


class DomainValidator:
    """
    Validates and normalizes domain names.

    Handles:
    - Conversion to lowercase canonical form
    - IDNA encoding for international characters
    - Rejection of forbidden characters
    - Length limits for the whole name and for each label
    - LDH syntax of every label and an alphabetic (or punycode) TLD
    """

    def validate(self, raw_domain: str) -> DomainValidationResult:
        """
        Validate and normalize a domain string.

        Args:
            raw_domain: The raw domain string to validate

        Returns:
            DomainValidationResult with validation status and canonical form or error
        """
        if not raw_domain or not raw_domain.strip():
            return self._failure(
                DomainValidationErrorCode.EMPTY_INPUT,
                "Domain input is empty",
                {"raw_input": raw_domain},
            )

        domain = raw_domain.strip()

        if FORBIDDEN_CHARS_PATTERN.search(domain):
            return self._failure(
                DomainValidationErrorCode.FORBIDDEN_CHARS,
                "Domain contains forbidden characters",
                {
                    "raw_input": raw_domain,
                    "forbidden_chars": FORBIDDEN_CHARS_PATTERN.findall(domain),
                },
            )

        try:
            canonical = self.normalize_to_canonical(domain)
        except DomainValidationError as e:
            return self._failure(
                DomainValidationErrorCode.IDNA_ERROR,
                e.message,
                e.details,
            )

        if len(canonical) > MAX_DOMAIN_LENGTH:
            return self._failure(
                DomainValidationErrorCode.TOO_LONG,
                f"Domain exceeds {MAX_DOMAIN_LENGTH} characters",
                {"raw_input": raw_domain, "length": len(canonical)},
            )

        labels = canonical.split(".")
        for label in labels:
            if not label or len(label) > MAX_LABEL_LENGTH or not LABEL_PATTERN.match(label):
                return self._failure(
                    DomainValidationErrorCode.INVALID_LABEL,
                    f"Invalid domain label: {label!r}",
                    {"raw_input": raw_domain, "label": label},
                )

        tld = self._extract_tld(canonical)
        if not tld or not self.is_valid_tld(tld):
            return self._failure(
                DomainValidationErrorCode.INVALID_TLD,
                "Domain has no valid top-level label",
                {"raw_input": raw_domain, "canonical": canonical, "tld": tld},
            )

        return DomainValidationResult(
            valid=True,
            canonical_domain=canonical,
            error=None,
        )

    def require_valid(self, raw_domain: str) -> str:
        """
        Validate a domain and return its canonical form.

        Raises:
            DomainValidationError: If the domain is not valid
        """
        result = self.validate(raw_domain)
        if not result.valid:
            raise DomainValidationError(
                code=result.error.code.value,
                message=result.error.message,
                details=result.error.details,
            )
        return result.canonical_domain

    def normalize_to_canonical(self, domain: str) -> str:
        """
        Convert domain to canonical form (lowercase, IDNA-encoded, no root dot).

        Args:
            domain: Domain string to normalize

        Returns:
            Canonical form of the domain

        Raises:
            DomainValidationError: If IDNA encoding fails
        """
        domain_lower = domain.lower()
        if domain_lower.endswith("."):
            domain_lower = domain_lower[:-1]

        has_non_ascii = any(ord(c) > 127 for c in domain_lower)
        if not has_non_ascii:
            return domain_lower

        try:
            return idna.encode(domain_lower, uts46=True).decode("ascii")
        except idna.IDNAError as e:
            raise DomainValidationError(
                code=DomainValidationErrorCode.IDNA_ERROR.value,
                message=f"IDNA encoding failed: {e}",
                details={"domain": domain, "idna_error": str(e)},
            )

    def is_valid_tld(self, tld: str) -> bool:
        """
        Check if a label can serve as a top-level domain.

        TLDs are alphabetic, or punycode-encoded ('xn--').
        """
        if tld.startswith("xn--"):
            return len(tld) > 4
        return tld.isalpha() and tld.isascii()

    def _extract_tld(self, domain: str) -> Optional[str]:
        """Return the last label of a domain, or None for a single-label name."""
        if not domain or "." not in domain:
            return None

        parts = domain.rsplit(".", 1)
        if len(parts) != 2 or not parts[1]:
            return None

        return parts[1].lower()

    def _failure(
        self,
        code: DomainValidationErrorCode,
        message: str,
        details: dict,
    ) -> DomainValidationResult:
        return DomainValidationResult(
            valid=False,
            canonical_domain=None,
            error=DomainValidationFailure(code=code, message=message, details=details),
        )
