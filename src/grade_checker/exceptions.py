"""
Exception classes for the grade checker system.

All exceptions inherit from GradeCheckerError and provide structured
error information with codes, messages, and optional details.
"""

from typing import Optional


class GradeCheckerError(Exception):
    """Base exception for all grade checker errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class DomainValidationError(GradeCheckerError):
    """Raised when the domain to assess is not a valid DNS name."""

    pass


class TransportError(GradeCheckerError):
    """Raised when the assessment API cannot be reached or answers with a failure status."""

    pass


class DecodeError(GradeCheckerError):
    """Raised when a response body is malformed or carries an unrecognized grade."""

    pass


class ConfigError(GradeCheckerError):
    """Raised when a configuration file cannot be parsed."""

    pass
