"""
Grade Checker - TLS configuration grading through the SSL Labs assessment API.

This package submits an assessment for a domain, polls until the analysis is
complete, and reduces the result to a grade and a process exit code.
"""

__version__ = "0.1.0"
__author__ = "Grade Checker Team"

from grade_checker.exceptions import (
    GradeCheckerError,
    DomainValidationError,
    TransportError,
    DecodeError,
    ConfigError,
)
from grade_checker.enums import (
    AssessmentStatus,
    Grade,
    Toggle,
    ContentType,
    LogLevel,
    DomainValidationErrorCode,
    TransportErrorCode,
    DecodeErrorCode,
)
from grade_checker.domain_validator import (
    DomainValidator,
    DomainValidationResult,
    DomainValidationFailure,
)
from grade_checker.config import (
    ApiConfig,
    PollConfig,
    LoggingConfig,
    SystemConfig,
    load_config_from_env,
    load_config_from_file,
    save_config_to_file,
)
from grade_checker.models import (
    AssessmentRequest,
    FetchedResponse,
    EndpointResult,
    AssessmentSnapshot,
    PollState,
    ApiInfo,
)
from grade_checker.exit_codes import ExitCodeMapper
from grade_checker.response_decoder import ResponseDecoder
from grade_checker.status_reconciler import StatusReconciler
from grade_checker.audit_logger import (
    AuditLogger,
    LogEntry,
)
from grade_checker.api_client import AssessmentApiClient
from grade_checker.poll_loop import PollLoop
from grade_checker.presenter import ResultPresenter
from grade_checker.self_test import (
    SelfTest,
    SelfTestResult,
    ConfigValidationResult,
    run_self_test,
)
from grade_checker.cli import (
    main as cli_main,
    create_parser,
    build_config,
)

__all__ = [
    # Exceptions
    "GradeCheckerError",
    "DomainValidationError",
    "TransportError",
    "DecodeError",
    "ConfigError",
    # Enums
    "AssessmentStatus",
    "Grade",
    "Toggle",
    "ContentType",
    "LogLevel",
    "DomainValidationErrorCode",
    "TransportErrorCode",
    "DecodeErrorCode",
    # Domain Validator
    "DomainValidator",
    "DomainValidationResult",
    "DomainValidationFailure",
    # Configuration
    "ApiConfig",
    "PollConfig",
    "LoggingConfig",
    "SystemConfig",
    "load_config_from_env",
    "load_config_from_file",
    "save_config_to_file",
    # Models
    "AssessmentRequest",
    "FetchedResponse",
    "EndpointResult",
    "AssessmentSnapshot",
    "PollState",
    "ApiInfo",
    # Core
    "ExitCodeMapper",
    "ResponseDecoder",
    "StatusReconciler",
    "PollLoop",
    "ResultPresenter",
    # API Client
    "AssessmentApiClient",
    # Audit Logger
    "AuditLogger",
    "LogEntry",
    # Self-Test
    "SelfTest",
    "SelfTestResult",
    "ConfigValidationResult",
    "run_self_test",
    # CLI
    "cli_main",
    "create_parser",
    "build_config",
]
