"""
Startup Self-Test module for the grade checker system.

Validates the configuration and checks that the assessment API answers on
its info endpoint before any assessment is submitted.
"""

import sys
import time
from dataclasses import dataclass, field
from typing import Optional, TextIO
from urllib.parse import urlparse

from .api_client import AssessmentApiClient
from .config import LOG_FORMATS, LOG_LEVELS, SystemConfig
from .exceptions import TransportError
from .models import ApiInfo


@dataclass
class ConfigValidationResult:
    """Result of configuration validation."""

    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass
class SelfTestResult:
    """Complete self-test result."""

    success: bool
    config_validation: ConfigValidationResult
    api_info: Optional[ApiInfo] = None
    error: Optional[str] = None
    total_duration_ms: float = 0.0


class SelfTest:
    """
    Startup self-test for the grade checker system.

    Performs:
    1. Configuration validation
    2. A connectivity check against the API info endpoint
    """

    # Timeout for the connectivity check (shorter than normal operations)
    CONNECTIVITY_TIMEOUT = 10.0

    def __init__(
        self,
        config: SystemConfig,
        client: Optional[AssessmentApiClient] = None,
    ) -> None:
        """
        Initialize the self-test.

        Args:
            config: System configuration to validate and test
            client: Optional API client (built from config when omitted)
        """
        self._config = config
        self._client = client

    async def run(self) -> SelfTestResult:
        """
        Run the complete self-test.

        Returns:
            SelfTestResult with validation and connectivity results
        """
        start_time = time.perf_counter()

        config_result = self.validate_config()
        if not config_result.valid:
            return SelfTestResult(
                success=False,
                config_validation=config_result,
                total_duration_ms=self._elapsed_ms(start_time),
            )

        client = self._client or AssessmentApiClient(
            base_url=self._config.api.base_url,
            timeout=min(self._config.api.timeout_seconds, self.CONNECTIVITY_TIMEOUT),
            user_agent=self._config.api.user_agent,
            simulation_mode=self._config.simulation_mode,
        )

        try:
            async with client:
                api_info = await client.info()
        except TransportError as e:
            return SelfTestResult(
                success=False,
                config_validation=config_result,
                error=e.message,
                total_duration_ms=self._elapsed_ms(start_time),
            )

        return SelfTestResult(
            success=True,
            config_validation=config_result,
            api_info=api_info,
            total_duration_ms=self._elapsed_ms(start_time),
        )

    def validate_config(self) -> ConfigValidationResult:
        """
        Validate the system configuration.

        Checks:
        - The API base URL uses HTTPS
        - Interval, attempt ceiling and timeout are in range
        - Log settings are known values
        """
        errors: list[str] = []
        warnings: list[str] = []

        api = self._config.api
        parsed = urlparse(api.base_url)
        if parsed.scheme.lower() != "https" or not parsed.netloc:
            errors.append(f"API base URL must be an HTTPS URL: {api.base_url}")
        if api.timeout_seconds <= 0:
            errors.append("timeout_seconds must be positive")

        poll = self._config.poll
        if poll.interval_seconds <= 0:
            errors.append("interval_seconds must be positive")
        elif poll.interval_seconds < 5:
            warnings.append("interval_seconds below 5s may trigger rate limiting")
        if poll.max_attempts < 1:
            errors.append("max_attempts must be at least 1")

        if self._config.logging.level not in LOG_LEVELS:
            errors.append(f"Unsupported log level: {self._config.logging.level}")
        if self._config.logging.output_format not in LOG_FORMATS:
            errors.append(f"Unsupported log format: {self._config.logging.output_format}")

        return ConfigValidationResult(
            valid=len(errors) == 0,
            errors=errors,
            warnings=warnings,
        )

    def _elapsed_ms(self, start_time: float) -> float:
        """Calculate elapsed time in milliseconds."""
        return (time.perf_counter() - start_time) * 1000

    def print_results(self, result: SelfTestResult, stream: Optional[TextIO] = None) -> None:
        """Print self-test results."""
        out = stream or sys.stdout
        print("Self-test", file=out)
        print("=" * 60, file=out)

        if result.config_validation.valid:
            print("  ✓ Configuration valid", file=out)
        else:
            print("  ✗ Configuration invalid", file=out)
            for error in result.config_validation.errors:
                print(f"    - {error}", file=out)
        for warning in result.config_validation.warnings:
            print(f"    ! {warning}", file=out)

        if result.api_info is not None:
            info = result.api_info
            print(
                f"  ✓ API reachable (engine {info.engine_version}, "
                f"criteria {info.criteria_version})",
                file=out,
            )
            for message in info.messages:
                print(f"    {message}", file=out)
        elif result.error:
            print(f"  ✗ API unreachable: {result.error}", file=out)

        print(f"{'-' * 60}", file=out)
        print(f"  Duration: {result.total_duration_ms:.0f}ms", file=out)


async def run_self_test(
    config: SystemConfig,
    print_output: bool = True,
    stream: Optional[TextIO] = None,
) -> SelfTestResult:
    """
    Convenience function to run self-test.

    Args:
        config: System configuration to test
        print_output: Whether to print results
        stream: Output stream (defaults to stdout)

    Returns:
        SelfTestResult with test outcomes
    """
    self_test = SelfTest(config)
    result = await self_test.run()

    if print_output:
        self_test.print_results(result, stream)

    return result
