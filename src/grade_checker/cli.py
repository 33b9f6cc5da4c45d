"""
Command-line interface for the grade checker system.

Submits a TLS assessment for one domain, polls the assessment API until the
result is ready, prints the grade and exits with a code derived from it:

- 0: grade A+ or A
- 1: grade A-
- 2: any lower grade, or no grade
- 3: assessment error, unknown status, or no endpoint
- 4: invalid domain
- 5: transport failure
- 6: undecodable response
- 7: invalid configuration
"""

import argparse
import asyncio
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional

from tqdm import tqdm

from . import __version__
from .api_client import AssessmentApiClient
from .audit_logger import AuditLogger
from .config import (
    DEFAULT_CONFIG_PATH,
    SystemConfig,
    load_config_from_env,
    load_config_from_file,
    save_config_to_file,
    validate_logging_config,
)
from .exceptions import ConfigError, DecodeError, DomainValidationError, TransportError
from .exit_codes import (
    EXIT_CONFIG_ERROR,
    EXIT_DECODE_ERROR,
    EXIT_INVALID_DOMAIN,
    EXIT_TRANSPORT_ERROR,
)
from .models import AssessmentRequest, PollState
from .poll_loop import PollLoop
from .presenter import ResultPresenter
from .self_test import run_self_test

COMPONENT = "CLI"


def build_config(args: argparse.Namespace) -> SystemConfig:
    """
    Resolve the effective configuration.

    Precedence, lowest first: defaults, environment (.env included),
    config file (--config, else ~/.grade_checker/config.json if present),
    command line flags.

    Raises:
        ConfigError: If the config file is unreadable or invalid
    """
    config = load_config_from_env()

    if args.config:
        loaded = load_config_from_file(Path(args.config), base=config)
        if loaded is None:
            raise ConfigError(
                code="missing_config",
                message=f"Config file not found: {args.config}",
                details={"path": args.config},
            )
        config = loaded
    else:
        config = load_config_from_file(DEFAULT_CONFIG_PATH, base=config) or config

    poll = config.poll
    if args.time is not None:
        poll = replace(poll, interval_seconds=args.time)
    if args.attempts is not None:
        poll = replace(poll, max_attempts=args.attempts)
    if poll.interval_seconds < 0 or poll.max_attempts < 0:
        raise ConfigError(
            code="invalid_config",
            message="Interval and attempts must not be negative",
            details={"interval_seconds": poll.interval_seconds, "max_attempts": poll.max_attempts},
        )

    logging_config = config.logging
    if args.verbose:
        logging_config = replace(logging_config, level="debug")
    validate_logging_config(logging_config)

    return replace(
        config,
        poll=poll,
        logging=logging_config,
        simulation_mode=config.simulation_mode or args.dry_run,
        startup_self_test=config.startup_self_test or args.self_test,
    )


def create_progress_bar(domain: str, max_attempts: int, enabled: bool = True) -> tqdm:
    """Progress bar advanced once per poll; the loop may run one cycle past max_attempts."""
    return tqdm(
        total=max_attempts + 1,
        disable=not enabled,
        unit="attempt",
        desc=domain,
        file=sys.stderr,
    )


async def assess_domain(
    request: AssessmentRequest,
    config: SystemConfig,
    logger: AuditLogger,
    progress: bool = False,
    verbose: bool = False,
) -> int:
    """
    Run one assessment session and print its outcome.

    Args:
        request: Validated assessment request
        config: Effective configuration
        logger: Audit logger for diagnostics
        progress: Show a progress bar keyed to the attempt count
        verbose: Print the final state as JSON

    Returns:
        Process exit code
    """
    if config.startup_self_test:
        result = await run_self_test(config, print_output=True, stream=sys.stderr)
        if not result.success:
            if not result.config_validation.valid:
                return EXIT_CONFIG_ERROR
            return EXIT_TRANSPORT_ERROR

    if config.simulation_mode:
        logger.info(COMPONENT, "Simulation mode enabled, no requests will be sent")

    bar = create_progress_bar(request.domain_name, config.poll.max_attempts, enabled=progress)

    def advance(state: PollState) -> None:
        bar.update(1)

    client = AssessmentApiClient(
        base_url=config.api.base_url,
        timeout=config.api.timeout_seconds,
        user_agent=config.api.user_agent,
        simulation_mode=config.simulation_mode,
        logger=logger,
    )

    try:
        async with client:
            loop = PollLoop(
                fetch=client.fetch,
                interval_seconds=config.poll.interval_seconds,
                max_attempts=config.poll.max_attempts,
                on_attempt=advance,
                logger=logger,
            )
            state = await loop.run(request)
    except TransportError as e:
        logger.log_error(COMPONENT, "Assessment API request failed", error=e, additional_data=e.details)
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_TRANSPORT_ERROR
    except DecodeError as e:
        logger.log_error(COMPONENT, "Could not decode assessment response", error=e, additional_data=e.details)
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_DECODE_ERROR
    finally:
        bar.close()

    ResultPresenter(verbose=verbose).render(state)
    return state.exit_code


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="grade-checker",
        description=(
            "Use the SSL Labs API to perform a deep analysis of the configuration "
            "of any SSL web server on the public Internet"
        ),
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "domain",
        help="Domain name to analyse (e.g., www.example.com)",
    )
    parser.add_argument(
        "--time", "-t",
        type=float,
        default=None,
        help="Pause in seconds between request attempts to the API (default: 15)",
    )
    parser.add_argument(
        "--attempts", "-a",
        type=int,
        default=None,
        help="Number of attempts to the API before giving up (default: 10)",
    )
    parser.add_argument(
        "--publish",
        action="store_true",
        help="Publish assessment results on the public results boards",
    )
    parser.add_argument(
        "--from-cache",
        action="store_true",
        help="Deliver cached assessment reports when available",
    )
    parser.add_argument(
        "--progress",
        action="store_true",
        help="Display a progress bar",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Make the operation more talkative",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Simulation mode - no real network requests",
    )
    parser.add_argument(
        "--self-test",
        action="store_true",
        help="Check API connectivity before submitting the assessment",
    )
    parser.add_argument(
        "--config", "-c",
        help="Path to configuration file",
    )
    parser.add_argument(
        "--write-config",
        metavar="PATH",
        help="Write the effective configuration to PATH and exit",
    )
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        config = build_config(args)
    except ConfigError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    logger = AuditLogger.from_names(
        level=config.logging.level,
        output_format=config.logging.output_format,
    )
    logger.debug(COMPONENT, "CLI parameters", vars(args))

    if args.write_config:
        try:
            save_config_to_file(config, Path(args.write_config))
        except ConfigError as e:
            print(f"Error: {e.message}", file=sys.stderr)
            return EXIT_CONFIG_ERROR
        print(f"Configuration written to: {args.write_config}")
        return 0

    try:
        request = AssessmentRequest.create(
            args.domain,
            from_cache=args.from_cache,
            publish=args.publish,
        )
    except DomainValidationError as e:
        logger.log_error(COMPONENT, "Invalid domain", error=e, additional_data=e.details)
        print(f"Error: Invalid domain {args.domain!r}: {e.message}", file=sys.stderr)
        return EXIT_INVALID_DOMAIN

    return asyncio.run(assess_domain(
        request=request,
        config=config,
        logger=logger,
        progress=args.progress,
        verbose=args.verbose,
    ))


if __name__ == "__main__":
    sys.exit(main())
