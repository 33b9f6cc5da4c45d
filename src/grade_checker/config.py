"""
Configuration dataclasses for the grade checker system.

This module defines the configuration structures used throughout the system
(assessment API access, polling cadence, logging) and loads them from
defaults, the environment (including a .env file) and JSON config files.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from . import __version__
from .exceptions import ConfigError

DEFAULT_API_URL = "https://api.ssllabs.com/api/v3"
DEFAULT_USER_AGENT = f"GradeChecker/{__version__}"
DEFAULT_CONFIG_PATH = Path.home() / ".grade_checker" / "config.json"

LOG_LEVELS = ("debug", "info", "warn", "error")
LOG_FORMATS = ("json", "text", "both")


def _float_env(name: str, default: float) -> float:
    try:
        value = os.getenv(name)
        return float(value) if value is not None else default
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        value = os.getenv(name)
        return int(value) if value is not None else default
    except ValueError:
        return default


@dataclass
class ApiConfig:
    """Assessment API access configuration."""

    base_url: str = DEFAULT_API_URL
    timeout_seconds: float = 30.0
    user_agent: str = DEFAULT_USER_AGENT


@dataclass
class PollConfig:
    """Polling cadence: a fixed interval and a hard attempt ceiling."""

    interval_seconds: float = 15.0
    max_attempts: int = 10


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "info"
    output_format: str = "text"  # 'json', 'text', 'both'


@dataclass
class SystemConfig:
    """Main system configuration combining all sub-configurations."""

    api: ApiConfig = field(default_factory=ApiConfig)
    poll: PollConfig = field(default_factory=PollConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    simulation_mode: bool = False
    startup_self_test: bool = False


def load_config_from_env(dotenv_path: Optional[Path] = None) -> SystemConfig:
    """
    Build a configuration from defaults overridden by environment variables.

    A .env file is loaded first; variables already set in the process
    environment take precedence over it.
    """
    load_dotenv(dotenv_path=dotenv_path)

    return SystemConfig(
        api=ApiConfig(
            base_url=os.getenv("GRADE_CHECKER_API_URL", DEFAULT_API_URL),
            timeout_seconds=_float_env("GRADE_CHECKER_HTTP_TIMEOUT", 30.0),
            user_agent=os.getenv("GRADE_CHECKER_USER_AGENT", DEFAULT_USER_AGENT),
        ),
        poll=PollConfig(
            interval_seconds=_float_env("GRADE_CHECKER_INTERVAL", 15.0),
            max_attempts=_int_env("GRADE_CHECKER_ATTEMPTS", 10),
        ),
        logging=LoggingConfig(
            level=os.getenv("GRADE_CHECKER_LOG_LEVEL", "info").lower(),
            output_format=os.getenv("GRADE_CHECKER_LOG_FORMAT", "text").lower(),
        ),
    )


def validate_logging_config(logging_config: LoggingConfig) -> None:
    """
    Check log level and output format against the supported values.

    Raises:
        ConfigError: If either value is unsupported
    """
    if logging_config.level not in LOG_LEVELS:
        raise ConfigError(
            code="invalid_config",
            message=f"Unsupported log level: {logging_config.level}",
            details={"level": logging_config.level, "allowed": list(LOG_LEVELS)},
        )
    if logging_config.output_format not in LOG_FORMATS:
        raise ConfigError(
            code="invalid_config",
            message=f"Unsupported log format: {logging_config.output_format}",
            details={"output_format": logging_config.output_format, "allowed": list(LOG_FORMATS)},
        )


def config_from_dict(data: dict, base: Optional[SystemConfig] = None) -> SystemConfig:
    """
    Overlay a parsed config document on a base configuration.

    Raises:
        ConfigError: If a section has the wrong shape
    """
    base = base or SystemConfig()
    try:
        api_data = data.get("api", {})
        poll_data = data.get("poll", {})
        logging_data = data.get("logging", {})

        return SystemConfig(
            api=ApiConfig(
                base_url=str(api_data.get("base_url", base.api.base_url)),
                timeout_seconds=float(api_data.get("timeout_seconds", base.api.timeout_seconds)),
                user_agent=str(api_data.get("user_agent", base.api.user_agent)),
            ),
            poll=PollConfig(
                interval_seconds=float(poll_data.get("interval_seconds", base.poll.interval_seconds)),
                max_attempts=int(poll_data.get("max_attempts", base.poll.max_attempts)),
            ),
            logging=LoggingConfig(
                level=str(logging_data.get("level", base.logging.level)).lower(),
                output_format=str(logging_data.get("output_format", base.logging.output_format)).lower(),
            ),
            simulation_mode=bool(data.get("simulation_mode", base.simulation_mode)),
            startup_self_test=bool(data.get("startup_self_test", base.startup_self_test)),
        )
    except (AttributeError, TypeError, ValueError) as e:
        raise ConfigError(
            code="invalid_config",
            message=f"Invalid configuration: {e}",
            details={"error": str(e)},
        )


def config_to_dict(config: SystemConfig) -> dict:
    """Serialize a configuration to the config file schema."""
    return {
        "api": {
            "base_url": config.api.base_url,
            "timeout_seconds": config.api.timeout_seconds,
            "user_agent": config.api.user_agent,
        },
        "poll": {
            "interval_seconds": config.poll.interval_seconds,
            "max_attempts": config.poll.max_attempts,
        },
        "logging": {
            "level": config.logging.level,
            "output_format": config.logging.output_format,
        },
        "simulation_mode": config.simulation_mode,
        "startup_self_test": config.startup_self_test,
    }


def load_config_from_file(
    config_path: Path,
    base: Optional[SystemConfig] = None,
) -> Optional[SystemConfig]:
    """
    Load configuration from a JSON file.

    Args:
        config_path: Path to the configuration file
        base: Configuration whose values fill in missing keys

    Returns:
        SystemConfig, or None if the file does not exist

    Raises:
        ConfigError: If the file cannot be read or parsed
    """
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return None
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(
            code="unreadable_config",
            message=f"Could not load config from {config_path}: {e}",
            details={"path": str(config_path)},
        )

    if not isinstance(data, dict):
        raise ConfigError(
            code="invalid_config",
            message=f"Config file {config_path} does not contain a JSON object",
            details={"path": str(config_path)},
        )

    return config_from_dict(data, base)


def save_config_to_file(config: SystemConfig, config_path: Path) -> None:
    """
    Save configuration to a JSON file.

    Raises:
        ConfigError: If the file cannot be written
    """
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(config_to_dict(config), f, indent=2, ensure_ascii=False)
    except OSError as e:
        raise ConfigError(
            code="unwritable_config",
            message=f"Could not save config to {config_path}: {e}",
            details={"path": str(config_path)},
        )
