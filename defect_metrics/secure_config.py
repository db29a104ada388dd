"""
Secure Configuration Management

Centralized, validated configuration for the defect metrics layer.
Values come from environment variables (optionally loaded from a ``.env`` file)
and are validated once, failing fast with ConfigurationError.

Usage:
    from defect_metrics.secure_config import get_config

    config = get_config()
    tracker_config = config.get_defect_tracker_config()
    print(tracker_config.base_url)

Environment:
    DEFECT_TRACKER_BASE_URL              Base URL of the defect tracker REST service (required)
    DEFECT_TRACKER_TIMEOUT               Request timeout in seconds (default: 30)
    DEFECT_TRACKER_MAX_RETRIES           Attempts per request for transient failures (default: 3)
    DEFECT_TRACKER_UNKNOWN_COLOR_POLICY  Risk tier for unrecognised card colors: medium | low (default: medium)
    DEFECT_TRACKER_LOG_LEVEL             Log level (default: INFO)
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

VALID_UNKNOWN_COLOR_POLICIES = ("medium", "low")
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigurationError(Exception):
    """Raised when configuration is missing or invalid."""

    pass


@dataclass
class DefectTrackerConfig:
    """
    Validated defect tracker service configuration.
    """

    base_url: str
    timeout_seconds: float = 30.0
    max_retries: int = 3
    unknown_color_policy: str = "medium"
    log_level: str = "INFO"

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate()

    def _validate(self):
        """
        Validate defect tracker configuration.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if not self.base_url:
            raise ConfigurationError("DEFECT_TRACKER_BASE_URL is required")

        if not self.base_url.startswith(("http://", "https://")):
            raise ConfigurationError(f"DEFECT_TRACKER_BASE_URL must be an http(s) URL: {self.base_url}")

        placeholders = ["your_host", "example.invalid", "placeholder", "replace_me"]
        if any(placeholder in self.base_url.lower() for placeholder in placeholders):
            raise ConfigurationError("DEFECT_TRACKER_BASE_URL contains a placeholder value")

        if self.timeout_seconds <= 0:
            raise ConfigurationError(f"DEFECT_TRACKER_TIMEOUT must be positive, got {self.timeout_seconds}")

        if self.max_retries < 1:
            raise ConfigurationError(f"DEFECT_TRACKER_MAX_RETRIES must be at least 1, got {self.max_retries}")

        if self.unknown_color_policy not in VALID_UNKNOWN_COLOR_POLICIES:
            raise ConfigurationError(
                f"DEFECT_TRACKER_UNKNOWN_COLOR_POLICY must be one of {VALID_UNKNOWN_COLOR_POLICIES}, "
                f"got {self.unknown_color_policy!r}"
            )

        if self.log_level.upper() not in VALID_LOG_LEVELS:
            raise ConfigurationError(f"DEFECT_TRACKER_LOG_LEVEL is not a valid level: {self.log_level}")


def _parse_number(name: str, raw: str | None, default: float, cast: type = float) -> float:
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be numeric, got {raw!r}") from e


class SecureConfig:
    """
    Centralized configuration manager.

    Loads ``.env`` once, then validates on every accessor call so that a
    misconfiguration surfaces at the first use rather than mid-fetch.
    """

    def __init__(self):
        """Initialize configuration (loads .env file)."""
        load_dotenv()

    def get_defect_tracker_config(self) -> DefectTrackerConfig:
        """
        Get validated defect tracker configuration.

        Returns:
            DefectTrackerConfig: Validated configuration

        Raises:
            ConfigurationError: If configuration is missing or invalid
        """
        return DefectTrackerConfig(
            base_url=(os.getenv("DEFECT_TRACKER_BASE_URL") or "").strip(),
            timeout_seconds=_parse_number("DEFECT_TRACKER_TIMEOUT", os.getenv("DEFECT_TRACKER_TIMEOUT"), 30.0),
            max_retries=int(
                _parse_number("DEFECT_TRACKER_MAX_RETRIES", os.getenv("DEFECT_TRACKER_MAX_RETRIES"), 3, int)
            ),
            unknown_color_policy=(os.getenv("DEFECT_TRACKER_UNKNOWN_COLOR_POLICY") or "medium").strip().lower(),
            log_level=(os.getenv("DEFECT_TRACKER_LOG_LEVEL") or "INFO").strip().upper(),
        )


_config_instance: SecureConfig | None = None


def get_config() -> SecureConfig:
    """
    Get the global configuration instance (singleton pattern).

    Returns:
        SecureConfig: The configuration manager
    """
    global _config_instance
    if _config_instance is None:
        _config_instance = SecureConfig()
    return _config_instance


def validate_config_on_startup(required_services: list[str]) -> None:
    """
    Validate required configuration at application startup.

    Args:
        required_services: Services to validate (currently only 'defect_tracker')

    Raises:
        ConfigurationError: If any required configuration is missing or invalid
        ValueError: If an unknown service is named
    """
    config = get_config()

    for service in required_services:
        if service == "defect_tracker":
            config.get_defect_tracker_config()
        else:
            raise ValueError(f"Unknown service: {service}")
