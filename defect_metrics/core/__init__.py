"""
Core Infrastructure - Configuration and Logging

Centralized infrastructure utilities used throughout the package.

Usage:
    from defect_metrics.core import get_config, get_logger

    config = get_config().get_defect_tracker_config()
    logger = get_logger(__name__)
"""

from ..secure_config import (
    ConfigurationError,
    DefectTrackerConfig,
    SecureConfig,
    get_config,
    validate_config_on_startup,
)
from .logging_config import get_logger, log_with_context, setup_logging

__all__ = [
    # Configuration
    "get_config",
    "validate_config_on_startup",
    "ConfigurationError",
    "SecureConfig",
    "DefectTrackerConfig",
    # Logging
    "get_logger",
    "log_with_context",
    "setup_logging",
]
