"""
Error Handling Utility Module

Reusable, structured alternatives to bare ``except Exception:`` blocks:

1. log_and_continue() - Log an expected failure and keep going
2. log_and_return_default() - Log a failure and hand back a fallback value
3. log_and_raise() - Log an unexpected failure with context and re-raise

All helpers attach ``error_type``, ``exception_class`` and a ``context`` dict
through ``extra`` so JSON log output stays queryable.
"""

import logging
from typing import Any, NoReturn


def log_and_continue(
    logger: logging.Logger,
    error: Exception,
    context: dict[str, Any],
    error_type: str = "Operation",
) -> None:
    """
    Log an error with structured context and continue execution.

    Example:
        try:
            count = float(raw)
        except ValueError as e:
            log_and_continue(logger, e, {"field": "value", "raw": raw}, "Count parsing")
    """
    logger.warning(
        f"{error_type} failed: {error}",
        extra={
            "error_type": error_type,
            "exception_class": error.__class__.__name__,
            "context": context,
        },
    )


def log_and_return_default(
    logger: logging.Logger,
    error: Exception,
    context: dict[str, Any],
    default_value: Any = None,
    error_type: str = "Operation",
) -> Any:
    """
    Log an error and return a default value.

    Returns:
        default_value
    """
    logger.warning(
        f"{error_type} failed, returning default value: {error}",
        extra={
            "error_type": error_type,
            "exception_class": error.__class__.__name__,
            "context": context,
            "default_value": str(default_value),
        },
    )
    return default_value


def log_and_raise(
    logger: logging.Logger,
    error: Exception,
    context: dict[str, Any],
    error_type: str = "Operation",
) -> NoReturn:
    """
    Log an error with context and re-raise it.

    Raises:
        The original exception after logging
    """
    logger.error(
        f"{error_type} failed critically: {error}",
        exc_info=True,
        extra={
            "error_type": error_type,
            "exception_class": error.__class__.__name__,
            "context": context,
        },
    )
    raise error
