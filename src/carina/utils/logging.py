"""Structured logging utilities for Carina.

Carina is a library, so nothing is configured on import. Applications call
setup_logging() with the logging section of their CarinaConfig, or build the
manager through ClusterManager.from_config_file() which does it for them.
"""

import logging
import sys
from collections.abc import MutableMapping
from typing import Any

import structlog

from carina.core.config import LoggingConfig

REDACTED = "***"

# Event fields that can carry credentials
SECRET_FIELDS = frozenset({"token", "password", "api_key", "x_auth_token", "csr", "private_key"})


def redact_secrets(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """structlog processor masking credential fields before rendering."""
    for key in event_dict.keys() & SECRET_FIELDS:
        if event_dict[key]:
            event_dict[key] = REDACTED
    return event_dict


def build_processors(log_format: str) -> list[Any]:
    """Processor chain for the given format ("json" or "console")."""
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        redact_secrets,
    ]
    if log_format == "json":
        processors += [
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer())
    return processors


def setup_logging(config: LoggingConfig | None = None) -> None:
    """Configure structured logging for Carina.

    Args:
        config: Logging section of CarinaConfig (defaults if None). Unknown levels
            fall back to INFO; output is "stdout" or "stderr".
    """
    config = config or LoggingConfig()
    log_level = getattr(logging, config.level.upper(), logging.INFO)
    stream = sys.stdout if config.output == "stdout" else sys.stderr

    logging.basicConfig(format="%(message)s", stream=stream, level=log_level)

    structlog.configure(
        processors=build_processors(config.format),
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    return structlog.get_logger(name)


def log_operation(logger: structlog.BoundLogger, operation: str, **kwargs: Any) -> None:
    """Log the start of a cluster operation as event "operation_<name>"."""
    logger.info(f"operation_{operation}", **kwargs)


def log_error(
    logger: structlog.BoundLogger,
    error: Exception,
    operation: str | None = None,
    **kwargs: Any,
) -> None:
    """Log a failed operation with the error type, message and traceback.

    Args:
        logger: Logger instance
        error: Exception raised by the operation
        operation: Operation name (optional)
        **kwargs: Additional context fields, e.g. account_id and cluster
    """
    context = {
        "error_type": type(error).__name__,
        "error_message": str(error),
        **kwargs,
    }
    if operation:
        context["operation"] = operation

    logger.error("error_occurred", **context, exc_info=True)
