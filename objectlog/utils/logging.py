"""
Structured logging for objectlog using structlog.

Every event carries the application name. Events about a particular log
file are emitted through a logger bound with ``bind_log``, so they name the
file and its encoding. Enum members such as halt reasons render as their
plain values in both JSON and console output.
"""

import logging
import sys
from enum import Enum
from pathlib import Path
from typing import Any, Union

import structlog
from structlog.types import EventDict, Processor

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Tag every log entry with the application name."""
    event_dict["app"] = "objectlog"
    return event_dict


def render_enums(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Replace Enum values with their plain values."""
    for key, value in event_dict.items():
        if isinstance(value, Enum):
            event_dict[key] = value.value
    return event_dict


def bind_log(
    logger: structlog.stdlib.BoundLogger,
    path: Union[str, Path],
    encoding: str,
) -> structlog.stdlib.BoundLogger:
    """
    Bind a logger to one log file.

    Args:
        logger: Module logger
        path: Path of the log file
        encoding: "binary" or "text"

    Returns:
        Logger whose events carry ``log_path`` and ``encoding``
    """
    return logger.bind(log_path=str(path), encoding=encoding)


def configure_logging(
    log_level: str = "INFO",
    log_format: str = "json",
    log_output: str = "stderr",
) -> None:
    """
    Configure structured logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Output format (json or console)
        log_output: Output stream (stdout or stderr)

    Raises:
        ValueError: If the level is not a known logging level
    """
    if log_level.upper() not in LOG_LEVELS:
        raise ValueError(f"Unknown log level {log_level!r}, expected one of {LOG_LEVELS}")

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout if log_output == "stdout" else sys.stderr,
        level=getattr(logging, log_level.upper()),
        force=True,
    )

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_app_context,
        render_enums,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_from_config(config: Any) -> None:
    """
    Configure logging from the ``logging`` section of a ``Config``.

    Args:
        config: Configuration providing ``logging.level``, ``logging.format``
            and ``logging.output``
    """
    configure_logging(
        log_level=config.get("logging.level", "WARNING"),
        log_format=config.get("logging.format", "console"),
        log_output=config.get("logging.output", "stderr"),
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        structlog logger
    """
    return structlog.get_logger(name)
