"""Structured logging configuration.

Every event carries the ``service`` name, and the daemon target bound at
startup via ``bind_daemon_context`` rides along through contextvars.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

SERVICE_NAME = "signalforge_runtime"


def _stamp_service(service: str) -> Processor:
    def processor(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service", service)
        return event_dict

    return processor


def setup_logging(
    level: str = "INFO",
    log_format: str = "json",
    service: str = SERVICE_NAME,
) -> structlog.stdlib.BoundLogger:
    """Set up structured logging with structlog.

    Args:
        level: Minimum level name.
        log_format: ``json`` for machine output, ``console`` for local runs.
        service: Value of the ``service`` key on every event.

    Returns:
        Logger for the engine itself.
    """
    numeric_level = getattr(logging, level.upper())
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=numeric_level)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        _stamp_service(service),
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
    return get_logger(service)


def bind_daemon_context(base_url: str | None, managed_prefix: str) -> None:
    """Attach the daemon target to all subsequent events."""
    structlog.contextvars.bind_contextvars(
        daemon=base_url or "environment",
        managed_prefix=managed_prefix,
    )


def get_logger(name: str | None = None, **initial_context: Any) -> structlog.stdlib.BoundLogger:
    """Get a bound logger instance."""
    logger = structlog.get_logger(name)
    if initial_context:
        logger = logger.bind(**initial_context)
    return logger
