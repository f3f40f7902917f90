"""
Structured Logging with structlog
=============================================================================
CONCEPT: Why Structured Logging?

Plain text:
    2025-01-15 10:30:45 INFO Denied teacher update on payments

Structured:
    {"timestamp": "2025-01-15T10:30:45Z", "level": "debug",
     "event": "authorization_denied", "role": "teacher",
     "resource": "payments", "action": "update"}

The structured form can be filtered by field (role, resource) in any log
aggregator without regexes.

STRUCTLOG PIPELINE:
    Raw event -> [merge_contextvars] -> [add_log_level] -> [TimeStamper]
              -> [ConsoleRenderer (debug) | JSONRenderer (production)]

structlog is wired on top of stdlib logging, so modules that use
`logging.getLogger(__name__)` (like madrassa.auth.rbac) end up in the same
pipeline as those that use `get_logger(__name__)`.
=============================================================================
"""

import logging
import sys

import structlog

from madrassa.config import settings


_logging_configured: bool = False


def setup_logging() -> None:
    """
    Configure structlog and the stdlib root logger.

    Called once from the application lifespan. Calling it again is a no-op.

    THE PROCESSOR CHAIN:
      1. merge_contextvars: request-scoped fields bound with
         structlog.contextvars.bind_contextvars()
      2. filter_by_level: drop entries below the configured level
      3. add_logger_name / add_log_level
      4. PositionalArgumentsFormatter: printf-style arguments
      5. TimeStamper(fmt="iso")
      6. StackInfoRenderer / format_exc_info: stack and traceback rendering
      7. UnicodeDecoder
      8. ProcessorFormatter.wrap_for_formatter: hand off to the stdlib
         handler, which renders console or JSON output
    """
    global _logging_configured

    if _logging_configured:
        return

    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ]

    structlog.configure(
        processors=shared_processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Console output for development, JSON for everything else.
    formatter = structlog.stdlib.ProcessorFormatter(
        processor=structlog.dev.ConsoleRenderer()
        if settings.debug
        else structlog.processors.JSONRenderer(),
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    for noisy_logger in ["uvicorn", "uvicorn.access", "httpcore", "httpx"]:
        logging.getLogger(noisy_logger).setLevel(logging.WARNING)

    _logging_configured = True


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a named structured logger. Pass the module's __name__.

    USAGE:
        from madrassa.observability.logging import get_logger

        logger = get_logger(__name__)
        logger.info("matrix_verified", roles=5, resources=16)

        # Request-scoped context:
        structlog.contextvars.bind_contextvars(subject="jdoe", role="teacher")
    """
    return structlog.get_logger(name)
