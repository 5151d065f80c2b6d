"""Structured logging configuration for soundcue2graph.

Configures both structlog and stdlib logging so that module loggers created
with ``structlog.get_logger(__name__)`` and ``logging.getLogger(__name__)``
share one handler and one output format.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.stdlib import ProcessorFormatter


def _remove_internal_fields(
    logger: Any,
    method_name: str,
    event_dict: dict,
) -> dict:
    """Drop the bookkeeping fields ``ProcessorFormatter`` adds to every record."""
    event_dict.pop("_record", None)
    event_dict.pop("_from_structlog", None)
    return event_dict


def configure_logging(*, level: str = "WARNING", json_output: bool = False) -> None:
    """Configure structlog and stdlib logging.

    Parameters
    ----------
    level : str
        Log level name (DEBUG, INFO, WARNING, ERROR)
    json_output : bool
        Emit JSON lines instead of human-readable console output
    """
    log_level = getattr(logging, level.upper())

    shared_processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_output:
        final_processors: list = [
            _remove_internal_fields,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        final_processors = [
            _remove_internal_fields,
            structlog.dev.ConsoleRenderer(colors=False),
        ]

    structlog.configure(
        processors=[*shared_processors, ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Reconfiguration in tests needs fresh loggers
        cache_logger_on_first_use=False,
    )

    # Export text goes to stdout, so logs go to stderr
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        ProcessorFormatter(
            processors=final_processors,
            foreign_pre_chain=shared_processors,
        )
    )

    root = logging.getLogger()
    root.handlers = []
    root.addHandler(handler)
    root.setLevel(log_level)


def get_logger(name: str) -> Any:
    """Get a module logger backed by the stdlib logger ``name``.

    Events pass through stdlib logging, so nothing is printed until the
    application configures a handler (``configure_logging`` does this).
    """
    return structlog.wrap_logger(
        logging.getLogger(name),
        wrapper_class=structlog.stdlib.BoundLogger,
    )
