"""structlog configuration for graphkeep.

Two output modes:
- Human (default): colored console output to stderr
- JSON (--log-json): structured JSON lines to stderr

Modules log through stdlib ``logging.getLogger(__name__)``; modules that
emit structured events use :func:`get_logger`, which routes through the
same stdlib logger so level filtering and handlers apply uniformly.
"""

from __future__ import annotations

import logging
import sys

import structlog


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Structured logger backed by the stdlib logger *name*.

    Events below the stdlib logger's effective level are dropped before
    any processing, so an application that never calls
    :func:`configure_logging` sees nothing below WARNING.
    """
    return structlog.wrap_logger(
        logging.getLogger(name),
        processors=[
            structlog.stdlib.filter_by_level,
            *_shared_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
    )


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
) -> None:
    """Configure structlog processors and output routing.

    Args:
        verbose: Enable DEBUG-level output. When False, only WARNING+.
        log_json: Use JSON renderer instead of console renderer.
    """
    gk_level = logging.DEBUG if verbose else logging.WARNING
    shared_processors = _shared_processors()

    if log_json:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.WARNING)

    logging.getLogger("graphkeep").setLevel(gk_level)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
