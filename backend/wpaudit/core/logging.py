"""
Structured logging for the audit tool.

Everything goes to stderr: the CLI prints its summary on stdout. The API
renders JSON lines, the CLI renders console lines. Request ids and the
audited site are merged in from structlog contextvars.
"""

import logging
import sys
from typing import List, Optional

import structlog
from wpaudit.core.config import settings

QUIET_LOGGERS = ("httpx", "httpcore", "asyncio", "tldextract", "filelock")


def _shared_processors() -> List:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]


def _renderer(log_format: str):
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def _stderr_handler(log_format: str) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_shared_processors(),
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            _renderer(log_format),
        ],
    ))
    return handler


def setup_logging(level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """Configure structlog and stdlib logging. Arguments override LOG_LEVEL / LOG_FORMAT."""
    log_format = log_format or settings.LOG_FORMAT
    level_name = (level or settings.LOG_LEVEL).upper()

    structlog.configure(
        processors=_shared_processors() + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root = logging.getLogger()
    root.handlers = [_stderr_handler(log_format)]
    root.setLevel(getattr(logging, level_name, logging.INFO))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a named logger."""
    return structlog.get_logger(name)
