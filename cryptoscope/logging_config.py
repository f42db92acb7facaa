"""
Structured logging configuration using structlog.

Provider, tool and executor modules log through stdlib ``logging``; the API
middleware logs through structlog. Both end up in one stream, rendered as JSON
lines or as colored console output.
"""

import logging
import sys
from typing import List, Optional, TextIO

import structlog

from .config import settings

NOISY_LOGGERS = ("uvicorn.access", "httpcore", "httpx")


def _shared_processors() -> List[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _use_json(level: int, log_format: str) -> bool:
    if log_format == "json":
        return True
    if log_format == "console":
        return False
    # auto: console while debugging, JSON otherwise
    return level != logging.DEBUG


def setup_logging(
    log_level: Optional[str] = None,
    *,
    log_format: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> None:
    """Configure structlog and route stdlib logging through it.

    Args:
        log_level: Override log level (default: settings.log_level)
        log_format: "json", "console" or "auto" (default: settings.log_format)
        stream: Output stream (default: stdout). The CLI passes stderr so
            tool output on stdout stays clean.
    """
    level = getattr(logging, (log_level or settings.log_level).upper(), logging.INFO)
    shared = _shared_processors()

    if _use_json(level, (log_format or settings.log_format).lower()):
        shared.append(structlog.processors.format_exc_info)
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
