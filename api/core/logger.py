"""Structured logging built on structlog.

Both structlog loggers and plain ``logging`` loggers (uvicorn, sqlalchemy,
``logging.getLogger`` in main.py) end up in one stdout handler, rendered as
JSON lines when LOG_FORMAT=json and as coloured console output otherwise.
Anything bound with ``bind_contextvars`` (the request id, see
core.middleware) is merged into every line.

Usage:
    from core import get_logger
    logger = get_logger(__name__)
    logger.info("property.created", property_id=42, city="Madrid")
"""

import logging
import os
import sys

import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars
from structlog.types import EventDict, Processor

__all__ = [
    "bind_contextvars",
    "clear_contextvars",
    "configure_logging",
    "get_logger",
]

_QUIET_LOGGERS = ("uvicorn.access", "aiosqlite", "sqlalchemy.engine.Engine")


def _get_log_level() -> int:
    level_name = os.environ.get("LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_name, logging.INFO)


def _is_json_format() -> bool:
    return os.environ.get("LOG_FORMAT", "").lower() == "json"


def _drop_color_message(
    _logger: logging.Logger, _method_name: str, event_dict: EventDict
) -> EventDict:
    # uvicorn duplicates every message as an ANSI-coloured "color_message"
    event_dict.pop("color_message", None)
    return event_dict


def configure_logging(
    level: int | None = None, json_output: bool | None = None
) -> None:
    """Route structlog and stdlib logging through one formatter.

    ``level`` and ``json_output`` default to LOG_LEVEL and LOG_FORMAT.
    Safe to call more than once: the root handler is replaced, not added.
    """
    if level is None:
        level = _get_log_level()
    if json_output is None:
        json_output = _is_json_format()

    pre_chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _drop_color_message,
    ]

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *pre_chain,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    renderer: Processor = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(
            colors=sys.stdout.isatty(),
            exception_formatter=structlog.dev.plain_traceback,
        )
    )
    formatter = structlog.stdlib.ProcessorFormatter(
        # ExtraAdder keeps ``extra={...}`` fields from stdlib loggers
        foreign_pre_chain=[*pre_chain, structlog.stdlib.ExtraAdder()],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Structured logger; pass ``__name__``.

    Event names are dotted and lowercase (``repository.slow_query``);
    everything else goes in keyword arguments.
    """
    return structlog.stdlib.get_logger(name)
