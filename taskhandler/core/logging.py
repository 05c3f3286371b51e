"""
ⒸAngelaMos | 2026
logging.py
"""
import logging
import sys

import orjson
import structlog

from taskhandler.core.config import get_settings


def configure_logging(
    json_mode: bool | None = None,
    debug: bool | None = None,
) -> None:
    """
    Configure structlog for the handler
    Unset arguments come from settings (debug, json_logs)
    Auto-detects JSON mode based on TTY if settings leave it open
    """
    if json_mode is None or debug is None:
        settings = get_settings()
        if json_mode is None:
            json_mode = settings.json_logs
        if debug is None:
            debug = settings.debug

    if json_mode is None:
        json_mode = not sys.stderr.isatty()

    log_level = logging.DEBUG if debug else logging.INFO

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt = "iso",
                                         utc = True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_mode:
        processors = [
            *shared_processors,
            structlog.processors.JSONRenderer(serializer = _json_serializer),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors = True),
        ]

    structlog.configure(
        processors = processors,
        wrapper_class = structlog.make_filtering_bound_logger(log_level),
        context_class = dict,
        logger_factory = structlog.PrintLoggerFactory(),
        cache_logger_on_first_use = True,
    )


def _json_serializer(obj: dict, **kwargs) -> str:
    """
    Serialize log entries to JSON using orjson for speed
    """
    return orjson.dumps(obj, default = str).decode("utf-8")


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """
    Get a lazily assembled logger
    Module level loggers pick up configure_logging() calls made after import
    """
    if name:
        return structlog.get_logger(component = name)
    return structlog.get_logger()
