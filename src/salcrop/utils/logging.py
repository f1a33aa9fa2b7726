"""Logging setup for salcrop, built on structlog.

Library modules log through ``get_logger`` (structured events) or through
``logging.getLogger(__name__)`` for low-level debug output. Callers that
crop many images concurrently can tag events with a request and an image
identifier via ``set_correlation_context``.
"""

import logging
import sys
from collections.abc import MutableMapping
from contextvars import ContextVar
from typing import Any, cast

import structlog
from structlog.types import Processor

from salcrop.config import settings

_CORRELATION_KEYS = ("request_id", "image_id")

_correlation: ContextVar[dict[str, str] | None] = ContextVar(
    "salcrop_correlation", default=None
)


def set_correlation_context(
    request_id: str | None = None,
    image_id: str | None = None,
) -> None:
    """Tag subsequent log events in this context.

    Arguments left as None keep any value set earlier.

    Args:
        request_id: Caller's identifier for the crop request.
        image_id: Identifier of the image being cropped, such as a file name.
    """
    ids = dict(_correlation.get() or {})
    for key, value in zip(_CORRELATION_KEYS, (request_id, image_id), strict=True):
        if value is not None:
            ids[key] = value
    _correlation.set(ids)


def clear_correlation_context() -> None:
    _correlation.set(None)


def _add_correlation_ids(
    logger: logging.Logger,
    method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Copy the current correlation ids into the event."""
    _ = logger, method_name
    ids = _correlation.get()
    if ids:
        event_dict.update(ids)
    return event_dict


def _renderer(log_format: str) -> list[Processor]:
    if log_format == "json":
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]


def configure_logging(
    level: str | None = None,
    log_format: str | None = None,
) -> None:
    """Install the structlog pipeline and route stdlib logging to stdout.

    Args:
        level: Level name such as "DEBUG" or "INFO". Defaults to
            ``settings.LOG_LEVEL``.
        log_format: "console" or "json". Defaults to ``settings.LOG_FORMAT``.
    """
    level_name = (level or settings.LOG_LEVEL).upper()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            _add_correlation_ids,
            *_renderer(log_format or settings.LOG_FORMAT),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=logging.getLevelNamesMapping()[level_name],
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger, named after the caller's module by default."""
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))
