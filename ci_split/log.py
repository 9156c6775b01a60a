from __future__ import annotations

import logging
import logging.config
import sys
from typing import Callable, List, Optional, Tuple, Union

import structlog

from ci_split import settings


def err(msg: str) -> None:
    print(msg, file=sys.stderr)  # noqa


def configure(
    *,
    json: Optional[bool] = None,
    level: Union[str, int, None] = None,
) -> None:
    """Set up structlog on top of stdlib logging, rendering to stderr.

    stdout is reserved for the list of test files assigned to a node.
    """
    if json is None:
        json = settings.json_logging
    if level is None:
        level = settings.log_level
    level = logging.getLevelName(level.upper()) if isinstance(level, str) else level
    shared, structured, renderer = _get_processors(json)
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "processor": renderer,
                    "foreign_pre_chain": shared,
                }
            },
            "handlers": {
                "default": {
                    "level": level,
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "stream": "ext://sys.stderr",
                }
            },
            "loggers": {
                "ci_split": {
                    "handlers": ["default"],
                    "level": level,
                    "propagate": False,
                }
            },
        }
    )
    structlog.configure(
        processors=shared + structured,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=json,
    )


def _get_processors(json: bool) -> Tuple[List, List, Callable]:
    shared = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    structured = [structlog.stdlib.PositionalArgumentsFormatter()]

    if json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    # Hand the event dict over to ProcessorFormatter for rendering.
    structured.append(structlog.stdlib.ProcessorFormatter.wrap_for_formatter)
    return shared, structured, renderer


def logger(name: str, **initial_values) -> structlog.stdlib.BoundLogger:  # type: ignore[no-untyped-def]
    if structlog.is_configured() is False:
        configure()
    return structlog.stdlib.get_logger(name, **initial_values)
