"""structlog setup for applications embedding aggregate_cache.

The library itself only calls ``structlog.get_logger()``; hosts that want the
cache events rendered through stdlib logging call ``configure_logging`` once
at startup.
"""

from __future__ import annotations

import logging
import sys

import structlog

_HANDLER_TAG = "_aggregate_cache_handler"

_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def configure_logging(
    *,
    level: str = "INFO",
    json_format: bool = False,
    replace_handlers: bool = False,
) -> None:
    """Route structlog events through a stderr handler on the root logger.

    Handlers the host installed are kept; calling again only swaps the
    handler added by a previous call.

    Args:
        level: Minimum level name (DEBUG, INFO, WARNING, ERROR).
        json_format: Render JSON lines instead of the console renderer.
        replace_handlers: Remove every existing root handler first.
    """
    default_level = _LEVEL_MAP.get(level.upper(), logging.INFO)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", key="timestamp"),
    ]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(default_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer()
        if json_format
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    root_logger = logging.getLogger()
    if replace_handlers:
        root_logger.handlers.clear()
    else:
        for existing in list(root_logger.handlers):
            if getattr(existing, _HANDLER_TAG, False):
                root_logger.removeHandler(existing)
    setattr(handler, _HANDLER_TAG, True)
    root_logger.addHandler(handler)
    root_logger.setLevel(default_level)
