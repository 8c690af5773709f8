"""Structured logging for cluster tracking.

structlog builds the event dict and hands it to the standard library, where
``ProcessorFormatter`` renders it on each handler. Handlers installed here
are named ``cluster_track.*`` and replaced on every call to
``setup_logging``.
"""
from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from time import perf_counter
from typing import TYPE_CHECKING, Any, Generator

import structlog
from structlog.types import Processor

if TYPE_CHECKING:
    from cluster_track.core.config import LoggingConfig

HANDLER_PREFIX = "cluster_track."


class StderrHandler(logging.StreamHandler):
    """Stream handler bound to whatever ``sys.stderr`` is at emit time.

    Test runners and CLI harnesses swap and close ``sys.stderr``; a handler
    holding the stream from configure time would write to a closed file.
    """

    def __init__(self, level: int = logging.NOTSET) -> None:
        logging.Handler.__init__(self, level)

    @property
    def stream(self):
        return sys.stderr


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _formatter(format_type: str, colors: bool) -> structlog.stdlib.ProcessorFormatter:
    if format_type == "json":
        render: list[Processor] = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        render = [structlog.dev.ConsoleRenderer(colors=colors)]
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_shared_processors(),
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *render],
    )


def remove_handlers() -> None:
    """Detach and close the handlers installed by ``setup_logging``."""
    root = logging.getLogger()
    for handler in list(root.handlers):
        if (handler.get_name() or "").startswith(HANDLER_PREFIX):
            root.removeHandler(handler)
            handler.close()


def setup_logging(
    level: str = "INFO",
    format_type: str = "console",
    log_file: Path | None = None,
) -> structlog.stdlib.BoundLogger:
    """Configure structured logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
        format_type: "console" for human-readable output, "json" for one JSON object per line.
        log_file: Optional file receiving the same records (never colourised).

    Returns:
        Configured bound logger.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_shared_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    remove_handlers()
    root = logging.getLogger()
    root.setLevel(log_level)

    stream_handler = StderrHandler()
    stream_handler.set_name(HANDLER_PREFIX + "stderr")
    stream_handler.setFormatter(_formatter(format_type, colors=sys.stderr.isatty()))
    root.addHandler(stream_handler)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.set_name(HANDLER_PREFIX + "file")
        file_handler.setFormatter(_formatter(format_type, colors=False))
        root.addHandler(file_handler)

    return structlog.get_logger()


def setup_logging_from_config(config: LoggingConfig) -> structlog.stdlib.BoundLogger:
    """Configure structured logging from a ``LoggingConfig`` section."""
    return setup_logging(level=config.level, format_type=config.format, log_file=config.file)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


@contextmanager
def log_duration(
    logger: structlog.stdlib.BoundLogger,
    operation: str,
    **extra: Any,
) -> Generator[None, None, None]:
    """Log start, completion (with duration) or failure of an operation.

    Exceptions are logged and re-raised.
    """
    logger.info(f"Starting {operation}", **extra)
    start = perf_counter()
    try:
        yield
    except Exception as e:
        logger.error(
            f"Failed {operation}",
            duration_seconds=round(perf_counter() - start, 3),
            error=str(e),
            **extra,
        )
        raise
    logger.info(
        f"Completed {operation}",
        duration_seconds=round(perf_counter() - start, 3),
        **extra,
    )


@contextmanager
def track_context(**context: Any) -> Generator[None, None, None]:
    """Bind context (e.g. scenario, track_id) to every record logged inside the block."""
    with structlog.contextvars.bound_contextvars(**context):
        yield
