"""Logging configuration for the fulfillment engine.

Module code only ever calls ``structlog.get_logger(__name__)``; embedding
applications call ``configure_logging()`` once at startup. Engine calls bind
their operation name and keys (order, SKU, task) with ``operation_context``,
so every line logged inside an engine call carries them.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Any

import structlog

_LEVELS = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}

_JSON_ENVIRONMENTS = {"production", "staging"}

_MAX_LOG_BYTES = 10 * 1024 * 1024

# Suppress noisy library loggers
logging.getLogger("protean").setLevel(logging.WARNING)


def current_environment() -> str:
    return (os.getenv("ENV") or os.getenv("ENVIRONMENT") or os.getenv("PROTEAN_ENV") or "development").lower()


def get_log_level() -> str:
    """``LOG_LEVEL`` if set, otherwise the default for the environment."""
    return os.getenv("LOG_LEVEL", _LEVELS.get(current_environment(), "INFO"))


def _rotating_file(path: Path, level) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path,
        maxBytes=_MAX_LOG_BYTES,
        backupCount=5,
        encoding="utf-8",
    )
    handler.setLevel(level)
    return handler


def setup_stdlib_logging(log_dir: str | os.PathLike = "logs", level: str | None = None) -> None:
    """Send stdlib records to stdout, ``tradeflow.log`` and ``tradeflow_error.log``.

    The error file only takes ERROR and above: invariant violations and
    provider failures that need a human.
    """
    level = level or get_log_level()
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [
        console,
        _rotating_file(log_path / "tradeflow.log", level),
        _rotating_file(log_path / "tradeflow_error.log", logging.ERROR),
    ]

    logging.getLogger("protean").setLevel(logging.WARNING)


def setup_structlog(json_output: bool = False) -> None:
    """Route structlog through stdlib, rendering JSON or coloured console lines."""
    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging(log_dir: str | os.PathLike = "logs") -> None:
    """Configure stdlib handlers and structlog for the current environment."""
    setup_stdlib_logging(log_dir)
    setup_structlog(json_output=current_environment() in _JSON_ENVIRONMENTS)


def operation_context(**kwargs: Any):
    """Bind context (operation, order, SKU...) to every log line emitted inside the block."""
    return structlog.contextvars.bound_contextvars(**kwargs)
