"""Structured logging shared by the CLI, the HTTP API and the selectors."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Union

import structlog


_DEFAULT_PROCESSORS = [
    structlog.contextvars.merge_contextvars,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
]

# Request-level chatter from the HTTP stack; only shown at DEBUG.
_QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


def _build_handlers(log_file: Optional[Union[str, Path]]) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))
    return handlers


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
    log_file: Optional[Union[str, Path]] = None,
) -> None:
    """Initialise structlog on top of stdlib logging.

    Parameters
    ----------
    level:
        Textual logging level (e.g. ``"DEBUG"``).
    json_output:
        Render events as JSON lines instead of the console format.
    log_file:
        Optional file that receives a copy of every event.
    """

    level = level.upper()
    logging.basicConfig(level=level, format="%(message)s", handlers=_build_handlers(log_file), force=True)

    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[*_DEFAULT_PROCESSORS, renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    quiet_level = logging.DEBUG if level == "DEBUG" else logging.WARNING
    for logger_name in _QUIET_LOGGERS:
        logging.getLogger(logger_name).setLevel(quiet_level)


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
