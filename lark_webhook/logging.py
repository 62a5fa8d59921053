"""Structured logging for action runs.

Log lines go to stderr. Stdout belongs to the workflow commands
(``::error::``, ``::set-output``) that the Actions runner parses.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Literal, Mapping, TextIO

import structlog

RUNNER_DEBUG_ENV = "RUNNER_DEBUG"


def get_logger(name: str | None = None) -> structlog.typing.FilteringBoundLogger:
    """Return a structlog logger, applying the default configuration on first use."""

    if not structlog.is_configured():
        configure_logging()

    return structlog.get_logger(name)


def resolve_level(level: str, environ: Mapping[str, str] | None = None) -> str:
    """Return ``DEBUG`` when the runner has step debug logging enabled, else ``level``."""

    environ = os.environ if environ is None else environ
    if environ.get(RUNNER_DEBUG_ENV) == "1":
        return "DEBUG"
    return level.upper()


def configure_logging(
    level: str = "INFO",
    *,
    log_format: Literal["console", "json"] = "console",
    stream: TextIO | None = None,
) -> None:
    """Configure structlog and the stdlib root logger (used by httpx).

    ``console`` renders plain key=value lines for the step log, ``json`` one
    JSON object per line for log shipping.
    """

    stream = stream or sys.stderr
    processors: list[structlog.typing.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if log_format == "json":
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=structlog.PrintLoggerFactory(stream),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(level=numeric_level, format="%(levelname)s %(name)s: %(message)s", stream=stream)
