"""structlog setup shared by the CLI and the library modules."""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog
from structlog.types import Processor


class _CurrentStderr:
    """Writes to whatever ``sys.stderr`` is at call time.

    PrintLoggerFactory keeps the file it was given and loggers are cached on
    first use, so handing it ``sys.stderr`` directly would keep writing to a
    stream CliRunner has already swapped out and closed.
    """

    def write(self, message: str) -> int:
        return sys.stderr.write(message)

    def flush(self) -> None:
        sys.stderr.flush()


def _processors(json_logs: bool) -> list[Processor]:
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if json_logs:
        processors.append(structlog.processors.dict_tracebacks)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    return processors


def configure_logging(verbose: bool = False, json_logs: bool = False) -> None:
    """Route all schemacov logs to stderr; DEBUG when ``verbose``."""
    structlog.configure(
        processors=_processors(json_logs),
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG if verbose else logging.INFO),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=_CurrentStderr()),
        cache_logger_on_first_use=True,
    )


@contextmanager
def log_context(**fields: Any) -> Iterator[None]:
    """Attach ``fields`` to every log line emitted inside the block."""
    with structlog.contextvars.bound_contextvars(**fields):
        yield


def get_logger(name: str | None = None) -> Any:
    return structlog.get_logger(name)
