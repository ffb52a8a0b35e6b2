"""
Structured logging for the correlation service.

``setup_logging()`` is called once per process (``data-service`` or
``refresh-cli``).  Both structlog loggers and the stdlib loggers used by
the analysis modules end up in one stderr handler with the same key-value
layout.  Every event inside a pipeline cycle also carries that cycle's
``run_id`` so the fan-out warnings of one refresh can be grepped together:

    2025-06-01T14:23:01Z [warning] Candle fetch failed for kPEPE: HTTP 429  run_id=3f2a9c1e service=data-service
    2025-06-01T14:23:04Z [info   ] pipeline_computed  active=187 survivors=164 run_id=3f2a9c1e service=data-service

LOG_LEVEL and LOG_FORMAT (``console`` | ``json``) are read from the
environment when not passed explicitly.
"""

from __future__ import annotations

import logging
import os
import sys
import uuid
from contextlib import contextmanager
from typing import Any, Iterator

import structlog

# httpx logs one INFO line per candle request; a refresh issues hundreds
_QUIET_AT_WARNING = ("httpx", "httpcore", "uvicorn.access", "asyncio")


def _pre_chain() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.ExtraAdder(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _renderer(log_format: str) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=sys.stderr.isatty(), pad_event_to=30
    )


def setup_logging(
    *,
    service: str = "hypercorr",
    level: str | None = None,
    log_format: str | None = None,
) -> None:
    """Route structlog and stdlib logging through one stderr handler.

    Args:
        service: Bound to every event (``"data-service"``, ``"refresh-cli"``).
        level: Root level name; defaults to ``LOG_LEVEL`` or ``INFO``.
        log_format: ``"console"`` or ``"json"``; defaults to ``LOG_FORMAT``.
    """
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    log_format = (log_format or os.getenv("LOG_FORMAT", "console")).lower()

    pre_chain = _pre_chain()
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_format),
            ],
            foreign_pre_chain=pre_chain,
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level, logging.INFO))
    for name in _QUIET_AT_WARNING:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            *pre_chain,
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(service=service)


def get_logger(
    name: str | None = None, **initial_binds: Any
) -> structlog.stdlib.BoundLogger:
    """Structured logger, optionally with extra key-values bound."""
    log = structlog.get_logger(name)
    if initial_binds:
        log = log.bind(**initial_binds)
    return log


@contextmanager
def pipeline_run_context(*, force: bool) -> Iterator[str]:
    """Tag every event logged inside one pipeline cycle with a ``run_id``.

    Yields the id.  The binding is removed on exit, so ``service`` and any
    outer context survive.
    """
    run_id = uuid.uuid4().hex[:8]
    with structlog.contextvars.bound_contextvars(run_id=run_id, forced=force):
        yield run_id
