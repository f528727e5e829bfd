"""structlog setup for the uptix CLI.

Log records go to stderr through one stdlib handler. The user-facing
output of a command never goes through here; it uses ``uptix.core.progress``.
Every event emitted during a run carries that run's ``run_id``.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING
from uuid import uuid4

import structlog

if TYPE_CHECKING:
    from uptix.config.models import LoggingConfig

RUN_ID_KEY = "run_id"

# Libraries that log every request at INFO
_NOISY_LOGGERS = ("httpx", "httpcore")


def set_run_id(run_id: str | None = None) -> str:
    """Bind a run id (generated if not given) to every following log event."""
    rid = run_id or uuid4().hex[:12]
    structlog.contextvars.bind_contextvars(**{RUN_ID_KEY: rid})
    return rid


def clear_run_id() -> None:
    structlog.contextvars.unbind_contextvars(RUN_ID_KEY)


class ConsoleSuppressingFilter(logging.Filter):
    """Drop records while a Rich spinner owns the terminal."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: ARG002
        from uptix.core.progress import is_console_suppressed

        return not is_console_suppressed()


def configure_logging(*, config: LoggingConfig | None = None, level: str | None = None) -> None:
    """Route structlog through a single stderr handler.

    Args:
        config: Logging section of the loaded config.
        level: Overrides ``config.level`` (``-v`` passes DEBUG).
    """
    name = (level or (config.level if config is not None else "WARNING")).upper()
    numeric_level = logging.getLevelNamesMapping().get(name, logging.WARNING)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", key="timestamp"),
    ]

    structlog.configure(
        processors=[*shared_processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Not cached so a second configure_logging call (tests, -v) takes effect
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(numeric_level)
    handler.addFilter(ConsoleSuppressingFilter())
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.dev.ConsoleRenderer(
                colors=sys.stderr.isatty(),
                pad_event_to=0,
                pad_level=False,
            ),
            foreign_pre_chain=shared_processors,
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(numeric_level)
    root_logger.addHandler(handler)

    for noisy in _NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(max(numeric_level, logging.WARNING))


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    logger = structlog.get_logger()
    if name:
        logger = logger.bind(logger=name)
    return logger  # type: ignore[no-any-return]
