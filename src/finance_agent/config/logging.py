"""structlog setup shared by the agent, the services and the command-line runner.

Log lines go to stderr so that ``python -m finance_agent`` keeps stdout for
the answer itself.
"""

import logging
import sys
from typing import Literal

import structlog

from finance_agent.config.settings import get_settings

LogFormat = Literal["json", "console"]


def build_processors(log_format: LogFormat) -> list[structlog.types.Processor]:
    """Return the processor chain ending in the renderer for ``log_format``."""
    processors: list[structlog.types.Processor] = [
        # user_id and other request context bound by the entry point
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=sys.stderr.isatty(),
                exception_formatter=structlog.dev.plain_traceback,
            )
        )
    return processors


def configure_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] | None = None,
    format: LogFormat | None = None,
) -> None:
    """Route stdlib logging and structlog through one stderr handler.

    ``level`` and ``format`` fall back to ``LOG_LEVEL`` and ``LOG_FORMAT``.
    Calling this again replaces the previous configuration.
    """
    settings = get_settings()
    log_level = getattr(logging, level or settings.log_level)

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=log_level, force=True)

    structlog.configure(
        processors=build_processors(format or settings.log_format),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
