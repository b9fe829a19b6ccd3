"""
Log setup for the alert service.

Two kinds of loggers write here: structlog loggers in the API layer and
plain ``logging.getLogger(__name__)`` loggers in repositories, the
lifecycle manager and the notification dispatcher. Both are rendered by
one ``ProcessorFormatter`` on the root handler, so a line logged while a
trigger runs carries whatever was bound with ``bind_context`` (request_id,
template_resource_id, project_id, ...).
"""

import logging
import sys

import structlog
from structlog.types import Processor

from src.config.settings import get_settings

# Libraries that log every query or request at INFO
_NOISY_LOGGERS = ("asyncio", "asyncpg", "uvicorn.access")


def _pre_chain() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
    ]


def setup_logging(level: str | None = None, json_logs: bool | None = None) -> None:
    """
    Route structlog and stdlib logging through one stdout handler.

    Args:
        level: Root level, defaults to ``LOG_LEVEL``.
        json_logs: Render JSON lines, defaults to True in production.

    Safe to call more than once; the root handler is replaced each time.
    """
    settings = get_settings()
    level = level or settings.log_level
    if json_logs is None:
        json_logs = settings.is_production

    renderers: list[Processor]
    if json_logs:
        renderers = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        renderers = [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]

    structlog.configure(
        processors=[
            *_pre_chain(),
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_pre_chain(),
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *renderers,
            ],
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_context(**kwargs) -> None:
    """Attach key-value pairs to every following log line of this task."""
    structlog.contextvars.bind_contextvars(**kwargs)
