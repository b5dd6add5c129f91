"""structlog setup for the rank watcher process."""

import logging

import structlog
from structlog import contextvars as structlog_contextvars

# Libraries whose INFO output would drown the reconciliation log
NOISY_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine", "asyncio")

SHARED_PROCESSORS = [
    structlog.stdlib.filter_by_level,
    structlog_contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
]


def setup_logging(log_level: str = "INFO", json_output: bool = True) -> None:
    """
    Route structlog through stdlib logging at ``log_level``.

    :param log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL
    :param json_output: One JSON object per line; otherwise the dev console format
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(format="%(message)s", level=level, force=True)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[*SHARED_PROCESSORS, renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
