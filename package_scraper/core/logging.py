"""Logging setup for the CLI: structlog events rendered through stdlib logging.

Everything is written to stderr so stdout only carries the run summary.
"""

from __future__ import annotations

import logging
import logging.config
import os

import structlog

LOG_LEVEL_ENV = "PACKAGE_SCRAPER_LOG_LEVEL"
LOG_FORMAT_ENV = "PACKAGE_SCRAPER_LOG_FORMAT"
LOG_FORMATS = ("console", "json")

# Chatty third-party loggers, capped regardless of our own level.
QUIET_LOGGERS = ("httpx", "httpcore")


def resolve_level(verbose: bool = False) -> str:
    """``-v`` wins over the environment, which defaults to INFO."""
    if verbose:
        return "DEBUG"
    level = os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
    if not isinstance(logging.getLevelName(level), int):
        return "INFO"
    return level


def resolve_format() -> str:
    log_format = os.environ.get(LOG_FORMAT_ENV, "console").lower()
    return log_format if log_format in LOG_FORMATS else "console"


def _pre_chain(log_format: str) -> list[structlog.types.Processor]:
    # JSON lines get a full UTC timestamp; the console only needs the clock.
    if log_format == "json":
        stamper = structlog.processors.TimeStamper(fmt="iso", utc=True)
    else:
        stamper = structlog.processors.TimeStamper(fmt="%H:%M:%S", utc=False)
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        stamper,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def _renderer(log_format: str) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=False)


def setup_logging(verbose: bool = False) -> None:
    """Route structlog through a single stderr handler.

    Level comes from ``PACKAGE_SCRAPER_LOG_LEVEL`` unless *verbose* is set.
    ``PACKAGE_SCRAPER_LOG_FORMAT`` picks ``console`` or ``json`` output.
    """
    level = resolve_level(verbose)
    log_format = resolve_format()
    pre_chain = _pre_chain(log_format)

    structlog.configure(
        processors=pre_chain + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    loggers = {name: {"level": "WARNING"} for name in QUIET_LOGGERS}
    loggers["package_scraper"] = {"level": level}

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                log_format: {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "foreign_pre_chain": pre_chain,
                    "processors": [
                        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                        _renderer(log_format),
                    ],
                },
            },
            "handlers": {
                "stderr": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stderr",
                    "formatter": log_format,
                },
            },
            "root": {"handlers": ["stderr"], "level": level},
            "loggers": loggers,
        }
    )
