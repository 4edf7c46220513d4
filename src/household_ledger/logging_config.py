"""Structured logging configuration using structlog.

Calculators log snake_case events with keyword fields through module-level
loggers. Nothing is emitted to a configured sink until ``configure_logging`` is
called; the CLI does this on startup, library callers may route the
``household_ledger`` stdlib logger themselves.

Output formats:
- console: colored key/value lines for interactive use
- json: one JSON object per line for log collectors
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import structlog
from structlog.types import Processor

from household_ledger.config import LogLevel, Settings, get_settings

ROOT_LOGGER = "household_ledger"


def _add_log_level(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    if method_name == "warn":
        method_name = "warning"
    event_dict["level"] = method_name.upper()
    return event_dict


def _add_app_context(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    settings = get_settings()
    event_dict["app"] = settings.app_name
    event_dict["version"] = settings.app_version
    event_dict["environment"] = settings.environment.value
    return event_dict


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def get_console_processors(colors: bool = True) -> list[Processor]:
    """Processors for interactive console output."""
    return [
        structlog.stdlib.add_log_level,
        *_shared_processors(),
        structlog.dev.ConsoleRenderer(
            colors=colors,
            exception_formatter=structlog.dev.plain_traceback,
        ),
    ]


def get_json_processors() -> list[Processor]:
    """Processors for JSON lines output."""
    return [
        _add_log_level,
        _add_app_context,
        *_shared_processors(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(sort_keys=True),
    ]


def configure_logging(
    settings: Settings | None = None,
    *,
    level: LogLevel | str | None = None,
) -> None:
    """Route structlog events through the stdlib ``household_ledger`` logger.

    Args:
        settings: Application settings. If None, loads from environment.
        level: Overrides ``settings.log_level`` (used by the CLI --log-level flag).
    """
    if settings is None:
        settings = get_settings()

    if level is None:
        level = settings.log_level
    if not isinstance(level, LogLevel):
        level = LogLevel(level.upper())
    log_level = getattr(logging, level.value)

    if settings.log_format == "json":
        processors = get_json_processors()
    else:
        processors = get_console_processors(colors=sys.stderr.isatty())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # stdout carries command output; log lines go to stderr
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=log_level)
    logging.getLogger(ROOT_LOGGER).setLevel(log_level)

    if settings.log_file:
        _setup_file_handler(settings.log_file, log_level)


def _setup_file_handler(log_file: Path, level: int) -> None:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(log_file)
    file_handler.setLevel(level)
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    logging.getLogger(ROOT_LOGGER).addHandler(file_handler)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Example:
        logger = get_logger(__name__)
        logger.info("unit_method_calculated", period="2026-01", unit_cost="1111.11")
    """
    return structlog.stdlib.get_logger(name)


@contextmanager
def period_context(household: str, period: str, **extra: Any) -> Iterator[None]:
    """Tag every log event inside the block with the household and period.

    Example:
        with period_context(household.name, period.label):
            calculator.calculate(household, period)
    """
    bound = {"household": household, "period_label": period, **extra}
    structlog.contextvars.bind_contextvars(**bound)
    try:
        yield
    finally:
        structlog.contextvars.unbind_contextvars(*bound)
