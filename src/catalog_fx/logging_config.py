"""structlog setup for the API, the CLI and the conversion services.

Console rendering is used while developing; ``log_format="json"`` switches
to one JSON object per line, stamped with the app name, environment and
base currency so that conversion events from several shops can share a sink.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from decimal import Decimal
from pathlib import Path
from typing import Any
from uuid import UUID

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from catalog_fx.config import Settings, get_settings

# Loggers that emit one line per HTTP request.
_CHATTY_LOGGERS = ("httpcore", "httpx", "uvicorn.access")


def _add_log_level(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    event_dict["level"] = "WARNING" if method_name == "warn" else method_name.upper()
    return event_dict


def _add_app_context(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    settings = get_settings()
    event_dict.setdefault("app", settings.app_name)
    event_dict.setdefault("environment", settings.environment.value)
    event_dict.setdefault("base_currency", settings.base_currency)
    return event_dict


def _render_domain_values(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Show rates, prices and IDs as plain text rather than reprs."""
    for key, value in event_dict.items():
        if isinstance(value, Decimal):
            event_dict[key] = format(value, "f")
        elif isinstance(value, UUID):
            event_dict[key] = str(value)
    return event_dict


def build_processors(log_format: str) -> list[Processor]:
    """Processor chain for ``"json"`` or console output."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        _render_domain_values,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if log_format == "json":
        return [
            *processors,
            _add_log_level,
            _add_app_context,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    return [
        *processors,
        structlog.stdlib.add_log_level,
        structlog.dev.ConsoleRenderer(exception_formatter=structlog.dev.plain_traceback),
    ]


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog and the stdlib root logger.

    Called once by the API lifespan. The CLI prints its own output and
    leaves structlog at its defaults.
    """
    settings = settings or get_settings()
    level = getattr(logging, settings.log_level.value)

    structlog.configure(
        processors=build_processors(settings.log_format),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    if settings.log_file:
        _add_file_handler(settings.log_file, level)

    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.INFO))


def _add_file_handler(log_file: Path, level: int) -> None:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file)
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(name)s %(levelname)s %(message)s")
    )
    logging.getLogger().addHandler(handler)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.stdlib.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind request-scoped fields, e.g. ``request_id``, to every later event."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


@contextmanager
def log_context(**kwargs: Any) -> Iterator[None]:
    """Bind fields for the duration of a block, restoring earlier values after.

    Example:
        with log_context(product_id=str(product.id)):
            engine.reconcile_existing_entity(product)
    """
    with structlog.contextvars.bound_contextvars(**kwargs):
        yield
