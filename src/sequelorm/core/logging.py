"""
Structured logging for sequelorm, built on structlog.

Every module asks for its logger with ``get_logger(__name__)`` and emits
snake_case event names carrying key/value context, so a write shows up as
one indexable line::

    logger.debug("record_updated", table="items", record_id=1, columns=["price"])

Nothing is configured on import. Applications call ``configure_logging()``
(or ``configure_from_settings()`` with an ``OrmSettings``) once at start-up;
until then structlog's defaults apply.

Processor chain:
    ::

        TimeStamper(iso)           optional
        merge_contextvars          keys from scope() / bind_context()
        add_log_level
        add_logger_name
        _stamp_service             "service" key on every line
        JSONRenderer | ConsoleRenderer

Examples:
    >>> configure_logging(level="DEBUG", service="inventory")
    >>> log = get_logger(__name__)
    >>> with scope(model="Item"):
    ...     log.info("record_inserted", record_id=1)

Tags:
    logging, structlog, observability, sequelorm
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

if TYPE_CHECKING:
    from sequelorm.core.settings import OrmSettings

_service = "sequelorm"


def _stamp_service(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
    event_dict.setdefault("service", _service)
    return event_dict


def _level_number(level: str) -> int:
    number = logging.getLevelName(level.upper())
    if not isinstance(number, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return number


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    service: str = "sequelorm",
    add_timestamp: bool = True,
) -> None:
    """
    Install the sequelorm processor chain as structlog's global config.

    Args:
        level: Minimum level name (``DEBUG`` .. ``CRITICAL``)
        json_format: JSON lines when True, coloured console output when
            False; None picks JSON unless stdout is a terminal
        service: Value of the ``service`` key on each line
        add_timestamp: Prefix each line with an ISO-8601 timestamp

    Raises:
        ValueError: *level* is not a logging level name
    """
    global _service
    _service = service
    threshold = _level_number(level)

    if json_format is None:
        json_format = not sys.stdout.isatty()

    processors: list[Processor] = []
    if add_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso", utc=True))
    processors += [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.stdlib.add_logger_name,
        _stamp_service,
        structlog.processors.format_exc_info if json_format else structlog.dev.set_exc_info,
        structlog.processors.JSONRenderer() if json_format else structlog.dev.ConsoleRenderer(),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(threshold),
        logger_factory=structlog.PrintLoggerFactory(sys.stdout),
        cache_logger_on_first_use=False,
    )


def configure_from_settings(settings: OrmSettings) -> None:
    """``configure_logging()`` driven by ``log_level`` / ``log_json`` / ``service_name``."""
    configure_logging(
        level=settings.log_level,
        json_format=settings.log_json,
        service=settings.service_name,
    )


def get_logger(name: str | None = None) -> Any:
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


class scope:
    """
    Bind log context for the duration of a ``with`` / ``async with`` block.

    On exit each key goes back to what it was before the block: removed if
    it was unbound, otherwise rebound to its earlier value.
    """

    def __init__(self, **context: Any):
        self._context = context
        self._previous: dict[str, Any] = {}

    def _enter(self) -> scope:
        bound = structlog.contextvars.get_contextvars()
        self._previous = {k: bound[k] for k in self._context if k in bound}
        bind_context(**self._context)
        return self

    def _exit(self) -> None:
        unbind_context(*(k for k in self._context if k not in self._previous))
        if self._previous:
            bind_context(**self._previous)

    def __enter__(self) -> scope:
        return self._enter()

    def __exit__(self, *exc: object) -> None:
        self._exit()

    async def __aenter__(self) -> scope:
        return self._enter()

    async def __aexit__(self, *exc: object) -> None:
        self._exit()


__all__ = [
    "configure_logging",
    "configure_from_settings",
    "get_logger",
    "bind_context",
    "unbind_context",
    "clear_context",
    "scope",
]
