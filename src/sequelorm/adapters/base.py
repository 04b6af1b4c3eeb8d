"""Connector base class.

Manifesto:
    Drivers are blocking; the mapping layer is async. ``ConnectorBase``
    bridges the two once: subclasses implement a synchronous ``_run`` and
    the base runs it in a worker thread, one statement at a time, so the
    event loop never blocks on I/O and statements on one connection never
    interleave.

Features:
    - Abstract ``connect()``, ``disconnect()``, ``_run()``, ``is_table_exists_error()``
    - ``execute()`` satisfying the ``Connector`` protocol
    - Dialect chosen from the ``DatabaseConfig``
    - Async context-manager protocol for connection lifecycle

Tags:
    sequelorm, database, abstract-base, adapter-pattern
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod

from sequelorm.core.dialect import Dialect, get_dialect
from sequelorm.core.logging import get_logger
from sequelorm.core.protocols import QueryResult

from .types import DatabaseConfig, DatabaseType

logger = get_logger(__name__)


class ConnectorBase(ABC):
    """
    Abstract base class for connectors.

    Provides the async ``execute`` plumbing and defines the interface
    every driver-backed connector implements.
    """

    def __init__(self, config: DatabaseConfig):
        self._config = config
        self._connected = False
        self._dialect: Dialect = get_dialect(config.db_type.value)
        self._lock = asyncio.Lock()

    @property
    def dialect(self) -> Dialect:
        """SQL dialect for this connector's database type."""
        return self._dialect

    @property
    def db_type(self) -> DatabaseType:
        return self._config.db_type

    @property
    def is_connected(self) -> bool:
        return self._connected

    @abstractmethod
    def connect(self) -> None:
        """Establish connection to database."""
        ...

    @abstractmethod
    def disconnect(self) -> None:
        """Close connection to database."""
        ...

    @abstractmethod
    def _run(self, sql: str, params: tuple) -> QueryResult:
        """Execute and commit one statement on the calling thread."""
        ...

    @abstractmethod
    def is_table_exists_error(self, exc: BaseException) -> bool:
        """True if *exc* is the driver's duplicate-table signal."""
        ...

    async def execute(self, sql: str, params: tuple = ()) -> QueryResult:
        """Execute one statement in a worker thread and return its result."""
        async with self._lock:
            if not self._connected:
                await asyncio.to_thread(self.connect)
            logger.debug("statement_executing", backend=self._dialect.name, sql=sql)
            return await asyncio.to_thread(self._run, sql, tuple(params))

    async def close(self) -> None:
        async with self._lock:
            await asyncio.to_thread(self.disconnect)

    async def __aenter__(self) -> ConnectorBase:
        await asyncio.to_thread(self.connect)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._config.to_connection_string()!r})"


__all__ = [
    "ConnectorBase",
]
