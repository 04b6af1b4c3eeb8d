"""Connection manager: the process-wide connector handle.

Every statement the mapping layer issues goes through
``get_connection_manager().run(operation)``. An *operation* is an async
callable receiving the connector; it builds its SQL from
``connector.dialect`` at execution time, so a statement requested before
any database is configured can still be rendered correctly later.

Deferred operations
-------------------
When no connector is set, ``run()`` queues the operation and suspends.
``set_connector()`` is the readiness signal: it drains the queue once,
in FIFO order, resolving each waiting caller with its operation's result
(or exception). Operations requested while a drain is still pending
queue behind it, so issuance order is preserved.

Usage
-----
::

    from sequelorm.orm.connection import get_connection_manager
    from sequelorm.adapters import SQLiteConnector

    manager = get_connection_manager()
    save_task = asyncio.create_task(item.save())   # queued, no connector yet
    await manager.connect(SQLiteConnector())       # drains: INSERT runs now
    result = await save_task

Tier: Core (sequelorm)
"""

from __future__ import annotations

import asyncio
from collections import deque
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from sequelorm.core.logging import get_logger
from sequelorm.core.protocols import Connector, QueryResult

logger = get_logger(__name__)

T = TypeVar("T")

Operation = Callable[[Connector], Awaitable[T]]


class ConnectionManager:
    """Shared connector handle plus the FIFO queue of deferred operations."""

    def __init__(self) -> None:
        self._connector: Connector | None = None
        self._pending: deque[tuple[Operation[Any], asyncio.Future[Any]]] = deque()
        self._drain_task: asyncio.Task[None] | None = None

    @property
    def connector(self) -> Connector | None:
        return self._connector

    @property
    def is_connected(self) -> bool:
        return self._connector is not None

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    # ── Readiness ────────────────────────────────────────────────────────

    def set_connector(self, connector: Connector) -> None:
        """Install *connector* and drain any deferred operations."""
        self._connector = connector
        logger.info(
            "connector_available",
            dialect=connector.dialect.name,
            pending=len(self._pending),
        )
        if self._pending:
            self._schedule_drain()

    async def connect(self, connector: Connector) -> None:
        """Install *connector* and wait until the deferred queue is drained."""
        self.set_connector(connector)
        # the drain task is created via call_soon_threadsafe; let it start
        await asyncio.sleep(0)
        if self._drain_task is not None:
            await self._drain_task

    def remove_connection(self) -> Connector | None:
        """Drop the connector handle; later operations are deferred."""
        connector, self._connector = self._connector, None
        if connector is not None:
            logger.info("connector_removed", dialect=connector.dialect.name)
        return connector

    async def close(self) -> None:
        """Drop the connector handle and close it."""
        connector = self.remove_connection()
        if connector is not None:
            await connector.close()

    # ── Execution ────────────────────────────────────────────────────────

    async def run(self, operation: Operation[T]) -> T:
        """Run *operation* now, or defer it until a connector is available.

        Raises whatever the operation raises; callers translate that into
        an ``Err`` at their own boundary.
        """
        if self._connector is not None and not self._pending:
            return await operation(self._connector)

        future: asyncio.Future[T] = asyncio.get_running_loop().create_future()
        self._pending.append((operation, future))
        logger.debug("statement_deferred", pending=len(self._pending))
        if self._connector is not None:
            self._schedule_drain()
        return await future

    async def execute(self, sql: str, params: tuple = ()) -> QueryResult:
        """Run one literal statement through the queue."""
        return await self.run(lambda connector: connector.execute(sql, params))

    def _schedule_drain(self) -> None:
        loop = self._pending[0][1].get_loop()
        loop.call_soon_threadsafe(self._start_drain)

    def _start_drain(self) -> None:
        if self._drain_task is None or self._drain_task.done():
            self._drain_task = asyncio.get_running_loop().create_task(self._drain())

    async def _drain(self) -> None:
        drained = 0
        while self._pending and self._connector is not None:
            operation, future = self._pending.popleft()
            if future.cancelled():
                continue
            try:
                result = await operation(self._connector)
            except asyncio.CancelledError:
                if not future.done():
                    future.cancel()
                raise
            except Exception as e:
                if not future.done():
                    future.set_exception(e)
            else:
                if not future.done():
                    future.set_result(result)
                else:
                    logger.debug("deferred_caller_gone", pending=len(self._pending))
            drained += 1
        logger.info("deferred_queue_drained", count=drained, remaining=len(self._pending))


# ── Process-wide singleton ───────────────────────────────────────────────

_manager: ConnectionManager | None = None


def get_connection_manager() -> ConnectionManager:
    global _manager
    if _manager is None:
        _manager = ConnectionManager()
    return _manager


def reset_connection_manager() -> None:
    """Forget the connector and any deferred operations (for testing)."""
    global _manager
    _manager = None


def set_connector(connector: Connector) -> None:
    get_connection_manager().set_connector(connector)


def remove_connection() -> Connector | None:
    return get_connection_manager().remove_connection()


__all__ = [
    "ConnectionManager",
    "Operation",
    "get_connection_manager",
    "reset_connection_manager",
    "set_connector",
    "remove_connection",
]
