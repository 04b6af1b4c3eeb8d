"""Diagnostic event bus.

Every statement the record lifecycle writes (INSERT / UPDATE / DELETE /
CREATE TABLE) publishes one ``orm.write`` event naming the columns it
touched. Observability tooling subscribes to the process-wide bus; the
mapping layer never depends on anyone listening, and a failing handler
is logged and ignored.

Usage::

    from sequelorm.core.events import Event, get_event_bus

    async def show(event: Event) -> None:
        print(event.payload["status"], event.payload["message"])

    await get_event_bus().subscribe("orm.*", show)
"""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Protocol, runtime_checkable

from sequelorm.core.logging import get_logger

logger = get_logger(__name__)


# ── Event Model ──────────────────────────────────────────────────────────


@dataclass
class Event:
    """Event payload.

    Attributes:
        event_type: Dot-separated type (e.g., ``orm.write``)
        source: Origin component (the table name for writes)
        payload: Event-specific data; writes carry ``status`` and ``message``
        timestamp: When the event occurred (UTC)
        event_id: Unique event identifier
    """

    event_type: str
    source: str
    payload: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def status(self) -> str | None:
        return self.payload.get("status")

    @property
    def message(self) -> str | None:
        return self.payload.get("message")

    def matches(self, pattern: str) -> bool:
        """Check if event type matches a pattern (``*``, ``orm.*`` or exact)."""
        if pattern == "*":
            return True
        if pattern.endswith(".*"):
            prefix = pattern[:-2]
            return self.event_type.startswith(prefix + ".")
        return self.event_type == pattern


EventHandler = Callable[[Event], Awaitable[None]]


@runtime_checkable
class EventBus(Protocol):
    """Protocol for event bus implementations."""

    async def publish(self, event: Event) -> None: ...

    async def subscribe(self, event_type: str, handler: EventHandler) -> str: ...

    async def unsubscribe(self, subscription_id: str) -> None: ...

    async def close(self) -> None: ...


@dataclass
class Subscription:
    """Internal subscription record."""

    id: str
    pattern: str
    handler: EventHandler


class InMemoryEventBus:
    """In-process event bus.

    ``publish`` awaits every matching handler before returning, so a
    caller that awaited ``save()`` has already seen its write event.
    """

    def __init__(self) -> None:
        self._subscriptions: dict[str, Subscription] = {}
        self._closed = False

    async def publish(self, event: Event) -> None:
        if self._closed:
            return

        handlers = [
            (sub.id, sub.handler)
            for sub in self._subscriptions.values()
            if event.matches(sub.pattern)
        ]
        if not handlers:
            return

        async def safe_call(sub_id: str, handler: EventHandler) -> None:
            try:
                await handler(event)
            except Exception as e:
                logger.warning(
                    "event_handler_error",
                    subscription_id=sub_id,
                    event_type=event.event_type,
                    error=str(e),
                )

        await asyncio.gather(*[safe_call(sub_id, handler) for sub_id, handler in handlers])

    async def subscribe(self, event_type: str, handler: EventHandler) -> str:
        sub_id = f"sub_{uuid.uuid4().hex[:12]}"
        self._subscriptions[sub_id] = Subscription(id=sub_id, pattern=event_type, handler=handler)
        return sub_id

    async def unsubscribe(self, subscription_id: str) -> None:
        self._subscriptions.pop(subscription_id, None)

    async def close(self) -> None:
        """Mark bus as closed and clear subscriptions."""
        self._closed = True
        self._subscriptions.clear()

    @property
    def subscription_count(self) -> int:
        return len(self._subscriptions)


# ── Default Event Bus Singleton ──────────────────────────────────────────

_event_bus: EventBus | None = None


def get_event_bus() -> EventBus:
    """Get the global event bus, creating an in-memory one if none is set."""
    global _event_bus
    if _event_bus is None:
        _event_bus = InMemoryEventBus()
    return _event_bus


def set_event_bus(bus: EventBus | None) -> None:
    """Set (or with ``None``, reset) the global event bus."""
    global _event_bus
    _event_bus = bus


async def publish_write(
    source: str,
    operation: str,
    columns: list[str],
    message: str,
    status: str = "info",
) -> None:
    """Publish the diagnostic event for one issued write.

    The write has already happened; a failing bus is logged and ignored.
    """
    event = Event(
        event_type="orm.write",
        source=source,
        payload={
            "status": status,
            "message": message,
            "operation": operation,
            "columns": list(columns),
        },
    )
    try:
        await get_event_bus().publish(event)
    except Exception as e:
        logger.warning(
            "event_publish_failed",
            event_type=event.event_type,
            source=source,
            operation=operation,
            error=str(e),
        )


__all__ = [
    "Event",
    "EventBus",
    "EventHandler",
    "InMemoryEventBus",
    "get_event_bus",
    "set_event_bus",
    "publish_write",
]
