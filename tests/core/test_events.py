"""Tests for sequelorm.core.events: Event model, InMemoryEventBus, publish_write."""

import pytest

from sequelorm.core.events import (
    Event,
    EventBus,
    InMemoryEventBus,
    get_event_bus,
    publish_write,
    set_event_bus,
)


class TestEvent:
    def test_defaults(self):
        event = Event(event_type="orm.write", source="items")
        assert event.payload == {}
        assert event.event_id
        assert event.timestamp.tzinfo is not None

    def test_status_and_message(self):
        event = Event("orm.write", "items", {"status": "info", "message": "updated"})
        assert event.status == "info"
        assert event.message == "updated"

    def test_unique_ids(self):
        assert Event("a", "b").event_id != Event("a", "b").event_id


class TestEventMatches:
    def test_exact_match(self):
        event = Event(event_type="orm.write", source="items")
        assert event.matches("orm.write") is True
        assert event.matches("orm.read") is False

    def test_wildcards(self):
        event = Event(event_type="orm.write", source="items")
        assert event.matches("*") is True
        assert event.matches("orm.*") is True
        assert event.matches("table.*") is False


class TestInMemoryEventBus:
    def test_satisfies_protocol(self):
        assert isinstance(InMemoryEventBus(), EventBus)

    @pytest.mark.asyncio
    async def test_publish_to_matching_subscribers(self):
        bus = InMemoryEventBus()
        received = []

        async def handler(event):
            received.append(event)

        await bus.subscribe("orm.*", handler)
        await bus.subscribe("other", handler)
        await bus.publish(Event("orm.write", "items"))

        assert len(received) == 1

    @pytest.mark.asyncio
    async def test_handler_errors_are_contained(self):
        bus = InMemoryEventBus()
        received = []

        async def broken(event):
            raise RuntimeError("subscriber bug")

        async def working(event):
            received.append(event)

        await bus.subscribe("*", broken)
        await bus.subscribe("*", working)
        await bus.publish(Event("orm.write", "items"))

        assert len(received) == 1

    @pytest.mark.asyncio
    async def test_unsubscribe(self):
        bus = InMemoryEventBus()
        received = []

        async def handler(event):
            received.append(event)

        sub_id = await bus.subscribe("*", handler)
        await bus.unsubscribe(sub_id)
        await bus.publish(Event("orm.write", "items"))

        assert received == []
        assert bus.subscription_count == 0

    @pytest.mark.asyncio
    async def test_closed_bus_drops_events(self):
        bus = InMemoryEventBus()
        received = []

        async def handler(event):
            received.append(event)

        await bus.subscribe("*", handler)
        await bus.close()
        await bus.publish(Event("orm.write", "items"))

        assert received == []


class TestGlobalBus:
    def test_default_is_in_memory(self):
        assert isinstance(get_event_bus(), InMemoryEventBus)

    def test_set_and_reset(self):
        bus = InMemoryEventBus()
        set_event_bus(bus)
        assert get_event_bus() is bus
        set_event_bus(None)
        assert get_event_bus() is not bus

    @pytest.mark.asyncio
    async def test_publish_write(self, event_bus):
        await publish_write("items", "update", ["price"], "updated items.1 columns: price")

        (event,) = event_bus.writes
        assert event.source == "items"
        assert event.payload == {
            "status": "info",
            "message": "updated items.1 columns: price",
            "operation": "update",
            "columns": ["price"],
        }

    @pytest.mark.asyncio
    async def test_failing_subscriber_does_not_fail_save(self, item_model, recording_connector):
        bus = InMemoryEventBus()

        async def broken(event):
            raise RuntimeError("subscriber bug")

        await bus.subscribe("orm.write", broken)
        set_event_bus(bus)

        result = await item_model.create(name="John").save()

        assert result.is_ok()

    @pytest.mark.asyncio
    async def test_failing_bus_does_not_fail_publish_write(self, event_bus):
        event_bus.fail_with(RuntimeError("sink down"))
        await publish_write("items", "insert", ["name"], "inserted items.1")
        assert event_bus.events == []

    @pytest.mark.asyncio
    async def test_failing_bus_does_not_fail_save(self, item_model, recording_connector, event_bus):
        event_bus.fail_with(RuntimeError("sink down"))
        item = item_model.create(name="John", price=42)

        result = await item.save()

        assert result.is_ok()
        assert item.id == 1
        assert not item.is_new and not item.is_dirty
        assert len(recording_connector.statements) == 1
