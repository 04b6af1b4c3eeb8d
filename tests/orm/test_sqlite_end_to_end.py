"""End-to-end scenarios against an in-memory SQLite database."""

from datetime import datetime, timedelta, timezone

import pytest

from sequelorm.core.errors import ItemNotFoundError, ItemNotValidError, NotSavedYetError
from sequelorm.orm.data_types import BOOLEAN, DATETIME, ENUM, FLOAT, INT, TEXT, VARCHAR
from sequelorm.orm.registry import define_model
from sequelorm.orm.schema import create_table, get_table_from_migration


def items_block(t):
    t.add_column("name", VARCHAR())
    t.add_column("price", INT())
    t.add_timestamps()


class TestScenarios:
    @pytest.mark.asyncio
    async def test_insert_then_find(self, sqlite_connector):
        (await create_table("items", items_block)).unwrap()
        Item = define_model("Item", get_table_from_migration("items"))

        before = datetime.now(timezone.utc)
        item = Item.create({"name": "John", "price": 42})
        (await item.save()).unwrap()

        assert item.id == 1
        assert item.is_new is False and item.is_dirty is False
        assert item.created_at - before < timedelta(seconds=1)

        found = (await Item.find(1)).unwrap()
        assert found.name == "John"
        assert found.price == 42
        assert found.created_at.tzinfo is not None
        assert abs(found.created_at - item.created_at) < timedelta(seconds=1)

    @pytest.mark.asyncio
    async def test_update_persists_only_the_change(self, sqlite_connector, event_bus):
        (await create_table("items", items_block)).unwrap()
        Item = define_model("Item", get_table_from_migration("items"))
        item = Item.create(name="John", price=42)
        await item.save()

        item.price = 1_000_000
        (await item.save()).unwrap()

        found = (await Item.find(item.id)).unwrap()
        assert found.price == 1_000_000
        assert found.name == "John"
        assert event_bus.writes[-1].payload["columns"] == ["price", "updated_at"]

    @pytest.mark.asyncio
    async def test_find_missing(self, sqlite_connector):
        (await create_table("items", items_block)).unwrap()
        Item = define_model("Item", get_table_from_migration("items"))

        result = await Item.find(999)

        assert isinstance(result.error, ItemNotFoundError)

    @pytest.mark.asyncio
    async def test_required_field(self, sqlite_connector):
        (await create_table("people", lambda t: t.add_column("name", VARCHAR(required=True)))).unwrap()
        Person = define_model("Person", get_table_from_migration("people"))

        result = await Person.create().save()

        assert isinstance(result.error, ItemNotValidError)

    @pytest.mark.asyncio
    async def test_destroy_new_thing(self, sqlite_connector):
        Thing = define_model("Thing", {"label": VARCHAR()})
        result = await Thing.create().destroy()
        assert isinstance(result.error, NotSavedYetError)

    @pytest.mark.asyncio
    async def test_destroy_removes_row(self, sqlite_connector):
        (await create_table("items", items_block)).unwrap()
        Item = define_model("Item", get_table_from_migration("items"))
        item = Item.create(name="John", price=42)
        await item.save()

        (await item.destroy()).unwrap()

        assert isinstance((await Item.find(1)).error, ItemNotFoundError)


class TestTypesRoundTrip:
    @pytest.mark.asyncio
    async def test_every_builtin_type(self, sqlite_connector):
        def block(t):
            t.add_column("count", INT())
            t.add_column("title", VARCHAR(length=20))
            t.add_column("body", TEXT())
            t.add_column("active", BOOLEAN())
            t.add_column("ratio", FLOAT())
            t.add_column("seen", DATETIME())
            t.add_column("status", ENUM(values=["draft", "live"]))

        (await create_table("samples", block)).unwrap()
        Sample = define_model("Sample", get_table_from_migration("samples"))
        seen = datetime(2024, 3, 1, 12, 30, 15, tzinfo=timezone.utc)
        sample = Sample.create(
            count=3, title="t", body="long", active=True, ratio=0.5, seen=seen, status="live"
        )
        (await sample.save()).unwrap()

        found = (await Sample.find(sample.id)).unwrap()

        assert found.count == 3
        assert found.title == "t"
        assert found.body == "long"
        assert found.active is True
        assert found.ratio == 0.5
        assert found.seen == seen
        assert found.status == "live"

    @pytest.mark.asyncio
    async def test_enum_check_constraint(self, sqlite_connector):
        (await create_table("posts", lambda t: t.add_column("status", ENUM(values=["draft"])))).unwrap()
        Post = define_model("Post", get_table_from_migration("posts"))

        result = await Post.create(status="live").save()

        assert isinstance(result.error, ItemNotValidError)

    @pytest.mark.asyncio
    async def test_unique_key_violation_passes_through(self, sqlite_connector):
        def block(t):
            t.add_column("sku", VARCHAR())
            t.add_unique_key("sku")

        (await create_table("products", block)).unwrap()
        Product = define_model("Product", get_table_from_migration("products"))
        await Product.create(sku="A1").save()

        result = await Product.create(sku="A1").save()

        assert result.is_err()
        assert "UNIQUE" in str(result.error)
