"""Tests for sequelorm.adapters.sqlite."""

import sqlite3

import pytest

from sequelorm.adapters import SQLiteConnector
from sequelorm.core.errors import DatabaseConnectionError
from sequelorm.core.protocols import Connector


class TestSQLiteConnector:
    def test_satisfies_protocol(self):
        assert isinstance(SQLiteConnector(), Connector)

    def test_lazy_connect(self):
        connector = SQLiteConnector()
        assert connector.is_connected is False

    @pytest.mark.asyncio
    async def test_execute_round_trip(self):
        async with SQLiteConnector() as connector:
            await connector.execute('CREATE TABLE "t" ("id" INTEGER PRIMARY KEY AUTOINCREMENT, "v" TEXT)')
            first = await connector.execute('INSERT INTO "t" ("v") VALUES (?)', ("a",))
            second = await connector.execute('INSERT INTO "t" ("v") VALUES (?)', ("b",))
            rows = (await connector.execute('SELECT * FROM "t" ORDER BY "id"')).rows

        assert (first.last_insert_id, second.last_insert_id) == (1, 2)
        assert rows == [{"id": 1, "v": "a"}, {"id": 2, "v": "b"}]

    @pytest.mark.asyncio
    async def test_update_has_no_insert_id(self):
        async with SQLiteConnector() as connector:
            await connector.execute('CREATE TABLE "t" ("v" TEXT)')
            await connector.execute('INSERT INTO "t" ("v") VALUES (?)', ("a",))
            result = await connector.execute('UPDATE "t" SET "v" = ?', ("b",))

        assert result.last_insert_id is None
        assert result.rowcount == 1

    @pytest.mark.asyncio
    async def test_table_exists_signal(self):
        async with SQLiteConnector() as connector:
            await connector.execute('CREATE TABLE "t" ("v" TEXT)')
            with pytest.raises(sqlite3.OperationalError) as exc_info:
                await connector.execute('CREATE TABLE "t" ("v" TEXT)')

        assert connector.is_table_exists_error(exc_info.value)
        assert not connector.is_table_exists_error(sqlite3.OperationalError("no such table: x"))

    @pytest.mark.asyncio
    async def test_file_database(self, tmp_path):
        path = str(tmp_path / "shop.db")
        async with SQLiteConnector(path) as connector:
            await connector.execute('CREATE TABLE "t" ("v" TEXT)')
            await connector.execute('INSERT INTO "t" ("v") VALUES (?)', ("kept",))

        async with SQLiteConnector(path) as connector:
            rows = (await connector.execute('SELECT "v" FROM "t"')).rows

        assert rows == [{"v": "kept"}]

    @pytest.mark.asyncio
    async def test_close_disconnects(self):
        connector = SQLiteConnector()
        await connector.execute("SELECT 1")
        assert connector.is_connected
        await connector.close()
        assert connector.is_connected is False

    def test_run_without_connection_raises(self):
        connector = SQLiteConnector()
        with pytest.raises(DatabaseConnectionError, match="not connected"):
            connector._run("SELECT 1", ())
