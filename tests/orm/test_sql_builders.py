"""Tests for sequelorm.orm.sql: statement shapes per dialect."""

from sequelorm.core.dialect import MySQLDialect, SQLiteDialect
from sequelorm.orm.data_types import ENUM, INT, VARCHAR
from sequelorm.orm.schema import define_table
from sequelorm.orm.sql import (
    build_create_table,
    build_delete,
    build_drop_table,
    build_insert,
    build_select_by_id,
    build_update,
)

sqlite = SQLiteDialect()
mysql = MySQLDialect()


def _items(t):
    t.add_column("name", VARCHAR())
    t.add_column("price", INT())
    t.add_unique_key("name")
    t.add_unique_key(("name", "price"))


class TestCreateTable:
    def test_mysql_shape(self):
        schema = define_table("items", _items)
        assert build_create_table(mysql, schema) == (
            "CREATE TABLE `items` (`id` INT(11) AUTO_INCREMENT PRIMARY KEY, "
            "`name` VARCHAR(255), `price` INT(11), "
            "UNIQUE (`name`), UNIQUE (`name`, `price`));"
        )

    def test_sqlite_shape(self):
        schema = define_table("items", _items)
        sql = build_create_table(sqlite, schema)
        assert sql.startswith('CREATE TABLE "items" ("id" INTEGER PRIMARY KEY AUTOINCREMENT, ')
        assert sql.endswith('UNIQUE ("name"), UNIQUE ("name", "price"));')

    def test_sqlite_enum_uses_check_constraint(self):
        schema = define_table("posts", lambda t: t.add_column("status", ENUM(values=["draft", "live"])))
        assert "\"status\" TEXT CHECK (\"status\" IN ('draft', 'live'))" in build_create_table(sqlite, schema)

    def test_mysql_enum(self):
        schema = define_table("posts", lambda t: t.add_column("status", ENUM(values=["draft", "live"])))
        assert "`status` ENUM('draft', 'live')" in build_create_table(mysql, schema)


class TestWrites:
    def test_insert(self):
        sql, params = build_insert(sqlite, "items", {"name": "John", "price": 42})
        assert sql == 'INSERT INTO "items" ("name", "price") VALUES (?, ?)'
        assert params == ("John", 42)

    def test_update_targets_primary_key(self):
        sql, params = build_update(mysql, "items", {"price": 7}, 3)
        assert sql == "UPDATE `items` SET `price` = %s WHERE `id` = %s"
        assert params == (7, 3)

    def test_delete(self):
        sql, params = build_delete(sqlite, "items", 9)
        assert sql == 'DELETE FROM "items" WHERE "id" = ?'
        assert params == (9,)

    def test_select_by_id(self):
        sql, params = build_select_by_id(sqlite, "items", 9)
        assert sql == 'SELECT * FROM "items" WHERE "id" = ? LIMIT 1'
        assert params == (9,)

    def test_drop(self):
        assert build_drop_table(mysql, "items") == "DROP TABLE IF EXISTS `items`"
