"""Statement builders.

Pure functions from (dialect, table, columns) to ``(sql, params)``.
Nothing here touches a connector; ``record.py`` and ``schema.py`` hand
the output to the connection manager.

Shapes::

    CREATE TABLE t (<id>, <col>..., UNIQUE (a), UNIQUE (b, c));
    INSERT INTO t (a, b) VALUES (?, ?)
    UPDATE t SET a = ?, b = ? WHERE id = ?
    DELETE FROM t WHERE id = ?
    SELECT * FROM t WHERE id = ? LIMIT 1
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from sequelorm.core.dialect import Dialect

if TYPE_CHECKING:
    from sequelorm.orm.schema import SchemaDescriptor

ID_COLUMN = "id"


def _columns(dialect: Dialect, names: Sequence[str]) -> str:
    return ", ".join(dialect.quote(n) for n in names)


def build_create_table(dialect: Dialect, schema: SchemaDescriptor) -> str:
    parts = [dialect.id_column(ID_COLUMN)]
    parts.extend(
        dialect.column_definition(column.name, column.column_type)
        for column in schema.columns
        if column.name != ID_COLUMN
    )
    for key in schema.unique_keys:
        names = [key] if isinstance(key, str) else list(key)
        parts.append(f"UNIQUE ({_columns(dialect, names)})")
    return f"CREATE TABLE {dialect.quote(schema.table_name)} ({', '.join(parts)});"


def build_drop_table(dialect: Dialect, table: str) -> str:
    return f"DROP TABLE IF EXISTS {dialect.quote(table)}"


def build_insert(dialect: Dialect, table: str, values: Mapping[str, Any]) -> tuple[str, tuple]:
    names = list(values)
    sql = (
        f"INSERT INTO {dialect.quote(table)} ({_columns(dialect, names)}) "
        f"VALUES ({dialect.placeholders(len(names))})"
    )
    return sql, tuple(values[n] for n in names)


def build_update(
    dialect: Dialect, table: str, values: Mapping[str, Any], record_id: Any
) -> tuple[str, tuple]:
    names = list(values)
    assignments = ", ".join(
        f"{dialect.quote(n)} = {dialect.placeholder(i)}" for i, n in enumerate(names)
    )
    sql = (
        f"UPDATE {dialect.quote(table)} SET {assignments} "
        f"WHERE {dialect.quote(ID_COLUMN)} = {dialect.placeholder(len(names))}"
    )
    return sql, tuple(values[n] for n in names) + (record_id,)


def build_delete(dialect: Dialect, table: str, record_id: Any) -> tuple[str, tuple]:
    sql = f"DELETE FROM {dialect.quote(table)} WHERE {dialect.quote(ID_COLUMN)} = {dialect.placeholder(0)}"
    return sql, (record_id,)


def build_select_by_id(dialect: Dialect, table: str, record_id: Any) -> tuple[str, tuple]:
    sql = (
        f"SELECT * FROM {dialect.quote(table)} "
        f"WHERE {dialect.quote(ID_COLUMN)} = {dialect.placeholder(0)} LIMIT 1"
    )
    return sql, (record_id,)


__all__ = [
    "ID_COLUMN",
    "build_create_table",
    "build_drop_table",
    "build_insert",
    "build_update",
    "build_delete",
    "build_select_by_id",
]
