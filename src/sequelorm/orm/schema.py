"""
Table definitions ("migrations") and their DDL.

A table is declared once with a block that receives a ``TableBuilder``;
the resulting ``SchemaDescriptor`` is recorded process-wide so models can
mirror the physical schema instead of restating it.

Manifesto:
    The column list of a table is written in exactly one place. Models
    built with ``define_model("Item", get_table_from_migration("items"))``
    pick up every column, type and option from that definition.

Architecture:
    ::

        define_table("items", block)          create_table("items", block)
                │                                       │
                ▼                                       ▼
        TableBuilder ──► SchemaDescriptor ──► _definitions["items"]
                                 │
                                 └──► build_create_table(dialect, schema)
                                            │
                                            ▼
                                 ConnectionManager.run(...)

Examples:
    >>> def items(t):
    ...     t.add_column("name", VARCHAR(required=True))
    ...     t.add_column("price", INT())
    ...     t.add_unique_key("name")
    ...     t.add_timestamps()
    >>> result = await create_table("items", items)
    >>> [c.name for c in result.unwrap().columns]
    ['id', 'name', 'price', 'created_at', 'updated_at']

Guardrails:
    ❌ DON'T: declare an ``id`` column; it is always injected first
    ✅ DO: use ``add_unique_key(("a", "b"))`` for composite constraints

Tags:
    schema, ddl, migrations, table-definition, sequelorm
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass, field
from typing import Any, Union

from sequelorm.core.errors import NotADataTypeError, SchemaError, TableAlreadyExistsError
from sequelorm.core.events import publish_write
from sequelorm.core.logging import get_logger
from sequelorm.core.protocols import Connector, QueryResult
from sequelorm.core.result import Err, Ok, Result
from sequelorm.orm.connection import get_connection_manager
from sequelorm.orm.data_types import DATETIME, INT, ColumnType, check_data_type
from sequelorm.orm.sql import ID_COLUMN, build_create_table, build_drop_table

logger = get_logger(__name__)

CREATED_AT = "created_at"
UPDATED_AT = "updated_at"
TIMESTAMP_COLUMNS = (CREATED_AT, UPDATED_AT)

UniqueKey = Union[str, tuple[str, ...]]


@dataclass(frozen=True)
class Column:
    """One named column bound to its ``ColumnType``."""

    name: str
    column_type: ColumnType

    @property
    def type(self) -> str:
        return self.column_type.type


def _id_column() -> Column:
    return Column(ID_COLUMN, INT())


@dataclass(frozen=True)
class SchemaDescriptor:
    """
    Ordered column list (id first) plus unique-key constraints.

    Attributes:
        table_name: Physical table name
        columns: Columns in declaration order, ``id`` always at index 0
        unique_keys: Column names or tuples of names
    """

    table_name: str
    columns: tuple[Column, ...]
    unique_keys: tuple[UniqueKey, ...] = ()

    @property
    def column_names(self) -> list[str]:
        return [c.name for c in self.columns]

    @property
    def has_timestamps(self) -> bool:
        names = set(self.column_names)
        return all(ts in names for ts in TIMESTAMP_COLUMNS)

    def column(self, name: str) -> Column:
        for c in self.columns:
            if c.name == name:
                return c
        raise KeyError(f"Table '{self.table_name}' has no column '{name}'")

    def field_types(self) -> dict[str, ColumnType]:
        """Field name -> ColumnType for every non-id column."""
        return {c.name: c.column_type for c in self.columns if c.name != ID_COLUMN}

    def __iter__(self) -> Iterator[Column]:
        return iter(self.columns)


@dataclass
class TableBuilder:
    """Collects columns and constraints inside a table-definition block."""

    table_name: str
    columns: list[Column] = field(default_factory=list)
    unique_keys: list[UniqueKey] = field(default_factory=list)

    def add_column(self, name: str, column_type: Any) -> TableBuilder:
        if not check_data_type(column_type):
            raise NotADataTypeError(
                f"Column '{name}' of '{self.table_name}' is not declared with a data type: {column_type!r}",
                column=name,
            ).with_context(table=self.table_name)
        if name == ID_COLUMN:
            raise SchemaError(f"'{ID_COLUMN}' is reserved for the primary key").with_context(
                table=self.table_name
            )
        if not isinstance(column_type, ColumnType):
            # bare DataType: bind its default options
            column_type = column_type()
        self.columns.append(Column(name, column_type))
        return self

    def add_unique_key(self, key: str | Sequence[str]) -> TableBuilder:
        self.unique_keys.append(key if isinstance(key, str) else tuple(key))
        return self

    def add_timestamps(self) -> TableBuilder:
        self.add_column(CREATED_AT, DATETIME())
        self.add_column(UPDATED_AT, DATETIME())
        return self

    def build(self) -> SchemaDescriptor:
        known = {c.name for c in self.columns}
        for key in self.unique_keys:
            names = (key,) if isinstance(key, str) else key
            missing = [n for n in names if n not in known and n != ID_COLUMN]
            if missing:
                raise SchemaError(
                    f"Unique key on '{self.table_name}' names unknown columns: {', '.join(missing)}"
                )
        return SchemaDescriptor(
            table_name=self.table_name,
            columns=(_id_column(), *self.columns),
            unique_keys=tuple(self.unique_keys),
        )


TableBlock = Callable[[TableBuilder], Any]


# =============================================================================
# Table-definition registry
# =============================================================================

_definitions: dict[str, SchemaDescriptor] = {}


def define_table(name: str, block: TableBlock | None = None) -> SchemaDescriptor:
    """Run *block* against a fresh builder and record the result. No SQL is issued."""
    builder = TableBuilder(name)
    if block is not None:
        block(builder)
    schema = builder.build()
    _definitions[name] = schema
    logger.debug("table_defined", table=name, columns=schema.column_names)
    return schema


def get_table_from_migration(table_name: str) -> SchemaDescriptor:
    """Return the definition recorded for *table_name*."""
    if table_name not in _definitions:
        available = ", ".join(sorted(_definitions))
        raise KeyError(f"Table '{table_name}' not defined. Available: {available}")
    return _definitions[table_name]


def list_table_definitions() -> list[str]:
    return sorted(_definitions)


def clear_table_definitions() -> None:
    """Forget every table definition and every model (for testing)."""
    from sequelorm.orm.registry import clear_models

    _definitions.clear()
    clear_models()


# =============================================================================
# DDL
# =============================================================================


async def create_table(name: str, block: TableBlock | None = None) -> Result[SchemaDescriptor]:
    """
    Define the table and issue its ``CREATE TABLE``.

    Returns ``Err(TableAlreadyExistsError)`` when the connector reports a
    duplicate table; other connector errors come back unmodified.
    ``NotADataTypeError`` from the block is raised immediately.
    """
    schema = define_table(name, block)

    async def _create(connector: Connector) -> QueryResult:
        sql = build_create_table(connector.dialect, schema)
        try:
            return await connector.execute(sql)
        except Exception as e:
            if connector.is_table_exists_error(e):
                raise TableAlreadyExistsError(
                    f"Table '{name}' already exists", table=name, cause=e
                ) from e
            raise

    try:
        await get_connection_manager().run(_create)
    except Exception as e:
        logger.warning("table_create_failed", table=name, error=str(e))
        return Err(e)

    logger.info("table_created", table=name, columns=schema.column_names)
    await publish_write(name, "create_table", schema.column_names, f"created table {name}")
    return Ok(schema)


async def drop_table(name: str) -> Result[str]:
    """Issue ``DROP TABLE IF EXISTS`` for *name*; the definition is kept."""

    async def _drop(connector: Connector) -> QueryResult:
        return await connector.execute(build_drop_table(connector.dialect, name))

    try:
        await get_connection_manager().run(_drop)
    except Exception as e:
        return Err(e)

    logger.info("table_dropped", table=name)
    return Ok(name)


__all__ = [
    "CREATED_AT",
    "UPDATED_AT",
    "TIMESTAMP_COLUMNS",
    "Column",
    "SchemaDescriptor",
    "TableBuilder",
    "define_table",
    "get_table_from_migration",
    "list_table_definitions",
    "clear_table_definitions",
    "create_table",
    "drop_table",
]
