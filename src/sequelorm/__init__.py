"""
sequelorm - record persistence for relational databases.

Declare a table, derive a model from it, and let records track their own
changes::

    import sequelorm as orm

    await orm.connect("sqlite:///shop.db")
    await orm.create_table("items", lambda t: (
        t.add_column("name", orm.VARCHAR(required=True)),
        t.add_column("price", orm.INT()),
        t.add_timestamps(),
    ))
    Item = orm.define_model("Item", orm.get_table_from_migration("items"))

    item = Item.create(name="John", price=42)
    await item.save()          # INSERT
    item.price = 1_000_000
    await item.save()          # UPDATE items SET price = ?, updated_at = ? WHERE id = ?

Every asynchronous call returns ``Ok(value)`` or ``Err(error)``.
"""

from __future__ import annotations

from sequelorm.adapters import create_connector
from sequelorm.core.errors import (
    ConfigError,
    DatabaseConnectionError,
    DatabaseError,
    ItemNotFoundError,
    ItemNotValidError,
    NotADataTypeError,
    NotSavedYetError,
    OrmError,
    RecordDeletedError,
    SchemaError,
    StateError,
    TableAlreadyExistsError,
)
from sequelorm.core.logging import configure_from_settings, configure_logging, get_logger
from sequelorm.core.protocols import Connector
from sequelorm.core.result import Err, Ok, Result
from sequelorm.core.settings import OrmSettings
from sequelorm.orm import (
    BOOLEAN,
    DATETIME,
    ENUM,
    FLOAT,
    INT,
    TEXT,
    VARCHAR,
    Model,
    Record,
    clear_table_definitions,
    create_table,
    define_model,
    define_table,
    drop_table,
    get_connection_manager,
    get_model,
    get_table_from_migration,
    list_models,
    register_data_type,
    remove_connection,
)

__version__ = "0.1.0"

logger = get_logger(__name__)


async def connect(url: str | None = None, settings: OrmSettings | None = None) -> Connector:
    """
    Open a connector for *url* (default: ``settings.database_url``) and install it.

    Statements deferred while disconnected run before this returns.
    """
    settings = settings or OrmSettings()
    connector = create_connector(url if url is not None else settings.database_url)
    await get_connection_manager().connect(connector)
    logger.info("connected", dialect=connector.dialect.name)
    return connector


async def disconnect() -> None:
    """Drop and close the installed connector."""
    await get_connection_manager().close()


__all__ = [
    "__version__",
    "connect",
    "disconnect",
    "configure_logging",
    "configure_from_settings",
    "OrmSettings",
    # results
    "Ok",
    "Err",
    "Result",
    # data types
    "BOOLEAN",
    "DATETIME",
    "ENUM",
    "FLOAT",
    "INT",
    "TEXT",
    "VARCHAR",
    "register_data_type",
    # tables and models
    "Model",
    "Record",
    "clear_table_definitions",
    "create_table",
    "define_model",
    "define_table",
    "drop_table",
    "get_model",
    "get_table_from_migration",
    "list_models",
    "remove_connection",
    # errors
    "ConfigError",
    "DatabaseConnectionError",
    "DatabaseError",
    "ItemNotFoundError",
    "ItemNotValidError",
    "NotADataTypeError",
    "NotSavedYetError",
    "OrmError",
    "RecordDeletedError",
    "SchemaError",
    "StateError",
    "TableAlreadyExistsError",
]
