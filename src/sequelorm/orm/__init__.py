"""
sequelorm.orm - data types, table definitions, models and records.

Modules
-------
data_types  DataType / ColumnType descriptors and the type registry
schema      TableBuilder, SchemaDescriptor, define_table / create_table
sql         Statement builders
connection  ConnectionManager (shared connector + deferred queue)
registry    ModelDescriptor, define_model / get_model
model       Model factory (create, find)
record      Record lifecycle and accessors
"""

from sequelorm.orm.connection import (
    ConnectionManager,
    get_connection_manager,
    remove_connection,
    reset_connection_manager,
    set_connector,
)
from sequelorm.orm.data_types import (
    BOOLEAN,
    DATETIME,
    ENUM,
    FLOAT,
    INT,
    TEXT,
    VARCHAR,
    ColumnType,
    DataType,
    check_data_type,
    get_data_type,
    list_data_types,
    register_data_type,
    reset_data_types,
)
from sequelorm.orm.model import Model
from sequelorm.orm.record import Record
from sequelorm.orm.registry import (
    ModelDescriptor,
    clear_models,
    define_model,
    get_model,
    list_models,
)
from sequelorm.orm.schema import (
    Column,
    SchemaDescriptor,
    TableBuilder,
    clear_table_definitions,
    create_table,
    define_table,
    drop_table,
    get_table_from_migration,
)

__all__ = [
    # connection
    "ConnectionManager",
    "get_connection_manager",
    "remove_connection",
    "reset_connection_manager",
    "set_connector",
    # data types
    "BOOLEAN",
    "DATETIME",
    "ENUM",
    "FLOAT",
    "INT",
    "TEXT",
    "VARCHAR",
    "ColumnType",
    "DataType",
    "check_data_type",
    "get_data_type",
    "list_data_types",
    "register_data_type",
    "reset_data_types",
    # models
    "Model",
    "ModelDescriptor",
    "Record",
    "clear_models",
    "define_model",
    "get_model",
    "list_models",
    # tables
    "Column",
    "SchemaDescriptor",
    "TableBuilder",
    "clear_table_definitions",
    "create_table",
    "define_table",
    "drop_table",
    "get_table_from_migration",
]
