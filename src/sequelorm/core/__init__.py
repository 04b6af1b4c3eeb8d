"""
sequelorm.core - primitives shared by the mapping layer and its connectors.

Modules
-------
errors      Typed error taxonomy (OrmError and subclasses)
result      Ok / Err result envelope returned by every async operation
logging     structlog configuration and get_logger()
settings    OrmSettings (pydantic-settings, SEQUELORM_ env prefix)
protocols   Connector protocol and QueryResult
dialect     SQL dialects (sqlite, mysql)
events      Diagnostic event bus
"""

from sequelorm.core.errors import (
    ConfigError,
    DatabaseConnectionError,
    DatabaseError,
    ErrorCategory,
    ErrorContext,
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
from sequelorm.core.result import Err, Ok, Result, from_optional

__all__ = [
    "ConfigError",
    "DatabaseConnectionError",
    "DatabaseError",
    "ErrorCategory",
    "ErrorContext",
    "ItemNotFoundError",
    "ItemNotValidError",
    "NotADataTypeError",
    "NotSavedYetError",
    "OrmError",
    "RecordDeletedError",
    "SchemaError",
    "StateError",
    "TableAlreadyExistsError",
    "Err",
    "Ok",
    "Result",
    "from_optional",
]
