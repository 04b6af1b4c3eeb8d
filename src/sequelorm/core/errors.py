"""
Structured error types for sequelorm.

Every failure the mapping layer can report is an ``OrmError`` subclass.
Errors carry a category for routing, a structured context (table, model,
record id, offending fields) and an optional chained cause, so a caller
receiving an ``Err(...)`` from ``save()`` knows exactly what went wrong
without parsing messages.

Manifesto:
    - **Typed taxonomy:** One class per failure the record lifecycle defines
    - **Rich context:** Errors know which table, record and fields they concern
    - **Error chaining:** Driver exceptions are preserved as ``cause``
    - **Result-friendly:** Async operations return these inside ``Err``

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                         OrmError                             │
        │              (category, context, cause)                      │
        ├─────────────────────────────────────────────────────────────┤
        │  SchemaError          DatabaseError         StateError       │
        │  (SCHEMA)             (DATABASE)            (STATE)          │
        │      │                    │                     │            │
        │  NotADataTypeError    TableAlreadyExists    NotSavedYetError │
        │                       DatabaseConnection    RecordDeleted    │
        │                                                              │
        │  ItemNotFoundError    ItemNotValidError     ConfigError      │
        │  (NOT_FOUND)          (VALIDATION)          (CONFIG)         │
        └─────────────────────────────────────────────────────────────┘

Examples:
    >>> error = ItemNotValidError("Item has invalid fields", fields=["price"])
    >>> error.fields
    ['price']
    >>> error.category
    <ErrorCategory.VALIDATION: 'VALIDATION'>

    >>> err = ItemNotFoundError("No item with id 999").with_context(table="items")
    >>> err.context.table
    'items'

Tags:
    error-handling, exception-hierarchy, error-context, sequelorm
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Coarse failure kind, used to route errors without isinstance chains."""

    SCHEMA = "SCHEMA"             # Malformed type or table definition
    DATABASE = "DATABASE"         # Driver, DDL, connection failures
    NOT_FOUND = "NOT_FOUND"       # Lookup matched nothing
    VALIDATION = "VALIDATION"     # Field values rejected at save time
    STATE = "STATE"               # Operation invalid for the record's state
    CONFIG = "CONFIG"             # Missing config, unknown adapter, no driver
    INTERNAL = "INTERNAL"         # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Only non-None fields end up in ``to_dict()`` so log lines stay small.

    Attributes:
        table: Table the failing statement targeted
        model: Model name the record belongs to
        record_id: Primary key of the record, if it has one
        fields: Field names involved in the failure
        metadata: Any additional key-value pairs
    """

    table: str | None = None
    model: str | None = None
    record_id: int | None = None
    fields: list[str] | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Non-empty fields only, metadata merged in."""
        result: dict[str, Any] = {}
        for key in ["table", "model", "record_id", "fields"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class OrmError(Exception):
    """
    Base exception for all sequelorm errors.

    Subclasses set ``default_category``; callers may override it per
    instance. ``with_context()`` adds metadata fluently and returns the
    same error so it can be used inline in ``return Err(...)``.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> OrmError:
        """
        Attach table / model / record details and return ``self``.

        Usage:
            return Err(ItemNotFoundError("missing").with_context(table="items", record_id=9))
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Flat, JSON-friendly view used by ``Err.to_dict()`` and log lines."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# SCHEMA ERRORS (raised synchronously at definition time)
# =============================================================================


class SchemaError(OrmError):
    """A table or model definition is malformed."""

    default_category = ErrorCategory.SCHEMA


class NotADataTypeError(SchemaError):
    """A column was declared with something that is not a data type."""

    def __init__(self, message: str, *, column: str | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.column = column
        if column is not None:
            self.context.fields = [column]


# =============================================================================
# DATABASE ERRORS
# =============================================================================


class DatabaseError(OrmError):
    """Database-level failure."""

    default_category = ErrorCategory.DATABASE


class TableAlreadyExistsError(DatabaseError):
    """CREATE TABLE hit an existing table; translated from the driver's signal."""

    def __init__(self, message: str, *, table: str | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.table = table
        if table is not None:
            self.context.table = table


class DatabaseConnectionError(DatabaseError):
    """The driver could not open a connection."""


# =============================================================================
# RECORD ERRORS
# =============================================================================


class ItemNotFoundError(OrmError):
    """A primary-key lookup matched zero rows."""

    default_category = ErrorCategory.NOT_FOUND


class ItemNotValidError(OrmError):
    """
    One or more fields failed validation at save time.

    No statement was issued; the record's flags and data are untouched.
    ``fields`` lists the offending field names in descriptor order.
    """

    default_category = ErrorCategory.VALIDATION

    def __init__(self, message: str, *, fields: Iterable[str] = (), **kwargs: Any):
        super().__init__(message, **kwargs)
        self.fields = list(fields)
        self.context.fields = self.fields


class StateError(OrmError):
    """Operation is not valid for the record's lifecycle state."""

    default_category = ErrorCategory.STATE


class NotSavedYetError(StateError):
    """The record has never been persisted (destroy/reload on a transient record)."""


class RecordDeletedError(StateError):
    """The record was destroyed; it accepts no further mutation or writes."""


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(OrmError):
    """Missing or invalid configuration (unknown URL scheme, absent driver)."""

    default_category = ErrorCategory.CONFIG


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "OrmError",
    "SchemaError",
    "NotADataTypeError",
    "DatabaseError",
    "TableAlreadyExistsError",
    "DatabaseConnectionError",
    "ItemNotFoundError",
    "ItemNotValidError",
    "StateError",
    "NotSavedYetError",
    "RecordDeletedError",
    "ConfigError",
]
