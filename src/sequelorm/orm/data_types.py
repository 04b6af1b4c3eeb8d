"""
Data-type registry: validation, default options and wire marshalling.

A ``DataType`` is an immutable descriptor shared by every column of its
kind. Calling it with keyword options binds those options (merged over
the type's defaults) into a ``ColumnType``, which is what tables and
models declare::

    from sequelorm.orm.data_types import INT, VARCHAR, ENUM

    price = INT()                                   # length=11
    name = VARCHAR(required=True)                   # length=255
    status = ENUM(values=["draft", "published"])

Validation is strict: no truthy coercion, no numeric strings, no NaN.
Values are checked at save time, never at assignment time.

DATETIME values are normalized to UTC. Naive datetimes are treated as
UTC; the wire format is ``YYYY-MM-DD HH:MM:SS`` (whole seconds).

Tags:
    data-types, validation, marshalling, registry, sequelorm
"""

from __future__ import annotations

import math
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any

from sequelorm.core.errors import SchemaError

Validator = Callable[[Any, Mapping[str, Any]], bool]
Converter = Callable[[Any], Any]

WIRE_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def _identity(value: Any) -> Any:
    return value


def _always_invalid(value: Any, options: Mapping[str, Any]) -> bool:
    return False


# =============================================================================
# Descriptors
# =============================================================================


@dataclass(frozen=True, eq=False)
class DataType:
    """
    Immutable type descriptor.

    Attributes:
        type: Tag identifying the kind (``integer``, ``varchar``, ...)
        sql: SQL template; ``{length}`` / ``{values}`` are filled from options
        default_options: Options every column of this type starts from
        validator: ``(value, options) -> bool``
        saver: Python value -> wire value
        loader: wire value -> Python value
    """

    type: str
    sql: str
    default_options: Mapping[str, Any] | None = None
    validator: Validator = field(default=_always_invalid, repr=False)
    saver: Converter = field(default=_identity, repr=False)
    loader: Converter = field(default=_identity, repr=False)

    def validate(self, value: Any, options: Mapping[str, Any] | None = None) -> bool:
        return bool(self.validator(value, options if options is not None else (self.default_options or {})))

    def save(self, value: Any) -> Any:
        return None if value is None else self.saver(value)

    def load(self, value: Any) -> Any:
        return None if value is None else self.loader(value)

    def __call__(self, options: Mapping[str, Any] | None = None, **kwargs: Any) -> ColumnType:
        return ColumnType(self, options, **kwargs)


class ColumnType:
    """
    A ``DataType`` bound to column options.

    Options merge caller values over ``default_options``. Two options are
    understood by every type:

    - ``required``: ``None`` and ``""`` are rejected at save time
    - ``validation``: a ``value -> bool`` predicate that replaces the
      type's own validator
    """

    __slots__ = ("data_type", "options")

    def __init__(self, data_type: DataType, options: Mapping[str, Any] | None = None, **kwargs: Any):
        merged = {**(data_type.default_options or {}), **(options or {}), **kwargs}
        self.data_type = data_type
        self.options: Mapping[str, Any] = MappingProxyType(merged)

    @property
    def type(self) -> str:
        return self.data_type.type

    @property
    def sql(self) -> str:
        return self.data_type.sql

    @property
    def default_options(self) -> Mapping[str, Any] | None:
        return self.data_type.default_options

    @property
    def required(self) -> bool:
        return bool(self.options.get("required"))

    def validation(self, value: Any) -> bool:
        """Validate *value* with the custom validator if configured, else the type's."""
        custom = self.options.get("validation")
        if custom is not None:
            return bool(custom(value))
        return self.data_type.validate(value, self.options)

    def is_valid(self, value: Any) -> bool:
        """Save-time check: required gate first, then the validator.

        An absent value on an optional column skips the type's own
        validator, but a configured ``validation`` predicate still sees it.
        """
        if value is None or value == "":
            if self.required:
                return False
            if value is None and self.options.get("validation") is None:
                return True
        return self.validation(value)

    def save(self, value: Any) -> Any:
        return self.data_type.save(value)

    def load(self, value: Any) -> Any:
        return self.data_type.load(value)

    def render(self) -> str:
        """Fill the SQL template with this column's options."""
        fill = dict(self.options)
        if "{values}" in self.sql:
            values = self.options.get("values")
            if not values:
                raise SchemaError(f"{self.type.upper()} column requires a non-empty 'values' option")
            fill["values"] = ", ".join("'" + str(v).replace("'", "''") + "'" for v in values)
        try:
            return self.sql.format(**fill)
        except KeyError as e:
            raise SchemaError(f"Missing option {e} for {self.type} column template {self.sql!r}") from e

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ColumnType):
            return NotImplemented
        return self.data_type == other.data_type and dict(self.options) == dict(other.options)

    def __hash__(self) -> int:
        return hash(self.data_type.type)

    def __repr__(self) -> str:
        opts = ", ".join(f"{k}={v!r}" for k, v in self.options.items() if k != "validation")
        return f"ColumnType({self.type}{', ' + opts if opts else ''})"


def check_data_type(candidate: Any) -> bool:
    """True if *candidate* carries both a ``sql`` template and a ``type`` tag."""
    return bool(getattr(candidate, "sql", None) and getattr(candidate, "type", None))


# =============================================================================
# Built-in validators and converters
# =============================================================================


def _is_int(value: Any, options: Mapping[str, Any]) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_str(value: Any, options: Mapping[str, Any]) -> bool:
    return isinstance(value, str)


def _is_bool(value: Any, options: Mapping[str, Any]) -> bool:
    return value is True or value is False


def _is_float(value: Any, options: Mapping[str, Any]) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _is_datetime(value: Any, options: Mapping[str, Any]) -> bool:
    return isinstance(value, datetime)


def _is_enum_member(value: Any, options: Mapping[str, Any]) -> bool:
    values = options.get("values") or ()
    return any(type(value) is type(v) and value == v for v in values)


def _to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _save_datetime(value: datetime) -> str:
    return _to_utc(value).strftime(WIRE_DATETIME_FORMAT)


def _load_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return _to_utc(value)
    if isinstance(value, bytes):
        value = value.decode()
    return _to_utc(datetime.fromisoformat(str(value)))


def _load_bool(value: Any) -> Any:
    if isinstance(value, int) and not isinstance(value, bool):
        return bool(value)
    return value


INT = DataType("integer", "INT({length})", MappingProxyType({"length": 11}), _is_int)
VARCHAR = DataType("varchar", "VARCHAR({length})", MappingProxyType({"length": 255}), _is_str)
TEXT = DataType("text", "TEXT", None, _is_str)
BOOLEAN = DataType("boolean", "INT(1)", None, _is_bool, loader=_load_bool)
FLOAT = DataType("float", "FLOAT", None, _is_float)
DATETIME = DataType("datetime", "DATETIME", None, _is_datetime, _save_datetime, _load_datetime)
ENUM = DataType("enum", "ENUM({values})", None, _is_enum_member)

BUILTIN_TYPES: tuple[DataType, ...] = (INT, VARCHAR, TEXT, BOOLEAN, FLOAT, DATETIME, ENUM)


# =============================================================================
# Registry
# =============================================================================


class DataTypeRegistry:
    """Process-wide mapping from type tag to ``DataType``."""

    def __init__(self) -> None:
        self._types: dict[str, DataType] = {}
        self.reset()

    def register(self, data_type: DataType) -> DataType:
        if not check_data_type(data_type):
            raise SchemaError(f"{data_type!r} is missing a sql template or type tag")
        self._types[data_type.type] = data_type
        return data_type

    def get(self, type_tag: str) -> DataType:
        if type_tag not in self._types:
            available = ", ".join(sorted(self._types))
            raise KeyError(f"Data type '{type_tag}' not found. Available: {available}")
        return self._types[type_tag]

    def names(self) -> list[str]:
        return sorted(self._types)

    def reset(self) -> None:
        """Forget custom types and restore the built-ins."""
        self._types = {t.type: t for t in BUILTIN_TYPES}


data_type_registry = DataTypeRegistry()


def register_data_type(data_type: DataType) -> DataType:
    return data_type_registry.register(data_type)


def get_data_type(type_tag: str) -> DataType:
    return data_type_registry.get(type_tag)


def list_data_types() -> list[str]:
    return data_type_registry.names()


def reset_data_types() -> None:
    data_type_registry.reset()


__all__ = [
    "DataType",
    "ColumnType",
    "DataTypeRegistry",
    "check_data_type",
    "data_type_registry",
    "register_data_type",
    "get_data_type",
    "list_data_types",
    "reset_data_types",
    "INT",
    "VARCHAR",
    "TEXT",
    "BOOLEAN",
    "FLOAT",
    "DATETIME",
    "ENUM",
    "BUILTIN_TYPES",
]
