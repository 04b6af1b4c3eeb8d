"""Model registry for defining and looking up models by name.

Manifesto:
    A model is defined once per process and looked up by name anywhere
    else, without importing the module that defined it. Re-defining a
    name replaces the previous model; ``clear_models()`` gives tests a
    clean slate.

Naming:
    ``define_model("line_item", ...)`` registers ``LineItem`` backed by the
    ``lineitems`` table. Pluralization only appends ``s`` to names that do
    not already end in ``s``, so an already-plural name maps to itself.

Tags:
    sequelorm, orm, registry, model-definition, lookup
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from sequelorm.core.errors import NotADataTypeError, SchemaError
from sequelorm.core.logging import get_logger
from sequelorm.orm.data_types import DATETIME, INT, ColumnType, check_data_type
from sequelorm.orm.schema import TIMESTAMP_COLUMNS, SchemaDescriptor, UniqueKey
from sequelorm.orm.sql import ID_COLUMN

if TYPE_CHECKING:
    from sequelorm.orm.model import Model

logger = get_logger(__name__)

# Attribute names owned by Record itself; a field with one of these
# names would be unreachable through attribute access.
RESERVED_NAMES = frozenset(
    {
        "model",
        "data",
        "snapshot",
        "is_new",
        "is_dirty",
        "is_deleted",
        "save",
        "destroy",
        "reload",
        "update_attributes",
        "read_attribute",
        "write_attribute",
        "to_dict",
    }
)

_WORD_SPLIT = re.compile(r"[\s_\-]+")


def normalize_model_name(name: str) -> str:
    """``line_item`` / ``line-item`` / ``lineItem`` -> ``LineItem``."""
    parts = [p for p in _WORD_SPLIT.split(name.strip()) if p]
    if not parts:
        raise SchemaError(f"Invalid model name: {name!r}")
    return "".join(p[:1].upper() + p[1:] for p in parts)


def table_name_for(model_name: str) -> str:
    table = model_name.lower()
    return table if table.endswith("s") else f"{table}s"


@dataclass(frozen=True)
class ModelDescriptor:
    """
    Everything a ``Model`` and its ``Record`` instances need.

    ``columns`` is ordered: ``id`` first, then declared columns in
    declaration order (timestamps included when present).
    """

    name: str
    table_name: str
    columns: Mapping[str, ColumnType]
    unique_keys: tuple[UniqueKey, ...] = ()
    getters: Mapping[str, Callable[..., Any]] = field(default_factory=dict)
    setters: Mapping[str, Callable[..., Any]] = field(default_factory=dict)
    instance_methods: Mapping[str, Callable[..., Any]] = field(default_factory=dict)
    class_methods: Mapping[str, Callable[..., Any]] = field(default_factory=dict)

    @property
    def fields(self) -> tuple[str, ...]:
        return tuple(self.columns)

    @property
    def declared_fields(self) -> tuple[str, ...]:
        """Every persisted field except ``id``, in descriptor order."""
        return tuple(name for name in self.columns if name != ID_COLUMN)

    @property
    def has_timestamps(self) -> bool:
        return all(ts in self.columns for ts in TIMESTAMP_COLUMNS)

    def is_field(self, name: str) -> bool:
        return name in self.columns

    def column(self, name: str) -> ColumnType:
        return self.columns[name]


def _coerce_column(model: str, name: str, column_type: Any) -> ColumnType:
    if not check_data_type(column_type):
        raise NotADataTypeError(
            f"Field '{name}' of model '{model}' is not declared with a data type: {column_type!r}",
            column=name,
        ).with_context(model=model)
    if isinstance(column_type, ColumnType):
        return column_type
    return column_type()


def build_descriptor(
    name: str,
    fields_or_schema: Mapping[str, Any] | SchemaDescriptor,
    *,
    timestamps: bool = False,
    table_name: str | None = None,
    getters: Mapping[str, Callable[..., Any]] | None = None,
    setters: Mapping[str, Callable[..., Any]] | None = None,
    instance_methods: Mapping[str, Callable[..., Any]] | None = None,
    class_methods: Mapping[str, Callable[..., Any]] | None = None,
) -> ModelDescriptor:
    model_name = normalize_model_name(name)

    if isinstance(fields_or_schema, SchemaDescriptor):
        declared = fields_or_schema.field_types()
        unique_keys = fields_or_schema.unique_keys
        table = table_name or fields_or_schema.table_name
    else:
        declared = dict(fields_or_schema)
        unique_keys = ()
        table = table_name or table_name_for(model_name)

    if ID_COLUMN in declared:
        raise SchemaError(f"'{ID_COLUMN}' is reserved for the primary key").with_context(model=model_name)
    clashes = sorted(RESERVED_NAMES.intersection(declared))
    if clashes:
        raise SchemaError(
            f"Field names clash with record attributes: {', '.join(clashes)}"
        ).with_context(model=model_name, fields=clashes)

    columns: dict[str, ColumnType] = {ID_COLUMN: INT()}
    for field_name, column_type in declared.items():
        columns[field_name] = _coerce_column(model_name, field_name, column_type)
    if timestamps:
        for ts in TIMESTAMP_COLUMNS:
            columns.setdefault(ts, DATETIME())

    return ModelDescriptor(
        name=model_name,
        table_name=table,
        columns=MappingProxyType(columns),
        unique_keys=tuple(unique_keys),
        getters=MappingProxyType(dict(getters or {})),
        setters=MappingProxyType(dict(setters or {})),
        instance_methods=MappingProxyType(dict(instance_methods or {})),
        class_methods=MappingProxyType(dict(class_methods or {})),
    )


class ModelRegistry:
    """Process-wide mapping from normalized model name to ``Model``."""

    def __init__(self) -> None:
        self._models: dict[str, Model] = {}

    def define(self, descriptor: ModelDescriptor) -> Model:
        from sequelorm.orm.model import Model

        replaced = descriptor.name in self._models
        model = Model(descriptor)
        self._models[descriptor.name] = model
        logger.debug(
            "model_defined",
            model=descriptor.name,
            table=descriptor.table_name,
            fields=list(descriptor.fields),
            replaced=replaced,
        )
        return model

    def get(self, name: str) -> Model:
        key = normalize_model_name(name)
        if key not in self._models:
            available = ", ".join(sorted(self._models))
            raise KeyError(f"Model '{key}' not defined. Available: {available}")
        return self._models[key]

    def names(self) -> list[str]:
        return sorted(self._models)

    def clear(self) -> None:
        self._models.clear()


model_registry = ModelRegistry()


def define_model(
    name: str,
    fields_or_schema: Mapping[str, Any] | SchemaDescriptor,
    *,
    timestamps: bool = False,
    table_name: str | None = None,
    getters: Mapping[str, Callable[..., Any]] | None = None,
    setters: Mapping[str, Callable[..., Any]] | None = None,
    instance_methods: Mapping[str, Callable[..., Any]] | None = None,
    class_methods: Mapping[str, Callable[..., Any]] | None = None,
) -> Model:
    """
    Define (or re-define) a model and return it.

    Args:
        name: Model name; normalized to upper-camel form
        fields_or_schema: ``{field: data type}`` or a ``SchemaDescriptor``
            from ``get_table_from_migration()``
        timestamps: Add ``created_at`` / ``updated_at`` DATETIME fields
        table_name: Override the derived table name
        getters: ``{field: fn(record)}`` read overrides
        setters: ``{field: fn(record, value)}`` write overrides
        instance_methods: ``{name: fn(record, ...)}`` bound to each record
        class_methods: ``{name: fn(model, ...)}`` bound to the model

    Raises:
        NotADataTypeError: A field is not declared with a data type
        SchemaError: A field is named ``id`` or clashes with a record attribute
    """
    descriptor = build_descriptor(
        name,
        fields_or_schema,
        timestamps=timestamps,
        table_name=table_name,
        getters=getters,
        setters=setters,
        instance_methods=instance_methods,
        class_methods=class_methods,
    )
    return model_registry.define(descriptor)


def get_model(name: str) -> Model:
    return model_registry.get(name)


def list_models() -> list[str]:
    return model_registry.names()


def clear_models() -> None:
    """Forget every model (for testing)."""
    model_registry.clear()


__all__ = [
    "RESERVED_NAMES",
    "ModelDescriptor",
    "ModelRegistry",
    "model_registry",
    "build_descriptor",
    "normalize_model_name",
    "table_name_for",
    "define_model",
    "get_model",
    "list_models",
    "clear_models",
]
