"""Model: the per-descriptor factory for records.

A ``Model`` is what ``define_model()`` returns. It creates transient
records, looks persisted ones up by primary key, and exposes the
descriptor's class methods with the model bound as their receiver::

    Item = define_model(
        "Item",
        {"name": VARCHAR(), "price": INT()},
        class_methods={"cheap": lambda model, limit: f"{model.table_name}<{limit}"},
    )
    item = Item.create(name="John", price=42)
    result = await Item.find(1)
    Item.cheap(10)

Tags:
    sequelorm, orm, model, factory, lookup
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MethodType
from typing import Any

from sequelorm.core.errors import ItemNotFoundError
from sequelorm.core.logging import get_logger
from sequelorm.core.protocols import Connector, QueryResult
from sequelorm.core.result import Err, Result, from_optional
from sequelorm.orm.connection import get_connection_manager
from sequelorm.orm.record import Record
from sequelorm.orm.registry import ModelDescriptor
from sequelorm.orm.sql import build_select_by_id

logger = get_logger(__name__)


class Model:
    """Factory and lookup entry point for one model descriptor."""

    def __init__(self, descriptor: ModelDescriptor):
        self._descriptor = descriptor

    @property
    def descriptor(self) -> ModelDescriptor:
        return self._descriptor

    @property
    def name(self) -> str:
        return self._descriptor.name

    @property
    def table_name(self) -> str:
        return self._descriptor.table_name

    @property
    def fields(self) -> tuple[str, ...]:
        return self._descriptor.fields

    @property
    def columns(self):
        return self._descriptor.columns

    def create(self, attrs: Mapping[str, Any] | None = None, /, **kwargs: Any) -> Record:
        """Build a transient record from *attrs* (fields and extras alike)."""
        return Record(self, {**(attrs or {}), **kwargs})

    async def find(self, record_id: Any) -> Result[Record]:
        """
        Primary-key lookup.

        Returns ``Err(ItemNotFoundError)`` when no row matches; connector
        errors come back unmodified inside ``Err``.
        """

        async def _select(connector: Connector) -> QueryResult:
            sql, params = build_select_by_id(connector.dialect, self.table_name, record_id)
            return await connector.execute(sql, params)

        try:
            result = await get_connection_manager().run(_select)
        except Exception as e:
            logger.warning("record_find_failed", table=self.table_name, id=record_id, error=str(e))
            return Err(e)

        row = result.rows[0] if result.rows else None
        missing = ItemNotFoundError(f"No {self.name} with id {record_id}").with_context(
            table=self.table_name, model=self.name, record_id=record_id
        )
        return from_optional(row, missing).map(lambda r: Record.from_row(self, r))

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        method = self._descriptor.class_methods.get(name)
        if method is None:
            raise AttributeError(f"Model '{self._descriptor.name}' has no attribute '{name}'")
        return MethodType(method, self)

    def __repr__(self) -> str:
        return f"Model({self.name!r}, table={self.table_name!r}, fields={list(self.fields)})"


__all__ = ["Model"]
