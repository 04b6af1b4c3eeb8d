"""
Record: one persistable row with its lifecycle and accessors.

Manifesto:
    A record writes at most one statement per ``save()``, and only the
    columns that actually changed. Validation gates every write, and a
    failed write leaves the record exactly as it was.

Lifecycle:
    ::

        create()                  save()                   field = value
        ────────► Transient ───────────────► Clean ◄──────────────┐
                  is_new=True      INSERT     │   save()            │
                  is_dirty=True               │   UPDATE diff       │
                      │                       ▼                     │
                      │ destroy()            Dirty ─────────────────┘
                      ▼                       │
               NotSavedYetError               │ destroy()  DELETE
                                              ▼
                                           Deleted  (terminal)

Attribute resolution:
    For ``record.<name>`` reads and writes:

    1. a getter / setter registered for ``name`` on the model
    2. a declared field: read ``data[name]``; writes store and mark dirty
    3. an instance method registered on the model (reads only)
    4. anything else: an unmodeled extra kept in ``data``, never persisted

    Custom accessors call ``read_attribute`` / ``write_attribute`` to reach
    the built-in behavior of step 2.

Concurrency:
    ``save``, ``destroy`` and ``reload`` hold a per-record ``asyncio.Lock``,
    so overlapping calls on one record run one after another. Two
    concurrent ``save()`` calls on a transient record issue one INSERT;
    the second finds the record clean.

Tags:
    sequelorm, orm, record, lifecycle, dirty-tracking, diff-update
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from types import MappingProxyType, MethodType
from typing import TYPE_CHECKING, Any

from sequelorm.core.errors import (
    ItemNotFoundError,
    ItemNotValidError,
    NotSavedYetError,
    RecordDeletedError,
)
from sequelorm.core.events import publish_write
from sequelorm.core.logging import get_logger
from sequelorm.core.protocols import Connector, QueryResult
from sequelorm.core.result import Err, Ok, Result, from_optional
from sequelorm.orm.connection import get_connection_manager
from sequelorm.orm.schema import CREATED_AT, UPDATED_AT
from sequelorm.orm.sql import ID_COLUMN, build_delete, build_insert, build_select_by_id, build_update

if TYPE_CHECKING:
    from sequelorm.orm.model import Model
    from sequelorm.orm.registry import ModelDescriptor

logger = get_logger(__name__)

_READ_ONLY = frozenset({ID_COLUMN, "model", "data", "snapshot", "is_new", "is_dirty", "is_deleted"})


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Record:
    """One instance of a model. Obtain with ``Model.create()`` or ``Model.find()``."""

    def __init__(self, model: Model, attrs: Mapping[str, Any] | None = None):
        attrs = dict(attrs or {})
        if ID_COLUMN in attrs:
            raise AttributeError(f"'{ID_COLUMN}' is assigned by the database")
        object.__setattr__(self, "_model", model)
        object.__setattr__(self, "_data", attrs)
        object.__setattr__(self, "_snapshot", {})
        object.__setattr__(self, "_id", None)
        object.__setattr__(self, "_is_new", True)
        object.__setattr__(self, "_is_dirty", True)
        object.__setattr__(self, "_is_deleted", False)
        object.__setattr__(self, "_lock", asyncio.Lock())

    @classmethod
    def from_row(cls, model: Model, row: Mapping[str, Any]) -> Record:
        """Hydrate a clean persisted record from a database row."""
        record = cls(model)
        record._apply_row(row)
        return record

    # ── State ────────────────────────────────────────────────────────────

    @property
    def model(self) -> Model:
        return self._model

    @property
    def id(self) -> Any:
        return self._id

    @property
    def data(self) -> dict[str, Any]:
        """The live attribute mapping, declared fields and extras alike."""
        return self._data

    @property
    def snapshot(self) -> Mapping[str, Any]:
        return MappingProxyType(self._snapshot)

    @property
    def is_new(self) -> bool:
        return self._is_new

    @property
    def is_dirty(self) -> bool:
        return self._is_dirty

    @property
    def is_deleted(self) -> bool:
        return self._is_deleted

    @property
    def _descriptor(self) -> ModelDescriptor:
        return self._model.descriptor

    # ── Accessors ────────────────────────────────────────────────────────

    def read_attribute(self, name: str) -> Any:
        if name == ID_COLUMN:
            return self._id
        return self._data.get(name)

    def write_attribute(self, name: str, value: Any) -> None:
        if name == ID_COLUMN:
            raise AttributeError(f"'{ID_COLUMN}' is assigned by the database")
        if self._is_deleted:
            raise RecordDeletedError(f"Cannot modify a deleted {self._descriptor.name}").with_context(
                table=self._descriptor.table_name, model=self._descriptor.name, fields=[name]
            )
        self._data[name] = value
        if self._descriptor.is_field(name):
            object.__setattr__(self, "_is_dirty", True)

    def __getattr__(self, name: str) -> Any:
        # only reached when normal lookup fails
        if name.startswith("_"):
            raise AttributeError(name)
        descriptor = self._descriptor
        getter = descriptor.getters.get(name)
        if getter is not None:
            return getter(self)
        if descriptor.is_field(name):
            return self.read_attribute(name)
        method = descriptor.instance_methods.get(name)
        if method is not None:
            return MethodType(method, self)
        if name in self._data:
            return self._data[name]
        raise AttributeError(f"'{descriptor.name}' record has no attribute '{name}'")

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            object.__setattr__(self, name, value)
            return
        if name in _READ_ONLY:
            raise AttributeError(f"'{name}' is read-only")
        if self._is_deleted:
            raise RecordDeletedError(f"Cannot modify a deleted {self._descriptor.name}").with_context(
                table=self._descriptor.table_name, model=self._descriptor.name, fields=[name]
            )
        setter = self._descriptor.setters.get(name)
        if setter is not None:
            setter(self, value)
        else:
            self.write_attribute(name, value)

    # ── Validation and diffing ───────────────────────────────────────────

    def _invalid_fields(self, names: Iterable[str]) -> list[str]:
        descriptor = self._descriptor
        return [n for n in names if not descriptor.column(n).is_valid(self._data.get(n))]

    def _diff(self) -> list[str]:
        return [
            n
            for n in self._descriptor.declared_fields
            if self._data.get(n) != self._snapshot.get(n)
        ]

    def _missing_required(self) -> list[str]:
        descriptor = self._descriptor
        return [
            n
            for n in descriptor.declared_fields
            if descriptor.column(n).required and self._data.get(n) in (None, "")
        ]

    def _not_valid(self, fields: list[str]) -> Err:
        descriptor = self._descriptor
        logger.info("record_not_valid", table=descriptor.table_name, id=self._id, fields=fields)
        return Err(
            ItemNotValidError(
                f"{descriptor.name} has invalid fields: {', '.join(fields)}", fields=fields
            ).with_context(table=descriptor.table_name, model=descriptor.name, record_id=self._id)
        )

    def _deleted_error(self, action: str) -> Err:
        descriptor = self._descriptor
        return Err(
            RecordDeletedError(f"Cannot {action} a deleted {descriptor.name}").with_context(
                table=descriptor.table_name, model=descriptor.name
            )
        )

    def _not_saved_error(self, action: str) -> Err:
        descriptor = self._descriptor
        return Err(
            NotSavedYetError(f"Cannot {action} a {descriptor.name} that was never saved").with_context(
                table=descriptor.table_name, model=descriptor.name
            )
        )

    # ── Persistence ──────────────────────────────────────────────────────

    async def save(self) -> Result[Record]:
        """
        Insert a transient record, or update the changed fields of a dirty one.

        A clean record, or a dirty one whose values match the snapshot,
        issues no statement.
        """
        async with self._lock:
            if self._is_deleted:
                return self._deleted_error("save")
            if self._is_new:
                return await self._insert()
            if not self._is_dirty:
                return Ok(self)
            return await self._update()

    async def _insert(self) -> Result[Record]:
        descriptor = self._descriptor
        fields = descriptor.declared_fields

        invalid = self._invalid_fields(fields)
        if invalid:
            return self._not_valid(invalid)

        values = {n: self._data.get(n) for n in fields}
        now = _now()
        for ts in (CREATED_AT, UPDATED_AT):
            if ts in values:
                values[ts] = now
        wire = {n: descriptor.column(n).save(v) for n, v in values.items()}

        async def _run(connector: Connector) -> QueryResult:
            sql, params = build_insert(connector.dialect, descriptor.table_name, wire)
            return await connector.execute(sql, params)

        try:
            result = await get_connection_manager().run(_run)
        except Exception as e:
            logger.warning("record_insert_failed", table=descriptor.table_name, error=str(e))
            return Err(e)

        self._data.update(values)
        object.__setattr__(self, "_id", result.last_insert_id)
        object.__setattr__(self, "_snapshot", values)
        object.__setattr__(self, "_is_new", False)
        object.__setattr__(self, "_is_dirty", False)

        columns = list(fields)
        logger.info("record_inserted", table=descriptor.table_name, id=self._id, columns=columns)
        await publish_write(
            descriptor.table_name,
            "insert",
            columns,
            f"inserted {descriptor.table_name}.{self._id} columns: {', '.join(columns)}",
        )
        return Ok(self)

    async def _update(self) -> Result[Record]:
        descriptor = self._descriptor

        diff = self._diff()
        if not diff:
            object.__setattr__(self, "_is_dirty", False)
            return Ok(self)

        to_check = diff + [n for n in self._missing_required() if n not in diff]
        invalid = self._invalid_fields(n for n in descriptor.declared_fields if n in to_check)
        if invalid:
            return self._not_valid(invalid)

        values = {n: self._data.get(n) for n in diff}
        if descriptor.is_field(UPDATED_AT):
            values[UPDATED_AT] = _now()
        wire = {n: descriptor.column(n).save(v) for n, v in values.items()}
        record_id = self._id

        async def _run(connector: Connector) -> QueryResult:
            sql, params = build_update(connector.dialect, descriptor.table_name, wire, record_id)
            return await connector.execute(sql, params)

        try:
            await get_connection_manager().run(_run)
        except Exception as e:
            logger.warning("record_update_failed", table=descriptor.table_name, id=record_id, error=str(e))
            return Err(e)

        self._data.update(values)
        self._snapshot.update(values)
        object.__setattr__(self, "_is_dirty", False)

        columns = list(values)
        logger.info("record_updated", table=descriptor.table_name, id=record_id, columns=columns)
        await publish_write(
            descriptor.table_name,
            "update",
            columns,
            f"updated {descriptor.table_name}.{record_id} columns: {', '.join(columns)}",
        )
        return Ok(self)

    async def destroy(self) -> Result[Record]:
        """Delete the row. The record becomes terminal and its id resets to ``None``."""
        async with self._lock:
            if self._is_deleted:
                return self._deleted_error("destroy")
            if self._is_new:
                return self._not_saved_error("destroy")

            descriptor = self._descriptor
            record_id = self._id

            async def _run(connector: Connector) -> QueryResult:
                sql, params = build_delete(connector.dialect, descriptor.table_name, record_id)
                return await connector.execute(sql, params)

            try:
                await get_connection_manager().run(_run)
            except Exception as e:
                logger.warning("record_delete_failed", table=descriptor.table_name, id=record_id, error=str(e))
                return Err(e)

            object.__setattr__(self, "_is_deleted", True)
            object.__setattr__(self, "_is_dirty", False)
            object.__setattr__(self, "_id", None)

            logger.info("record_deleted", table=descriptor.table_name, id=record_id)
            await publish_write(
                descriptor.table_name,
                "delete",
                [ID_COLUMN],
                f"deleted {descriptor.table_name}.{record_id}",
            )
            return Ok(self)

    async def reload(self) -> Result[Record]:
        """Re-read the row and discard unsaved changes to declared fields."""
        async with self._lock:
            if self._is_deleted:
                return self._deleted_error("reload")
            if self._is_new:
                return self._not_saved_error("reload")

            descriptor = self._descriptor
            record_id = self._id

            async def _run(connector: Connector) -> QueryResult:
                sql, params = build_select_by_id(connector.dialect, descriptor.table_name, record_id)
                return await connector.execute(sql, params)

            try:
                result = await get_connection_manager().run(_run)
            except Exception as e:
                return Err(e)

            row = result.rows[0] if result.rows else None
            missing = ItemNotFoundError(f"No {descriptor.name} with id {record_id}").with_context(
                table=descriptor.table_name, model=descriptor.name, record_id=record_id
            )
            return from_optional(row, missing).inspect(self._apply_row).map(lambda _: self)

    async def update_attributes(self, attrs: Mapping[str, Any], *, save: bool = False) -> Result[Record]:
        """Assign each entry through the normal setter resolution, then optionally save.

        Either every entry is applied or none is: read-only names are
        rejected up front, and a setter that raises rolls back the entries
        applied before it. Both come back as ``Err``.
        """
        if self._is_deleted:
            return self._deleted_error("update")
        descriptor = self._descriptor
        rejected = [n for n in attrs if n in _READ_ONLY or n.startswith("_")]
        if rejected:
            return Err(
                ItemNotValidError(
                    f"{descriptor.name} attributes are read-only: {', '.join(rejected)}", fields=rejected
                ).with_context(table=descriptor.table_name, model=descriptor.name, record_id=self._id)
            )

        data, dirty = dict(self._data), self._is_dirty
        try:
            for name, value in attrs.items():
                setattr(self, name, value)
        except Exception as e:
            self._data.clear()
            self._data.update(data)
            object.__setattr__(self, "_is_dirty", dirty)
            logger.info("record_update_rejected", table=descriptor.table_name, id=self._id, error=str(e))
            return Err(e)
        if save:
            return await self.save()
        return Ok(self)

    def _apply_row(self, row: Mapping[str, Any]) -> None:
        descriptor = self._descriptor
        for name, value in row.items():
            if name == ID_COLUMN:
                continue
            self._data[name] = descriptor.column(name).load(value) if descriptor.is_field(name) else value
        object.__setattr__(self, "_id", row.get(ID_COLUMN))
        object.__setattr__(self, "_snapshot", {n: self._data.get(n) for n in descriptor.declared_fields})
        object.__setattr__(self, "_is_new", False)
        object.__setattr__(self, "_is_dirty", False)

    # ── Introspection ────────────────────────────────────────────────────

    def to_dict(self) -> dict[str, Any]:
        """Field values only; unmodeled extras are left out."""
        return {n: self.read_attribute(n) for n in self._descriptor.fields}

    def __repr__(self) -> str:
        if self._is_deleted:
            state = "deleted"
        elif self._is_new:
            state = "new"
        else:
            state = "dirty" if self._is_dirty else "clean"
        values = ", ".join(f"{n}={self._data.get(n)!r}" for n in self._descriptor.declared_fields)
        return f"<{self._descriptor.name} id={self._id!r} {state} {values}>"


__all__ = ["Record"]
