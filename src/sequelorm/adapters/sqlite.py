"""SQLite connector."""

from __future__ import annotations

import sqlite3
from typing import Any

from sequelorm.core.errors import DatabaseConnectionError
from sequelorm.core.protocols import QueryResult

from .base import ConnectorBase
from .types import DatabaseConfig, DatabaseType


class SQLiteConnector(ConnectorBase):
    """
    Connector over the standard-library ``sqlite3`` module.

    ``path=":memory:"`` gives a private database that lives as long as the
    connector; rows come back as ``sqlite3.Row`` and are converted to dicts.
    """

    def __init__(
        self,
        path: str = ":memory:",
        *,
        timeout: float = 5.0,
        **kwargs: Any,
    ):
        config = DatabaseConfig(
            db_type=DatabaseType.SQLITE,
            path=path,
            options=kwargs,
        )
        super().__init__(config)
        self._timeout = timeout
        self._conn: sqlite3.Connection | None = None

    def connect(self) -> None:
        """Open the database file (or an in-memory database)."""
        if self._conn is not None:
            return

        path = self._config.path or ":memory:"
        uri = path.startswith("file:")

        try:
            self._conn = sqlite3.connect(
                path,
                timeout=self._timeout,
                check_same_thread=False,
                uri=uri,
            )
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA foreign_keys = ON")
            self._connected = True

        except sqlite3.Error as e:
            raise DatabaseConnectionError(
                f"Failed to connect to SQLite: {e}",
                cause=e,
            ) from e

    def disconnect(self) -> None:
        """Close the underlying sqlite3 connection, if open."""
        if self._conn:
            self._conn.close()
            self._conn = None
            self._connected = False

    def _run(self, sql: str, params: tuple) -> QueryResult:
        if self._conn is None:
            raise DatabaseConnectionError("SQLite connector is not connected")
        try:
            cursor = self._conn.execute(sql, params)
            rows = [dict(row) for row in cursor.fetchall()] if cursor.description else []
            self._conn.commit()
        except sqlite3.Error:
            self._conn.rollback()
            raise
        return QueryResult(
            rows=rows,
            last_insert_id=cursor.lastrowid if sql.lstrip().upper().startswith("INSERT") else None,
            rowcount=cursor.rowcount,
        )

    def is_table_exists_error(self, exc: BaseException) -> bool:
        return isinstance(exc, sqlite3.OperationalError) and "already exists" in str(exc)


__all__ = [
    "SQLiteConnector",
]
