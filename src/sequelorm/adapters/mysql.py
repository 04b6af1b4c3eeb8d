"""MySQL connector.

Statements go through a ``mysql.connector`` pooled connection and use
``%s`` placeholders. A duplicate ``CREATE TABLE`` surfaces as errno 1050.

Install the driver::

    pip install sequelorm[mysql]

The driver is imported at ``connect()`` time; if it is missing a
:class:`~sequelorm.core.errors.ConfigError` explains how to install it.
"""

from __future__ import annotations

from typing import Any

from sequelorm.core.errors import ConfigError, DatabaseConnectionError
from sequelorm.core.protocols import QueryResult

from .base import ConnectorBase
from .types import DatabaseConfig, DatabaseType

# ER_TABLE_EXISTS_ERROR
MYSQL_TABLE_EXISTS = 1050


class MySQLConnector(ConnectorBase):
    """MySQL / MariaDB connector backed by a ``mysql.connector`` pool."""

    def __init__(
        self,
        host: str = "localhost",
        port: int = 3306,
        database: str = "",
        username: str | None = None,
        password: str | None = None,
        *,
        pool_size: int = 5,
        charset: str = "utf8mb4",
        **kwargs: Any,
    ):
        config = DatabaseConfig(
            db_type=DatabaseType.MYSQL,
            host=host,
            port=port,
            database=database,
            username=username,
            password=password,
            pool_size=pool_size,
            options={**kwargs, "charset": charset},
        )
        super().__init__(config)
        self._pool: Any = None

    def connect(self) -> None:
        """Create the connection pool."""
        if self._pool is not None:
            return
        try:
            from mysql.connector import pooling
        except ImportError:
            raise ConfigError(
                "mysql-connector-python is required for MySQL. "
                "Install with: pip install sequelorm[mysql]"
            ) from None

        try:
            self._pool = pooling.MySQLConnectionPool(
                pool_name="sequelorm_mysql_pool",
                pool_size=self._config.pool_size,
                host=self._config.host,
                port=self._config.port,
                database=self._config.database,
                user=self._config.username,
                password=self._config.password,
                charset=self._config.options.get("charset", "utf8mb4"),
                connect_timeout=self._config.connect_timeout,
                autocommit=False,
            )
            self._connected = True
        except Exception as e:
            raise DatabaseConnectionError(
                f"Failed to connect to MySQL: {e}",
                cause=e,
            ) from e

    def disconnect(self) -> None:
        # mysql.connector pools have no closeall(); pooled connections close on GC
        self._pool = None
        self._connected = False

    def _run(self, sql: str, params: tuple) -> QueryResult:
        conn = self._pool.get_connection()
        try:
            cursor = conn.cursor(dictionary=True)
            try:
                cursor.execute(sql, params)
                rows = cursor.fetchall() if cursor.with_rows else []
                conn.commit()
            except Exception:
                conn.rollback()
                raise
            return QueryResult(
                rows=list(rows),
                last_insert_id=cursor.lastrowid or None,
                rowcount=cursor.rowcount,
            )
        finally:
            conn.close()  # returns the connection to the pool

    def is_table_exists_error(self, exc: BaseException) -> bool:
        return getattr(exc, "errno", None) == MYSQL_TABLE_EXISTS


__all__ = [
    "MySQLConnector",
    "MYSQL_TABLE_EXISTS",
]
