"""
Canonical protocol definitions for sequelorm.

The mapping layer never imports a database driver. It talks to whatever
object satisfies ``Connector``: something that can run one statement,
report the rows and generated id, and recognise its own driver's
"table already exists" failure so the core can translate it.

Architecture:
    ::

        protocols.py (YOU ARE HERE)
        ├── QueryResult   rows / last_insert_id / rowcount of one statement
        └── Connector     async statement execution + error recognition

    Implementations:
        adapters/sqlite.py  (stdlib sqlite3)
        adapters/mysql.py   (mysql-connector-python)
        tests/_support/recording.py (RecordingConnector fake)

Guardrails:
    ❌ DON'T: Import sqlite3 / mysql.connector in orm/ modules
    ✅ DO: Depend on the Connector shape and the Dialect it exposes

Tags:
    protocol, connector, async, database, sequelorm
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from sequelorm.core.dialect import Dialect


@dataclass
class QueryResult:
    """Outcome of a single statement.

    Attributes:
        rows: Returned rows as column-name → value mappings (empty for writes)
        last_insert_id: Auto-increment id generated by an INSERT, if any
        rowcount: Number of rows affected, as reported by the driver
    """

    rows: list[dict[str, Any]] = field(default_factory=list)
    last_insert_id: int | None = None
    rowcount: int = 0


@runtime_checkable
class Connector(Protocol):
    """
    Async database connector consumed by the mapping layer.

    ``execute`` raises the driver's native exception on failure; the core
    catches it at the call boundary and hands it back inside ``Err``.
    """

    @property
    def dialect(self) -> Dialect:
        """SQL dialect used to render placeholders, quoting and DDL."""
        ...

    async def execute(self, sql: str, params: tuple = ()) -> QueryResult:
        """Execute one statement and commit it."""
        ...

    def is_table_exists_error(self, exc: BaseException) -> bool:
        """True if *exc* is this driver's duplicate-table signal."""
        ...

    async def close(self) -> None:
        """Release the underlying connection."""
        ...


__all__ = [
    "QueryResult",
    "Connector",
]
