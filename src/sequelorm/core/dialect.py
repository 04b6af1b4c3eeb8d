"""SQL dialect abstraction for the statement builders.

The record lifecycle emits the same four statement shapes on every
backend (CREATE / INSERT / UPDATE / DELETE, plus SELECT by id). Only the
fragments differ: placeholder style, identifier quoting, the synthetic
primary-key column, and how an ENUM column is spelled. ``Dialect`` owns
exactly those fragments so ``orm/sql.py`` never branches on a backend.

Architecture::

    orm/sql.py:
    ┌────────────────────────────────────────────────────────────────┐
    │  f"INSERT INTO {d.quote(t)} ({cols}) VALUES ({d.placeholders(n)})"│
    └────────────────────────────────────────────────────────────────┘
                              │
                              ▼
    ┌──────────────────────────────┐ ┌──────────────────────────────┐
    │ SQLite                       │ │ MySQL                        │
    │ ?  "ident"                   │ │ %s  `ident`                  │
    │ INTEGER PRIMARY KEY          │ │ INT(11) AUTO_INCREMENT       │
    │   AUTOINCREMENT              │ │   PRIMARY KEY                │
    │ ENUM → TEXT CHECK (IN ...)   │ │ ENUM('a', 'b')               │
    └──────────────────────────────┘ └──────────────────────────────┘

Examples:
    >>> d = get_dialect("mysql")
    >>> d.placeholders(3)
    '%s, %s, %s'
    >>> d.id_column("id")
    '`id` INT(11) AUTO_INCREMENT PRIMARY KEY'

Tags:
    dialect, sql, abstraction, portability, sequelorm
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from sequelorm.orm.data_types import ColumnType


@runtime_checkable
class Dialect(Protocol):
    """SQL dialect contract.

    Every method returns a SQL fragment valid for the target database.
    """

    @property
    def name(self) -> str:
        """Registry key of this dialect."""
        ...

    def placeholder(self, index: int) -> str:
        """Single positional placeholder (0-based index)."""
        ...

    def placeholders(self, count: int) -> str:
        """Comma-separated placeholder list."""
        ...

    def quote(self, identifier: str) -> str:
        """Quote a table or column name."""
        ...

    def id_column(self, name: str) -> str:
        """DDL for the synthetic auto-increment integer primary key."""
        ...

    def column_definition(self, name: str, column_type: ColumnType) -> str:
        """DDL for one declared column."""
        ...


def _quote_literal(value: object) -> str:
    return "'" + str(value).replace("'", "''") + "'"


class SQLiteDialect:
    """SQLite dialect: ``?`` placeholders, double-quoted identifiers."""

    @property
    def name(self) -> str:
        return "sqlite"

    # -- Placeholders ------------------------------------------------------

    def placeholder(self, index: int) -> str:  # noqa: ARG002
        return "?"

    def placeholders(self, count: int) -> str:
        return ", ".join("?" for _ in range(count))

    # -- Identifiers -------------------------------------------------------

    def quote(self, identifier: str) -> str:
        return '"' + identifier.replace('"', '""') + '"'

    # -- DDL ---------------------------------------------------------------

    def id_column(self, name: str) -> str:
        return f"{self.quote(name)} INTEGER PRIMARY KEY AUTOINCREMENT"

    def column_definition(self, name: str, column_type: ColumnType) -> str:
        # SQLite has no ENUM; emulate it with a CHECK constraint
        if column_type.type == "enum":
            values = ", ".join(_quote_literal(v) for v in column_type.options.get("values") or [])
            return f"{self.quote(name)} TEXT CHECK ({self.quote(name)} IN ({values}))"
        return f"{self.quote(name)} {column_type.render()}"


class MySQLDialect:
    """MySQL dialect: ``%s`` placeholders (mysql.connector), backtick identifiers."""

    @property
    def name(self) -> str:
        return "mysql"

    def placeholder(self, index: int) -> str:  # noqa: ARG002
        return "%s"

    def placeholders(self, count: int) -> str:
        return ", ".join("%s" for _ in range(count))

    def quote(self, identifier: str) -> str:
        return "`" + identifier.replace("`", "``") + "`"

    def id_column(self, name: str) -> str:
        return f"{self.quote(name)} INT(11) AUTO_INCREMENT PRIMARY KEY"

    def column_definition(self, name: str, column_type: ColumnType) -> str:
        return f"{self.quote(name)} {column_type.render()}"


# =========================================================================
# Registry / Factory
# =========================================================================

# Shared instances; dialects hold no state.
_DIALECTS: dict[str, Dialect] = {
    "sqlite": SQLiteDialect(),
    "mysql": MySQLDialect(),
    "mariadb": MySQLDialect(),  # alias
}


def get_dialect(db_type: str) -> Dialect:
    """Look up a registered dialect by name (``sqlite``, ``mysql``).

    Raises:
        ValueError: If ``db_type`` is not recognised.
    """
    key = db_type.lower() if isinstance(db_type, str) else db_type.value
    if key not in _DIALECTS:
        raise ValueError(
            f"Unknown dialect '{db_type}'. "
            f"Supported: {sorted(set(_DIALECTS) - {'mariadb'})}"
        )
    return _DIALECTS[key]


def register_dialect(name: str, dialect: Dialect) -> None:
    """Register a custom dialect implementation (third-party drivers, test doubles)."""
    _DIALECTS[name.lower()] = dialect


__all__ = [
    "Dialect",
    "SQLiteDialect",
    "MySQLDialect",
    "get_dialect",
    "register_dialect",
]
