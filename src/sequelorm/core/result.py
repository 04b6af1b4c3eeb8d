"""
Ok / Err outcome values for asynchronous operations.

Every asynchronous operation of the mapping layer (``save``, ``destroy``,
``find``, ``create_table``) returns ``Ok(value)`` or ``Err(error)`` instead
of raising across the await boundary. Validation failures, missing rows and
driver errors all travel the same channel, and the record's state is left
untouched whenever an ``Err`` comes back.

Examples:
    >>> result = await item.save()
    >>> match result:
    ...     case Ok(record):
    ...         print(record.id)
    ...     case Err(ItemNotValidError() as error):
    ...         print(error.fields)

    >>> Err(ValueError("oops")).map(lambda x: x * 2).unwrap_or(0)
    0

Tags:
    result-pattern, error-handling, functional-programming, sequelorm
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

from sequelorm.core.errors import OrmError


T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """
    Outcome of an operation that succeeded.

    Examples:
        >>> ok = Ok(42)
        >>> ok.is_ok()
        True
        >>> Ok(10).map(lambda n: n + 1).unwrap()
        11
    """

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        """Return the wrapped value."""
        return self.value

    def unwrap_or(self, default: T) -> T:
        """The wrapped value; *default* is ignored."""
        return self.value

    def unwrap_err(self) -> Exception:
        raise ValueError(f"Called unwrap_err on {self!r}")

    def map(self, f: Callable[[T], U]) -> Result[U]:
        """Apply *f* to the wrapped value."""
        return Ok(f(self.value))

    def flat_map(self, f: Callable[[T], Result[U]]) -> Result[U]:
        """Apply *f* and return its own result."""
        return f(self.value)

    def map_err(self, f: Callable[[Exception], Exception]) -> Result[T]:
        return self

    def inspect(self, f: Callable[[T], None]) -> Result[T]:
        """Pass the value to *f* and return this result unchanged."""
        f(self.value)
        return self

    def to_dict(self) -> dict[str, Any]:
        return {"ok": True, "value": self.value}

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[T]):
    """
    Outcome of an operation that failed, carrying the exception.

    The accompanying value of a failed operation is always absent:
    ``unwrap_or(None)`` yields ``None``.

    Examples:
        >>> err = Err(ValueError("bad input"))
        >>> err.is_err()
        True
        >>> err.unwrap_or(None) is None
        True
    """

    error: Exception

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> T:
        """Re-raise the carried exception."""
        raise self.error

    def unwrap_or(self, default: T) -> T:
        return default

    def unwrap_err(self) -> Exception:
        return self.error

    def map(self, f: Callable[[T], U]) -> Result[U]:
        return Err(self.error)

    def flat_map(self, f: Callable[[T], Result[U]]) -> Result[U]:
        return Err(self.error)

    def map_err(self, f: Callable[[Exception], Exception]) -> Result[T]:
        """Replace the carried exception with *f(error)*."""
        return Err(f(self.error))

    def inspect(self, f: Callable[[T], None]) -> Result[T]:
        return self

    def to_dict(self) -> dict[str, Any]:
        if isinstance(self.error, OrmError):
            return {"ok": False, "error": self.error.to_dict()}
        return {
            "ok": False,
            "error": {
                "error_type": type(self.error).__name__,
                "message": str(self.error),
            },
        }

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result = Ok[T] | Err[T]


def from_optional(value: T | None, error: Exception) -> Result[T]:
    """
    Convert an optional value to a Result.

    Examples:
        >>> from_optional(row, ItemNotFoundError("No item with id 3")).is_err()
        True
    """
    if value is None:
        return Err(error)
    return Ok(value)


__all__ = [
    "Result",
    "Ok",
    "Err",
    "from_optional",
]
