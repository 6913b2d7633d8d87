from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Callable, Protocol

from typing_extensions import TypeAlias, TypeVar

if TYPE_CHECKING:
    from fluentdb.core.result import DatabaseRow

__all__ = (
    "Connection",
    "Cursor",
    "ObjectT",
    "RowMapper",
    "StatementParameters",
    "T",
    "ValueExtractor",
)

T = TypeVar("T")
ObjectT = TypeVar("ObjectT")


class Cursor(Protocol):
    """The subset of a DB-API 2.0 cursor the executor relies on."""

    description: Any
    rowcount: int

    def execute(self, operation: Any, parameters: Any = ..., /) -> Any: ...

    def executemany(self, operation: Any, seq_of_parameters: Any, /) -> Any: ...

    def fetchone(self) -> Any: ...

    def fetchmany(self, size: int = ..., /) -> Any: ...

    def close(self) -> Any: ...


class Connection(Protocol):
    """A DB-API 2.0 connection. Opening, committing and closing stay with the caller."""

    def cursor(self) -> Any: ...


StatementParameters: TypeAlias = Sequence[Any]
RowMapper: TypeAlias = Callable[["DatabaseRow"], T]
ValueExtractor: TypeAlias = Callable[[ObjectT], Any]

