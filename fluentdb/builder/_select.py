"""SELECT builders and the row extraction operations they share."""

import itertools
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Callable, Optional, Union

from mypy_extensions import trait
from typing_extensions import Self

from fluentdb.core.compiler import ColumnReference, TableReference, render_select
from fluentdb.core.predicates import PredicateAccumulator
from fluentdb.core.result import DatabaseRow
from fluentdb.exceptions import MultipleResultsFoundError, NotFoundError, NullValueError
from fluentdb.utils.logging import get_logger

if TYPE_CHECKING:
    import datetime
    from collections.abc import Iterator, Sequence
    from uuid import UUID

    from fluentdb.builder._base import TableProtocol
    from fluentdb.builder._delete import DeleteBuilder
    from fluentdb.builder._update import UpdateBuilder
    from fluentdb.core.compiler import Statement
    from fluentdb.driver import StatementExecutor
    from fluentdb.typing import Connection, RowMapper, T

__all__ = ("DatabaseQueryBuilder", "RowExtractionMixin")

logger = get_logger("builder")

ColumnLike = Union[str, ColumnReference]
COUNT_COLUMN = "count(*)"


def _identity(row: DatabaseRow) -> DatabaseRow:
    return row


@trait
class RowExtractionMixin:
    """Terminal query operations built on ``_select``.

    ``single_*`` operations require exactly one row: zero rows raise ``NotFoundError``
    and more than one raise ``MultipleResultsFoundError``. ``list*`` operations return
    rows in database order, which is unspecified unless ``order_by`` was used.
    """

    _executor: "StatementExecutor"
    _table_name: str

    def _select(self, columns: "Sequence[ColumnLike]", ordered: bool = True) -> "Statement":
        raise NotImplementedError

    def _default_columns(self) -> "list[ColumnLike]":
        return []

    def _column_references(self, columns: "Sequence[ColumnLike]") -> "Optional[list[Optional[ColumnReference]]]":
        return None

    def _warn_if_unordered(self) -> None:
        return None

    def build(self) -> "Statement":
        """Render the SELECT that ``list`` and ``stream`` would run."""
        return self._select(self._default_columns())

    @contextmanager
    def _open_rows(
        self, columns: "Sequence[ColumnLike]", connection: "Optional[Connection]", ordered: bool = True
    ) -> "Iterator[Iterator[DatabaseRow]]":
        statement = self._select(columns, ordered)
        with self._executor.open_rows(statement, connection, self._column_references(columns)) as rows:
            yield rows

    def _single_row(
        self,
        columns: "Sequence[ColumnLike]",
        connection: "Optional[Connection]",
        required: bool,
        column: "Optional[str]" = None,
    ) -> "Optional[DatabaseRow]":
        with self._open_rows(columns, connection, ordered=False) as rows:
            found = list(itertools.islice(rows, 2))
        if len(found) > 1:
            raise MultipleResultsFoundError(operation="SELECT", table=self._table_name, column=column)
        if not found:
            if required:
                raise NotFoundError(operation="SELECT", table=self._table_name, column=column)
            return None
        return found[0]

    def _single_scalar(
        self,
        column: ColumnLike,
        getter: "Callable[[DatabaseRow, int], Any]",
        connection: "Optional[Connection]",
        nullable: bool,
    ) -> Any:
        row = self._single_row([column], connection, required=True, column=str(column))
        value = getter(row, 0)  # type: ignore[arg-type]
        if value is None and not nullable:
            raise NullValueError(operation="SELECT", table=self._table_name, column=str(column))
        return value

    def single_string(
        self, column: ColumnLike, connection: "Optional[Connection]" = None, *, nullable: bool = False
    ) -> "Optional[str]":
        """Return ``column`` of the single matching row as text."""
        return self._single_scalar(column, DatabaseRow.get_string, connection, nullable)

    def single_long(
        self, column: ColumnLike, connection: "Optional[Connection]" = None, *, nullable: bool = False
    ) -> "Optional[int]":
        """Return ``column`` of the single matching row as an integer."""
        return self._single_scalar(column, DatabaseRow.get_int, connection, nullable)

    def single_instant(
        self, column: ColumnLike, connection: "Optional[Connection]" = None, *, nullable: bool = False
    ) -> "Optional[datetime.datetime]":
        """Return ``column`` of the single matching row as a ``datetime``."""
        return self._single_scalar(column, DatabaseRow.get_datetime, connection, nullable)

    single_datetime = single_instant

    def single_uuid(
        self, column: ColumnLike, connection: "Optional[Connection]" = None, *, nullable: bool = False
    ) -> "Optional[UUID]":
        return self._single_scalar(column, DatabaseRow.get_uuid, connection, nullable)

    def single_object(self, mapper: "RowMapper[T]", connection: "Optional[Connection]" = None) -> "T":
        """Map the single matching row with ``mapper``."""
        row = self._single_row(self._default_columns(), connection, required=True)
        return mapper(row)  # type: ignore[arg-type]

    def single_object_or_none(self, mapper: "RowMapper[T]", connection: "Optional[Connection]" = None) -> "Optional[T]":
        """Map the matching row with ``mapper``, or return None when no row matches."""
        row = self._single_row(self._default_columns(), connection, required=False)
        return None if row is None else mapper(row)

    def get_count(self, connection: "Optional[Connection]" = None) -> int:
        """Return the number of matching rows."""
        row = self._single_row([COUNT_COLUMN], connection, required=True, column=COUNT_COLUMN)
        return row.get_int(0) or 0  # type: ignore[union-attr]

    @contextmanager
    def stream(self, mapper: "RowMapper[T]", connection: "Optional[Connection]" = None) -> "Iterator[Iterator[T]]":
        """Yield a lazy, one-shot iterator of mapped rows.

        The cursor is released when the block exits, including when the mapper raises
        or the caller stops early.
        """
        self._warn_if_unordered()
        with self._open_rows(self._default_columns(), connection) as rows:
            yield (mapper(row) for row in rows)

    def list(self, mapper: "RowMapper[T]", connection: "Optional[Connection]" = None) -> "list[T]":
        """Map every matching row with ``mapper``."""
        with self.stream(mapper, connection) as rows:
            return [*rows]

    def for_each(self, consumer: "Callable[[DatabaseRow], Any]", connection: "Optional[Connection]" = None) -> None:
        """Call ``consumer`` for every matching row."""
        with self.stream(_identity, connection) as rows:
            for row in rows:
                consumer(row)

    def _list_column(
        self, column: ColumnLike, getter: "Callable[[DatabaseRow, int], Any]", connection: "Optional[Connection]"
    ) -> "list[Any]":
        self._warn_if_unordered()
        with self._open_rows([column], connection) as rows:
            return [getter(row, 0) for row in rows]

    def list_strings(self, column: ColumnLike, connection: "Optional[Connection]" = None) -> "list[Optional[str]]":
        return self._list_column(column, DatabaseRow.get_string, connection)

    def list_longs(self, column: ColumnLike, connection: "Optional[Connection]" = None) -> "list[Optional[int]]":
        return self._list_column(column, DatabaseRow.get_int, connection)

    def list_instants(
        self, column: ColumnLike, connection: "Optional[Connection]" = None
    ) -> "list[Optional[datetime.datetime]]":
        return self._list_column(column, DatabaseRow.get_datetime, connection)


class DatabaseQueryBuilder(PredicateAccumulator, RowExtractionMixin):
    """Query against a single table.

    Example:
        >>> table.where("name", "x").order_by("code").list_longs("code", connection)
    """

    def __init__(self, table: "TableProtocol") -> None:
        super().__init__()
        self._table = table
        self._order_by: list[str] = []
        self._unordered = False

    @property
    def _executor(self) -> "StatementExecutor":  # type: ignore[override]
        return self._table.executor

    @property
    def _table_name(self) -> str:  # type: ignore[override]
        return self._table.table_name

    def order_by(self, clause: str) -> Self:
        """Add an ORDER BY clause. Needed for a predictable list order."""
        self._order_by.append(clause)
        return self

    def unordered(self) -> Self:
        """Acknowledge that list results may come back in any order."""
        self._unordered = True
        return self

    def _warn_if_unordered(self) -> None:
        if not self._order_by and not self._unordered:
            logger.debug("Listing %s without ORDER BY; row order is unspecified", self._table_name)

    def _select(self, columns: "Sequence[ColumnLike]", ordered: bool = True) -> "Statement":
        return render_select(
            columns,
            TableReference(self._table_name),
            self._conditions,
            self._condition_parameters,
            self._order_by if ordered else (),
        )

    def update(self) -> "UpdateBuilder":
        """Start an UPDATE restricted by this query's predicates."""
        from fluentdb.builder._update import UpdateBuilder

        builder = UpdateBuilder(self._table)
        self._copy_predicates_to(builder)
        return builder

    def set_field(self, field: str, value: Any) -> "UpdateBuilder":
        """Shortcut for ``update().set_field(field, value)``."""
        return self.update().set_field(field, value)

    def set_fields(self, fields: "Sequence[str]", values: "Sequence[Any]") -> "UpdateBuilder":
        return self.update().set_fields(fields, values)

    def delete(self, connection: "Optional[Connection]" = None) -> int:
        """Delete the matching rows and return how many were removed."""
        from fluentdb.builder._delete import DeleteBuilder

        builder: DeleteBuilder = DeleteBuilder(self._table)
        self._copy_predicates_to(builder)
        return builder.execute(connection)
