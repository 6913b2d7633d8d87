"""Table aliases and SELECT statements joining several tables."""

from typing import TYPE_CHECKING, Any, Optional, Union

from typing_extensions import Self

from fluentdb.builder._select import RowExtractionMixin
from fluentdb.core.compiler import ColumnReference, JoinClause, JoinType, TableReference, render_select
from fluentdb.core.predicates import PredicateAccumulator
from fluentdb.exceptions import SQLBuilderError
from fluentdb.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from fluentdb.builder._base import TableProtocol
    from fluentdb.core.compiler import Statement
    from fluentdb.driver import StatementExecutor

__all__ = ("JoinedSelectBuilder", "TableAlias")

logger = get_logger("builder.join")

ColumnLike = Union[str, ColumnReference]


class TableAlias:
    """A table known under an alias, the starting point of a joined select.

    Example:
        >>> orders, customers = orders_table.alias("o"), customers_table.alias("c")
        >>> orders.join(orders.column("customer_id"), customers.column("id")).where(customers.column("name"), "x")
    """

    __slots__ = ("reference", "table")

    def __init__(self, table: "TableProtocol", alias: str) -> None:
        self.table = table
        self.reference = TableReference(table.table_name, alias)

    @property
    def alias(self) -> str:
        return self.reference.qualifier

    def __repr__(self) -> str:
        return f"TableAlias({self.reference.render()!r})"

    def column(self, column_name: str) -> ColumnReference:
        return self.reference.column(column_name)

    def select(self) -> "JoinedSelectBuilder":
        """Start a select from this table alone."""
        return JoinedSelectBuilder(self)

    def where(self, field: str, value: Any) -> "JoinedSelectBuilder":
        return self.select().where_equals(self.column(field), value)

    def join(self, left: ColumnReference, right: ColumnReference) -> "JoinedSelectBuilder":
        return self.select().join(left, right)

    def left_join(self, left: ColumnReference, right: ColumnReference) -> "JoinedSelectBuilder":
        return self.select().left_join(left, right)

    def join_on(
        self, left_fields: "Sequence[str]", joined: "TableAlias", right_fields: "Sequence[str]"
    ) -> "JoinedSelectBuilder":
        """Join ``joined`` matching each of this alias's ``left_fields`` to the paired ``right_fields``."""
        return self.select().join_on([self.column(field) for field in left_fields], joined, right_fields)


class JoinedSelectBuilder(PredicateAccumulator, RowExtractionMixin):
    """SELECT over one or more aliased tables.

    Every table contributes ``alias.*`` unless ``select_columns`` narrows the column list.
    Predicates and ordering should use alias-qualified ``ColumnReference`` values.
    """

    def __init__(self, source: TableAlias) -> None:
        super().__init__()
        self._source = source
        self._tables: list[TableReference] = [source.reference]
        self._joins: list[JoinClause] = []
        self._columns: list[ColumnLike] = []
        self._order_by: list[str] = []
        self._unordered = False

    @property
    def _executor(self) -> "StatementExecutor":  # type: ignore[override]
        return self._source.table.executor

    @property
    def _table_name(self) -> str:  # type: ignore[override]
        return self._source.table.table_name

    @property
    def tables(self) -> "list[TableReference]":
        return list(self._tables)

    def _add_join(
        self, join_type: JoinType, table: TableReference, on: "Sequence[tuple[ColumnReference, ColumnReference]]"
    ) -> Self:
        for left, right in on:
            if left.table not in self._tables:
                msg = f"Column {left} refers to alias {left.alias!r}, which is not part of the query"
                raise SQLBuilderError(msg)
            if right.table != table:
                msg = f"Column {right} does not belong to joined alias {table.qualifier!r}"
                raise SQLBuilderError(msg)
        self._tables.append(table)
        self._joins.append(JoinClause(join_type, table, tuple(on)))
        return self

    def _join_pair(self, join_type: JoinType, a: ColumnReference, b: ColumnReference) -> Self:
        a_present, b_present = a.table in self._tables, b.table in self._tables
        if a_present and b_present:
            msg = f"Both {a.alias!r} and {b.alias!r} are already part of the query"
            raise SQLBuilderError(msg)
        if not a_present and not b_present:
            msg = f"Neither {a.alias!r} nor {b.alias!r} is part of the query"
            raise SQLBuilderError(msg)
        if a_present:
            return self._add_join(join_type, b.table, [(a, b)])
        return self._add_join(join_type, a.table, [(b, a)])

    def join(self, a: ColumnReference, b: ColumnReference) -> Self:
        """Inner join the table of whichever column is not yet part of the query."""
        return self._join_pair(JoinType.INNER, a, b)

    def left_join(self, a: ColumnReference, b: ColumnReference) -> Self:
        return self._join_pair(JoinType.LEFT, a, b)

    def join_on(
        self, left_fields: "Sequence[ColumnReference]", joined: TableAlias, right_fields: "Sequence[str]"
    ) -> Self:
        """Inner join ``joined`` on several column pairs."""
        return self._add_join(JoinType.INNER, joined.reference, self._pairs(left_fields, joined, right_fields))

    def left_join_on(
        self, left_fields: "Sequence[ColumnReference]", joined: TableAlias, right_fields: "Sequence[str]"
    ) -> Self:
        return self._add_join(JoinType.LEFT, joined.reference, self._pairs(left_fields, joined, right_fields))

    @staticmethod
    def _pairs(
        left_fields: "Sequence[ColumnReference]", joined: TableAlias, right_fields: "Sequence[str]"
    ) -> "list[tuple[ColumnReference, ColumnReference]]":
        if not left_fields or len(left_fields) != len(right_fields):
            msg = f"Join of {joined.alias!r} needs matching, non-empty column lists"
            raise SQLBuilderError(msg)
        return [(left, joined.column(right)) for left, right in zip(left_fields, right_fields)]

    def select_columns(self, *columns: ColumnLike) -> Self:
        """Select exactly ``columns``. Rows then support ``row.table(alias)``."""
        self._columns.extend(columns)
        return self

    def order_by(self, clause: ColumnLike) -> Self:
        self._order_by.append(str(clause))
        return self

    def unordered(self) -> Self:
        self._unordered = True
        return self

    def _warn_if_unordered(self) -> None:
        if not self._order_by and not self._unordered:
            logger.debug("Listing join of %s without ORDER BY; row order is unspecified", self._table_name)

    def _default_columns(self) -> "list[ColumnLike]":
        if self._columns:
            return list(self._columns)
        return [f"{table.qualifier}.*" for table in self._tables]

    def _column_references(self, columns: "Sequence[ColumnLike]") -> "Optional[list[Optional[ColumnReference]]]":
        if not any(isinstance(column, ColumnReference) for column in columns):
            return None
        return [column if isinstance(column, ColumnReference) else None for column in columns]

    def _select(self, columns: "Sequence[ColumnLike]", ordered: bool = True) -> "Statement":
        return render_select(
            columns,
            self._tables[0],
            self._conditions,
            self._condition_parameters,
            self._order_by if ordered else (),
            self._joins,
        )
