"""Rendering of INSERT, UPDATE, DELETE and SELECT text with positional placeholders.

Every function here is pure: it takes table, field and predicate data and returns a
``Statement`` holding the SQL text together with its ordered parameter list. Field
values always precede predicate values, each group in the order it was added.
"""

from enum import Enum
from typing import TYPE_CHECKING, Any, NamedTuple, Optional, Union

from fluentdb.core.parameters import validate_parameter_count
from fluentdb.exceptions import SQLBuilderError

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

__all__ = (
    "ColumnReference",
    "JoinClause",
    "JoinType",
    "OperationType",
    "Statement",
    "TableReference",
    "render_delete",
    "render_insert",
    "render_select",
    "render_update",
    "render_where",
)


class OperationType(str, Enum):
    SELECT = "SELECT"
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"

    def __str__(self) -> str:
        return self.value


class JoinType(str, Enum):
    INNER = "INNER JOIN"
    LEFT = "LEFT JOIN"

    def __str__(self) -> str:
        return self.value


class TableReference(NamedTuple):
    """A table name with an optional alias."""

    name: str
    alias: "Optional[str]" = None

    def render(self) -> str:
        return f"{self.name} {self.alias}" if self.alias else self.name

    @property
    def qualifier(self) -> str:
        return self.alias or self.name

    def column(self, column_name: str) -> "ColumnReference":
        return ColumnReference(self, column_name)


class ColumnReference(NamedTuple):
    """A column qualified by the alias of the table it belongs to."""

    table: TableReference
    column_name: str

    @property
    def alias(self) -> str:
        return self.table.qualifier

    @property
    def qualified_name(self) -> str:
        return f"{self.alias}.{self.column_name}"

    def __str__(self) -> str:
        return self.qualified_name


class JoinClause(NamedTuple):
    """Join of ``table`` onto the statement, matching column pairs with equality."""

    join_type: JoinType
    table: TableReference
    on: "tuple[tuple[ColumnReference, ColumnReference], ...]"

    def render(self) -> str:
        condition = " AND ".join(f"{left.qualified_name} = {right.qualified_name}" for left, right in self.on)
        return f"{self.join_type.value} {self.table.render()} ON {condition}"


class Statement(NamedTuple):
    """Rendered SQL text and the positional parameters bound to it."""

    sql: str
    parameters: "tuple[Any, ...]"
    operation: OperationType
    table: "Optional[str]" = None

    def validate(self, dialect: "Optional[str]" = None) -> "Statement":
        """Check that placeholder and parameter counts agree.

        Raises:
            ParameterMismatchError: If they differ.
        """
        validate_parameter_count(self.sql, self.parameters, dialect)
        return self


ColumnLike = Union[str, ColumnReference]


def _column_name(column: ColumnLike) -> str:
    return column.qualified_name if isinstance(column, ColumnReference) else column


def render_where(conditions: "Sequence[str]") -> str:
    if not conditions:
        return ""
    return " WHERE " + " AND ".join(conditions)


def render_insert(table: str, fields: "Sequence[str]", values: "Sequence[Any]") -> Statement:
    """Render ``INSERT INTO table (f1, f2) VALUES (?, ?)``."""
    if not fields:
        msg = f"INSERT into {table} needs at least one field"
        raise SQLBuilderError(msg)
    _check_fields(table, fields, values)
    placeholders = ", ".join("?" for _ in fields)
    sql = f"INSERT INTO {table} ({', '.join(fields)}) VALUES ({placeholders})"
    return Statement(sql, tuple(values), OperationType.INSERT, table)


def render_update(
    table: str,
    fields: "Sequence[str]",
    values: "Sequence[Any]",
    conditions: "Sequence[str]",
    condition_parameters: "Sequence[Any]",
) -> Statement:
    """Render ``UPDATE table SET f1 = ?, f2 = ? WHERE ...``."""
    if not fields:
        msg = f"UPDATE of {table} needs at least one field"
        raise SQLBuilderError(msg)
    _check_fields(table, fields, values)
    assignments = ", ".join(f"{field} = ?" for field in fields)
    sql = f"UPDATE {table} SET {assignments}{render_where(conditions)}"
    return Statement(sql, (*values, *condition_parameters), OperationType.UPDATE, table)


def render_delete(table: str, conditions: "Sequence[str]", condition_parameters: "Sequence[Any]") -> Statement:
    """Render ``DELETE FROM table WHERE ...``."""
    sql = f"DELETE FROM {table}{render_where(conditions)}"
    return Statement(sql, tuple(condition_parameters), OperationType.DELETE, table)


def render_select(
    columns: "Iterable[ColumnLike]",
    table: TableReference,
    conditions: "Sequence[str]",
    condition_parameters: "Sequence[Any]",
    order_by: "Sequence[str]" = (),
    joins: "Sequence[JoinClause]" = (),
) -> Statement:
    """Render ``SELECT cols FROM table [JOIN ...] WHERE ... [ORDER BY ...]``."""
    column_list = ", ".join(_column_name(column) for column in columns) or "*"
    from_clause = " ".join((table.render(), *(join.render() for join in joins)))
    sql = f"SELECT {column_list} FROM {from_clause}{render_where(conditions)}"
    if order_by:
        sql += f" ORDER BY {', '.join(order_by)}"
    return Statement(sql, tuple(condition_parameters), OperationType.SELECT, table.name)


def _check_fields(table: str, fields: "Sequence[str]", values: "Sequence[Any]") -> None:
    if len(fields) != len(values):
        msg = f"{table}: {len(fields)} field(s) but {len(values)} value(s)"
        raise SQLBuilderError(msg)
    if len(set(fields)) != len(fields):
        duplicates = sorted({field for field in fields if fields.count(field) > 1})
        msg = f"{table}: field(s) set more than once: {', '.join(duplicates)}"
        raise SQLBuilderError(msg)
