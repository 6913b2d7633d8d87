"""WHERE clause accumulation.

``PredicateAccumulator`` keeps two lists in lockstep: the SQL fragments of each
condition and the values bound to their placeholders. Builders that filter rows
(queries, updates, deletes, joined selects) inherit from it.
"""

from typing import TYPE_CHECKING, Any, Union

from typing_extensions import Self

from fluentdb.core.compiler import ColumnReference
from fluentdb.exceptions import SQLBuilderError

if TYPE_CHECKING:
    from collections.abc import Collection, Sequence

__all__ = ("EMPTY_IN_CONDITION", "PredicateAccumulator")

EMPTY_IN_CONDITION = "1 = 0"

FieldName = Union[str, ColumnReference]


def _field(field: FieldName) -> str:
    return field.qualified_name if isinstance(field, ColumnReference) else field


class PredicateAccumulator:
    """Ordered WHERE conditions and their parameters."""

    __slots__ = ("_conditions", "_condition_parameters")

    def __init__(self) -> None:
        self._conditions: list[str] = []
        self._condition_parameters: list[Any] = []

    @property
    def conditions(self) -> "list[str]":
        return list(self._conditions)

    @property
    def condition_parameters(self) -> "list[Any]":
        return list(self._condition_parameters)

    def where_equals(self, field: FieldName, value: Any) -> Self:
        """Add ``field = ?``, or ``field IS NULL`` without a parameter when ``value`` is None."""
        if value is None:
            self._conditions.append(f"{_field(field)} IS NULL")
            return self
        return self.where_expression(f"{_field(field)} = ?", value)

    def where(self, field: FieldName, value: Any) -> Self:
        """Alias of :meth:`where_equals`."""
        return self.where_equals(field, value)

    def where_optional(self, field: FieldName, value: Any) -> Self:
        """Add ``field = ?`` unless ``value`` is None."""
        if value is None:
            return self
        return self.where_equals(field, value)

    def where_expression(self, expression: str, *parameters: Any) -> Self:
        """Add a SQL fragment verbatim and bind ``parameters`` to its placeholders in order."""
        self._conditions.append(expression)
        self._condition_parameters.extend(parameters)
        return self

    def where_in(self, field: FieldName, values: "Collection[Any]") -> Self:
        """Add ``field IN (?, ...)``. An empty collection matches no rows."""
        values = list(values)
        if not values:
            self._conditions.append(EMPTY_IN_CONDITION)
            return self
        placeholders = ", ".join("?" for _ in values)
        return self.where_expression(f"{_field(field)} IN ({placeholders})", *values)

    def where_all(self, fields: "Sequence[FieldName]", values: "Sequence[Any]") -> Self:
        """Call :meth:`where_equals` for each field and value pair."""
        if len(fields) != len(values):
            msg = f"{len(fields)} field(s) but {len(values)} value(s) in where_all"
            raise SQLBuilderError(msg)
        for field, value in zip(fields, values):
            self.where_equals(field, value)
        return self

    def _copy_predicates_to(self, other: "PredicateAccumulator") -> None:
        other._conditions.extend(self._conditions)
        other._condition_parameters.extend(self._condition_parameters)
