"""Batched INSERT, UPDATE and DELETE over a collection of objects.

Each builder renders one statement template and builds one parameter set per object
by calling the registered extractors: field extractors in registration order, then
predicate extractors in registration order.
"""

from typing import TYPE_CHECKING, Any, Callable, Generic, Optional

from typing_extensions import Self

from fluentdb.core.compiler import OperationType, render_delete, render_insert, render_update
from fluentdb.exceptions import SQLBuilderError
from fluentdb.typing import ObjectT

if TYPE_CHECKING:
    from collections.abc import Iterable

    from fluentdb.builder._base import TableProtocol
    from fluentdb.typing import Connection, ValueExtractor

__all__ = ("BulkDeleteBuilder", "BulkInsertBuilder", "BulkUpdateBuilder")


def _constant(value: Any) -> "Callable[[Any], Any]":
    return lambda _: value


class _BulkBuilder(Generic[ObjectT]):
    operation: OperationType

    def __init__(self, table: "TableProtocol", objects: "Iterable[ObjectT]") -> None:
        self._table = table
        self._objects = list(objects)
        self._where_fields: list[str] = []
        self._where_extractors: list[ValueExtractor[ObjectT]] = []

    def _require_predicates(self) -> None:
        if not self._where_fields:
            msg = f"Bulk {self.operation.value} of {self._table.table_name} needs at least one where() extractor"
            raise SQLBuilderError(msg)

    def _where_conditions(self) -> "list[str]":
        return [f"{field} = ?" for field in self._where_fields]

    def _parameter_sets(self, extractors: "list[ValueExtractor[ObjectT]]") -> "list[list[Any]]":
        return [[extract(obj) for extract in extractors] for obj in self._objects]

    def _execute_batch(
        self, sql: str, extractors: "list[ValueExtractor[ObjectT]]", connection: "Optional[Connection]"
    ) -> int:
        if not self._objects:
            return 0
        return self._table.executor.execute_many(
            sql, self._parameter_sets(extractors), self.operation, self._table.table_name, connection
        )


class _FieldExtractorsMixin(Generic[ObjectT]):
    _field_names: "list[str]"
    _field_extractors: "list[ValueExtractor[ObjectT]]"

    def set_field(self, field: str, extractor: "ValueExtractor[ObjectT]") -> Self:
        """Register ``extractor`` as the source of ``field`` for every object."""
        if field in self._field_names:
            msg = f"Field {field!r} registered more than once"
            raise SQLBuilderError(msg)
        self._field_names.append(field)
        self._field_extractors.append(extractor)
        return self

    def _with_audit(self, audit: "dict[str, Any]") -> "tuple[list[str], list[ValueExtractor[ObjectT]]]":
        fields = list(self._field_names)
        extractors = list(self._field_extractors)
        for column, value in audit.items():
            if column not in fields:
                fields.append(column)
                extractors.append(_constant(value))
        return fields, extractors


class BulkInsertBuilder(_FieldExtractorsMixin[ObjectT], _BulkBuilder[ObjectT]):
    """INSERT of one row per object.

    Example:
        >>> table.bulk_insert(users).set_field("name", lambda u: u.name).execute(connection)
        2
    """

    operation = OperationType.INSERT

    def __init__(self, table: "TableProtocol", objects: "Iterable[ObjectT]") -> None:
        super().__init__(table, objects)
        self._field_names: list[str] = []
        self._field_extractors: list[ValueExtractor[ObjectT]] = []
        self._id_field: Optional[str] = None
        self._key_setter: Optional[Callable[[ObjectT, Any], Any]] = None

    def generate_primary_keys(self, id_field: str, setter: "Callable[[ObjectT, Any], Any]") -> Self:
        """Let the database generate ``id_field`` and pass each new key to ``setter(obj, key)``.

        Each row is then inserted with its own statement execution.
        """
        self._id_field = id_field
        self._key_setter = setter
        return self

    def execute(self, connection: "Optional[Connection]" = None) -> int:
        """Insert every object and return the number of inserted rows."""
        fields, extractors = self._with_audit(dict(self._table.audit_values(OperationType.INSERT)))
        statement = render_insert(self._table.table_name, fields, [None] * len(fields))
        if self._id_field is None or self._key_setter is None:
            return self._execute_batch(statement.sql, extractors, connection)
        keys = self._table.executor.execute_each_returning_key(
            statement.sql, self._parameter_sets(extractors), self._id_field, self._table.table_name, connection
        )
        for obj, key in zip(self._objects, keys):
            self._key_setter(obj, key)
        return len(keys)


class BulkUpdateBuilder(_FieldExtractorsMixin[ObjectT], _BulkBuilder[ObjectT]):
    """UPDATE of one row per object, located by the ``where`` extractors."""

    operation = OperationType.UPDATE

    def __init__(self, table: "TableProtocol", objects: "Iterable[ObjectT]") -> None:
        super().__init__(table, objects)
        self._field_names: list[str] = []
        self._field_extractors: list[ValueExtractor[ObjectT]] = []

    def where(self, field: str, extractor: "ValueExtractor[ObjectT]") -> Self:
        """Restrict each object's UPDATE to rows where ``field`` equals the extracted value."""
        self._where_fields.append(field)
        self._where_extractors.append(extractor)
        return self

    def execute(self, connection: "Optional[Connection]" = None) -> int:
        """Update every object's row and return the summed affected row count."""
        self._require_predicates()
        fields, extractors = self._with_audit(dict(self._table.audit_values(OperationType.UPDATE)))
        statement = render_update(
            self._table.table_name,
            fields,
            [None] * len(fields),
            self._where_conditions(),
            [None] * len(self._where_fields),
        )
        return self._execute_batch(statement.sql, [*extractors, *self._where_extractors], connection)


class BulkDeleteBuilder(_BulkBuilder[ObjectT]):
    """DELETE of the rows matching each object."""

    operation = OperationType.DELETE

    def where(self, field: str, extractor: "ValueExtractor[ObjectT]") -> Self:
        self._where_fields.append(field)
        self._where_extractors.append(extractor)
        return self

    def execute(self, connection: "Optional[Connection]" = None) -> int:
        self._require_predicates()
        statement = render_delete(self._table.table_name, self._where_conditions(), [None] * len(self._where_fields))
        return self._execute_batch(statement.sql, self._where_extractors, connection)
