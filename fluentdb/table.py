"""Table entry points for every builder."""

import datetime
from typing import TYPE_CHECKING, Any, Callable, Optional

from fluentdb.builder import (
    BulkDeleteBuilder,
    BulkInsertBuilder,
    BulkUpdateBuilder,
    DatabaseQueryBuilder,
    DeleteBuilder,
    InsertBuilder,
    KeyStrategy,
    SaveBuilder,
    TableAlias,
    UpdateBuilder,
)
from fluentdb.core.compiler import OperationType
from fluentdb.core.config import DEFAULT_STATEMENT_CONFIG
from fluentdb.driver import StatementExecutor

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable, Mapping, Sequence

    from fluentdb.core.compiler import ColumnReference
    from fluentdb.core.config import StatementConfig
    from fluentdb.typing import ObjectT

__all__ = ("DatabaseTable", "TimestampedTable", "utc_now")


def utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class DatabaseTable:
    """A named table and the configuration its statements run with.

    Example:
        >>> table = DatabaseTable("demo_table", sqlite_statement_config)
        >>> table.insert().set_field("code", 1).set_field("name", "a").execute(connection)
        1
        >>> table.where("code", 1).single_string("name", connection)
        'a'
    """

    __slots__ = ("config", "executor", "table_name")

    def __init__(self, table_name: str, config: "Optional[StatementConfig]" = None) -> None:
        self.table_name = table_name
        self.config = config or DEFAULT_STATEMENT_CONFIG
        self.executor = StatementExecutor(self.config)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.table_name!r})"

    def audit_values(self, operation: OperationType) -> "Mapping[str, Any]":
        """Columns added to every INSERT or UPDATE of this table."""
        return {}

    def query(self) -> DatabaseQueryBuilder:
        return DatabaseQueryBuilder(self)

    def unordered(self) -> DatabaseQueryBuilder:
        """Query whose list results may come back in any order."""
        return self.query().unordered()

    def where(self, field: "str | ColumnReference", value: Any) -> DatabaseQueryBuilder:
        return self.query().where_equals(field, value)

    def where_optional(self, field: str, value: Any) -> DatabaseQueryBuilder:
        return self.query().where_optional(field, value)

    def where_in(self, field: str, values: "Collection[Any]") -> DatabaseQueryBuilder:
        return self.query().where_in(field, values)

    def where_expression(self, expression: str, *parameters: Any) -> DatabaseQueryBuilder:
        return self.query().where_expression(expression, *parameters)

    def where_all(self, fields: "Sequence[str]", values: "Sequence[Any]") -> DatabaseQueryBuilder:
        return self.query().where_all(fields, values)

    def order_by(self, clause: str) -> DatabaseQueryBuilder:
        return self.query().order_by(clause)

    def insert(self) -> InsertBuilder:
        return InsertBuilder(self)

    def update(self) -> UpdateBuilder:
        """UPDATE without predicates. Executing it changes every row."""
        return UpdateBuilder(self)

    def delete(self) -> DeleteBuilder:
        return DeleteBuilder(self)

    def alias(self, alias: str) -> TableAlias:
        return TableAlias(self, alias)

    def save(self, id_field: str, id_value: Any = None, strategy: KeyStrategy = KeyStrategy.GENERATED) -> SaveBuilder:
        """Insert-or-update builder using the given key strategy."""
        return SaveBuilder(self, id_field, id_value, strategy)

    def new_save_builder(self, id_field: str, id_value: "Optional[int]") -> SaveBuilder:
        """Save with a database generated numeric key when ``id_value`` is None."""
        return self.save(id_field, id_value, KeyStrategy.GENERATED)

    def new_save_builder_with_uuid(self, id_field: str, id_value: Any) -> SaveBuilder:
        """Save with a random UUID key when ``id_value`` is None."""
        return self.save(id_field, id_value, KeyStrategy.UUID)

    def new_save_builder_no_generated_keys(self, id_field: str, id_value: Any) -> SaveBuilder:
        """Save that never generates a key; inserting without ``id_value`` fails."""
        return self.save(id_field, id_value, KeyStrategy.EXPLICIT)

    new_save_builder_with_string = new_save_builder_no_generated_keys

    def bulk_insert(self, objects: "Iterable[ObjectT]") -> "BulkInsertBuilder[ObjectT]":
        return BulkInsertBuilder(self, objects)

    def bulk_update(self, objects: "Iterable[ObjectT]") -> "BulkUpdateBuilder[ObjectT]":
        return BulkUpdateBuilder(self, objects)

    def bulk_delete(self, objects: "Iterable[ObjectT]") -> "BulkDeleteBuilder[ObjectT]":
        return BulkDeleteBuilder(self, objects)


class TimestampedTable(DatabaseTable):
    """Table with audit columns maintained on every write.

    INSERT sets both ``created_at`` and ``updated_at`` to the same timestamp; UPDATE
    sets ``updated_at`` only. A save that changes nothing issues no statement and so
    leaves ``updated_at`` untouched.
    """

    __slots__ = ("clock", "created_at", "updated_at")

    def __init__(
        self,
        table_name: str,
        config: "Optional[StatementConfig]" = None,
        *,
        created_at: str = "created_at",
        updated_at: str = "updated_at",
        clock: "Optional[Callable[[], datetime.datetime]]" = None,
    ) -> None:
        super().__init__(table_name, config)
        self.created_at = created_at
        self.updated_at = updated_at
        self.clock = clock or utc_now

    def audit_values(self, operation: OperationType) -> "Mapping[str, Any]":
        now = self.clock()
        if operation is OperationType.INSERT:
            return {self.created_at: now, self.updated_at: now}
        if operation is OperationType.UPDATE:
            return {self.updated_at: now}
        return {}
