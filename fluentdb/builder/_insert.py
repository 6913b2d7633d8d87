"""INSERT builders."""

from typing import TYPE_CHECKING, Any, Optional

from fluentdb.builder._base import FieldValuesMixin, merge_audit_values
from fluentdb.core.compiler import OperationType, render_insert

if TYPE_CHECKING:
    from fluentdb.builder._base import TableProtocol
    from fluentdb.core.compiler import Statement
    from fluentdb.typing import Connection

__all__ = ("InsertBuilder", "InsertWithPkBuilder")


class InsertBuilder(FieldValuesMixin):
    """Single-row INSERT.

    Example:
        >>> table.insert().set_field("code", 1).set_field("name", "a").execute(connection)
        1
    """

    def __init__(self, table: "TableProtocol") -> None:
        self._table = table
        self._field_names: list[str] = []
        self._field_values: list[Any] = []

    def build(self) -> "Statement":
        fields, values = merge_audit_values(
            self._field_names, self._field_values, self._table.audit_values(OperationType.INSERT)
        )
        return render_insert(self._table.table_name, fields, values)

    def execute(self, connection: "Optional[Connection]" = None) -> int:
        """Insert the row and return the inserted row count."""
        return self._table.executor.execute(self.build(), connection)

    def set_primary_key(self, id_field: str, id_value: Any = None) -> "InsertWithPkBuilder":
        """Continue as an insert that returns the row's key.

        With ``id_value`` None the key is generated by the database.
        """
        return InsertWithPkBuilder(self, id_field, id_value)


class InsertWithPkBuilder:
    """INSERT whose ``execute`` returns the primary key of the new row."""

    def __init__(self, insert: InsertBuilder, id_field: str, id_value: Any = None) -> None:
        self._insert = insert
        self._id_field = id_field
        self._id_value = id_value

    def set_field(self, field: str, value: Any) -> "InsertWithPkBuilder":
        self._insert.set_field(field, value)
        return self

    def execute(self, connection: "Optional[Connection]" = None) -> Any:
        """Insert the row and return its key."""
        executor = self._insert._table.executor
        if self._id_value is not None:
            self._insert.set_field(self._id_field, self._id_value)
            executor.execute(self._insert.build(), connection)
            return self._id_value
        return executor.execute_returning_key(self._insert.build(), self._id_field, connection)
