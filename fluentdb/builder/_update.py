"""UPDATE builder."""

from typing import TYPE_CHECKING, Any, Optional

from fluentdb.builder._base import FieldValuesMixin, merge_audit_values
from fluentdb.core.compiler import OperationType, render_update
from fluentdb.core.predicates import PredicateAccumulator

if TYPE_CHECKING:
    from fluentdb.builder._base import TableProtocol
    from fluentdb.core.compiler import Statement
    from fluentdb.typing import Connection

__all__ = ("UpdateBuilder",)


class UpdateBuilder(PredicateAccumulator, FieldValuesMixin):
    """UPDATE of the rows matching the accumulated predicates.

    Without predicates every row of the table is updated.
    """

    def __init__(self, table: "TableProtocol") -> None:
        super().__init__()
        self._table = table
        self._field_names: list[str] = []
        self._field_values: list[Any] = []

    def build(self) -> "Statement":
        fields, values = merge_audit_values(
            self._field_names, self._field_values, self._table.audit_values(OperationType.UPDATE)
        )
        return render_update(self._table.table_name, fields, values, self._conditions, self._condition_parameters)

    def execute(self, connection: "Optional[Connection]" = None) -> int:
        """Run the UPDATE and return the number of affected rows.

        Returns 0 without touching the database when no field was set.
        """
        if not self._field_names:
            return 0
        return self._table.executor.execute(self.build(), connection)
