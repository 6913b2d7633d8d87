"""DELETE builder."""

from typing import TYPE_CHECKING, Optional

from fluentdb.core.compiler import render_delete
from fluentdb.core.predicates import PredicateAccumulator

if TYPE_CHECKING:
    from fluentdb.builder._base import TableProtocol
    from fluentdb.core.compiler import Statement
    from fluentdb.typing import Connection

__all__ = ("DeleteBuilder",)


class DeleteBuilder(PredicateAccumulator):
    """DELETE of the rows matching the accumulated predicates."""

    def __init__(self, table: "TableProtocol") -> None:
        super().__init__()
        self._table = table

    def build(self) -> "Statement":
        return render_delete(self._table.table_name, self._conditions, self._condition_parameters)

    def execute(self, connection: "Optional[Connection]" = None) -> int:
        return self._table.executor.execute(self.build(), connection)
