"""Save (insert-or-update) reconciliation.

A save probes for an existing row, by primary key when an id was given and by the
registered unique keys otherwise, then issues exactly one INSERT, one UPDATE, or
nothing when every supplied value already matches the stored row.
"""

import itertools
import uuid
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import TYPE_CHECKING, Any, NamedTuple, Optional

from typing_extensions import Self

from fluentdb.builder._base import FieldValuesMixin, merge_audit_values
from fluentdb.core.compiler import OperationType, TableReference, render_insert, render_select, render_update
from fluentdb.core.predicates import PredicateAccumulator
from fluentdb.driver.context import resolve_connection
from fluentdb.exceptions import AmbiguousMatchError, MissingKeyError
from fluentdb.utils.logging import get_logger

if TYPE_CHECKING:
    from fluentdb.builder._base import TableProtocol
    from fluentdb.core.result import DatabaseRow
    from fluentdb.typing import Connection

__all__ = ("KeyStrategy", "SaveBuilder", "SaveResult", "SaveStatus", "values_equal")

logger = get_logger("builder.save")


class KeyStrategy(Enum):
    """How the primary key of an inserted row is obtained when no id was given."""

    GENERATED = "generated"
    """The database generates a numeric key that the driver reports back."""
    EXPLICIT = "explicit"
    """The caller always supplies the key."""
    UUID = "uuid"
    """A random UUID is generated and inserted."""


class SaveStatus(Enum):
    INSERTED = "inserted"
    UPDATED = "updated"
    UNCHANGED = "unchanged"


class SaveResult(NamedTuple):
    """Key of the saved row and what the save did to it."""

    id: Any
    status: SaveStatus


def values_equal(new: Any, stored: Any) -> bool:
    """Compare a bound value with the value read back from the database.

    NULL only equals NULL. A number read back is compared numerically with the new
    value, so ``"1.5"`` or ``Decimal("1.50")`` matches a stored ``1.5``. Text read back
    is compared with the text form of the new value.
    """
    if new is None or stored is None:
        return new is None and stored is None
    if new == stored:
        return True
    if isinstance(stored, (int, float, Decimal)) and isinstance(new, (str, int, float, Decimal)):
        return _numbers_equal(new, stored)
    if isinstance(stored, str) and not isinstance(new, str):
        return str(new) == stored
    return False


def _numbers_equal(new: Any, stored: Any) -> bool:
    try:
        return Decimal(str(new)) == Decimal(str(stored))
    except InvalidOperation:
        return False


class SaveBuilder(FieldValuesMixin):
    """Insert-or-update of one row.

    Example:
        >>> table.new_save_builder("id", None).unique_key("code", 100).set_field("name", "a").execute(connection)
        1
    """

    def __init__(
        self,
        table: "TableProtocol",
        id_field: str,
        id_value: Any = None,
        strategy: KeyStrategy = KeyStrategy.GENERATED,
    ) -> None:
        self._table = table
        self._id_field = id_field
        self._id_value = id_value
        self._strategy = strategy
        self._field_names: list[str] = []
        self._field_values: list[Any] = []
        self._unique_fields: list[str] = []
        self._unique_values: list[Any] = []

    @property
    def strategy(self) -> KeyStrategy:
        return self._strategy

    def unique_key(self, field: str, value: Any) -> Self:
        """Identify the row by ``field`` when no id is given. The value is also saved."""
        self._unique_fields.append(field)
        self._unique_values.append(value)
        return self

    def _supplied(self) -> "tuple[list[str], list[Any]]":
        fields = list(self._field_names)
        values = list(self._field_values)
        for field, value in zip(self._unique_fields, self._unique_values):
            if field not in fields:
                fields.append(field)
                values.append(value)
        return fields, values

    def execute(self, connection: "Optional[Connection]" = None) -> Any:
        """Save the row and return its key."""
        return self.save(connection).id

    def save(self, connection: "Optional[Connection]" = None) -> SaveResult:
        """Save the row and report whether it was inserted, updated or left unchanged.

        Raises:
            AmbiguousMatchError: If the unique keys match more than one row.
            MissingKeyError: If an explicit key is required for the insert but none was given.
        """
        connection = resolve_connection(connection)
        existing = self._probe(connection)
        if existing is None:
            result = self._insert(connection)
        else:
            result = self._reconcile(existing, connection)
        logger.debug("Save on %s: %s", self._table.table_name, result.status.value)
        return result

    def _probe(self, connection: "Connection") -> "Optional[DatabaseRow]":
        predicates = PredicateAccumulator()
        if self._id_value is not None:
            probe_fields = [self._id_field]
            predicates.where_equals(self._id_field, self._id_value)
        elif self._unique_fields:
            probe_fields = self._unique_fields
            predicates.where_all(self._unique_fields, self._unique_values)
        else:
            return None
        statement = render_select(
            (), TableReference(self._table.table_name), predicates.conditions, predicates.condition_parameters
        )
        with self._table.executor.open_rows(statement, connection) as rows:
            found = list(itertools.islice(rows, 2))
        if len(found) > 1:
            raise AmbiguousMatchError(
                operation=OperationType.SELECT.value,
                table=self._table.table_name,
                column=", ".join(probe_fields),
            )
        return found[0] if found else None

    def _insert(self, connection: "Connection") -> SaveResult:
        fields, values = self._supplied()
        fields, values = merge_audit_values(fields, values, self._table.audit_values(OperationType.INSERT))
        id_value = self._id_value
        if id_value is None:
            if self._strategy is KeyStrategy.EXPLICIT:
                raise MissingKeyError(
                    operation=OperationType.INSERT.value, table=self._table.table_name, column=self._id_field
                )
            if self._strategy is KeyStrategy.UUID:
                id_value = uuid.uuid4()
        executor = self._table.executor
        if id_value is None:
            statement = render_insert(self._table.table_name, fields, values)
            id_value = executor.execute_returning_key(statement, self._id_field, connection)
        else:
            statement = render_insert(self._table.table_name, [self._id_field, *fields], [id_value, *values])
            executor.execute(statement, connection)
        return SaveResult(id_value, SaveStatus.INSERTED)

    def _reconcile(self, row: "DatabaseRow", connection: "Connection") -> SaveResult:
        found_id = self._read_id(row)
        fields, values = self._supplied()
        config = self._table.config
        if all(values_equal(config.coerce(value), row.get(field)) for field, value in zip(fields, values)):
            return SaveResult(found_id, SaveStatus.UNCHANGED)
        fields, values = merge_audit_values(fields, values, self._table.audit_values(OperationType.UPDATE))
        predicates = PredicateAccumulator().where_equals(self._id_field, found_id)
        statement = render_update(
            self._table.table_name, fields, values, predicates.conditions, predicates.condition_parameters
        )
        self._table.executor.execute(statement, connection)
        return SaveResult(found_id, SaveStatus.UPDATED)

    def _read_id(self, row: "DatabaseRow") -> Any:
        if self._id_value is not None:
            return self._id_value
        if self._strategy is KeyStrategy.UUID:
            return row.get_uuid(self._id_field)
        return row.get(self._id_field)
