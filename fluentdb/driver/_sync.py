"""Synchronous statement execution against DB-API 2.0 connections."""

import contextlib
import time
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Optional

from fluentdb.core.compiler import OperationType, Statement
from fluentdb.core.config import DEFAULT_STATEMENT_CONFIG, GeneratedKeys, StatementConfig
from fluentdb.core.result import DatabaseRow, column_names
from fluentdb.driver.context import resolve_connection
from fluentdb.exceptions import UnsupportedGenerationError
from fluentdb.observability import create_event, notify_observers
from fluentdb.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from fluentdb.core.compiler import ColumnReference
    from fluentdb.typing import Connection, Cursor

__all__ = ("CursorScope", "StatementExecutor")

logger = get_logger("driver")

FETCH_SIZE = 100
KEY_SAVEPOINT = "fluentdb_generated_key"


class CursorScope:
    """Context manager for DB-API cursor management."""

    __slots__ = ("connection", "cursor")

    def __init__(self, connection: "Connection") -> None:
        self.connection = connection
        self.cursor: "Optional[Cursor]" = None

    def __enter__(self) -> "Cursor":
        self.cursor = self.connection.cursor()
        return self.cursor

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self.cursor is not None:
            with contextlib.suppress(Exception):
                self.cursor.close()
            self.cursor = None


class _ExecutionRecord:
    __slots__ = ("rows_affected",)

    def __init__(self) -> None:
        self.rows_affected: "Optional[int]" = None


class StatementExecutor:
    """Runs rendered statements on the calling thread and reports each execution.

    Driver errors propagate unchanged after observers have been notified.
    """

    __slots__ = ("config",)

    def __init__(self, config: "Optional[StatementConfig]" = None) -> None:
        self.config = config or DEFAULT_STATEMENT_CONFIG

    def _prepare(self, statement: Statement) -> "list[Any]":
        if self.config.validate_parameters:
            statement.validate(self.config.dialect)
        return self.config.coerce_parameters(list(statement.parameters))

    @contextmanager
    def _observe(
        self,
        operation: "OperationType",
        table: "Optional[str]",
        sql: str,
        parameters: Any,
        is_many: bool = False,
    ) -> "Iterator[_ExecutionRecord]":
        record = _ExecutionRecord()
        parameter_count = len(parameters) if not is_many else len(parameters[0]) if parameters else 0
        logger.debug("Executing %s on %s: %s (%d parameter(s))", operation.value, table, sql, parameter_count)
        started_at = time.time()
        start = time.perf_counter()
        error: "Optional[BaseException]" = None
        try:
            yield record
        except Exception as e:
            error = e
            logger.debug("%s on %s failed with %s", operation.value, table, type(e).__name__)
            raise
        finally:
            if self.config.statement_observers:
                event = create_event(
                    operation=operation.value,
                    table=table,
                    sql=sql,
                    parameters=parameters,
                    duration_s=time.perf_counter() - start,
                    rows_affected=record.rows_affected,
                    error=error,
                    is_many=is_many,
                    started_at=started_at,
                )
                notify_observers(self.config.statement_observers, event)

    def execute(self, statement: Statement, connection: "Optional[Connection]" = None) -> int:
        """Execute an INSERT, UPDATE or DELETE and return the affected row count."""
        parameters = self._prepare(statement)
        with (
            self._observe(statement.operation, statement.table, statement.sql, parameters) as record,
            CursorScope(resolve_connection(connection)) as cursor,
        ):
            cursor.execute(statement.sql, parameters)
            record.rows_affected = cursor.rowcount
        return record.rows_affected or 0

    def execute_returning_key(
        self, statement: Statement, id_field: str, connection: "Optional[Connection]" = None
    ) -> Any:
        """Execute an INSERT that omits ``id_field`` and return the key the database generated.

        With ``GeneratedKeys.LASTROWID`` the INSERT runs inside a savepoint that is rolled
        back when the driver reports no key, so a failed key lookup leaves no row behind.
        Releasing the savepoint commits when no transaction was open before it.

        Raises:
            UnsupportedGenerationError: If the configured driver cannot report generated keys.
        """
        mode = self.config.generated_keys
        if mode is GeneratedKeys.UNSUPPORTED:
            raise UnsupportedGenerationError(
                "Driver is configured without generated key support; use a UUID or explicit key",
                operation=statement.operation.value,
                table=statement.table,
                column=id_field,
            )
        if mode is GeneratedKeys.RETURNING:
            statement = statement._replace(sql=f"{statement.sql} RETURNING {id_field}")
        parameters = self._prepare(statement)
        with (
            self._observe(statement.operation, statement.table, statement.sql, parameters) as record,
            CursorScope(resolve_connection(connection)) as cursor,
        ):
            if mode is GeneratedKeys.RETURNING:
                cursor.execute(statement.sql, parameters)
                row = cursor.fetchone()
                key = row[0] if row else None
                record.rows_affected = cursor.rowcount
            else:
                key, record.rows_affected = self._insert_reporting_lastrowid(cursor, statement.sql, parameters)
        if key is None:
            raise UnsupportedGenerationError(
                "Driver reported no generated key; the insert was rolled back",
                operation=statement.operation.value,
                table=statement.table,
                column=id_field,
            )
        return key

    @staticmethod
    def _insert_reporting_lastrowid(cursor: "Cursor", sql: str, parameters: "list[Any]") -> "tuple[Any, int]":
        cursor.execute(f"SAVEPOINT {KEY_SAVEPOINT}")
        try:
            cursor.execute(sql, parameters)
            key = getattr(cursor, "lastrowid", None)
            rowcount = cursor.rowcount
        except Exception:
            with contextlib.suppress(Exception):
                cursor.execute(f"ROLLBACK TO SAVEPOINT {KEY_SAVEPOINT}")
                cursor.execute(f"RELEASE SAVEPOINT {KEY_SAVEPOINT}")
            raise
        if key is None:
            cursor.execute(f"ROLLBACK TO SAVEPOINT {KEY_SAVEPOINT}")
            rowcount = 0
        cursor.execute(f"RELEASE SAVEPOINT {KEY_SAVEPOINT}")
        return key, rowcount

    def execute_many(
        self,
        sql: str,
        parameter_sets: "Sequence[Sequence[Any]]",
        operation: OperationType,
        table: "Optional[str]" = None,
        connection: "Optional[Connection]" = None,
    ) -> int:
        """Execute one statement template once per parameter set in a single batch.

        Returns:
            The total number of affected rows.
        """
        if not parameter_sets:
            return 0
        prepared = [self._prepare(Statement(sql, tuple(parameters), operation, table)) for parameters in parameter_sets]
        with (
            self._observe(operation, table, sql, prepared, is_many=True) as record,
            CursorScope(resolve_connection(connection)) as cursor,
        ):
            cursor.executemany(sql, prepared)
            record.rows_affected = cursor.rowcount
        return record.rows_affected or 0

    def execute_each_returning_key(
        self,
        sql: str,
        parameter_sets: "Sequence[Sequence[Any]]",
        id_field: str,
        table: "Optional[str]" = None,
        connection: "Optional[Connection]" = None,
    ) -> "list[Any]":
        """Execute an INSERT template once per parameter set and collect each generated key."""
        connection = resolve_connection(connection)
        return [
            self.execute_returning_key(
                Statement(sql, tuple(parameters), OperationType.INSERT, table), id_field, connection
            )
            for parameters in parameter_sets
        ]

    @contextmanager
    def open_rows(
        self,
        statement: Statement,
        connection: "Optional[Connection]" = None,
        references: "Optional[Sequence[Optional[ColumnReference]]]" = None,
    ) -> "Iterator[Iterator[DatabaseRow]]":
        """Execute a SELECT and yield a one-shot iterator over its rows.

        The cursor is closed when the block exits, whether or not every row was consumed.
        """
        parameters = self._prepare(statement)
        with CursorScope(resolve_connection(connection)) as cursor:
            with self._observe(statement.operation, statement.table, statement.sql, parameters):
                cursor.execute(statement.sql, parameters)
            names = column_names(cursor.description)
            yield self._iterate_rows(cursor, names, references, statement.table)

    @staticmethod
    def _iterate_rows(
        cursor: "Cursor",
        names: "list[str]",
        references: "Optional[Sequence[Optional[ColumnReference]]]",
        table: "Optional[str]",
    ) -> "Iterator[DatabaseRow]":
        while True:
            batch = cursor.fetchmany(FETCH_SIZE)
            if not batch:
                return
            for values in batch:
                yield DatabaseRow(values, names, references, table=table)

