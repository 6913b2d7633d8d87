"""Statement execution and connection scoping."""

from fluentdb.driver._sync import CursorScope, StatementExecutor
from fluentdb.driver.context import connection_scope, get_current_connection, resolve_connection

__all__ = ("CursorScope", "StatementExecutor", "connection_scope", "get_current_connection", "resolve_connection")
