"""Context-based connection access for builders.

Terminal operations accept a connection explicitly. When they are called without
one, the connection bound with :func:`connection_scope` for the current context
is used instead.
"""

from contextlib import contextmanager
from contextvars import ContextVar
from typing import TYPE_CHECKING, Optional

from fluentdb.exceptions import ImproperConfigurationError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from fluentdb.typing import Connection

__all__ = ("connection_scope", "current_connection", "get_current_connection", "resolve_connection")

current_connection: "ContextVar[Optional[Connection]]" = ContextVar("fluentdb_current_connection", default=None)


def get_current_connection() -> "Optional[Connection]":
    """Get the connection bound to the current context, if any."""
    return current_connection.get()


@contextmanager
def connection_scope(connection: "Connection") -> "Iterator[Connection]":
    """Bind ``connection`` as the ambient connection until the block exits.

    Scopes nest; leaving an inner scope restores the outer connection. The
    connection is neither opened nor closed here.
    """
    token = current_connection.set(connection)
    try:
        yield connection
    finally:
        current_connection.reset(token)


def resolve_connection(connection: "Optional[Connection]" = None) -> "Connection":
    """Return ``connection`` or fall back to the ambient one.

    Raises:
        ImproperConfigurationError: If neither is available.
    """
    if connection is not None:
        return connection
    ambient = current_connection.get()
    if ambient is None:
        msg = "No connection given and no connection_scope() is active"
        raise ImproperConfigurationError(msg)
    return ambient
