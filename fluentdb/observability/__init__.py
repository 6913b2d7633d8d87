"""Public observability exports."""

from fluentdb.observability._observer import (
    StatementEvent,
    StatementObserver,
    create_event,
    default_statement_observer,
    format_statement_event,
    notify_observers,
)

__all__ = (
    "StatementEvent",
    "StatementObserver",
    "create_event",
    "default_statement_observer",
    "format_statement_event",
    "notify_observers",
)
