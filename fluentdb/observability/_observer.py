"""Statement observer primitives for SQL execution events."""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from time import time
from typing import Any, Optional

from fluentdb.utils.logging import get_logger

__all__ = (
    "StatementEvent",
    "StatementObserver",
    "create_event",
    "default_statement_observer",
    "format_statement_event",
    "notify_observers",
)


logger = get_logger("observability")


StatementObserver = Callable[["StatementEvent"], None]


@dataclass(slots=True)
class StatementEvent:
    """Structured payload describing one SQL execution."""

    operation: str
    table: "Optional[str]"
    sql: str
    parameters: Any
    rows_affected: "Optional[int]"
    duration_s: float
    outcome: str
    error_type: "Optional[str]"
    is_many: bool
    started_at: float

    @property
    def succeeded(self) -> bool:
        return self.outcome == "success"

    def as_dict(self) -> "dict[str, Any]":
        """Return event payload as a dictionary."""

        return {
            "operation": self.operation,
            "table": self.table,
            "sql": self.sql,
            "parameters": self.parameters,
            "rows_affected": self.rows_affected,
            "duration_s": self.duration_s,
            "outcome": self.outcome,
            "error_type": self.error_type,
            "is_many": self.is_many,
            "started_at": self.started_at,
        }


def format_statement_event(event: StatementEvent) -> str:
    """Create a concise human-readable representation of a statement event.

    Parameter values are left out; only their count is shown.
    """

    mode_label = "many" if event.is_many else "single"
    rows_label = "rows=%s" % (event.rows_affected if event.rows_affected is not None else "unknown")
    duration_label = f"{event.duration_s:.6f}s"
    parameter_count = len(event.parameters) if event.parameters is not None else 0
    outcome_label = event.outcome if event.error_type is None else f"{event.outcome}:{event.error_type}"
    return (
        f"[{event.table or '-'}] {event.operation} ({mode_label}, {rows_label}, duration={duration_label}, "
        f"{outcome_label})\nSQL: {event.sql}\nParameters: {parameter_count}"
    )


def default_statement_observer(event: StatementEvent) -> None:
    """Log statement execution payload."""

    logger.info(format_statement_event(event))


def create_event(
    *,
    operation: str,
    table: "Optional[str]",
    sql: str,
    parameters: Any,
    duration_s: float,
    rows_affected: "Optional[int]" = None,
    error: "Optional[BaseException]" = None,
    is_many: bool = False,
    started_at: "Optional[float]" = None,
) -> StatementEvent:
    """Factory helper used by the executor to build statement events."""

    return StatementEvent(
        operation=operation,
        table=table,
        sql=sql,
        parameters=parameters,
        rows_affected=rows_affected,
        duration_s=duration_s,
        outcome="success" if error is None else "error",
        error_type=type(error).__name__ if error is not None else None,
        is_many=is_many,
        started_at=started_at if started_at is not None else time(),
    )


def notify_observers(observers: "Iterable[StatementObserver]", event: StatementEvent) -> None:
    """Deliver ``event`` to every observer.

    A failing observer is logged and skipped so reporting never changes the outcome of the statement.
    """
    for observer in observers:
        try:
            observer(event)
        except Exception:
            logger.exception("Statement observer %r failed", observer)
