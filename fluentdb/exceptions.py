from typing import Any, Optional

__all__ = (
    "AmbiguousMatchError",
    "FluentDBError",
    "ImproperConfigurationError",
    "MissingKeyError",
    "MultipleResultsFoundError",
    "NotFoundError",
    "NullValueError",
    "ParameterMismatchError",
    "QueryError",
    "SQLBuilderError",
    "UnsupportedGenerationError",
)


class FluentDBError(Exception):
    """Base exception class from which all fluentdb exceptions inherit."""

    detail: str

    def __init__(self, *args: Any, detail: str = "") -> None:
        """Initialize ``FluentDBError``.

        Args:
            *args: args are converted to :class:`str` before passing to :class:`Exception`
            detail: detail of the exception.
        """
        str_args = [str(arg) for arg in args if arg]
        if not detail:
            if str_args:
                detail, *str_args = str_args
            elif hasattr(self, "detail"):
                detail = self.detail
        self.detail = detail
        super().__init__(*str_args)

    def __repr__(self) -> str:
        if self.detail:
            return f"{self.__class__.__name__} - {self.detail}"
        return self.__class__.__name__

    def __str__(self) -> str:
        return " ".join((*self.args, self.detail)).strip()


def _with_context(
    message: str, operation: "Optional[str]", table: "Optional[str]", column: "Optional[str]"
) -> str:
    context = [
        f"{label}={value}"
        for label, value in (("operation", operation), ("table", table), ("column", column))
        if value
    ]
    if not context:
        return message
    return f"{message} [{' '.join(context)}]"


class QueryError(FluentDBError):
    """Base class for failures of a statement against a table.

    Carries the operation kind and, where known, the table and column involved.
    Parameter values are never part of the message.
    """

    operation: "Optional[str]"
    table: "Optional[str]"
    column: "Optional[str]"

    def __init__(
        self,
        message: "Optional[str]" = None,
        *,
        operation: "Optional[str]" = None,
        table: "Optional[str]" = None,
        column: "Optional[str]" = None,
    ) -> None:
        if message is None:
            message = self.__class__.__doc__.splitlines()[0] if self.__class__.__doc__ else "Query failed."
        super().__init__(detail=_with_context(message, operation, table, column))
        self.operation = operation
        self.table = table
        self.column = column


class NotFoundError(QueryError):
    """No rows matched a query that requires exactly one."""


class MultipleResultsFoundError(QueryError):
    """More than one row matched a query that requires exactly one."""


class NullValueError(QueryError):
    """A non-nullable column read returned NULL."""


class AmbiguousMatchError(QueryError):
    """Unique key predicates matched more than one row during save."""


class MissingKeyError(QueryError):
    """An explicit primary key value is required but none was given."""


class UnsupportedGenerationError(QueryError):
    """The driver cannot report generated keys."""


class ParameterMismatchError(FluentDBError):
    """Placeholder count of a rendered statement differs from its bound parameter count."""

    sql: str
    placeholder_count: int
    parameter_count: int

    def __init__(self, sql: str, placeholder_count: int, parameter_count: int, message: "Optional[str]" = None) -> None:
        if message is None:
            message = f"Statement has {placeholder_count} placeholder(s) but {parameter_count} parameter(s)"
        super().__init__(detail=f"{message}\nSQL: {sql}")
        self.sql = sql
        self.placeholder_count = placeholder_count
        self.parameter_count = parameter_count


class SQLBuilderError(FluentDBError):
    """Issues building or generating SQL statements."""

    def __init__(self, message: "Optional[str]" = None) -> None:
        if message is None:
            message = "Issues building SQL statement."
        super().__init__(message)


class ImproperConfigurationError(FluentDBError):
    """Improper Configuration error.

    Raised when an operation needs something the caller did not provide, such as
    an ambient connection.
    """
