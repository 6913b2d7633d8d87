"""fluentdb: fluent, parameterized SQL statement builders over DB-API connections."""

from fluentdb import builder, core, driver, exceptions, observability, typing, utils
from fluentdb.__metadata__ import __version__
from fluentdb.builder import (
    BulkDeleteBuilder,
    BulkInsertBuilder,
    BulkUpdateBuilder,
    DatabaseQueryBuilder,
    DeleteBuilder,
    InsertBuilder,
    InsertWithPkBuilder,
    JoinedSelectBuilder,
    KeyStrategy,
    SaveBuilder,
    SaveResult,
    SaveStatus,
    TableAlias,
    UpdateBuilder,
)
from fluentdb.core import (
    DEFAULT_STATEMENT_CONFIG,
    ColumnReference,
    DatabaseRow,
    GeneratedKeys,
    StatementConfig,
    sqlite_statement_config,
)
from fluentdb.driver import StatementExecutor, connection_scope
from fluentdb.exceptions import (
    AmbiguousMatchError,
    FluentDBError,
    ImproperConfigurationError,
    MissingKeyError,
    MultipleResultsFoundError,
    NotFoundError,
    NullValueError,
    ParameterMismatchError,
    QueryError,
    SQLBuilderError,
    UnsupportedGenerationError,
)
from fluentdb.observability import StatementEvent, default_statement_observer
from fluentdb.table import DatabaseTable, TimestampedTable

__all__ = (
    "DEFAULT_STATEMENT_CONFIG",
    "AmbiguousMatchError",
    "BulkDeleteBuilder",
    "BulkInsertBuilder",
    "BulkUpdateBuilder",
    "ColumnReference",
    "DatabaseQueryBuilder",
    "DatabaseRow",
    "DatabaseTable",
    "DeleteBuilder",
    "FluentDBError",
    "GeneratedKeys",
    "ImproperConfigurationError",
    "InsertBuilder",
    "InsertWithPkBuilder",
    "JoinedSelectBuilder",
    "KeyStrategy",
    "MissingKeyError",
    "MultipleResultsFoundError",
    "NotFoundError",
    "NullValueError",
    "ParameterMismatchError",
    "QueryError",
    "SQLBuilderError",
    "SaveBuilder",
    "SaveResult",
    "SaveStatus",
    "StatementConfig",
    "StatementEvent",
    "StatementExecutor",
    "TableAlias",
    "TimestampedTable",
    "UnsupportedGenerationError",
    "UpdateBuilder",
    "__version__",
    "builder",
    "connection_scope",
    "core",
    "default_statement_observer",
    "driver",
    "exceptions",
    "observability",
    "sqlite_statement_config",
    "typing",
    "utils",
)
