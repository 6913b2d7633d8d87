"""Statement composition, predicates, parameters and rows."""

from fluentdb.core.compiler import (
    ColumnReference,
    JoinClause,
    JoinType,
    OperationType,
    Statement,
    TableReference,
    render_delete,
    render_insert,
    render_select,
    render_update,
)
from fluentdb.core.config import DEFAULT_STATEMENT_CONFIG, GeneratedKeys, StatementConfig, sqlite_statement_config
from fluentdb.core.parameters import count_placeholders, validate_parameter_count
from fluentdb.core.predicates import PredicateAccumulator
from fluentdb.core.result import DatabaseRow

__all__ = (
    "DEFAULT_STATEMENT_CONFIG",
    "ColumnReference",
    "DatabaseRow",
    "GeneratedKeys",
    "JoinClause",
    "JoinType",
    "OperationType",
    "PredicateAccumulator",
    "Statement",
    "StatementConfig",
    "TableReference",
    "count_placeholders",
    "render_delete",
    "render_insert",
    "render_select",
    "render_update",
    "sqlite_statement_config",
    "validate_parameter_count",
)
