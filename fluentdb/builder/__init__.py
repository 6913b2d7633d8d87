"""Fluent statement builders created by ``DatabaseTable``."""

from fluentdb.builder._base import FieldValuesMixin, TableProtocol, merge_audit_values
from fluentdb.builder._bulk import BulkDeleteBuilder, BulkInsertBuilder, BulkUpdateBuilder
from fluentdb.builder._delete import DeleteBuilder
from fluentdb.builder._insert import InsertBuilder, InsertWithPkBuilder
from fluentdb.builder._join import JoinedSelectBuilder, TableAlias
from fluentdb.builder._save import KeyStrategy, SaveBuilder, SaveResult, SaveStatus, values_equal
from fluentdb.builder._select import DatabaseQueryBuilder, RowExtractionMixin
from fluentdb.builder._update import UpdateBuilder

__all__ = (
    "BulkDeleteBuilder",
    "BulkInsertBuilder",
    "BulkUpdateBuilder",
    "DatabaseQueryBuilder",
    "DeleteBuilder",
    "FieldValuesMixin",
    "InsertBuilder",
    "InsertWithPkBuilder",
    "JoinedSelectBuilder",
    "KeyStrategy",
    "RowExtractionMixin",
    "SaveBuilder",
    "SaveResult",
    "SaveStatus",
    "TableAlias",
    "TableProtocol",
    "UpdateBuilder",
    "merge_audit_values",
    "values_equal",
)
