"""Shared pieces of the statement builders."""

from typing import TYPE_CHECKING, Any, Protocol

from mypy_extensions import trait
from typing_extensions import Self

from fluentdb.exceptions import SQLBuilderError

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from fluentdb.core.compiler import OperationType
    from fluentdb.core.config import StatementConfig
    from fluentdb.driver import StatementExecutor

__all__ = ("FieldValuesMixin", "TableProtocol", "merge_audit_values")


class TableProtocol(Protocol):
    """What builders need from the table that created them."""

    table_name: str
    config: "StatementConfig"
    executor: "StatementExecutor"

    def audit_values(self, operation: "OperationType") -> "Mapping[str, Any]": ...


def merge_audit_values(
    fields: "Sequence[str]", values: "Sequence[Any]", audit: "Mapping[str, Any]"
) -> "tuple[list[str], list[Any]]":
    """Append audit columns the caller did not set explicitly."""
    merged_fields = list(fields)
    merged_values = list(values)
    for column, value in audit.items():
        if column not in merged_fields:
            merged_fields.append(column)
            merged_values.append(value)
    return merged_fields, merged_values


@trait
class FieldValuesMixin:
    """``set_field``/``set_fields`` for builders that assign column values.

    Classes using it must create ``_field_names`` and ``_field_values`` lists.
    """

    _field_names: "list[str]"
    _field_values: "list[Any]"

    def set_field(self, field: str, value: Any) -> "Self":
        """Assign ``value`` to ``field``."""
        self._field_names.append(field)
        self._field_values.append(value)
        return self

    def set_fields(self, fields: "Sequence[str]", values: "Sequence[Any]") -> "Self":
        """Call :meth:`set_field` for each field and value pair."""
        if len(fields) != len(values):
            msg = f"{len(fields)} field(s) but {len(values)} value(s)"
            raise SQLBuilderError(msg)
        for field, value in zip(fields, values):
            self.set_field(field, value)
        return self
