"""Typed access to a single result row.

``DatabaseRow`` wraps one DB-API row tuple together with the cursor description and
converts column values on request. Row mappers receive one and must not keep it
after they return.
"""

import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Optional, Union
from uuid import UUID

from fluentdb.core.compiler import ColumnReference
from fluentdb.exceptions import NullValueError, QueryError

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping, Sequence

__all__ = ("DatabaseRow", "column_names", "to_datetime", "to_int", "to_string", "to_uuid")

ColumnKey = Union[str, int, ColumnReference]


def column_names(description: Any) -> "list[str]":
    """Extract column names from a DB-API ``cursor.description``."""
    return [str(column[0]) for column in description or ()]


def to_string(value: Any) -> "Optional[str]":
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8")
    return str(value)


def to_int(value: Any) -> "Optional[int]":
    if value is None or isinstance(value, int):
        return value
    if isinstance(value, (float, Decimal)):
        return int(value)
    return int(str(value).strip())


def to_datetime(value: Any) -> "Optional[datetime.datetime]":
    """Convert driver temporal values, ISO text and epoch seconds to ``datetime``."""
    if value is None or isinstance(value, datetime.datetime):
        return value
    if isinstance(value, datetime.date):
        return datetime.datetime(value.year, value.month, value.day)
    if isinstance(value, (int, float)):
        return datetime.datetime.fromtimestamp(value, tz=datetime.timezone.utc)
    text = to_string(value)
    if text is None:
        return None
    return datetime.datetime.fromisoformat(text.strip().replace("Z", "+00:00"))


def to_uuid(value: Any) -> "Optional[UUID]":
    if value is None or isinstance(value, UUID):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)) and len(bytes(value)) == 16:
        return UUID(bytes=bytes(value))
    return UUID(str(to_string(value)))


class DatabaseRow:
    """One row of a result set with typed column getters.

    Columns are looked up by position, by case-insensitive name, or by a
    ``ColumnReference`` when the statement selected alias-qualified columns.
    """

    __slots__ = ("_index", "_names", "_references", "_table", "_values")

    def __init__(
        self,
        values: "Sequence[Any]",
        names: "Sequence[str]",
        references: "Optional[Sequence[Optional[ColumnReference]]]" = None,
        table: "Optional[str]" = None,
    ) -> None:
        self._values = tuple(values)
        self._names = tuple(names)
        self._references = tuple(references) if references is not None else ()
        self._table = table
        index: dict[str, int] = {}
        for position, name in enumerate(self._names):
            index.setdefault(name.lower(), position)
        self._index = index

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> "Iterator[Any]":
        return iter(self._values)

    def __getitem__(self, key: ColumnKey) -> Any:
        return self.get(key)

    def __repr__(self) -> str:
        return f"DatabaseRow({self.as_dict()!r})"

    def keys(self) -> "tuple[str, ...]":
        return self._names

    def as_dict(self) -> "dict[str, Any]":
        return dict(zip(self._names, self._values))

    def _position(self, key: ColumnKey) -> int:
        if isinstance(key, int):
            if not -len(self._values) <= key < len(self._values):
                msg = f"Column index {key} out of range"
                raise QueryError(msg, operation="SELECT", table=self._table)
            return key
        if isinstance(key, ColumnReference):
            if key in self._references:
                return self._references.index(key)
            key = key.column_name
        position = self._index.get(key.lower())
        if position is None:
            msg = f"Column {key!r} is not part of the result"
            raise QueryError(msg, operation="SELECT", table=self._table, column=key)
        return position

    def get(self, key: ColumnKey) -> Any:
        """Return the raw driver value of a column."""
        return self._values[self._position(key)]

    def is_null(self, key: ColumnKey) -> bool:
        return self.get(key) is None

    def _require(self, key: ColumnKey, value: Any) -> Any:
        if value is None:
            column = str(key)
            raise NullValueError(operation="SELECT", table=self._table, column=column)
        return value

    def get_string(self, key: ColumnKey) -> "Optional[str]":
        return to_string(self.get(key))

    def get_int(self, key: ColumnKey) -> "Optional[int]":
        return to_int(self.get(key))

    get_long = get_int

    def get_float(self, key: ColumnKey) -> "Optional[float]":
        value = self.get(key)
        return None if value is None else float(value)

    def get_decimal(self, key: ColumnKey) -> "Optional[Decimal]":
        value = self.get(key)
        return None if value is None else Decimal(str(value))

    def get_bool(self, key: ColumnKey) -> "Optional[bool]":
        value = self.get(key)
        if value is None or isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.strip().lower() in {"1", "true", "t", "yes", "y"}
        return bool(value)

    def get_datetime(self, key: ColumnKey) -> "Optional[datetime.datetime]":
        return to_datetime(self.get(key))

    get_instant = get_datetime

    def get_date(self, key: ColumnKey) -> "Optional[datetime.date]":
        value = self.get(key)
        if value is None or (isinstance(value, datetime.date) and not isinstance(value, datetime.datetime)):
            return value
        converted = to_datetime(value)
        return converted.date() if converted is not None else None

    def get_uuid(self, key: ColumnKey) -> "Optional[UUID]":
        return to_uuid(self.get(key))

    def require_string(self, key: ColumnKey) -> str:
        return self._require(key, self.get_string(key))

    def require_int(self, key: ColumnKey) -> int:
        return self._require(key, self.get_int(key))

    def require_datetime(self, key: ColumnKey) -> "datetime.datetime":
        return self._require(key, self.get_datetime(key))

    def table(self, alias: str) -> "DatabaseRow":
        """Return the columns selected from the table known as ``alias``.

        Only available when the statement selected explicit ``ColumnReference`` columns.
        """
        selected = [
            (reference, value)
            for reference, value in zip(self._references, self._values)
            if reference is not None and reference.alias == alias
        ]
        if not selected:
            msg = f"No columns selected for alias {alias!r}"
            raise QueryError(msg, operation="SELECT", table=self._table)
        return DatabaseRow(
            [value for _, value in selected],
            [reference.column_name for reference, _ in selected],
            [reference for reference, _ in selected],
            table=self._table,
        )

    @classmethod
    def from_mapping(cls, mapping: "Mapping[str, Any]", table: "Optional[str]" = None) -> "DatabaseRow":
        return cls(list(mapping.values()), list(mapping.keys()), table=table)
