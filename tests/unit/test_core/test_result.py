"""Unit tests for DatabaseRow column access."""

import datetime
from decimal import Decimal
from uuid import UUID

import pytest

from fluentdb.core.compiler import TableReference
from fluentdb.core.result import DatabaseRow, column_names, to_datetime, to_int, to_uuid
from fluentdb.exceptions import NullValueError, QueryError


@pytest.fixture
def row() -> DatabaseRow:
    return DatabaseRow(
        [1, "a", None, "42", "1.50", "true"], ["ID", "Name", "missing", "count", "price", "flag"], table="t"
    )


def test_lookup_by_name_position_and_case(row: DatabaseRow) -> None:
    assert row.get("id") == 1
    assert row.get("NAME") == "a"
    assert row.get(1) == "a"
    assert row[-1] == "true"
    assert row["name"] == "a"


def test_typed_getters(row: DatabaseRow) -> None:
    assert row.get_int("count") == 42
    assert row.get_long("id") == 1
    assert row.get_string("id") == "1"
    assert row.get_decimal("price") == Decimal("1.50")
    assert row.get_float("price") == 1.5
    assert row.get_bool("flag") is True


def test_null_handling(row: DatabaseRow) -> None:
    assert row.is_null("missing")
    assert row.get_string("missing") is None
    assert row.get_datetime("missing") is None
    with pytest.raises(NullValueError, match="column=missing"):
        row.require_string("missing")


def test_unknown_column(row: DatabaseRow) -> None:
    with pytest.raises(QueryError, match="not part of the result"):
        row.get("nope")
    with pytest.raises(QueryError):
        row.get(10)


def test_row_as_mapping(row: DatabaseRow) -> None:
    assert row.keys() == ("ID", "Name", "missing", "count", "price", "flag")
    assert row.as_dict()["Name"] == "a"
    assert len(row) == 6
    assert list(row)[0] == 1


def test_from_mapping() -> None:
    row = DatabaseRow.from_mapping({"code": 100, "name": "x"})

    assert row.get_int("code") == 100
    assert row.require_string("name") == "x"


def test_datetime_conversion() -> None:
    assert to_datetime("2024-01-02T03:04:05Z") == datetime.datetime(2024, 1, 2, 3, 4, 5, tzinfo=datetime.timezone.utc)
    assert to_datetime("2024-01-02 03:04:05") == datetime.datetime(2024, 1, 2, 3, 4, 5)
    assert to_datetime(0) == datetime.datetime(1970, 1, 1, tzinfo=datetime.timezone.utc)
    assert to_datetime(datetime.date(2024, 1, 2)) == datetime.datetime(2024, 1, 2)


def test_get_date() -> None:
    row = DatabaseRow(["2024-05-06T07:08:09+00:00"], ["created_at"])

    assert row.get_date("created_at") == datetime.date(2024, 5, 6)
    assert row.get_instant("created_at").tzinfo is not None


def test_uuid_and_int_conversion() -> None:
    value = UUID("12345678-1234-5678-1234-567812345678")

    assert to_uuid(str(value)) == value
    assert to_uuid(value.bytes) == value
    assert to_int(" 7 ") == 7
    assert to_int(Decimal("3")) == 3


def test_table_view_for_alias_qualified_columns() -> None:
    orders = TableReference("orders", "o")
    customers = TableReference("customers", "c")
    references = [orders.column("id"), customers.column("id"), customers.column("name")]
    row = DatabaseRow([10, 20, "x"], ["id", "id", "name"], references)

    assert row.get(customers.column("id")) == 20
    assert row.get(orders.column("id")) == 10
    assert row.table("c").get_int("id") == 20
    assert row.table("c").get_string("name") == "x"
    assert row.table("o").as_dict() == {"id": 10}
    with pytest.raises(QueryError):
        row.table("z")


def test_column_names_from_description() -> None:
    description = (("id", None, None, None, None, None, None), ("name", None, None, None, None, None, None))

    assert column_names(description) == ["id", "name"]
    assert column_names(None) == []
