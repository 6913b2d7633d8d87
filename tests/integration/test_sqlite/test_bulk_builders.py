"""Integration tests for batched statements on sqlite3."""

import sqlite3
from dataclasses import dataclass
from typing import Optional

import pytest

from fluentdb import DatabaseTable, StatementEvent, TimestampedTable

pytestmark = pytest.mark.integration


@dataclass
class Entry:
    code: int
    name: str
    id: Optional[int] = None


@pytest.fixture
def entries() -> "list[Entry]":
    return [Entry(1, "one"), Entry(2, "two"), Entry(3, "three")]


def _codes_and_names(table: DatabaseTable, connection: sqlite3.Connection) -> "list[tuple]":
    return table.query().order_by("code").list(lambda row: (row.get_int("code"), row.get_string("name")), connection)


def test_bulk_insert(demo_table: DatabaseTable, sqlite_connection: sqlite3.Connection, entries: "list[Entry]") -> None:
    count = (
        demo_table.bulk_insert(entries)
        .set_field("code", lambda entry: entry.code)
        .set_field("name", lambda entry: entry.name)
        .execute(sqlite_connection)
    )

    assert count == 3
    assert _codes_and_names(demo_table, sqlite_connection) == [(1, "one"), (2, "two"), (3, "three")]


def test_bulk_insert_runs_one_batch(
    demo_table: DatabaseTable, sqlite_connection: sqlite3.Connection, entries: "list[Entry]"
) -> None:
    events: list[StatementEvent] = []
    table = DatabaseTable("demo_table", demo_table.config.replace(statement_observers=(events.append,)))

    table.bulk_insert(entries).set_field("code", lambda entry: entry.code).execute(sqlite_connection)

    assert len(events) == 1
    assert events[0].is_many
    assert events[0].sql == "INSERT INTO demo_table (code) VALUES (?)"
    assert events[0].rows_affected == 3


def test_bulk_insert_accepts_generators(demo_table: DatabaseTable, sqlite_connection: sqlite3.Connection) -> None:
    count = demo_table.bulk_insert(Entry(code, f"n{code}") for code in range(5)).set_field(
        "code", lambda entry: entry.code
    ).execute(sqlite_connection)

    assert count == 5


def test_bulk_insert_generates_keys(
    demo_table: DatabaseTable, sqlite_connection: sqlite3.Connection, entries: "list[Entry]"
) -> None:
    def set_id(entry: Entry, key: int) -> None:
        entry.id = key

    count = (
        demo_table.bulk_insert(entries)
        .set_field("code", lambda entry: entry.code)
        .set_field("name", lambda entry: entry.name)
        .generate_primary_keys("id", set_id)
        .execute(sqlite_connection)
    )

    assert count == 3
    assert all(entry.id is not None for entry in entries)
    assert len({entry.id for entry in entries}) == 3
    for entry in entries:
        assert demo_table.where("id", entry.id).single_string("name", sqlite_connection) == entry.name


def test_bulk_update(demo_table: DatabaseTable, sqlite_connection: sqlite3.Connection, entries: "list[Entry]") -> None:
    demo_table.bulk_insert(entries).set_field("code", lambda entry: entry.code).set_field(
        "name", lambda entry: entry.name
    ).execute(sqlite_connection)
    changed = [Entry(1, "uno"), Entry(3, "tres"), Entry(99, "missing")]

    count = (
        demo_table.bulk_update(changed)
        .set_field("name", lambda entry: entry.name)
        .where("code", lambda entry: entry.code)
        .execute(sqlite_connection)
    )

    assert count == 2
    assert _codes_and_names(demo_table, sqlite_connection) == [(1, "uno"), (2, "two"), (3, "tres")]


def test_bulk_delete(demo_table: DatabaseTable, sqlite_connection: sqlite3.Connection, entries: "list[Entry]") -> None:
    demo_table.bulk_insert(entries).set_field("code", lambda entry: entry.code).set_field(
        "name", lambda entry: entry.name
    ).execute(sqlite_connection)

    count = (
        demo_table.bulk_delete(entries[:2])
        .where("code", lambda entry: entry.code)
        .where("name", lambda entry: entry.name)
        .execute(sqlite_connection)
    )

    assert count == 2
    assert _codes_and_names(demo_table, sqlite_connection) == [(3, "three")]


def test_bulk_on_timestamped_table(
    timestamped_table: TimestampedTable, sqlite_connection: sqlite3.Connection, entries: "list[Entry]"
) -> None:
    timestamped_table.bulk_insert(entries).set_field("code", lambda entry: entry.code).set_field(
        "name", lambda entry: entry.name
    ).execute(sqlite_connection)
    created = timestamped_table.where("code", 1).single_instant("updated_at", sqlite_connection)

    timestamped_table.bulk_update(entries[:1]).set_field("name", lambda entry: "renamed").where(
        "code", lambda entry: entry.code
    ).execute(sqlite_connection)

    assert timestamped_table.where("code", 1).single_instant("updated_at", sqlite_connection) > created
    assert timestamped_table.where("code", 2).single_instant("updated_at", sqlite_connection) == created
    assert timestamped_table.where("code", 1).single_instant("created_at", sqlite_connection) == created
