"""Integration tests for the ambient connection and statement observers."""

import logging
import sqlite3

import pytest

from fluentdb import DatabaseTable, StatementEvent, connection_scope, default_statement_observer
from fluentdb.exceptions import ImproperConfigurationError

pytestmark = pytest.mark.integration


def test_operations_use_ambient_connection(demo_table: DatabaseTable, sqlite_connection: sqlite3.Connection) -> None:
    with connection_scope(sqlite_connection):
        key = demo_table.save("id").unique_key("code", 1).set_field("name", "a").execute()
        demo_table.bulk_insert([2, 3]).set_field("code", lambda code: code).execute()
        demo_table.where("code", 2).update().set_field("name", "b").execute()

        assert demo_table.where("id", key).single_string("name") == "a"
        assert demo_table.where("code", 2).single_string("name") == "b"
        assert demo_table.query().order_by("code").list_longs("code") == [1, 2, 3]
        assert demo_table.where("code", 3).delete() == 1


def test_missing_connection(demo_table: DatabaseTable) -> None:
    with pytest.raises(ImproperConfigurationError):
        demo_table.query().get_count()
    with pytest.raises(ImproperConfigurationError):
        demo_table.save("id").set_field("name", "x").execute()


def test_explicit_connection_overrides_scope(demo_table: DatabaseTable, sqlite_connection: sqlite3.Connection) -> None:
    other = sqlite3.connect(":memory:")
    try:
        with connection_scope(other):
            demo_table.insert().set_field("code", 1).execute(sqlite_connection)
            assert demo_table.query().get_count(sqlite_connection) == 1
    finally:
        other.close()


def test_observers_see_every_statement(demo_table: DatabaseTable, sqlite_connection: sqlite3.Connection) -> None:
    events: list[StatementEvent] = []
    table = DatabaseTable("demo_table", demo_table.config.replace(statement_observers=(events.append,)))

    table.insert().set_field("code", 1).set_field("name", "secret-value").execute(sqlite_connection)
    table.where("code", 1).single_string("name", sqlite_connection)
    with pytest.raises(sqlite3.OperationalError):
        table.where("no_such_column", 1).get_count(sqlite_connection)

    assert [(event.operation, event.outcome) for event in events] == [
        ("INSERT", "success"),
        ("SELECT", "success"),
        ("SELECT", "error"),
    ]
    assert events[0].rows_affected == 1
    assert events[2].error_type == "OperationalError"
    assert all(event.table == "demo_table" for event in events)


def test_default_observer_logs_without_values(
    demo_table: DatabaseTable, sqlite_connection: sqlite3.Connection, caplog: pytest.LogCaptureFixture
) -> None:
    table = DatabaseTable("demo_table", demo_table.config.replace(statement_observers=(default_statement_observer,)))

    with caplog.at_level(logging.DEBUG, logger="fluentdb"):
        table.insert().set_field("name", "secret-value").execute(sqlite_connection)

    messages = [record.getMessage() for record in caplog.records]
    assert any("INSERT INTO demo_table (name) VALUES (?)" in message for message in messages)
    assert not any("secret-value" in message for message in messages)
