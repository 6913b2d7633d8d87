"""Fixtures running fluentdb builders against in-memory sqlite3 databases."""

import datetime
import sqlite3
from collections.abc import Callable, Generator
from string import Template

import pytest

from fluentdb import DatabaseTable, TimestampedTable, sqlite_statement_config

DDL_REPLACEMENTS = {
    "INTEGER_PK": "INTEGER PRIMARY KEY AUTOINCREMENT",
    "DATETIME": "TEXT",
    "UUID": "VARCHAR(36)",
}


def prepare_ddl(ddl: str) -> str:
    """Substitute ``${INTEGER_PK}`` style column types with their sqlite spelling."""
    return Template(ddl).substitute(DDL_REPLACEMENTS)


@pytest.fixture
def sqlite_connection() -> Generator[sqlite3.Connection, None, None]:
    connection = sqlite3.connect(":memory:")
    try:
        yield connection
    finally:
        connection.close()


@pytest.fixture
def create_table(sqlite_connection: sqlite3.Connection) -> Callable[[str], None]:
    def _create(ddl: str) -> None:
        sqlite_connection.execute(prepare_ddl(ddl))

    return _create


@pytest.fixture
def demo_table(create_table: Callable[[str], None]) -> DatabaseTable:
    create_table("CREATE TABLE demo_table (id ${INTEGER_PK}, code INTEGER, name VARCHAR(50), updated_at ${DATETIME})")
    return DatabaseTable("demo_table", sqlite_statement_config)


@pytest.fixture
def uuid_table(create_table: Callable[[str], None]) -> DatabaseTable:
    create_table("CREATE TABLE uuid_table (id ${UUID} PRIMARY KEY, code INTEGER, name VARCHAR(50))")
    return DatabaseTable("uuid_table", sqlite_statement_config)


class FakeClock:
    """Clock advancing one minute per reading."""

    def __init__(self) -> None:
        self.now = datetime.datetime(2024, 1, 1, 12, 0, tzinfo=datetime.timezone.utc)

    def __call__(self) -> datetime.datetime:
        self.now += datetime.timedelta(minutes=1)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def timestamped_table(create_table: Callable[[str], None], clock: FakeClock) -> TimestampedTable:
    create_table(
        "CREATE TABLE audited_table (id ${INTEGER_PK}, code INTEGER, name VARCHAR(50),"
        " created_at ${DATETIME} NOT NULL, updated_at ${DATETIME} NOT NULL)"
    )
    return TimestampedTable("audited_table", sqlite_statement_config, clock=clock)
