import pytest

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


@pytest.mark.parametrize(
    "error_class",
    [
        NotFoundError,
        MultipleResultsFoundError,
        NullValueError,
        AmbiguousMatchError,
        MissingKeyError,
        UnsupportedGenerationError,
    ],
)
def test_query_errors_share_base(error_class: "type[QueryError]") -> None:
    """Test every query failure is a QueryError and a FluentDBError."""
    assert issubclass(error_class, QueryError)
    assert issubclass(error_class, FluentDBError)


def test_exception_hierarchy() -> None:
    assert issubclass(ParameterMismatchError, FluentDBError)
    assert issubclass(SQLBuilderError, FluentDBError)
    assert issubclass(ImproperConfigurationError, FluentDBError)
    assert not issubclass(ParameterMismatchError, QueryError)


def test_query_error_default_message_and_context() -> None:
    """Test the docstring summary is used and context is appended."""
    exc = NotFoundError(operation="SELECT", table="demo_table", column="name")

    assert str(exc) == (
        "No rows matched a query that requires exactly one. [operation=SELECT table=demo_table column=name]"
    )
    assert exc.operation == "SELECT"
    assert exc.table == "demo_table"
    assert exc.column == "name"


def test_query_error_partial_context() -> None:
    exc = AmbiguousMatchError("Two rows for code", table="demo_table")

    assert str(exc) == "Two rows for code [table=demo_table]"
    assert exc.column is None


def test_query_error_without_context() -> None:
    assert str(MultipleResultsFoundError()) == "More than one row matched a query that requires exactly one."


def test_parameter_mismatch_error() -> None:
    """Test counts are reported but bound values are not."""
    exc = ParameterMismatchError("SELECT * FROM t WHERE a = ? AND b = ?", 2, 1)

    assert exc.placeholder_count == 2
    assert exc.parameter_count == 1
    assert "2 placeholder(s) but 1 parameter(s)" in str(exc)
    assert "SELECT * FROM t WHERE a = ? AND b = ?" in str(exc)


def test_sql_builder_error_messages() -> None:
    assert str(SQLBuilderError("2 field(s) but 1 value(s)")) == "2 field(s) but 1 value(s)"
    assert str(SQLBuilderError()) == "Issues building SQL statement."


def test_fluentdb_error_repr() -> None:
    exc = ImproperConfigurationError("No connection")

    assert exc.detail == "No connection"
    assert repr(exc) == "ImproperConfigurationError - No connection"


def test_exception_chaining() -> None:
    """Test exceptions support chaining with 'from'."""
    try:
        try:
            raise ValueError("driver failure")
        except ValueError as e:
            raise NotFoundError(table="t") from e
    except NotFoundError as exc:
        assert isinstance(exc.__cause__, ValueError)
