"""Unit tests for WHERE clause accumulation."""

import pytest

from fluentdb.core.compiler import TableReference
from fluentdb.core.predicates import EMPTY_IN_CONDITION, PredicateAccumulator
from fluentdb.exceptions import SQLBuilderError


def test_where_equals_binds_value() -> None:
    predicates = PredicateAccumulator().where_equals("code", 100)

    assert predicates.conditions == ["code = ?"]
    assert predicates.condition_parameters == [100]


def test_where_equals_none_is_null_safe() -> None:
    """Test a None value renders IS NULL and binds nothing."""
    predicates = PredicateAccumulator().where_equals("name", None)

    assert predicates.conditions == ["name IS NULL"]
    assert predicates.condition_parameters == []


def test_where_is_alias_of_where_equals() -> None:
    predicates = PredicateAccumulator().where("code", 1).where("name", None)

    assert predicates.conditions == ["code = ?", "name IS NULL"]
    assert predicates.condition_parameters == [1]


@pytest.mark.parametrize(
    ("value", "conditions", "parameters"),
    [
        pytest.param(None, [], [], id="absent"),
        pytest.param("a", ["name = ?"], ["a"], id="present"),
        pytest.param(0, ["name = ?"], [0], id="falsy-but-present"),
    ],
)
def test_where_optional(value: object, conditions: list, parameters: list) -> None:
    predicates = PredicateAccumulator().where_optional("name", value)

    assert predicates.conditions == conditions
    assert predicates.condition_parameters == parameters


def test_where_expression_binds_parameters_in_order() -> None:
    predicates = PredicateAccumulator().where_expression("code > ? AND code < ?", 10, 20)

    assert predicates.conditions == ["code > ? AND code < ?"]
    assert predicates.condition_parameters == [10, 20]


def test_where_in() -> None:
    predicates = PredicateAccumulator().where_in("code", [1, 2, 3])

    assert predicates.conditions == ["code IN (?, ?, ?)"]
    assert predicates.condition_parameters == [1, 2, 3]


def test_where_in_accepts_any_collection() -> None:
    predicates = PredicateAccumulator().where_in("code", (5,))

    assert predicates.conditions == ["code IN (?)"]
    assert predicates.condition_parameters == [5]


def test_where_in_empty_matches_nothing() -> None:
    predicates = PredicateAccumulator().where_in("code", [])

    assert predicates.conditions == [EMPTY_IN_CONDITION]
    assert predicates.condition_parameters == []


def test_where_all() -> None:
    predicates = PredicateAccumulator().where_all(["code", "name"], [1, None])

    assert predicates.conditions == ["code = ?", "name IS NULL"]
    assert predicates.condition_parameters == [1]


def test_where_all_length_mismatch() -> None:
    with pytest.raises(SQLBuilderError):
        PredicateAccumulator().where_all(["code", "name"], [1])


def test_column_reference_fields_are_qualified() -> None:
    orders = TableReference("orders", "o")
    predicates = PredicateAccumulator().where_equals(orders.column("status"), "open").where_in(orders.column("id"), [1])

    assert predicates.conditions == ["o.status = ?", "o.id IN (?)"]


def test_predicates_keep_call_order() -> None:
    """Test fragments and parameters stay aligned across predicate kinds."""
    predicates = (
        PredicateAccumulator()
        .where_equals("a", 1)
        .where_optional("b", None)
        .where_in("c", [2, 3])
        .where_expression("d <> ?", 4)
        .where_equals("e", None)
    )

    assert predicates.conditions == ["a = ?", "c IN (?, ?)", "d <> ?", "e IS NULL"]
    assert predicates.condition_parameters == [1, 2, 3, 4]


def test_chaining_returns_same_builder() -> None:
    predicates = PredicateAccumulator()

    assert predicates.where_equals("a", 1) is predicates
    assert predicates.where_in("b", []) is predicates


def test_properties_return_copies() -> None:
    predicates = PredicateAccumulator().where_equals("a", 1)
    predicates.conditions.append("b = ?")
    predicates.condition_parameters.append(2)

    assert predicates.conditions == ["a = ?"]
    assert predicates.condition_parameters == [1]
