import pytest
from pydantic import ValidationError

from table_editor.schemas.table_schemas import ColumnDefinition, FilterRule, SortSpec
from table_editor.services.filter_compiler import (
    FilterRuleSet,
    build_query_options,
    compile_filter_rules,
)


def rule(column, operator="eq", value="", logical="and", rule_id=None) -> FilterRule:
    return FilterRule(
        id=rule_id or f"{column}-{operator}",
        column=column,
        operator=operator,
        value=value,
        logical_operator=logical,
    )


def test_no_rules_means_no_filter():
    assert compile_filter_rules([]) is None


def test_single_rule():
    assert compile_filter_rules([rule("age", "gt", "30")]) == {"age": {"$gt": 30}}


def test_first_rule_logical_operator_is_ignored():
    assert compile_filter_rules([rule("age", "gt", "30", logical="or")]) == {
        "age": {"$gt": 30},
    }


def test_two_rules_joined_with_or():
    compiled = compile_filter_rules(
        [rule("age", "gt", "30"), rule("name", "eq", "Alice", logical="or")],
    )

    assert compiled == {"$or": [{"age": {"$gt": 30}}, {"name": {"$eq": "Alice"}}]}


def test_chain_is_left_associative_without_precedence():
    a = rule("a", "eq", "1")
    b = rule("b", "eq", "2", logical="or")
    c = rule("c", "eq", "3", logical="and")

    assert compile_filter_rules([a, b, c]) == {
        "$and": [
            {"$or": [{"a": {"$eq": 1}}, {"b": {"$eq": 2}}]},
            {"c": {"$eq": 3}},
        ],
    }


def test_runs_of_the_same_connective_are_flat():
    rules = [rule("a", value="1"), rule("b", value="2"), rule("c", value="3")]

    assert compile_filter_rules(rules) == {
        "$and": [{"a": {"$eq": 1}}, {"b": {"$eq": 2}}, {"c": {"$eq": 3}}],
    }


def test_no_value_operators_ignore_value():
    rules = [
        rule("email", "is_null", "ignored"),
        rule("phone", "is_not_null", logical="or"),
    ]

    assert compile_filter_rules(rules) == {
        "$or": [{"email": {"$eq": None}}, {"phone": {"$ne": None}}],
    }


def test_empty_value_is_still_compiled():
    assert compile_filter_rules([rule("name", "contains", "")]) == {
        "name": {"$contains": ""},
    }


def test_in_operator_splits_values():
    assert compile_filter_rules([rule("id", "in", "1, 2,3")]) == {"id": {"$in": [1, 2, 3]}}


@pytest.mark.parametrize(
    ("column", "value", "expected"),
    [
        (ColumnDefinition(name="x", type="number"), "12.5", 12.5),
        (ColumnDefinition(name="x", type="number"), "n/a", "n/a"),
        (ColumnDefinition(name="x", type="boolean"), "TRUE", True),
        (ColumnDefinition(name="x", type="string"), "42", "42"),
        (None, "false", False),
        (None, "null", None),
        (None, "Alice", "Alice"),
    ],
)
def test_values_are_parsed_by_column_type(column, value, expected):
    columns = [column] if column else None
    assert compile_filter_rules([rule("x", "eq", value)], columns) == {"x": {"$eq": expected}}


def test_build_query_options():
    sort = SortSpec(column="age", direction="desc")
    options = build_query_options([rule("age", "lte", "5")], sort=sort)

    assert options.filter == {"age": {"$lte": 5}}
    assert options.sort == sort
    assert build_query_options([]).filter is None


def test_rule_set_editing():
    rule_set = FilterRuleSet([ColumnDefinition(name="age", type="number")])
    first = rule_set.add_rule()
    second = rule_set.add_rule()

    assert first.column == "age"
    assert first.operator == "eq"
    assert first.id != second.id

    rule_set.update_rule(first.id, "operator", "gte")
    rule_set.update_rule(first.id, "value", "18")
    rule_set.update_rule(second.id, "logical_operator", "or")
    rule_set.update_rule(second.id, "operator", "is_null")

    assert rule_set.compile().filter == {
        "$or": [{"age": {"$gte": 18}}, {"age": {"$eq": None}}],
    }

    rule_set.remove_rule(first.id)
    assert [r.id for r in rule_set.rules] == [second.id]

    rule_set.clear()
    assert rule_set.compile().filter is None


def test_rule_set_rejects_unknown_fields():
    rule_set = FilterRuleSet([])
    new_rule = rule_set.add_rule()

    with pytest.raises(ValueError):
        rule_set.update_rule(new_rule.id, "id", "other")


def test_rule_set_validates_updated_values():
    rule_set = FilterRuleSet([ColumnDefinition(name="age", type="number")])
    first = rule_set.add_rule()
    second = rule_set.add_rule()

    with pytest.raises(ValidationError):
        rule_set.update_rule(second.id, "logical_operator", "xor")

    assert [r.logical_operator for r in rule_set.rules] == ["and", "and"]
    assert rule_set.rules[0] == first


def test_out_of_range_number_keeps_raw_text():
    columns = [ColumnDefinition(name="age", type="number")]

    assert compile_filter_rules([rule("age", "gt", "1e999")], columns) == {
        "age": {"$gt": "1e999"},
    }
