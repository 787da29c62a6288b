import math
import uuid
from typing import Any

from table_editor.schemas.table_schemas import (
    ColumnDefinition,
    ColumnType,
    FilterRule,
    QueryOptions,
    SortSpec,
)
from table_editor.services.value_coder import coerce_for_submission


COMPARISON_OPERATORS = [
    "eq",
    "ne",
    "gt",
    "gte",
    "lt",
    "lte",
    "contains",
    "in",
    "is_null",
    "is_not_null",
]
LOGICAL_OPERATORS = ["and", "or"]

# Operators compiled without consulting the rule's value
NO_VALUE_OPERATORS = {"is_null", "is_not_null"}


def _parse_untyped_value(value: str) -> Any:
    text = value.strip()
    lowered = text.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if lowered == "null":
        return None
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return value
    return value if math.isnan(number) or math.isinf(number) else number


def parse_filter_value(value: str, column: ColumnDefinition | None = None) -> Any:
    """Interpret the raw text of a filter value for the column it targets"""
    if column is None:
        return _parse_untyped_value(value)

    if column.type == ColumnType.NUMBER:
        number = coerce_for_submission(value, column)
        if number is None or (isinstance(number, float) and not math.isfinite(number)):
            return value
        return number
    if column.type == ColumnType.BOOLEAN:
        lowered = value.strip().lower()
        if lowered in ("true", "false"):
            return lowered == "true"
    return value


def compile_rule(
    rule: FilterRule,
    column: ColumnDefinition | None = None,
) -> dict[str, Any]:
    if rule.operator == "is_null":
        return {rule.column: {"$eq": None}}
    if rule.operator == "is_not_null":
        return {rule.column: {"$ne": None}}

    if rule.operator == "in":
        value: Any = [
            parse_filter_value(part.strip(), column)
            for part in rule.value.split(",")
            if part.strip()
        ]
    else:
        value = parse_filter_value(rule.value, column)
    return {rule.column: {f"${rule.operator}": value}}


def _join(predicate: dict[str, Any], logical: str, leaf: dict[str, Any]) -> dict[str, Any]:
    key = f"${logical}"
    # A run of the same connective is one flat list; mixing starts a new level
    if list(predicate) == [key]:
        return {key: [*predicate[key], leaf]}
    return {key: [predicate, leaf]}


def compile_filter_rules(
    rules: list[FilterRule],
    columns: list[ColumnDefinition] | None = None,
) -> dict[str, Any] | None:
    """
    Fold an ordered list of filter rules into one predicate.

    Rules are combined strictly left to right: ``a or b and c`` means
    ``(a or b) and c``. The first rule's logical operator is never read.
    Returns None when there are no rules.
    """
    by_name = {col.name: col for col in columns or []}

    predicate: dict[str, Any] | None = None
    for rule in rules:
        leaf = compile_rule(rule, by_name.get(rule.column))
        if predicate is None:
            predicate = leaf
        else:
            predicate = _join(predicate, rule.logical_operator, leaf)
    return predicate


def build_query_options(
    rules: list[FilterRule],
    columns: list[ColumnDefinition] | None = None,
    sort: SortSpec | None = None,
) -> QueryOptions:
    return QueryOptions(filter=compile_filter_rules(rules, columns), sort=sort)


class FilterRuleSet:
    """Ordered, editable list of filter rules for one table view"""

    def __init__(self, columns: list[ColumnDefinition]):
        self.columns = columns
        self.rules: list[FilterRule] = []

    def add_rule(self) -> FilterRule:
        rule = FilterRule(
            id=uuid.uuid4().hex,
            column=self.columns[0].name if self.columns else "",
            operator="eq",
            value="",
            logical_operator="and",
        )
        self.rules.append(rule)
        return rule

    def remove_rule(self, rule_id: str) -> None:
        self.rules = [rule for rule in self.rules if rule.id != rule_id]

    def update_rule(self, rule_id: str, field: str, value: str) -> None:
        if field not in ("column", "operator", "value", "logical_operator"):
            raise ValueError(f"Unknown filter rule field: {field}")
        self.rules = [
            FilterRule.model_validate({**rule.model_dump(), field: value})
            if rule.id == rule_id
            else rule
            for rule in self.rules
        ]

    def clear(self) -> None:
        self.rules = []

    def compile(self, sort: SortSpec | None = None) -> QueryOptions:
        return build_query_options(self.rules, self.columns, sort)
