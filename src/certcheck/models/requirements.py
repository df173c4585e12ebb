"""Requirement set data models: comparison rules over certificate fields."""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class ComparisonOperator(str, Enum):
    """Comparison applied between an extracted value and the expected value."""

    EQUAL_TO = "equal_to"
    NOT_EQUAL_TO = "not_equal_to"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    GREATER_THAN_OR_EQUAL = "greater_than_or_equal"
    LESS_THAN_OR_EQUAL = "less_than_or_equal"
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"

    @property
    def label(self) -> str:
        return _OPERATOR_LABELS[self]

    @property
    def symbol(self) -> str:
        return _OPERATOR_SYMBOLS[self]

    @property
    def is_relational(self) -> bool:
        """Relational operators are only defined over numbers."""
        return self in RELATIONAL_OPERATORS


_OPERATOR_LABELS = {
    ComparisonOperator.EQUAL_TO: "Equal to (=)",
    ComparisonOperator.NOT_EQUAL_TO: "Not equal to (!=)",
    ComparisonOperator.GREATER_THAN: "Greater than (>)",
    ComparisonOperator.LESS_THAN: "Less than (<)",
    ComparisonOperator.GREATER_THAN_OR_EQUAL: "Greater than or equal (>=)",
    ComparisonOperator.LESS_THAN_OR_EQUAL: "Less than or equal (<=)",
    ComparisonOperator.CONTAINS: "Contains",
    ComparisonOperator.NOT_CONTAINS: "Does not contain",
}

_OPERATOR_SYMBOLS = {
    ComparisonOperator.EQUAL_TO: "=",
    ComparisonOperator.NOT_EQUAL_TO: "!=",
    ComparisonOperator.GREATER_THAN: ">",
    ComparisonOperator.LESS_THAN: "<",
    ComparisonOperator.GREATER_THAN_OR_EQUAL: ">=",
    ComparisonOperator.LESS_THAN_OR_EQUAL: "<=",
    ComparisonOperator.CONTAINS: "contains",
    ComparisonOperator.NOT_CONTAINS: "not contains",
}

RELATIONAL_OPERATORS = frozenset({
    ComparisonOperator.GREATER_THAN,
    ComparisonOperator.LESS_THAN,
    ComparisonOperator.GREATER_THAN_OR_EQUAL,
    ComparisonOperator.LESS_THAN_OR_EQUAL,
})


class LogicalOperator(str, Enum):
    """Connector shown between a rule and the next rule of its set."""

    AND = "and"
    OR = "or"
    NOT = "not"

    @property
    def label(self) -> str:
        return self.value.upper()


class Rule(BaseModel):
    """One comparison constraint on one certificate field."""

    field_key: str
    operator: ComparisonOperator
    expected_value: str = ""
    logical_operator: LogicalOperator = LogicalOperator.AND

    def describe(self) -> str:
        """Short human-readable form, e.g. ``gl_coverage_limits >= 1000000``."""
        return f"{self.field_key} {self.operator.symbol} {self.expected_value}".rstrip()


class RuleSet(BaseModel):
    """Named, ordered collection of rules."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    description: str = ""
    rules: list[Rule] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def field_keys(self) -> list[str]:
        """Field keys referenced by the rules, in rule order, without repeats."""
        return list(dict.fromkeys(rule.field_key for rule in self.rules))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return self.model_dump(mode="json")
