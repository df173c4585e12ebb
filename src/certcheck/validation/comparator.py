"""Comparison of an extracted value against a rule's expected value.

Relational operators are only defined when both sides read as numbers; for
anything else they fail. Equality compares numerically when both sides are
numbers and case-insensitively otherwise. Containment is always a
case-insensitive substring test.
"""

import operator as _op
import re
from decimal import Decimal

from certcheck.models.requirements import ComparisonOperator
from certcheck.validation.results import ValidationStatus

# Thousands separators, currency sign and stray spaces inside amounts
_NUMBER_NOISE = re.compile(r"[,$\s]")
# Plain decimal literal, optionally with an exponent
_DECIMAL_LITERAL = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

_RELATIONAL = {
    ComparisonOperator.GREATER_THAN: _op.gt,
    ComparisonOperator.LESS_THAN: _op.lt,
    ComparisonOperator.GREATER_THAN_OR_EQUAL: _op.ge,
    ComparisonOperator.LESS_THAN_OR_EQUAL: _op.le,
}


def is_blank(value: str | None) -> bool:
    """Check if a value is absent or only whitespace."""
    return value is None or not value.strip()


def normalize_text(value: str) -> str:
    """Normalize a string for lexical comparison."""
    return value.strip().lower()


def parse_number(value: str | None) -> Decimal | None:
    """Parse an amount such as ``$2,000,000`` into a Decimal.

    Returns None unless the whole string, after dropping ``,`` ``$`` and
    whitespace, is a finite decimal number.
    """
    if value is None:
        return None
    cleaned = _NUMBER_NOISE.sub("", value.strip())
    if not _DECIMAL_LITERAL.fullmatch(cleaned):
        return None
    return Decimal(cleaned)


def _status(ok: bool) -> ValidationStatus:
    return ValidationStatus.PASS if ok else ValidationStatus.FAIL


def compare(
    actual: str | None,
    expected: str,
    operator: ComparisonOperator | str,
) -> ValidationStatus:
    """Compare an extracted value with an expected value.

    Args:
        actual: Extracted value, or None when the field was not found
        expected: Expected value from the rule
        operator: Comparison operator

    Returns:
        MISSING when ``actual`` is blank, otherwise PASS or FAIL
    """
    if is_blank(actual):
        return ValidationStatus.MISSING

    operator = ComparisonOperator(operator)
    expected = expected or ""

    if operator in (ComparisonOperator.CONTAINS, ComparisonOperator.NOT_CONTAINS):
        found = normalize_text(expected) in normalize_text(actual)
        return _status(found if operator == ComparisonOperator.CONTAINS else not found)

    actual_num = parse_number(actual)
    expected_num = parse_number(expected)
    numeric = actual_num is not None and expected_num is not None

    if operator in (ComparisonOperator.EQUAL_TO, ComparisonOperator.NOT_EQUAL_TO):
        if numeric:
            equal = actual_num == expected_num
        else:
            equal = normalize_text(actual) == normalize_text(expected)
        return _status(equal if operator == ComparisonOperator.EQUAL_TO else not equal)

    if not numeric:
        return ValidationStatus.FAIL
    return _status(_RELATIONAL[operator](actual_num, expected_num))
